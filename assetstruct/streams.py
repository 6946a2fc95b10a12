import io

from .exceptions import UnpackException


class Stream(object):
    '''This is a simple wrapper around an in-memory slice of bytes to
    uniform its properties: mainly we need to know how many bytes are
    left, since some fields are present or not depending on that.

    Note that remaining() is relative to the slice the stream was built
    from, not to any enclosing buffer.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)
        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of data to stream' % self._type.__name__)

        init_method()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __repr__(self):
        return f'<{self.__class__.__name__}(tell={self.tell()}, remaining={self.remaining()})>'

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.length = len(self.obj)
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = bytes(self.obj)
        self.init_bytes()

    def init_memoryview(self):
        self.obj = self.obj.tobytes()
        self.init_bytes()

    def tell(self):
        return self.obj.tell()

    def remaining(self):
        '''Number of bytes not yet consumed.'''
        return self.length - self.obj.tell()

    def read(self, size):
        '''Read exactly size bytes, failing if the data is truncated.'''
        data = self.obj.read(size)
        if len(data) != size:
            raise UnpackException(
                chain=[],
                message=f'expected {size} bytes at offset {self.tell() - len(data)}, found {len(data)}')

        return data

    def read_all(self):
        '''Returns all the data left.'''
        return self.obj.read()
