class AssetStructException(Exception):
    '''Base class to extend in order to throw exception in assetstruct.

    It takes as argument the chain of the layers that caused the exception,
    outermost first, and optionally a message describing what went wrong.
    '''

    def __init__(self, chain=None, message=None):
        self.chain = chain if chain is not None else []
        self.message = message
        super().__init__()

    def __str__(self):
        where = '.'.join(str(_) for _ in self.chain) or '<root>'
        if self.message:
            return f'{where}: {self.message}'
        return where

    def prepend(self, *layers):
        '''Add the layers in front of the chain and return the exception itself.'''
        self.chain[0:0] = [_ for _ in layers if _ is not None]
        return self


class DecodeError(AssetStructException):
    '''The input (binary or interchange document) doesn't match the format.'''
    pass


class UnpackException(DecodeError):
    '''The binary data doesn't follow the grammar of the field.'''
    pass


class TrailingDataException(UnpackException):
    '''An exact chunk didn't consume all the data it was given.'''
    pass


class MagicException(UnpackException):
    pass


class DocumentException(DecodeError, ValueError):
    '''The interchange document has not the expected shape.'''
    pass


class UnsupportedFormatException(AssetStructException):
    '''This is useful when is not possible to let an unknown format
    slip through the conversion.'''
    pass
