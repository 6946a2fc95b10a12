"""
Core module for the abstraction of a record of the format

"""
from typing import Tuple, List

from .fields import Field, OptionalField
from .meta import MetaChunk
from .streams import Stream
from .exceptions import (
    AssetStructException,
    UnpackException,
    TrailingDataException,
    DocumentException,
)


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: the fields declared
    as class attributes are packed and unpacked in the order of declaration.

    A Chunk can contain sub-chunks, simply instancing them as class attributes

        class SphereZ(Chunk):
            center = Vec3f()
            radius = fields.StructField('f')

        class DynSphere(Chunk):
            sphere = SphereZ()
            flags = fields.StructField('I')

    If "exact" is set, unpacking must consume all the data given.

    Every chunk reports the identifiers of the objects it refers to via
    hard_links() and soft_links(); by default there is none.
    """
    exact = False

    def __init__(self, raw=None, **kwargs):
        super().__init__(**kwargs)

        # now we have setup all the fields necessary and we can unpack if
        # some data is passed with the constructor
        if raw is not None:
            self.logger.debug('unpacking \'%s\' from %d bytes' % (self.__class__.__name__, len(raw)))
            self.unpack(Stream(raw))

    @classmethod
    def from_raw(cls, raw, **kwargs):
        '''Build the chunk from data that must be consumed entirely.'''
        instance = cls(**kwargs)
        stream = Stream(raw)
        instance.unpack(stream)

        if stream.remaining():
            raise TrailingDataException(message=f'{stream.remaining()} bytes left unpacking {cls.__name__}')

        return instance

    @classmethod
    def from_json_document(cls, doc, **kwargs):
        instance = cls(**kwargs)
        instance.from_json(doc)

        return instance

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return self.to_json()

    def _set_value(self, value):
        self.from_json(value)

    def pack(self):
        chunks = []
        for field_name, field in self.get_fields():
            self.logger.debug('packing %s.%s' % (self.__class__.__name__, field_name))
            try:
                chunks.append(field.pack())
            except AssetStructException as e:
                raise e.prepend(field_name)

        return b''.join(chunks)

    def unpack(self, stream):
        '''Build the representation field by field from the stream.

        The fields have no offset: each one starts where the previous one ended
        and the optional ones decide if they are present looking at the bytes
        remaining in the stream.
        '''
        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, stream.tell()))

            try:
                field.unpack(stream)
            except UnpackException as e:
                raise e.prepend(field_name)

        if self.exact and stream.remaining():
            raise TrailingDataException(message=f'{stream.remaining()} bytes left unpacking {self.__class__.__name__}')


    def to_json(self):
        doc = {}
        for field_name, field in self.get_fields():
            if field.skip_json:
                continue
            if isinstance(field, OptionalField) and not field.is_present():
                continue
            doc[field_name] = field.to_json()

        return doc

    def from_json(self, doc):
        if not isinstance(doc, dict):
            raise DocumentException(message=f'expected an object, found {doc.__class__.__name__}')

        names = self.get_ordered_fields_name()
        for key in doc:
            if key not in names:
                self.logger.debug('ignoring unknown key \'%s\' for %s' % (key, self.__class__.__name__))

        for field_name, field in self.get_fields():
            if field.skip_json:
                continue

            if field_name not in doc:
                if isinstance(field, OptionalField):
                    field.from_json(None)
                    continue
                raise DocumentException(chain=[field_name], message='missing key')

            try:
                field.from_json(doc[field_name])
            except AssetStructException as e:
                raise e.prepend(field_name)

    def hard_links(self) -> List[int]:
        return []

    def soft_links(self) -> List[int]:
        return []
