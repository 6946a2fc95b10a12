"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable and convertible to/from its interchange representation.

Every field has two faces:

 - the binary one: unpack() reads it from a Stream, pack() returns its bytes
 - the logical one: value is what the user manipulates, to_json()/from_json()
   convert it to/from the JSON-compatible interchange document

All the binary data is little endian.
"""
import logging
import math
import struct
from enum import Enum

from .meta import FieldBase
from .properties import Dependency, Compliant
from .streams import Stream
from .exceptions import (
    AssetStructException,
    UnpackException,
    MagicException,
    DocumentException,
)


def round_half_away(value: float) -> int:
    '''Round to the nearest integer, ties going away from zero.'''
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def bytes_from_json(doc) -> bytes:
    if not isinstance(doc, list):
        raise DocumentException(message=f'expected a list of bytes, found {doc.__class__.__name__}')
    try:
        return bytes(doc)
    except (TypeError, ValueError) as e:
        raise DocumentException(message=f'invalid list of bytes: {e}')


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *args, name=None, father=None, default=None,
                 compliant=Compliant.INHERIT, is_magic=False, skip_json=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.compliant = compliant
        self.is_magic = is_magic
        self.skip_json = skip_json

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    def is_compliant(self, level):
        '''Returns the compliant'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    def _get_size(self):
        return len(self.pack())

    size = property(
        fget=lambda self: self._get_size(),
    )

    raw = property(
        fget=lambda self: self.pack(),
    )

    def pack(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}.pack() not implemented")

    def unpack(self, stream: Stream) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}.unpack() not implemented")

    def to_json(self):
        return self.value

    def from_json(self, doc) -> None:
        self.value = doc

    def decode(self, data: bytes):
        '''Unpack the field from the data and return the logical value and the number of bytes consumed.'''
        stream = Stream(data)
        self.unpack(stream)

        return self.to_json(), stream.tell()

    def encode(self, value) -> bytes:
        '''Set the logical value and return the binary encoding.'''
        self.from_json(value)

        return self.pack()


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    numbers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if self.enum or self.format not in 'bBhHiIlLqQ':
            return f'<{self.__class__.__name__}({self.value!r})>'

        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def value_from_default(self):
        if not self.enum or isinstance(self.default, self.enum):
            return super().value_from_default()

        return self.enum(self.default)

    def get_format(self):
        return '<%s' % self.format

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _check(self, value):
        raw = value.value if isinstance(value, Enum) else value
        try:
            struct.pack(self.get_format(), raw)
        except (struct.error, TypeError, OverflowError):
            raise DocumentException(message=f'{value!r} does not fit the format \'{self.format}\'')

    def _set_value(self, value) -> None:
        if self.enum and not isinstance(value, self.enum):
            try:
                value = self.enum(value)
            except ValueError:
                pass
        self._check(value)
        self._value = value

    def pack(self) -> bytes:
        value = self._value
        return struct.pack(self.get_format(), value.value if isinstance(value, Enum) else value)

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise UnpackException(message=f'value 0x{value:x} is not a member of {self.enum.__name__}')

            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

        return value

    def _unpack(self, raw):
        value = struct.unpack(self.get_format(), raw)[0]
        if self.enum:
            value = self._unpack_enum(value)

        if self.is_magic and value != self.default:
            self.logger.warning(f'the magic doesn\'t correspond')
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(message=f'expected magic {self.default!r}, found {value!r}')

        return value

    def unpack(self, stream):
        self._value = self._unpack(stream.read(self.size))

    def to_json(self):
        if isinstance(self._value, Enum):
            return self._value.name

        return self.value

    def from_json(self, doc):
        if self.enum and isinstance(doc, str):
            try:
                doc = self.enum[doc]
            except KeyError:
                raise DocumentException(message=f'\'{doc}\' is not a member of {self.enum.__name__}')
        elif isinstance(doc, bool) or not isinstance(doc, (int, float)):
            raise DocumentException(message=f'expected a number, found {doc.__class__.__name__}')

        self.value = doc


class NumeratorFloatField(StructField):
    '''A float stored as an integer: the logical value is the raw one divided by "n".

    Converting back multiplies by "n" and rounds half away from zero; values
    outside the range of the integer format are refused.'''

    def __init__(self, format, n, default=0.0, **kw):
        self.numerator = n
        super().__init__(format, default=default, **kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r}, raw={self._value})>'

    def _get_value(self):
        return self._value / self.numerator

    def _set_value(self, value):
        try:
            raw = round_half_away(value * self.numerator)
        except (TypeError, ValueError, OverflowError):
            raise DocumentException(message=f'{value!r} cannot be scaled by {self.numerator}')
        self._check(raw)
        self._value = raw


class VertexVectorComponentField(StructField):
    '''A normalized float in [-1, 1] quantized on a single byte.'''

    def __init__(self, default=0.0, **kw):
        super().__init__('B', default=default, **kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r}, raw={self._value})>'

    def _get_value(self):
        return (self._value / 255) * 2 - 1

    def _set_value(self, value):
        try:
            raw = round_half_away(((value + 1) / 2) * 255)
        except (TypeError, ValueError, OverflowError):
            raise DocumentException(message=f'{value!r} is not a valid vector component')
        self._value = min(max(raw, 0), 255)


class StringField(Field):
    """Represent a contiguous chunk of bytes."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.length = n or len(kw['default'])

        super().__init__(**kw)

    def __len__(self):
        return self.length

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def _get_size(self):
        return self.length

    def _set_value(self, value) -> None:
        if len(value) != self.length:
            raise DocumentException(message=f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        self._value = bytes(value)

    def pack(self):
        return self._value

    def unpack(self, stream):
        value = stream.read(self.length)

        if self.is_magic and value != self.default:
            self.logger.warning(f'the magic doesn\'t correspond')
            if self.is_compliant(Compliant.MAGIC):
                raise MagicException(message=f'expected magic {self.default!r}, found {value!r}')

        self._value = value

    def to_json(self):
        return list(self._value)

    def from_json(self, doc):
        self.value = bytes_from_json(doc)


class FixedStringNULLField(Field):
    '''Text stored in exactly "n" bytes: the string followed by zero bytes.

    At least one zero byte must be present, so the text can be at most n - 1 bytes long.'''

    def __init__(self, n, default='', **kw):
        self.length = n
        super().__init__(default=default, **kw)

    def _get_size(self):
        return self.length

    def _set_value(self, value):
        if not isinstance(value, str):
            raise DocumentException(message=f'expected a string, found {value.__class__.__name__}')
        if len(value.encode('utf-8')) >= self.length:
            raise DocumentException(message=f'\'{value}\' does not fit {self.length} bytes with its terminator')

        self._value = value

    def pack(self):
        data = self._value.encode('utf-8')
        return data + b'\x00' * (self.length - len(data))

    def unpack(self, stream):
        raw = stream.read(self.length)
        end = raw.find(b'\x00')
        if end < 0:
            raise UnpackException(message=f'no terminator found in {self.length} bytes')

        self._value = raw[:end].decode('utf-8', errors='replace')


class PascalStringField(Field):
    '''Text prefixed by its length in bytes as u32.'''

    def __init__(self, default='', **kw):
        super().__init__(default=default, **kw)

    def _set_value(self, value):
        if not isinstance(value, str):
            raise DocumentException(message=f'expected a string, found {value.__class__.__name__}')

        self._value = value

    def pack(self):
        data = self._value.encode('utf-8')
        return struct.pack('<I', len(data)) + data

    def _read(self, stream):
        count = struct.unpack('<I', stream.read(4))[0]
        self.logger.debug('reading string of %d bytes' % count)
        return stream.read(count)

    def unpack(self, stream):
        self._value = self._read(stream).decode('utf-8', errors='replace')


class PascalStringNULLField(PascalStringField):
    '''Like PascalStringField but the stored length counts a trailing zero byte.'''

    def pack(self):
        data = self._value.encode('utf-8') + b'\x00'
        return struct.pack('<I', len(data)) + data

    def unpack(self, stream):
        data = self._read(stream)
        if not data:
            raise UnpackException(message='the string has no room for its terminator')

        self._value = data[:-1].decode('utf-8', errors='replace')


class ArrayField(Field):
    '''Un/Pack an array of fields.

    You can indicate an explicit number of elements via the parameter named "n",
    either as an integer, fixed by the format, or as a Dependency resolved at
    unpacking time. Subclasses storing the count by themselves pass None.

    This class must behave like a list in python, obviously cannot implement all the methods
    since, for example, slicing what should mean?
    '''

    def __init__(self, field_cls, n=0, **kw):
        self.field_cls = field_cls
        if n is not None and not isinstance(n, (Dependency, int)):
            raise Exception('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self._n = n

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        if self.default is not None:
            return self.default

        count = self._n if isinstance(self._n, int) else 0
        return [self.instance_element() for _ in range(count)]

    def get_count(self):
        '''Number of elements the binary data contains.'''
        if isinstance(self._n, Dependency):
            return self._n.resolve(self)

        return self._n

    def _set_value(self, value):
        if not isinstance(value, (list, tuple)):
            raise DocumentException(message=f'expected a list, found {value.__class__.__name__}')
        if isinstance(self._n, int) and len(value) != self._n:
            raise DocumentException(message=f'expected {self._n} elements, found {len(value)}')

        elements = []
        for idx, item in enumerate(value):
            if isinstance(item, Field):
                item.father = self
                elements.append(item)
                continue

            element = self.instance_element()
            try:
                element.from_json(item)
            except AssetStructException as e:
                raise e.prepend(idx)
            elements.append(element)

        self._value = elements

    def instance_element(self):
        return self.field_cls.create(father=self)  # pass the father so that we don't lose the hierarchy

    def pack(self):
        if isinstance(self._n, Dependency):
            count = self.get_count()
            if count != len(self._value):
                raise DocumentException(message=f'expected {count} elements as indicated by {self._n!r}, found {len(self._value)}')

        return b''.join(element.pack() for element in self._value)

    def unpack_elements(self, stream, count):
        self.logger.debug('unpacking %d elements for %s' % (count, self.name))
        elements = []
        for idx in range(count):
            element = self.instance_element()
            try:
                element.unpack(stream)
            except UnpackException as e:
                raise e.prepend(idx)
            elements.append(element)

        self._value = elements

    def unpack(self, stream):
        self.unpack_elements(stream, self.get_count())

    def to_json(self):
        return [element.to_json() for element in self._value]

    def from_json(self, doc):
        self.value = doc


class PascalArrayField(ArrayField):
    '''Array of fields prefixed by the number of elements as u32.

    The count is not part of the logical value.'''

    def __init__(self, field_cls, **kw):
        super().__init__(field_cls, n=None, **kw)

    def pack(self):
        return struct.pack('<I', len(self._value)) + b''.join(element.pack() for element in self._value)

    def unpack(self, stream):
        count = struct.unpack('<I', stream.read(4))[0]
        self.unpack_elements(stream, count)


class OptionalField(Field):
    """A field whose presence is not tagged anywhere in the binary data.

    At unpacking time the condition receives the father and the number of bytes
    left in the stream; at packing time the field is simply omitted when its
    value is None.

        class Resource(Chunk):
            link_crc32 = fields.StructField('I')
            crc32s = fields.OptionalField(fields.PascalArrayField(fields.StructField('I')), IfNotEmpty())
    """

    def __init__(self, field, condition, **kw):
        self._template = field
        self._condition = condition
        self._field = None

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}{self._field!r}>'

    def is_present(self):
        return self._field is not None

    def _instance_field(self):
        # the wrapped field lives at the same level of this one so that
        # its dependencies resolve with respect to our father
        field = self._template.create(father=self.father)
        field.name = self.name
        return field

    def _get_value(self):
        return self._field.value if self._field is not None else None

    def _set_value(self, value):
        if value is None:
            self._field = None
            return

        field = self._instance_field()
        field.value = value
        self._field = field

    def pack(self):
        return self._field.pack() if self._field is not None else b''

    def unpack(self, stream):
        remaining = stream.remaining()
        if not self._condition(self.father, remaining):
            self.logger.debug('field \'%s\' absent (%d bytes remaining)' % (self.name, remaining))
            self._field = None
            return

        field = self._instance_field()
        field.unpack(stream)
        self._field = field

    def to_json(self):
        return self._field.to_json() if self._field is not None else None

    def from_json(self, doc):
        if doc is None:
            self._field = None
            return

        field = self._instance_field()
        field.from_json(doc)
        self._field = field


class PaddingField(Field):
    '''Takes as much stream as possible'''

    def value_from_default(self):
        return b''

    def _set_value(self, value):
        self._value = bytes(value)

    def pack(self):
        return self._value

    def unpack(self, stream):
        self._value = stream.read_all()

    def to_json(self):
        return list(self._value)

    def from_json(self, doc):
        self.value = bytes_from_json(doc)
