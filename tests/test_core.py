import pytest

from assetstruct.core import Chunk
from assetstruct.fields import StructField, StringField, ArrayField, OptionalField
from assetstruct.meta import Meta
from assetstruct.properties import Dependency, OffsetDependency, IfNotEmpty
from assetstruct.exceptions import (
    UnpackException,
    TrailingDataException,
    DocumentException,
)


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = StructField('I', default=0xdeadbeef)

    dummy = Dummy()

    assert isinstance(dummy._meta, Meta)
    assert dummy.get_ordered_fields_name() == ['a', 'b', 'c']

    assert dummy.a.raw == b'\xad\x0b\x00\x00'
    assert dummy.a.value == 0xbad
    assert dummy.a.father == dummy

    assert dummy.b.raw == b'\x00' * 0x10

    assert dummy.c.raw == b'\xef\xbe\xad\xde'

    assert dummy.size == 0x18
    assert dummy.raw == (
        b'\xad\x0b\x00\x00' +
        b'\x00' * 0x10 +
        b'\xef\xbe\xad\xde'
    )


def test_instances_dont_share_fields():
    class Dummy(Chunk):
        a = StructField('I')

    first = Dummy()
    second = Dummy()

    first.a.value = 1

    assert first.a is not second.a
    assert second.a.value == 0


def test_inheritance():
    '''subclasses inherit fields'''
    class Father(Chunk):
        field_a = StringField(0x10)
        field_b = StructField("I")

    class Son(Father):
        field_c = StringField(0x08)

    field_b_value = b'\x01\x02\x03\x04'
    field_c_value = b'ABCDEFGH'
    son = Son(b'A' * 16 + field_b_value + field_c_value)

    assert [_ for _, __ in son.get_fields()] == [
        'field_a', 'field_b', 'field_c',
    ]

    assert son.field_b.value == 0x04030201
    assert son.field_c.value == field_c_value


def test_field_from_chunk():
    class Dummy(Chunk):
        field = StructField('i')

    class DummyContainer(Chunk):
        dummy = Dummy()
        extra = StructField('H')

    d = DummyContainer(b'\xff\xff\xff\xff\x02\x00')

    assert d.dummy.field.value == -1
    assert d.dummy.father == d
    assert d.to_json() == {'dummy': {'field': -1}, 'extra': 2}
    assert d.value == d.to_json()


def test_field_named_as_field_attribute():
    class Range(Chunk):
        begin = StructField('H')
        size = StructField('H')

    r = Range(b'\x01\x00\x02\x00')

    assert r.size.value == 2
    assert r.raw == b'\x01\x00\x02\x00'


def test_unpack_error_chain():
    class Inner(Chunk):
        a = StructField('I')
        b = StructField('I')

    class Outer(Chunk):
        inner = Inner()

    with pytest.raises(UnpackException) as e:
        Outer(b'\x01\x00\x00\x00\x02')

    assert e.value.chain == ['inner', 'b']
    assert str(e.value).startswith('inner.b: ')


def test_exact():
    class Loose(Chunk):
        a = StructField('H')

    class Strict(Loose):
        exact = True

    assert Loose(b'\x01\x00\x02').a.value == 1

    with pytest.raises(TrailingDataException):
        Strict(b'\x01\x00\x02')

    with pytest.raises(TrailingDataException):
        Loose.from_raw(b'\x01\x00\x02')

    assert Loose.from_raw(b'\x01\x00').a.value == 1


def test_dependency():
    class TLV(Chunk):
        count = StructField('I')
        data  = ArrayField(StructField('B'), n=Dependency('.count'))
        extra = StructField('H')

    tlv = TLV.from_raw(b'\x03\x00\x00\x00\x0a\x0b\x0c\x01\x02')

    assert tlv.data.to_json() == [0xa, 0xb, 0xc]
    assert tlv.extra.value == 0x0201

    tlv.data.value = [1, 2]
    with pytest.raises(DocumentException) as e:
        tlv.pack()

    assert e.value.chain == ['data']

    tlv.count.value = 2
    assert tlv.pack() == b'\x02\x00\x00\x00\x01\x02\x01\x02'


def test_offset_dependency():
    class Listing(Chunk):
        last = StructField('B')
        items = ArrayField(StructField('B'), n=OffsetDependency(1, '.last'))

    assert Listing.from_raw(b'\x01\x0a\x0b').items.to_json() == [0xa, 0xb]


def test_dependency_into_sub_chunk():
    class Counts(Chunk):
        first = StructField('B')
        second = StructField('B')

    class Table(Chunk):
        counts = Counts()
        rows = ArrayField(StructField('H'), n=Dependency('.counts.second'))

    table = Table.from_raw(b'\x07\x02\x01\x00\x02\x00')

    assert table.rows.to_json() == [1, 2]


@pytest.mark.parametrize('expression', ['count', '.', ''])
def test_dependency_must_be_relative(expression):
    with pytest.raises(ValueError):
        Dependency(expression)


def test_from_json():
    class Dummy(Chunk):
        a = StructField('I')
        b = StructField('f', skip_json=True)
        c = OptionalField(StructField('H'), IfNotEmpty())

    dummy = Dummy.from_json_document({'a': 1, 'b': 2.0, 'unknown': 'ignored'})

    assert dummy.a.value == 1
    # excluded from the document
    assert dummy.b.value == 0
    assert not dummy.c.is_present()
    assert dummy.to_json() == {'a': 1}

    dummy.from_json({'a': 2, 'c': 3})
    assert dummy.to_json() == {'a': 2, 'c': 3}
    assert dummy.raw == b'\x02\x00\x00\x00' + b'\x00' * 4 + b'\x03\x00'


def test_from_json_errors():
    class Dummy(Chunk):
        a = StructField('I')
        v = ArrayField(StructField('f'), n=2)

    with pytest.raises(DocumentException) as e:
        Dummy.from_json_document({'v': [0.0, 1.0]})
    assert e.value.chain == ['a']

    with pytest.raises(DocumentException) as e:
        Dummy.from_json_document({'a': 0, 'v': [0.0, 1.0, 2.0]})
    assert e.value.chain == ['v']

    with pytest.raises(DocumentException) as e:
        Dummy.from_json_document({'a': 0, 'v': [0.0, 'one']})
    assert e.value.chain == ['v', 1]

    with pytest.raises(DocumentException):
        Dummy.from_json_document([1, 2])
