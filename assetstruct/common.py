'''
# Common records

Records shared by the object kinds of the asset archives. References between
objects are 32-bit hashes (here called crc32) of their names: the records
carrying them report them as soft links.
'''
from typing import List

from .core import Chunk
from . import fields
from .properties import OffsetDependency, IfNotEmpty, IfRemainingNot


class Vec2f(fields.ArrayField):
    def __init__(self, **kw):
        super().__init__(fields.StructField('f'), n=2, **kw)


class Vec3f(fields.ArrayField):
    def __init__(self, **kw):
        super().__init__(fields.StructField('f'), n=3, **kw)


class Vec3i32(fields.ArrayField):
    def __init__(self, **kw):
        super().__init__(fields.StructField('i'), n=3, **kw)


class Vec4f(fields.ArrayField):
    def __init__(self, **kw):
        super().__init__(fields.StructField('f'), n=4, **kw)


Quat = Vec4f


class Mat4f(fields.ArrayField):
    '''4x4 matrix of floats, stored as a flat list of 16 elements.'''
    def __init__(self, **kw):
        super().__init__(fields.StructField('f'), n=16, **kw)


class Rect(Chunk):
    x1 = fields.StructField('i')
    y1 = fields.StructField('i')
    x2 = fields.StructField('i')
    y2 = fields.StructField('i')


class Color(Chunk):
    r = fields.StructField('f')
    g = fields.StructField('f')
    b = fields.StructField('f')
    a = fields.StructField('f')


class SphereZ(Chunk):
    center = Vec3f()
    radius = fields.StructField('f')


class RangeBeginEnd(Chunk):
    '''Range indicated by its bounds, by default u16.'''
    begin = fields.StructField('H')
    end   = fields.StructField('H')


class RangeBeginSize(Chunk):
    begin = fields.StructField('H')
    size  = fields.StructField('H')


class FadeDistances(Chunk):
    x          = fields.StructField('f')
    y          = fields.StructField('f')
    fade_close = fields.StructField('f')


class DynSphere(Chunk):
    sphere          = SphereZ()
    flags           = fields.StructField('I')
    dyn_sphere_name = fields.StructField('I')


class DynBox(Chunk):
    mat          = Mat4f()
    flags        = fields.StructField('I')
    dyn_box_name = fields.StructField('I')


class ResourceObjectZ(Chunk):
    '''Header shared by many object kinds.

    The list of crc32s is there only if some data follows the name: when
    present its elements are exactly the soft links of the object.'''
    exact = True

    friendly_name_crc32 = fields.StructField('I')
    crc32s              = fields.OptionalField(fields.PascalArrayField(fields.StructField('I')), IfNotEmpty())

    def soft_links(self) -> List[int]:
        if not self.crc32s.is_present():
            return []

        return [_.value for _ in self.crc32s.value]


class ObjectZ(Chunk):
    '''Base body of the objects placed in the world.

    The field data_crc32 has two meanings depending on what follows it: when
    exactly 90 bytes remain (the size of the fields from rot to object_type) no
    list is present and data_crc32 is itself a reference, otherwise a list of
    data_crc32 + 1 crc32s follows and those are the references.'''
    exact = True

    link_crc32  = fields.StructField('I')
    data_crc32  = fields.StructField('I')
    crc32s      = fields.OptionalField(
        fields.ArrayField(fields.StructField('I'), n=OffsetDependency(1, '.data_crc32')),
        IfRemainingNot(90),
    )
    rot         = Quat()
    transform   = Mat4f()
    radius      = fields.StructField('f')
    flags       = fields.StructField('I')
    object_type = fields.StructField('H')

    def soft_links(self) -> List[int]:
        if self.crc32s.is_present():
            return [_.value for _ in self.crc32s.value]
        elif self.data_crc32.value != 0:
            return [self.data_crc32.value]

        return []
