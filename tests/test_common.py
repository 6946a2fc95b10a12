import struct

import pytest

from assetstruct.common import (
    Rect,
    Color,
    SphereZ,
    RangeBeginEnd,
    RangeBeginSize,
    FadeDistances,
    DynSphere,
    DynBox,
    Mat4f,
    ResourceObjectZ,
    ObjectZ,
)
from assetstruct.exceptions import UnpackException, DocumentException


def test_rect():
    raw = struct.pack('<4i', -1, 2, 30, 40)
    rect = Rect.from_raw(raw)

    assert rect.to_json() == {'x1': -1, 'y1': 2, 'x2': 30, 'y2': 40}
    assert Rect.from_json_document(rect.to_json()).raw == raw


def test_color_and_sphere():
    color = Color.from_raw(struct.pack('<4f', 1.0, 0.5, 0.25, 0.0))
    assert color.to_json() == {'r': 1.0, 'g': 0.5, 'b': 0.25, 'a': 0.0}

    sphere = SphereZ.from_raw(struct.pack('<4f', 1.0, 2.0, 3.0, 4.5))
    assert sphere.to_json() == {'center': [1.0, 2.0, 3.0], 'radius': 4.5}


def test_ranges():
    assert RangeBeginEnd.from_raw(b'\x01\x00\x05\x00').to_json() == {'begin': 1, 'end': 5}
    assert RangeBeginSize.from_raw(b'\x01\x00\x05\x00').to_json() == {'begin': 1, 'size': 5}


def test_fade_distances():
    fade = FadeDistances.from_json_document({'x': 1.0, 'y': 2.0, 'fade_close': 0.5})

    assert fade.raw == struct.pack('<3f', 1.0, 2.0, 0.5)


def test_dyn_sphere_dyn_box():
    dyn_sphere = DynSphere()
    dyn_box = DynBox()

    assert len(dyn_sphere.raw) == 16 + 4 + 4
    assert len(dyn_box.raw) == 64 + 4 + 4
    assert set(dyn_sphere.to_json()) == {'sphere', 'flags', 'dyn_sphere_name'}


def test_mat4f_wrong_size():
    with pytest.raises(DocumentException):
        Mat4f().from_json([0.0] * 15)


def test_resource_object_without_crc32s():
    resource = ResourceObjectZ.from_raw(b'\x78\x56\x34\x12')

    assert not resource.crc32s.is_present()
    assert resource.to_json() == {'friendly_name_crc32': 0x12345678}
    assert resource.hard_links() == []
    assert resource.soft_links() == []


def test_resource_object_with_crc32s():
    raw = struct.pack('<4I', 0x12345678, 2, 0xaaaa, 0xbbbb)
    resource = ResourceObjectZ.from_raw(raw)

    assert resource.to_json() == {'friendly_name_crc32': 0x12345678, 'crc32s': [0xaaaa, 0xbbbb]}
    assert resource.soft_links() == [0xaaaa, 0xbbbb]
    assert resource.hard_links() == []
    assert resource.raw == raw


def test_resource_object_with_empty_crc32s():
    resource = ResourceObjectZ.from_raw(struct.pack('<2I', 1, 0))

    assert resource.to_json() == {'friendly_name_crc32': 1, 'crc32s': []}
    assert resource.soft_links() == []


def test_object_without_list(object_z_raw):
    raw = object_z_raw(7)
    # after link_crc32 and data_crc32 exactly 90 bytes remain
    assert len(raw) - 8 == 90

    obj = ObjectZ.from_raw(raw)

    assert not obj.crc32s.is_present()
    assert 'crc32s' not in obj.to_json()
    assert obj.soft_links() == [7]
    assert obj.hard_links() == []
    assert obj.radius.value == 2.5
    assert obj.object_type.value == 7
    assert obj.raw == raw


def test_object_without_list_zero_crc32(object_z_raw):
    assert ObjectZ.from_raw(object_z_raw(0)).soft_links() == []


def test_object_with_list(object_z_raw):
    raw = object_z_raw(2, [0x10, 0x11, 0x12])
    obj = ObjectZ.from_raw(raw)

    assert obj.crc32s.to_json() == [0x10, 0x11, 0x12]
    # data_crc32 counts the list, it's not a reference
    assert obj.soft_links() == [0x10, 0x11, 0x12]
    assert obj.to_json()['rot'] == [0.0, 0.0, 0.0, 1.0]
    assert obj.raw == raw


def test_object_with_single_element_list(object_z_raw):
    obj = ObjectZ.from_raw(object_z_raw(0, [0x99]))

    assert obj.soft_links() == [0x99]


def test_object_list_shorter_than_indicated(object_z_raw):
    with pytest.raises(UnpackException):
        ObjectZ.from_raw(object_z_raw(2, [0x10, 0x11]))


def test_object_document_roundtrip(object_z_raw):
    raw = object_z_raw(1, [0x20, 0x21], link_crc32=0xcafe)
    document = ObjectZ.from_raw(raw).to_json()

    assert ObjectZ.from_json_document(document).raw == raw


def test_object_document_inconsistent_count(object_z_raw):
    document = ObjectZ.from_raw(object_z_raw(1, [0x20, 0x21])).to_json()
    document['crc32s'].append(0x22)

    obj = ObjectZ.from_json_document(document)

    with pytest.raises(DocumentException) as e:
        obj.pack()

    assert e.value.chain == ['crc32s']
