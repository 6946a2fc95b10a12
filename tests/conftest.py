import logging
import os
import struct

import pytest

from assetstruct.images.dds import DDSFile, DDSFourCC


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)

IDENTITY = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


@pytest.fixture
def object_z_raw():
    """Builder for the binary body of an ObjectZ: the crc32s are inserted
    after data_crc32 only when given."""
    def _build(data_crc32, crc32s=None, link_crc32=0):
        raw = struct.pack('<II', link_crc32, data_crc32)
        if crc32s is not None:
            raw += struct.pack('<%dI' % len(crc32s), *crc32s)
        raw += struct.pack('<4f', 0.0, 0.0, 0.0, 1.0)
        raw += struct.pack('<16f', *IDENTITY)
        raw += struct.pack('<fIH', 2.5, 0x10, 7)
        return raw

    return _build


@pytest.fixture
def dds_dxt1():
    """A DXT1 texture of 8x4 pixels, that is two blocks."""
    return DDSFile.new(8, 4, DDSFourCC.DXT1, data=b'\x00\xf8\xe0\x07' + b'\x55' * 4 + b'\x1f\x00\x00\x00' + b'\xaa' * 4)


@pytest.fixture
def dds_dxt5():
    return DDSFile.new(4, 4, DDSFourCC.DXT5, mipmap_count=1, data=b'\xff' * 16)
