'''
# DirectDraw Surface

Container for block-compressed textures: a 128 bytes header (magic included)
followed by the raw blocks of the surface and of its mipmaps.

The reference is at <https://learn.microsoft.com/en-us/windows/win32/direct3ddds/dds-header>.

Only the block-compressed formats DXT1 and DXT5 are named here; note that the
last character of the fourcc is at offset 87 of the file.
'''
import io
from enum import Enum, Flag

from PIL import Image

from ..core import Chunk
from ..properties import Compliant
from .. import fields


class DDSFlags(Flag):
    NONE        = 0
    CAPS        = 0x00000001
    HEIGHT      = 0x00000002
    WIDTH       = 0x00000004
    PITCH       = 0x00000008
    PIXELFORMAT = 0x00001000
    MIPMAPCOUNT = 0x00020000
    LINEARSIZE  = 0x00080000
    DEPTH       = 0x00800000


class DDSPixelFormatFlags(Flag):
    NONE        = 0
    ALPHAPIXELS = 0x00000001
    ALPHA       = 0x00000002
    FOURCC      = 0x00000004
    RGB         = 0x00000040
    YUV         = 0x00000200
    LUMINANCE   = 0x00020000


class DDSCaps(Flag):
    NONE    = 0
    COMPLEX = 0x00000008
    TEXTURE = 0x00001000
    MIPMAP  = 0x00400000


class DDSFourCC(Enum):
    DXT1 = 0x31545844
    DXT5 = 0x35545844


# bytes for each block of 4x4 pixels
BLOCK_SIZE = {
    DDSFourCC.DXT1: 8,
    DDSFourCC.DXT5: 16,
}

DDS_HEADER_SIZE = 128


class DDSPixelFormat(Chunk):
    size          = fields.StructField('I', default=32)
    flags         = fields.StructField('I', enum=DDSPixelFormatFlags, default=DDSPixelFormatFlags.FOURCC)
    fourcc        = fields.StructField('I', enum=DDSFourCC, default=DDSFourCC.DXT1)
    rgb_bit_count = fields.StructField('I')
    r_bit_mask    = fields.StructField('I')
    g_bit_mask    = fields.StructField('I')
    b_bit_mask    = fields.StructField('I')
    a_bit_mask    = fields.StructField('I')


class DDSHeader(Chunk):
    magic                = fields.StringField(4, default=b'DDS ', is_magic=True)
    size                 = fields.StructField('I', default=124)
    flags                = fields.StructField('I', enum=DDSFlags, default=DDSFlags.NONE)
    height               = fields.StructField('I')
    width                = fields.StructField('I')
    pitch_or_linear_size = fields.StructField('I')
    depth                = fields.StructField('I')
    mipmap_count         = fields.StructField('I')
    reserved1            = fields.ArrayField(fields.StructField('I'), n=11)
    pixel_format         = DDSPixelFormat()
    caps                 = fields.StructField('I', enum=DDSCaps, default=DDSCaps.TEXTURE)
    caps2                = fields.StructField('I')
    caps3                = fields.StructField('I')
    caps4                = fields.StructField('I')
    reserved2            = fields.StructField('I')


class DDSFile(Chunk):
    header = DDSHeader()
    data   = fields.PaddingField()

    def __init__(self, raw=None, compliant=Compliant.MAGIC, **kwargs):
        super().__init__(raw, compliant=compliant, **kwargs)

    @classmethod
    def new(cls, width, height, fourcc, mipmap_count=None, data=b''):
        '''Build a container for a surface of the given size and format.'''
        dds = cls()
        header = dds.header

        flags = DDSFlags.CAPS | DDSFlags.HEIGHT | DDSFlags.WIDTH | DDSFlags.PIXELFORMAT | DDSFlags.LINEARSIZE
        caps = DDSCaps.TEXTURE
        if mipmap_count is not None:
            flags |= DDSFlags.MIPMAPCOUNT
            header.mipmap_count.value = mipmap_count
            if mipmap_count > 1:
                caps |= DDSCaps.COMPLEX | DDSCaps.MIPMAP

        header.flags.value = flags
        header.caps.value = caps
        header.width.value = width
        header.height.value = height
        header.pitch_or_linear_size.value = max(1, (width + 3) // 4) * max(1, (height + 3) // 4) * BLOCK_SIZE[fourcc]
        header.pixel_format.flags.value = DDSPixelFormatFlags.FOURCC
        header.pixel_format.fourcc.value = fourcc

        dds.data.value = data

        return dds

    @property
    def width(self):
        return self.header.width.value

    @property
    def height(self):
        return self.header.height.value

    @property
    def fourcc(self):
        return self.header.pixel_format.fourcc.value

    def to_image(self) -> Image.Image:
        '''Decode the surface with Pillow.'''
        return Image.open(io.BytesIO(self.raw))
