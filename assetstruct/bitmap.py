'''
# Bitmap objects

The body of a bitmap embeds a whole DDS file after a few fields of its own.
When packing, the payload of the document is dropped and replaced by the blocks
of the container given by the caller; when unpacking, a new container is built
from the blocks following the embedded DDS header. Width and height are not
part of the document since they always come from the container.

The body doesn't store the format of the texture: it's sniffed from the
fourcc of the embedded DDS header, looking only at its last character
(offset 87 of the payload) that is '1' (49) for DXT1, anything else is DXT5.
'''
from pathlib import Path

from .core import Chunk
from . import fields
from .images.dds import DDSFile, DDSFourCC, DDS_HEADER_SIZE
from .objects import ObjectFormatBase, get_links, load_half, unpack_half
from .exceptions import AssetStructException, UnsupportedFormatException


FORMAT_OFFSET = 87
FORMAT_DXT1 = 49

DATA_DDS = 'data.dds'


class BitmapZHeader(Chunk):
    exact = True

    friendly_name_crc32 = fields.StructField('I')
    link_count          = fields.StructField('I')
    # never interpreted as references
    links               = fields.ArrayField(fields.StructField('B'), n=5)


class BitmapZ(Chunk):
    exact = True

    width        = fields.StructField('I', skip_json=True)
    height       = fields.StructField('I', skip_json=True)
    precalc_size = fields.StructField('I')
    flag         = fields.StructField('H')
    format       = fields.StructField('B')
    mipmap_count = fields.StructField('B')
    four         = fields.StructField('B')
    data         = fields.PaddingField()

    def sniff_format(self) -> DDSFourCC:
        data = self.data.value
        if len(data) <= FORMAT_OFFSET:
            raise UnsupportedFormatException(
                chain=['data'],
                message=f'payload of {len(data)} bytes too short to find the format at offset {FORMAT_OFFSET}')

        return DDSFourCC.DXT1 if data[FORMAT_OFFSET] == FORMAT_DXT1 else DDSFourCC.DXT5


class BitmapObjectFormat(ObjectFormatBase):
    '''Format of the bitmap objects: the document is

        {
            "bitmap_header": {...},
            "bitmap": {...}
        }

    and the texture is exchanged as a DDSFile.'''

    def __init__(self, name='bitmap'):
        super().__init__(name=name)

    def pack(self, document, dds: DDSFile):
        try:
            bitmap_header = load_half(BitmapZHeader, document, 'bitmap_header')
            bitmap = load_half(BitmapZ, document, 'bitmap')

            bitmap.width.value = dds.width
            bitmap.height.value = dds.height
            bitmap.data.value = b''

            header_raw = bitmap_header.pack()
            body_raw = bitmap.pack() + dds.data.value
        except AssetStructException as e:
            raise e.prepend(self.name)

        self.logger.debug('packed bitmap %dx%d with %d bytes of data' % (dds.width, dds.height, len(dds.data.value)))

        # only the header is asked for links
        return (header_raw, body_raw) + get_links(bitmap_header)

    def _container(self, bitmap: BitmapZ) -> DDSFile:
        '''Build the texture from the payload of the body.'''
        fourcc = bitmap.sniff_format()

        data = bitmap.data.value
        if len(data) < DDS_HEADER_SIZE:
            raise UnsupportedFormatException(
                chain=['data'],
                message=f'payload of {len(data)} bytes shorter than the DDS header')

        self.logger.debug('unpacked bitmap %dx%d as %s' % (bitmap.width.value, bitmap.height.value, fourcc.name))

        return DDSFile.new(
            bitmap.width.value,
            bitmap.height.value,
            fourcc,
            mipmap_count=0,
            data=data[DDS_HEADER_SIZE:],
        )

    def unpack(self, header_raw: bytes, body_raw: bytes):
        try:
            bitmap_header = unpack_half(BitmapZHeader, header_raw, 'bitmap_header')
            bitmap = unpack_half(BitmapZ, body_raw, 'bitmap')

            try:
                dds = self._container(bitmap)
            except AssetStructException as e:
                raise e.prepend('bitmap')
        except AssetStructException as e:
            raise e.prepend(self.name)

        document = {
            'bitmap_header': bitmap_header.to_json(),
            'bitmap': bitmap.to_json(),
        }

        return (document, dds) + get_links(bitmap_header)

    def pack_path(self, input_path: Path):
        with open(Path(input_path) / DATA_DDS, 'rb') as f:
            raw = f.read()

        try:
            dds = DDSFile.from_raw(raw)
        except AssetStructException as e:
            raise e.prepend(self.name, DATA_DDS)

        return self.pack(self.read_document(input_path), dds)

    def unpack_path(self, header_raw: bytes, body_raw: bytes, output_path: Path):
        document, dds, hard_links, soft_links = self.unpack(header_raw, body_raw)

        with open(Path(output_path) / DATA_DDS, 'wb') as f:
            f.write(dds.raw)

        self.write_document(output_path, document)

        return hard_links, soft_links
