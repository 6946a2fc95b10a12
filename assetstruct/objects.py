"""
# Objects

An object of the archive is stored as two separate blobs, a header and a body.
Each one is described by a Chunk subclass; the pair is converted to/from an
interchange document like

    {
        "header": {...},
        "body": {...}
    }

collecting along the way the identifiers of the objects it refers to. The
links of the header come before the ones of the body, hard and soft are kept
apart and nothing is deduplicated.

The same ObjectFormat serves any kind of object: only the pair of classes changes

    fmt = ObjectFormat(ResourceObjectZ, ObjectZ, name='object')
    header_raw, body_raw, hard_links, soft_links = fmt.pack(document)
"""
import json
import logging
from pathlib import Path
from typing import List, Tuple, Type

from .core import Chunk
from .exceptions import AssetStructException, DocumentException


OBJECT_JSON = 'object.json'


def get_links(*chunks: Chunk) -> Tuple[List[int], List[int]]:
    '''Concatenate in order the links reported by the chunks.'''
    hard_links = []
    soft_links = []
    for chunk in chunks:
        hard_links.extend(chunk.hard_links())
        soft_links.extend(chunk.soft_links())

    return hard_links, soft_links


def load_half(cls: Type[Chunk], document, key):
    if not isinstance(document, dict):
        raise DocumentException(message=f'expected an object, found {document.__class__.__name__}')
    if key not in document:
        raise DocumentException(chain=[key], message='missing key')

    try:
        return cls.from_json_document(document[key])
    except AssetStructException as e:
        raise e.prepend(key)


def unpack_half(cls: Type[Chunk], raw: bytes, key):
    try:
        return cls.from_raw(raw)
    except AssetStructException as e:
        raise e.prepend(key)


def pack(document, header_cls: Type[Chunk], body_cls: Type[Chunk]) -> Tuple[bytes, bytes, List[int], List[int]]:
    '''Encode the document returning the raw header, the raw body and the links.'''
    header = load_half(header_cls, document, 'header')
    body = load_half(body_cls, document, 'body')

    try:
        header_raw = header.pack()
    except AssetStructException as e:
        raise e.prepend('header')

    try:
        body_raw = body.pack()
    except AssetStructException as e:
        raise e.prepend('body')

    hard_links, soft_links = get_links(header, body)

    return header_raw, body_raw, hard_links, soft_links


def unpack(header_raw: bytes, body_raw: bytes, header_cls: Type[Chunk], body_cls: Type[Chunk]):
    '''Decode the raw header and body returning the document and the links.'''
    header = unpack_half(header_cls, header_raw, 'header')
    body = unpack_half(body_cls, body_raw, 'body')

    document = {
        'header': header.to_json(),
        'body': body.to_json(),
    }

    hard_links, soft_links = get_links(header, body)

    return document, hard_links, soft_links


class ObjectFormatBase:
    '''Conversion between the two blobs of an object and a directory.

    The subclasses implement pack_path() reading <path>/object.json (and whatever
    else the kind needs) and unpack_path() writing them.'''

    def __init__(self, name=None):
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(f'{__name__}.{self.name}')

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.name})>'

    def read_document(self, input_path: Path):
        with open(Path(input_path) / OBJECT_JSON, 'r', encoding='utf-8') as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise DocumentException(chain=[self.name], message=f'invalid JSON in {OBJECT_JSON}: {e}')

    def write_document(self, output_path: Path, document) -> None:
        with open(Path(output_path) / OBJECT_JSON, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2)

    def pack_path(self, input_path: Path):
        raise NotImplementedError(f"method {self.__class__.__name__}.pack_path() not implemented")

    def unpack_path(self, header_raw: bytes, body_raw: bytes, output_path: Path):
        raise NotImplementedError(f"method {self.__class__.__name__}.unpack_path() not implemented")


class ObjectFormat(ObjectFormatBase):
    '''Format of the objects made by a header and a body without derived fields.'''

    def __init__(self, header_cls: Type[Chunk], body_cls: Type[Chunk], name=None):
        super().__init__(name=name or f'{header_cls.__name__}/{body_cls.__name__}')
        self.header_cls = header_cls
        self.body_cls = body_cls

    def pack(self, document):
        self.logger.debug('packing %s' % self.name)
        try:
            return pack(document, self.header_cls, self.body_cls)
        except AssetStructException as e:
            raise e.prepend(self.name)

    def unpack(self, header_raw: bytes, body_raw: bytes):
        self.logger.debug('unpacking %s from %d+%d bytes' % (self.name, len(header_raw), len(body_raw)))
        try:
            return unpack(header_raw, body_raw, self.header_cls, self.body_cls)
        except AssetStructException as e:
            raise e.prepend(self.name)

    def pack_path(self, input_path: Path):
        return self.pack(self.read_document(input_path))

    def unpack_path(self, header_raw: bytes, body_raw: bytes, output_path: Path):
        document, hard_links, soft_links = self.unpack(header_raw, body_raw)
        self.write_document(output_path, document)

        return hard_links, soft_links
