'''
# Portable Network Graphics

Format created to replace patent-emcumbered GIF files.

The format is described at <http://www.libpng.org/pub/png/spec/1.2/PNG-Contents.html>.

A PNG file is an 8 bytes signature followed by a sequence of chunks; here
we don't care about the image itself, only about the chunks, so that is possible
to stash into the file (and retrieve from it) arbitrary ancillary chunks.
'''
from typing import Iterable, Optional

from ...core import Chunk
from ... import fields
from ...meta import Endianess
from ...properties import Dependency
from ...common.crc import CRCField
from ...exceptions import (
    MagicException,
    InvalidSignature,
    NotUtf8,
    ChunkNotFound,
)
from .chunk_type import ChunkType, ChunkProperty


SIGNATURE = b'\x89\x50\x4e\x47\x0d\x0a\x1a\x0a'


class PNGHeader(Chunk):
    magic = fields.StringField(8, default=SIGNATURE, is_magic=True)

    def unpack(self, stream):
        try:
            super().unpack(stream)
        except MagicException as e:
            raise InvalidSignature('the data doesn\'t start with the PNG signature', chain=e.chain) from e


class ChunkTypeField(fields.StringField):
    '''The raw four bytes identifying the type of a chunk.

    The bytes are not validated when unpacked, the chunk takes care of that
    after the CRC check.'''

    def __init__(self, **kw):
        super().__init__(4, **kw)

    def _set_value(self, value):
        if isinstance(value, ChunkType):
            value = bytes(value)

        super()._set_value(value)

    @property
    def chunk_type(self) -> ChunkType:
        return ChunkType.from_bytes(self.value)


class PNGChunk(Chunk):
    '''This is the main data structure of the format: the 4 fields represent
    a chunk into the file. Each field is intended big-endian.

    A chunk is defined as critical or ancillary depending on the case of the
    starting letter of the type field.

    The crc field is network-byte-order CRC-32 computed over the chunk type and chunk data, but not the length.
    '''
    length = fields.StructField('I', endianess=Endianess.BIG_ENDIAN)
    type   = ChunkTypeField()
    data   = fields.StringField(Dependency('.length'))
    crc    = CRCField(['type', 'data'], endianess=Endianess.BIG_ENDIAN)  # network byte order

    @classmethod
    def new(cls, chunk_type: ChunkType, data: bytes) -> 'PNGChunk':
        chunk = cls()
        chunk.type = chunk_type
        chunk.data = data
        chunk.crc.update()

        return chunk

    @classmethod
    def from_strings(cls, type_string: str, message: str) -> 'PNGChunk':
        return cls.new(ChunkType.from_string(type_string), message.encode('utf-8'))

    def __str__(self):
        return (
            'Chunk {\n'
            f'  Length: {self.length.value}\n'
            f'  Type: {self.type.value.decode("latin1")}\n'
            f'  Data: {len(self.data)} bytes\n'
            f'  Crc: {self.crc.value}\n'
            '}'
        )

    @property
    def chunk_type(self) -> ChunkType:
        return self.type.chunk_type

    def validate(self):
        # raises if the bytes are not letters
        self.chunk_type

    def data_as_text(self) -> str:
        try:
            return self.data.value.decode('utf-8')
        except UnicodeDecodeError as e:
            raise NotUtf8(f'the data of the chunk \'{self.chunk_type}\' is not valid UTF-8: {e}') from e


class PNGFile(Chunk):
    header = PNGHeader()
    chunks = fields.ArrayField(PNGChunk())

    @classmethod
    def from_chunks(cls, chunks: Iterable[PNGChunk]) -> 'PNGFile':
        png = cls()

        for chunk in chunks:
            png.append(chunk)

        return png

    def append(self, chunk: PNGChunk):
        self.logger.debug('appending chunk \'%s\' with %d bytes of data' % (chunk.type.value.decode('latin1'), len(chunk.data)))
        self.chunks.append(chunk)

    def find_by_type(self, type_string: str) -> Optional[PNGChunk]:
        '''Return the first chunk with the given type, None if there is not.

        A malformed type string raises instead.'''
        needle = bytes(ChunkType.from_string(type_string))

        for chunk in self.chunks:
            if chunk.type.value == needle:
                return chunk

        return None

    def remove_by_type(self, type_string: str) -> PNGChunk:
        '''Remove and return the first chunk with the given type.'''
        chunk = self.find_by_type(type_string)

        if chunk is None:
            raise ChunkNotFound(f'no chunk with type \'{type_string}\'')

        self.chunks.remove(chunk)

        return chunk


__all__ = [
    'SIGNATURE',
    'ChunkType',
    'ChunkProperty',
    'ChunkTypeField',
    'PNGHeader',
    'PNGChunk',
    'PNGFile',
]
