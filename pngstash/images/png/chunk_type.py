'''
# Chunk types

A chunk type is a sequence of four bytes restricted to the ASCII letters; the
case of each letter (i.e. bit 5 of each byte) is a property bit

    byte 0  ancillary bit     uppercase = critical, lowercase = ancillary
    byte 1  private bit       uppercase = public, lowercase = private
    byte 2  reserved bit      must be uppercase in the current version of PNG
    byte 3  safe-to-copy bit  uppercase = unsafe to copy, lowercase = safe to copy

See <http://www.libpng.org/pub/png/spec/1.2/PNG-Structure.html#Chunk-naming-conventions>.
'''
from enum import Flag

from bitstring import Bits

from ...exceptions import InvalidChunkTypeBytes, InvalidChunkTypeString


# bit 5 (value 0x20) counting from the MSB of the byte
PROPERTY_BIT_OFFSET = 2


class ChunkProperty(Flag):
    NONE           = 0
    CRITICAL       = 1 << 0
    PUBLIC         = 1 << 1
    RESERVED_VALID = 1 << 2
    UNSAFE_TO_COPY = 1 << 3


class ChunkType(object):
    '''Immutable four-letters identifier of a chunk.'''

    __slots__ = ('_bytes', '_bits')

    def __init__(self, raw):
        raw = bytes(raw)

        if len(raw) != 4:
            raise InvalidChunkTypeBytes(f'a chunk type is exactly 4 bytes, not {len(raw)}')

        for byte in raw:
            if not self.is_valid_byte(byte):
                raise InvalidChunkTypeBytes(f'byte 0x{byte:02x} is not an ASCII letter ({raw!r})')

        object.__setattr__(self, '_bytes', raw)
        object.__setattr__(self, '_bits', Bits(raw))

    def __setattr__(self, name, value):
        raise AttributeError(f'{self.__class__.__name__} is immutable')

    def __reduce__(self):
        return (self.__class__, (self._bytes,))

    @classmethod
    def from_bytes(cls, raw) -> 'ChunkType':
        return cls(raw)

    @classmethod
    def from_string(cls, value: str) -> 'ChunkType':
        if not isinstance(value, str) or len(value) != 4 or not value.isascii():
            raise InvalidChunkTypeString(f'{value!r} is not made of exactly 4 ASCII characters')

        return cls(value.encode('ascii'))

    @staticmethod
    def is_valid_byte(byte: int) -> bool:
        return 65 <= byte <= 90 or 97 <= byte <= 122

    def __bytes__(self):
        return self._bytes

    def __str__(self):
        return self._bytes.decode('ascii')

    def to_string(self) -> str:
        return str(self)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self})>'

    def __eq__(self, other):
        if not isinstance(other, ChunkType):
            return NotImplemented

        return self._bytes == other._bytes

    def __hash__(self):
        return hash(self._bytes)

    def _is_uppercase(self, idx: int) -> bool:
        return not self._bits[idx * 8 + PROPERTY_BIT_OFFSET]

    def is_critical(self) -> bool:
        return self._is_uppercase(0)

    def is_public(self) -> bool:
        return self._is_uppercase(1)

    def is_reserved_bit_valid(self) -> bool:
        return self._is_uppercase(2)

    def is_safe_to_copy(self) -> bool:
        return not self._is_uppercase(3)

    def is_valid(self) -> bool:
        return all(self.is_valid_byte(_) for _ in self._bytes) and self.is_reserved_bit_valid()

    @property
    def properties(self) -> ChunkProperty:
        flags = ChunkProperty.NONE

        for idx, flag in enumerate((
                ChunkProperty.CRITICAL,
                ChunkProperty.PUBLIC,
                ChunkProperty.RESERVED_VALID,
                ChunkProperty.UNSAFE_TO_COPY)):
            if self._is_uppercase(idx):
                flags |= flag

        return flags
