import io
import logging
import struct
import zlib

import pytest
from PIL import Image

from pngstash.exceptions import (
    ChunkNotFound,
    CrcMismatch,
    InvalidChunkTypeBytes,
    InvalidChunkTypeString,
    InvalidSignature,
    NotUtf8,
    TruncatedInput,
)
from pngstash.images.png import SIGNATURE, ChunkType, PNGChunk, PNGFile
from pngstash.streams import Stream


def build_raw_chunk(length, chunk_type, data, crc):
    return struct.pack('>I', length) + chunk_type + data + struct.pack('>I', crc)


@pytest.fixture
def raw_chunk(message):
    return build_raw_chunk(42, b'RuSt', message, 2882656334)


def test_new_chunk(message):
    chunk = PNGChunk.new(ChunkType.from_string('RuSt'), message)

    assert chunk.length.value == 42
    assert chunk.chunk_type == ChunkType.from_string('RuSt')
    assert chunk.data.value == message
    assert chunk.crc.value == 2882656334
    assert chunk.crc.value == zlib.crc32(b'RuSt' + message)


def test_new_chunk_doesnt_check_validity():
    chunk = PNGChunk.new(ChunkType.from_string('Rust'), b'')

    assert chunk.length.value == 0
    assert not chunk.chunk_type.is_valid()


def test_chunk_from_strings():
    chunk = PNGChunk.from_strings('ruSt', 'héllo')

    assert chunk.data.value == 'héllo'.encode('utf-8')
    assert chunk.length.value == 6
    assert chunk.data_as_text() == 'héllo'


def test_chunk_from_strings_invalid_type():
    with pytest.raises(InvalidChunkTypeString):
        PNGChunk.from_strings('ruS', 'hello')


def test_valid_chunk_from_bytes(raw_chunk, message):
    chunk = PNGChunk.decode(raw_chunk)

    assert chunk.length.value == 42
    assert str(chunk.chunk_type) == 'RuSt'
    assert chunk.data_as_text() == message.decode()
    assert chunk.crc.value == 2882656334


def test_chunk_encode(raw_chunk):
    assert PNGChunk.decode(raw_chunk).encode() == raw_chunk


def test_chunk_decode_from_stream(raw_chunk):
    """Decoding from a stream leaves it positioned after the chunk"""
    stream = Stream(raw_chunk + raw_chunk)

    first = PNGChunk.decode(stream)
    second = PNGChunk.decode(stream)

    assert first == second
    assert stream.is_exhausted()


def test_invalid_chunk_from_bytes(message):
    with pytest.raises(CrcMismatch) as excinfo:
        PNGChunk.decode(build_raw_chunk(42, b'RuSt', message, 2882656333))

    assert excinfo.value.chain == ['crc']


def test_chunk_invalid_type_with_good_crc():
    raw = build_raw_chunk(1, b'Ru1t', b'x', zlib.crc32(b'Ru1tx'))

    with pytest.raises(InvalidChunkTypeBytes):
        PNGChunk.decode(raw)


def test_chunk_truncated(raw_chunk):
    for size in range(len(raw_chunk)):
        with pytest.raises(TruncatedInput):
            PNGChunk.decode(raw_chunk[:size])


@pytest.mark.parametrize('data', [b'', b'hello', b'\x00' * 255, bytes(range(256)) * 4, b'A' * 70000])
def test_chunk_round_trip(data):
    """The length is handled on the full 32 bits, also beyond 255 bytes"""
    chunk = PNGChunk.new(ChunkType.from_string('ruSt'), data)

    decoded = PNGChunk.decode(chunk.encode())

    assert decoded == chunk
    assert decoded.length.value == len(data)
    assert decoded.chunk_type == chunk.chunk_type
    assert decoded.data.value == data
    assert decoded.crc.value == chunk.crc.value


def test_chunk_crc_detects_bit_flips(message):
    encoded = bytearray(PNGChunk.new(ChunkType.from_string('RuSt'), message).encode())

    # type and data are between the length and the crc
    for bit in range(4 * 8, (len(encoded) - 4) * 8):
        corrupted = bytearray(encoded)
        corrupted[bit // 8] ^= 1 << (bit % 8)

        with pytest.raises(CrcMismatch):
            PNGChunk.decode(bytes(corrupted))


def test_chunk_data_not_utf8():
    chunk = PNGChunk.new(ChunkType.from_string('ruSt'), b'\xff\xfe\xfd')

    with pytest.raises(NotUtf8):
        chunk.data_as_text()


def test_chunk_str(message):
    chunk = PNGChunk.new(ChunkType.from_string('RuSt'), message)

    assert str(chunk) == (
        'Chunk {\n'
        '  Length: 42\n'
        '  Type: RuSt\n'
        '  Data: 42 bytes\n'
        '  Crc: 2882656334\n'
        '}'
    )


def test_empty_png():
    png = PNGFile()

    assert png.header.magic.value == b'\x89PNG\x0d\x0a\x1a\x0a'
    assert len(png.chunks) == 0
    assert png.encode() == SIGNATURE
    assert PNGFile.decode(SIGNATURE) == png


def test_png_file(minimal_png):
    """Check unpacking a pre-established PNG file is fine"""
    png = PNGFile.decode(minimal_png)

    types = [str(_.chunk_type) for _ in png.chunks]

    assert types[0] == 'IHDR'
    assert types[-1] == 'IEND'
    assert 'IDAT' in types

    for chunk in png.chunks:
        assert chunk.chunk_type.is_valid()
        assert chunk.crc.value == chunk.crc.calculate()

    assert png.encode() == minimal_png


@pytest.mark.parametrize('data', [
    b'',
    b'\x89PN',
    b'\x89PNG\r\n\x1a\x0b',
    b'GIF89a\x00\x00' + build_raw_chunk(0, b'IEND', b'', 0xae426082),
])
def test_png_invalid_signature(data):
    with pytest.raises(InvalidSignature) as excinfo:
        PNGFile.decode(data)

    assert excinfo.value.chain == ['magic', 'header']


def test_png_corrupted_chunk(minimal_png):
    png = PNGFile.decode(minimal_png)
    first = png.chunks[0]

    # flip a bit in the data of the second chunk
    offset = len(SIGNATURE) + first.size + 8
    corrupted = bytearray(minimal_png)
    corrupted[offset] ^= 0x01

    with pytest.raises(CrcMismatch) as excinfo:
        PNGFile.decode(bytes(corrupted))

    assert excinfo.value.chain == ['crc', '1', 'chunks']


def test_png_trailing_garbage(minimal_png):
    with pytest.raises(TruncatedInput):
        PNGFile.decode(minimal_png + b'\x00\x00')


def test_png_round_trip():
    png = PNGFile.from_chunks([
        PNGChunk.from_strings('IHDR', 'not really an header'),
        PNGChunk.from_strings('ruSt', 'hello'),
        PNGChunk.new(ChunkType.from_string('IEND'), b''),
    ])

    decoded = PNGFile.decode(png.encode())

    assert decoded == png
    assert [str(_.chunk_type) for _ in decoded.chunks] == ['IHDR', 'ruSt', 'IEND']


def test_png_chunks_is_restartable(minimal_png):
    png = PNGFile.decode(minimal_png)

    assert list(png.chunks) == list(png.chunks)
    assert len(list(png.chunks)) == len(png.chunks)
    assert png.chunks[0] is list(png.chunks)[0]


def test_png_append_find_remove(minimal_png):
    png = PNGFile.decode(minimal_png)
    count = len(png.chunks)
    chunk = PNGChunk.from_strings('ruSt', 'hello')

    assert png.find_by_type('ruSt') is None

    png.append(chunk)

    assert len(png.chunks) == count + 1
    assert png.chunks[-1] is chunk
    assert png.find_by_type('ruSt') is chunk

    assert png.remove_by_type('ruSt') is chunk
    assert png.find_by_type('ruSt') is None
    assert len(png.chunks) == count
    assert png.encode() == minimal_png

    with pytest.raises(ChunkNotFound):
        png.remove_by_type('ruSt')


def test_png_remove_first_match_only():
    png = PNGFile.from_chunks([
        PNGChunk.from_strings('ruSt', 'first'),
        PNGChunk.from_strings('teXt', 'other'),
        PNGChunk.from_strings('ruSt', 'second'),
    ])

    assert png.find_by_type('ruSt').data_as_text() == 'first'
    assert png.remove_by_type('ruSt').data_as_text() == 'first'
    assert png.find_by_type('ruSt').data_as_text() == 'second'
    assert [_.data_as_text() for _ in png.chunks] == ['other', 'second']


def test_png_find_malformed_type(minimal_png):
    png = PNGFile.decode(minimal_png)

    with pytest.raises(InvalidChunkTypeString):
        png.find_by_type('IEN')

    with pytest.raises(InvalidChunkTypeBytes):
        png.find_by_type('IE1D')

    with pytest.raises(InvalidChunkTypeString):
        png.remove_by_type('IENDD')


def test_hide_message(minimal_png):
    """Stash a message into an image, then get it back."""
    png = PNGFile.decode(minimal_png)
    png.append(PNGChunk.new(ChunkType.from_string('ruSt'), b'hello'))

    data = png.encode()

    chunk = PNGFile.decode(data).find_by_type('ruSt')

    assert chunk is not None
    assert not chunk.chunk_type.is_critical()
    assert chunk.data_as_text() == 'hello'

    # the image is still an image
    assert Image.open(io.BytesIO(data)).size == (1, 1)


def test_png_append_logs_type(caplog):
    png = PNGFile()

    with caplog.at_level(logging.DEBUG, logger='pngstash'):
        png.append(PNGChunk.from_strings('ruSt', 'hello'))

    assert "appending chunk 'ruSt' with 5 bytes of data" in caplog.text
