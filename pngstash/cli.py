'''
Command line interface to stash messages into PNG files

 $ pngstash encode image.png ruSt 'this is a secret'
 $ pngstash decode image.png ruSt
 this is a secret
 $ pngstash print image.png
 $ pngstash remove image.png ruSt

The operations working on bytes are separated from the ones touching the
filesystem so that can be used as a library too.
'''
import argparse
import logging
import os
import sys
from typing import Iterator, Optional, Tuple

from . import __version__
from .exceptions import PngStashException, NotUtf8
from .images.png import PNGFile, PNGChunk, ChunkProperty


logger = logging.getLogger(__name__)


def encode_message(png_data: bytes, type_string: str, message: str) -> bytes:
    '''Append a chunk with the given type containing the message.'''
    png = PNGFile.decode(png_data)
    chunk = PNGChunk.from_strings(type_string, message)

    if not chunk.chunk_type.is_valid():
        logger.warning(f'chunk type \'{type_string}\' has the reserved bit not set, readers may reject it')

    png.append(chunk)

    return png.encode()


def decode_message(png_data: bytes, type_string: str) -> Optional[str]:
    '''Return the text contained in the first chunk with the given type, None if it is missing.'''
    png = PNGFile.decode(png_data)
    chunk = png.find_by_type(type_string)

    if chunk is None:
        return None

    return chunk.data_as_text()


def remove_chunk(png_data: bytes, type_string: str) -> Tuple[bytes, PNGChunk]:
    '''Remove the first chunk with the given type, returns the new data and the removed chunk.'''
    png = PNGFile.decode(png_data)
    chunk = png.remove_by_type(type_string)

    return png.encode(), chunk


def describe_properties(properties: ChunkProperty) -> str:
    names = [_.name.lower() for _ in ChunkProperty if _.value and _ in properties]

    return ','.join(names) if names else 'none'


def print_chunks(png_data: bytes) -> Iterator[str]:
    '''Yield one line for each chunk, in order, with its type and its text.'''
    png = PNGFile.decode(png_data)

    for idx, chunk in enumerate(png.chunks):
        try:
            text = repr(chunk.data_as_text())
        except NotUtf8:
            text = f'<{len(chunk.data)} bytes of binary data>'

        yield f'[{idx:02d}] {chunk.chunk_type} ({describe_properties(chunk.chunk_type.properties)}): {text}'


def read_file(path: str) -> bytes:
    logger.debug(f'reading \'{path}\'')
    with open(path, 'rb') as f:
        return f.read()


def write_file(path: str, data: bytes):
    logger.debug(f'writing {len(data)} bytes to \'{path}\'')
    with open(path, 'wb') as f:
        f.write(data)


def cmd_encode(args) -> int:
    data = encode_message(read_file(args.file_path), args.chunk_type, args.message)
    write_file(args.output_file or args.file_path, data)

    return 0


def cmd_decode(args) -> int:
    message = decode_message(read_file(args.file_path), args.chunk_type)

    if message is None:
        print(f'no chunk with type \'{args.chunk_type}\' found', file=sys.stderr)
        return 1

    print(message)

    return 0


def cmd_remove(args) -> int:
    data, chunk = remove_chunk(read_file(args.file_path), args.chunk_type)
    write_file(args.file_path, data)

    print(chunk)

    return 0


def cmd_print(args) -> int:
    for line in print_chunks(read_file(args.file_path)):
        print(line)

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pngstash',
        description='Hide messages into ancillary chunks of PNG files',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True, help='Command to run')

    encode_parser = subparsers.add_parser('encode', help='Append a chunk containing a message')
    encode_parser.add_argument('file_path', help='PNG file')
    encode_parser.add_argument('chunk_type', help='Four letters type of the chunk (e.g. ruSt)')
    encode_parser.add_argument('message', help='Message to hide')
    encode_parser.add_argument('output_file', nargs='?', help='Where to save the result (default: overwrite the input)')
    encode_parser.set_defaults(func=cmd_encode)

    decode_parser = subparsers.add_parser('decode', help='Print the message contained in a chunk')
    decode_parser.add_argument('file_path', help='PNG file')
    decode_parser.add_argument('chunk_type', help='Four letters type of the chunk')
    decode_parser.set_defaults(func=cmd_decode)

    remove_parser = subparsers.add_parser('remove', help='Remove the first chunk with the given type')
    remove_parser.add_argument('file_path', help='PNG file')
    remove_parser.add_argument('chunk_type', help='Four letters type of the chunk')
    remove_parser.set_defaults(func=cmd_remove)

    print_parser = subparsers.add_parser('print', help='Print all the chunks')
    print_parser.add_argument('file_path', help='PNG file')
    print_parser.set_defaults(func=cmd_print)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug or 'DEBUG' in os.environ else logging.INFO)

    try:
        return args.func(args)
    except (PngStashException, OSError) as e:
        logger.debug('command \'%s\' failed' % args.command, exc_info=True)
        print(f'error: {e}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
