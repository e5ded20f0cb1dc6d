"""
# pngstash: hide messages into PNG files.

A PNG file is a signature followed by a sequence of chunks; each chunk carries a
type and a CRC so that any reader can skip what it doesn't understand. This
makes possible to add ancillary chunks containing arbitrary data without
damaging the image.

The format is described declaratively by chunks made of fields, and two basic
main operations are defined for the chunks and their sub components:

 1. unpack(): read the binary data from a stream and build a high-level
    representation of it; the fields are read in order of declaration
    and each field knows how many bytes it needs.

 2. raw: encode the high-level representation into binary data.

The PNG related classes are in pngstash.images.png, the command line
interface is in pngstash.cli.
"""
__version__ = '0.1.0'
