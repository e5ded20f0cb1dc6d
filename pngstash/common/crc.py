'''
We are implementing fields to handle CRC calculation.
'''
from zlib import crc32

from .. import fields
from ..exceptions import CrcMismatch


class CRCField(fields.StructField):
    """standard CRC methods with pre and post conditioning, as defined by ISO 3309 [ISO-3309]
    or ITU-T V.42 [ITU-V42]. The CRC polynomial employed is

      x^32+x^26+x^23+x^22+x^16+x^12+x^11+x^10+x^8+x^7+x^5+x^4+x^2+x+1

    The 32-bit CRC register is initialized to all 1's, and then the data from each byte is processed
    from the least significant bit (1) to the most significant bit (128). After all the data bytes are processed,
    the CRC register is inverted (its ones complement is taken). This value is transmitted (stored in the file)
    MSB first.

    See <https://www.w3.org/TR/PNG-Structure.html#CRC-algorithm>.

    The field_names are the sibling fields covered by the checksum, in order: they
    must precede this field so that when unpacking their values are already in place.
    """

    def __init__(self, field_names, *args, **kwargs):
        super().__init__('I', *args, formatter='%08x', **kwargs)
        self.field_names = field_names

    def calculate(self):
        value = 0
        for field_name in self.field_names:
            field = getattr(self.father, field_name)
            value = crc32(field.raw, value)

        return value

    def update(self):
        self.value = self.calculate()

    def unpack(self, stream):
        super().unpack(stream)

        expected = self.calculate()

        if self.value != expected:
            self.logger.debug('stored crc %08x, computed %08x' % (self.value, expected))
            raise CrcMismatch('CRC mismatch: stored %08x but computed %08x' % (self.value, expected))
