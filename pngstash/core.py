"""
Core module for the abstraction of a file format

"""
from typing import Tuple, List

from .fields import Field
from .meta import MetaChunk
from .streams import Stream
from .exceptions import PngStashException


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: it's an ordered
    sequence of fields (or of other chunks) declared as class attributes.

    Each instance has its own copy of the fields declared, created on first access.
    """

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented

        return self.raw == other.raw

    __hash__ = None

    def init(self):
        # trigger the creation of the fields
        self.get_fields()

    def _get_size(self):
        '''the size MUST be derived from the subchunks'''
        return sum(field.size for _, field in self.get_fields())

    def _get_raw(self):
        value = b''
        for field_name, field_instance in self.get_fields():
            field_raw = field_instance.raw
            self.logger.debug("field '%s' raw=%r" % (field_name, field_raw[:16]))
            value += field_raw

        return value

    def encode(self) -> bytes:
        '''Return the binary representation of this chunk.'''
        return self.raw

    @classmethod
    def decode(cls, data):
        '''Build an instance from raw bytes (or from a Stream positioned where the chunk starts).'''
        stream = data if isinstance(data, Stream) else Stream(data)

        instance = cls()
        instance.unpack(stream)

        return instance

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        The fields are unpacked in order of declaration, so a field can rely on
        the values of the ones preceding it. If something goes wrong the
        exception carries the names of the fields involved in its chain.

        When all the fields are in place, the validate() method (if present) is called.
        '''
        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, stream.tell()))

            try:
                field.unpack(stream)
            except PngStashException as e:
                e.chain.append(field_name)
                raise

        if hasattr(self, 'validate'):
            self.validate()
