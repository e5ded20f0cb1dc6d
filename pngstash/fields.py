"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable from a stream.
"""
import logging
import struct

from .meta import FieldBase, Endianess
from .properties import Dependency
from .exceptions import (
    PngStashException,
    UnpackException,
    MagicException,
    TruncatedInput,
)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *args, name=None, father=None, default=None,
                 endianess=Endianess.LITTLE_ENDIAN, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.endianess = endianess
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.
    """

    def __init__(self, format, default=0, formatter=None, **kw):
        self.format = format
        self.formatter = formatter
        super().__init__(default=default, **kw)

    def __repr__(self):
        formatter = self.formatter or '0x%x'
        return '<%s(%s)>' % (self.__class__.__name__, formatter % self.value)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _set_value(self, value) -> None:
        try:
            struct.pack(self.get_format(), value)
        except struct.error as e:
            raise ValueError(f"value {value!r} doesn't fit into format '{self.get_format()}'") from e

        self._value = value

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        return struct.pack(self.get_format(), self.value)

    def unpack(self, stream):
        raw = stream.read_exact(self.size)

        try:
            self._value = struct.unpack(self.get_format(), raw)[0]
        except struct.error as e:
            self.logger.error(e)
            raise UnpackException(str(e)) from e


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed (an integer) or can depend on another field
    of the same chunk via a Dependency: in that case setting the value
    writes back the new length."""

    def __init__(self, n=None, **kw):
        if n is None and kw.get('default') is None:
            raise ValueError("StringField must have 'n' or 'default' indicated!")

        self.n = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return len(self.value)

    @property
    def length(self) -> int:
        if not isinstance(self.n, Dependency):
            return self.n

        if self.father is None:
            return len(self._value)

        return self.n.resolve(self)

    def value_from_default(self):
        if self.default is not None:
            return self.default

        return b'\x00' * self.n if isinstance(self.n, int) else b''

    def _set_value(self, value) -> None:
        value = bytes(value)

        if isinstance(self.n, Dependency):
            self.n.resolve_and_set(self, len(value))
        elif len(value) != self.n:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.n} bytes)')

        self._value = value

    def _get_size(self):
        return len(self._value)

    def _get_raw(self):
        return self._value

    def unpack(self, stream):
        length = self.length
        self.logger.debug('reading %d bytes for \'%s\'' % (length, self.name))

        try:
            self._value = stream.read_exact(length)
        except TruncatedInput as e:
            if not self.is_magic:
                raise
            raise MagicException('not enough data for the magic') from e

        if self.is_magic and self._value != self.default:
            self.logger.warning('the magic doesn\'t correspond')
            raise MagicException('magic mismatch: %r instead of %r' % (self._value, self.default))


class ArrayField(Field):
    '''Un/Pack an array of Chunks.

    When unpacking, the elements are read one after the other until the stream
    is exhausted.

    This class must behave like a list in python, obviously cannot implement all the methods.
    '''

    def __init__(self, element, **kw):
        self.element = element
        if kw.get('default') is None:
            kw['default'] = []

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        return list(self.default)

    def _get_raw(self):
        return b''.join(element.raw for element in self.value)

    def _get_size(self):
        return sum(element.size for element in self.value)

    def instance_element(self):
        return self.element.create(father=self)  # pass the father so that we don't lose the hierarchy

    def append(self, element):
        element.father = self
        self.value.append(element)

    def remove(self, element):
        '''Remove exactly the instance passed as argument (not an equal one).'''
        for idx, _ in enumerate(self.value):
            if _ is element:
                del self.value[idx]
                element.father = None
                return

        raise ValueError(f'{element!r} is not in {self.__class__.__name__} \'{self.name}\'')

    def clear(self):
        self.value.clear()

    def unpack(self, stream):
        self.clear()

        while not stream.is_exhausted():
            element = self.instance_element()
            self.logger.debug('unpacking element #%d of \'%s\'' % (len(self.value), self.name))

            try:
                element.unpack(stream)
            except PngStashException as e:
                e.chain.append(str(len(self.value)))
                raise

            self.value.append(element)
