import io
import logging

from .exceptions import TruncatedInput


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around an in-memory buffer to
    uniform its properties: mainly we need reads that fail loudly
    when there are not enough bytes left.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % self._type.__name__)

        init_method()

        with self.obj.getbuffer() as view:
            self.size = view.nbytes

    def __repr__(self):
        return '<%s(offset=%d, size=%d)>' % (self.__class__.__name__, self.tell(), self.size)

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_memoryview(self):
        self.obj = io.BytesIO(self.obj.tobytes())

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

        return self

    def read_exact(self, n):
        '''Read exactly n bytes or raise TruncatedInput.'''
        offset = self.obj.tell()
        data = self.obj.read(n)

        if len(data) != n:
            logger.debug('short read at offset %d: wanted %d bytes, got %d' % (offset, n, len(data)))
            raise TruncatedInput(
                'needed %d bytes at offset %d but only %d are available' % (n, offset, len(data)))

        return data

    def is_exhausted(self):
        return self.obj.tell() >= self.size
