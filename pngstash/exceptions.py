class PngStashException(Exception):
    '''Base class to extend in order to throw exception in pngstash.

    It takes as optional argument the chain of the layers that
    caused the exception (outermost field last).
    '''

    def __init__(self, message=None, chain=None):
        self.chain = chain if chain is not None else []
        self.message = message
        super().__init__(message)

    def __str__(self):
        if not self.chain:
            return str(self.message)

        return '%s (at %s)' % (self.message, '.'.join(reversed(self.chain)))


class ChunkTypeException(PngStashException):
    pass


class InvalidChunkTypeBytes(ChunkTypeException):
    '''One of the bytes is not an ASCII letter.'''
    pass


class InvalidChunkTypeString(ChunkTypeException):
    '''The string is not made of exactly four ASCII characters.'''
    pass


class UnpackException(PngStashException):
    pass


class TruncatedInput(UnpackException):
    pass


class CrcMismatch(UnpackException):
    pass


class MagicException(PngStashException):
    pass


class InvalidSignature(MagicException):
    pass


class NotUtf8(PngStashException):
    pass


class ChunkNotFound(PngStashException):
    pass
