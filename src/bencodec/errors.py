class BencodeError(ValueError):
    """Base class for every error raised while decoding or encoding bencode.

    `offset` is the position in the input at which the problem was detected,
    or None when there is no input to point at (encoding, Value accessors).
    """

    def __init__(self, message: str, offset: int | None = None):
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self):
        if self.offset is None:
            return self.message
        return f"{self.message} at offset {self.offset}"


class DecodeError(BencodeError):
    pass


class EncodeError(BencodeError):
    pass


class UnexpectedEof(DecodeError):
    pass


class InvalidInteger(DecodeError):
    pass


class IntegerOverflow(DecodeError):
    pass


class InvalidLength(DecodeError):
    pass


class UnknownTypeMarker(DecodeError):
    pass


class TrailingData(DecodeError):
    pass


class DuplicateKey(DecodeError):
    pass


class UnsortedKeys(DecodeError):
    pass


class TypeMismatch(DecodeError):
    pass


class NestingTooDeep(DecodeError, EncodeError):
    pass


class Custom(DecodeError, EncodeError):
    """Raised by structured-type visitors and builders."""
