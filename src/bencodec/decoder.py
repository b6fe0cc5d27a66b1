import logging
from contextlib import contextmanager

from .constants import (
    DEFAULT_MAX_DEPTH,
    DICT_MARKER,
    DIGITS,
    END_MARKER,
    INT64_MAX,
    INT64_MAX_DIGITS,
    INT64_MIN,
    INT_MARKER,
    LENGTH_SEPARATOR,
    LIST_MARKER,
    MINUS,
)
from .errors import (
    DuplicateKey,
    IntegerOverflow,
    InvalidInteger,
    InvalidLength,
    NestingTooDeep,
    TrailingData,
    TypeMismatch,
    UnexpectedEof,
    UnknownTypeMarker,
    UnsortedKeys,
)
from .value import Value
from .visitor import IgnoreVisitor, Visitor, visitor_for

logger = logging.getLogger(__name__)

IGNORE = IgnoreVisitor()

KINDS = {
    INT_MARKER: "integer",
    LIST_MARKER: "list",
    DICT_MARKER: "dict",
}


class Decoder:
    """Pull parser over an in-memory buffer.

    `strict` rejects trailing bytes and duplicate dict keys (otherwise the
    trailing bytes are ignored and the last duplicate wins), `canonical`
    additionally requires dict keys in ascending order, and `max_depth`
    bounds how many lists/dicts may be open at once.
    """

    def __init__(
        self,
        source: bytes | bytearray | memoryview,
        *,
        strict: bool = True,
        canonical: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.source = bytes(source)
        self.current = 0
        self.depth = 0
        self.strict = strict
        self.canonical = canonical
        self.max_depth = max_depth

    def decode(self) -> Value:
        return self.decode_as(Value)

    def decode_as(self, target):
        visitor = visitor_for(target)
        try:
            result = self.visit(visitor)
        except RecursionError:
            # max_depth was set above what the interpreter stack can hold
            raise NestingTooDeep(
                f"nesting exceeds the interpreter stack (max_depth={self.max_depth})",
                self.current,
            ) from None
        self.finish()

        logger.debug(f"Decoded {self.current} bytes into {type(result).__name__}")
        return result

    def finish(self):
        if self.is_at_end():
            return

        extra = len(self.source) - self.current
        if self.strict:
            raise TrailingData(f"{extra} bytes after the top-level value", self.current)

        logger.debug(f"Ignoring {extra} trailing bytes at offset {self.current}")
        self.current = len(self.source)

    def visit(self, visitor: Visitor):
        start = self.current
        c = self.peek()
        match c:
            case b"":
                raise self.eof("a value")

            case _ if c.isdigit():
                return visitor.visit_bytes(self.read_string(), start)

            case b"i":
                return visitor.visit_int(self.read_integer(), start)

            case b"l":
                with self.nested(start):
                    self.expect(LIST_MARKER)
                    access = ListAccess(self, start)
                    result = visitor.visit_list(access)
                    access.finish()
                return result

            case b"d":
                with self.nested(start):
                    self.expect(DICT_MARKER)
                    access = DictAccess(self, start)
                    result = visitor.visit_dict(access)
                    access.finish()
                return result

            case _:
                raise UnknownTypeMarker(f"unknown type marker {c!r}", start)

    def read_string(self) -> bytes:
        start = self.current
        digits = self.read_digits()

        c = self.peek()
        if c == b"":
            raise self.eof("a byte string length")
        if c != LENGTH_SEPARATOR:
            raise InvalidLength(f"unexpected {c!r} in byte string length", self.current)
        if not digits:
            raise InvalidLength("byte string length has no digits", start)
        if len(digits) > 1 and digits.startswith(b"0"):
            raise InvalidLength(f"byte string length {digits!r} has a leading zero", start)

        self.advance()

        remaining = len(self.source) - self.current
        if len(digits) > len(str(remaining)) or int(digits) > remaining:
            raise UnexpectedEof(
                f"byte string runs past the end of input, {remaining} bytes left",
                len(self.source),
            )

        length = int(digits)
        string = self.source[self.current : self.current + length]
        self.current += length

        return string

    def read_integer(self) -> int:
        start = self.current
        self.expect(INT_MARKER)

        negative = self.peek() == MINUS
        if negative:
            self.advance()

        digits_start = self.current
        digits = self.read_digits()

        c = self.peek()
        if c == b"":
            raise self.eof("an integer")
        if c != END_MARKER:
            raise InvalidInteger(f"unexpected {c!r} in integer", self.current)
        if not digits:
            raise InvalidInteger("integer has no digits", digits_start)
        if digits.startswith(b"0") and (len(digits) > 1 or negative):
            raise InvalidInteger(
                f"non canonical integer {self.source[start:self.current + 1]!r}",
                digits_start,
            )

        self.advance()

        if len(digits) > INT64_MAX_DIGITS:
            raise IntegerOverflow(f"integer with {len(digits)} digits does not fit in 64 bits", digits_start)

        n = -int(digits) if negative else int(digits)
        if not INT64_MIN <= n <= INT64_MAX:
            raise IntegerOverflow(f"integer {n} does not fit in 64 bits", digits_start)

        return n

    def read_digits(self) -> bytes:
        start = self.current
        while self.current < len(self.source) and self.source[self.current] in DIGITS:
            self.current += 1
        return self.source[start : self.current]

    @contextmanager
    def nested(self, offset: int):
        if self.depth >= self.max_depth:
            raise NestingTooDeep(f"nesting deeper than {self.max_depth} levels", offset)

        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def peek(self) -> bytes:
        return self.source[self.current : self.current + 1]

    def advance(self) -> bytes:
        c = self.peek()
        self.current += 1
        return c

    def expect(self, char: bytes) -> bytes:
        c = self.peek()
        if c == b"":
            raise self.eof(repr(char))
        if c != char:
            raise UnknownTypeMarker(f"expected {char!r}, got {c!r} instead", self.current)

        return self.advance()

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def eof(self, expected: str) -> UnexpectedEof:
        return UnexpectedEof(f"unexpected end of input, expected {expected}", len(self.source))


class ListAccess:
    """Hands the elements of a list to a visitor, one at a time."""

    def __init__(self, decoder: Decoder, offset: int):
        self.decoder = decoder
        self.offset = offset

    def has_next(self) -> bool:
        c = self.decoder.peek()
        if c == b"":
            raise self.decoder.eof("a list element or 'e'")
        return c != END_MARKER

    def next_element(self, visitor: Visitor):
        return self.decoder.visit(visitor)

    def finish(self):
        while self.has_next():
            self.decoder.visit(IGNORE)
        self.decoder.expect(END_MARKER)


class DictAccess:
    """Hands the entries of a dict to a visitor, enforcing key rules.

    Every key must be followed by a call to next_value() or skip_value();
    a value the visitor does not ask for is skipped on the next key.
    """

    def __init__(self, decoder: Decoder, offset: int):
        self.decoder = decoder
        self.offset = offset
        self.key_offset = None
        self.last_key = None
        self.seen = set()
        self.pending = False

    def next_key(self) -> bytes | None:
        if self.pending:
            self.skip_value()

        decoder = self.decoder
        start = decoder.current
        c = decoder.peek()
        match c:
            case b"":
                raise decoder.eof("a dict key or 'e'")

            case b"e":
                return None

            case _ if c.isdigit():
                key = decoder.read_string()

            case b"i" | b"l" | b"d":
                raise TypeMismatch(
                    f"invalid type: {KINDS[c]}, expected a byte string dict key", start
                )

            case _:
                raise UnknownTypeMarker(f"unknown type marker {c!r}", start)

        self.check_key(key, start)

        self.key_offset = start
        self.last_key = key
        self.pending = True

        return key

    def check_key(self, key: bytes, offset: int):
        if key in self.seen:
            if self.decoder.strict:
                raise DuplicateKey(f"duplicate dict key {key!r}", offset)
            logger.debug(f"Accepting duplicate dict key {key!r} at offset {offset}")

        if self.decoder.canonical and self.last_key is not None and key <= self.last_key:
            raise UnsortedKeys(f"dict key {key!r} is not after {self.last_key!r}", offset)

        self.seen.add(key)

    def next_value(self, visitor: Visitor):
        if not self.pending:
            raise RuntimeError("next_value() called without a pending key")
        self.pending = False

        decoder = self.decoder
        if decoder.peek() == END_MARKER:
            raise UnexpectedEof(
                f"expected a value for dict key {self.last_key!r}, found 'e'",
                decoder.current,
            )

        return decoder.visit(visitor)

    def skip_value(self):
        self.next_value(IGNORE)

    def finish(self):
        while self.next_key() is not None:
            self.skip_value()
        self.decoder.expect(END_MARKER)


def decode(
    data: bytes | bytearray | memoryview | str,
    *,
    strict: bool = True,
    canonical: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Value:
    decoder = Decoder(
        _as_bytes(data), strict=strict, canonical=canonical, max_depth=max_depth
    )
    return decoder.decode()


def decode_as(
    data: bytes | bytearray | memoryview | str,
    target,
    *,
    strict: bool = True,
    canonical: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
):
    decoder = Decoder(
        _as_bytes(data), strict=strict, canonical=canonical, max_depth=max_depth
    )
    return decoder.decode_as(target)


def _as_bytes(data) -> bytes:
    if isinstance(data, str):
        return data.encode()
    return bytes(data)
