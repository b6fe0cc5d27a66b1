import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterable

from .constants import DEFAULT_MAX_DEPTH, INT64_MAX, INT64_MIN
from .errors import BencodeError, Custom, NestingTooDeep
from .value import Bytes, Dict, Int, List

logger = logging.getLogger(__name__)


class Encodable(ABC):
    """A type that knows how to describe itself to an Encoder."""

    @abstractmethod
    def bencode_describe(self, encoder: "Encoder") -> None: ...


class RecordBuilder:
    """Collects the fields of a record; the Encoder writes them sorted."""

    def __init__(self):
        self.entries: list[tuple[bytes | str, Any]] = []

    def field(self, key: bytes | str, value: Any):
        self.entries.append((key, value))


class Encoder:
    """Writes canonical bencode into a caller-owned bytearray.

    Dict keys are always written in ascending byte order and None values
    inside dicts and records are left out.
    """

    def __init__(
        self, buffer: bytearray | None = None, *, max_depth: int = DEFAULT_MAX_DEPTH
    ):
        self.buffer = buffer if buffer is not None else bytearray()
        self.max_depth = max_depth
        self.depth = 0

    def encode(self, obj: Any) -> bytes:
        start = len(self.buffer)
        try:
            self.emit(obj)
        except BencodeError:
            del self.buffer[start:]
            raise
        except RecursionError:
            del self.buffer[start:]
            raise NestingTooDeep(
                f"nesting exceeds the interpreter stack (max_depth={self.max_depth})"
            ) from None

        logger.debug(f"Encoded {type(obj).__name__} into {len(self.buffer) - start} bytes")
        return bytes(self.buffer[start:])

    def emit(self, obj: Any):
        match obj:
            case Int(value=value):
                self.emit_int(value)

            case Bytes(value=value):
                self.emit_string(value)

            case List(items=items):
                self.emit_list(items)

            case Dict(entries=entries):
                self.emit_dict(entries.items())

            case bool():
                self.emit_int(int(obj))

            case int():
                self.emit_int(int(obj))

            case bytes() | bytearray() | memoryview():
                self.emit_string(bytes(obj))

            case str():
                self.emit_string(obj.encode())

            # int and str enums are written by value above, the rest by name
            case Enum():
                self.emit_string(obj.name.encode())

            case list() | tuple():
                self.emit_list(obj)

            case dict():
                self.emit_dict(obj.items())

            case Encodable():
                obj.bencode_describe(self)

            case float():
                raise Custom(f"cannot encode float {obj!r}, bencode has no floating point")

            case None:
                raise Custom("cannot encode None outside of a dict or record")

            case _:
                raise Custom(f"cannot encode {type(obj).__name__}")

    def emit_int(self, value: int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise Custom(f"integer {value} does not fit in 64 bits")
        self.buffer += f"i{value}e".encode()

    def emit_string(self, s: bytes):
        self.buffer += str(len(s)).encode() + b":" + s

    def emit_list(self, items: Iterable[Any]):
        with self.nested():
            self.buffer += b"l"
            for item in items:
                self.emit(item)
            self.buffer += b"e"

    def emit_dict(self, items: Iterable[tuple[Any, Any]]):
        seen = set()
        entries = []
        for k, v in items:
            key = self.dict_key(k)
            if key in seen:
                raise Custom(f"duplicate dict key {key!r}")
            seen.add(key)
            if v is not None:
                entries.append((key, v))

        entries.sort(key=lambda kv: kv[0])

        with self.nested():
            self.buffer += b"d"
            for key, v in entries:
                self.emit_string(key)
                self.emit(v)
            self.buffer += b"e"

    def dict_key(self, key: Any) -> bytes:
        match key:
            case bytes():
                return key

            case bytearray() | memoryview():
                return bytes(key)

            case str():
                return key.encode()

            case Bytes(value=value):
                return value

            case _:
                raise Custom(f"dict keys must be byte strings, got {type(key).__name__}")

    @contextmanager
    def record(self):
        builder = RecordBuilder()
        yield builder
        self.emit_dict(builder.entries)

    @contextmanager
    def nested(self):
        if self.depth >= self.max_depth:
            raise NestingTooDeep(f"nesting deeper than {self.max_depth} levels")

        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1


def encode(
    value: Any, buffer: bytearray | None = None, *, max_depth: int = DEFAULT_MAX_DEPTH
) -> bytes:
    return Encoder(buffer, max_depth=max_depth).encode(value)


def encode_into(obj: Any, buffer: bytearray, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytearray:
    Encoder(buffer, max_depth=max_depth).encode(obj)
    return buffer


def encode_from(obj: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> bytes:
    return Encoder(max_depth=max_depth).encode(obj)
