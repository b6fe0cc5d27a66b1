from dataclasses import dataclass, field

from .constants import INT64_MAX, INT64_MIN
from .errors import IntegerOverflow, TypeMismatch


class Value:
    """Any bencode document: one of Int, Bytes, List or Dict.

    The accessors return the payload of the matching variant and raise
    TypeMismatch for every other one.
    """

    kind = "value"

    def as_int(self) -> int:
        raise self._mismatch("integer")

    def as_bytes(self) -> bytes:
        raise self._mismatch("byte string")

    def as_str(self) -> str:
        raise self._mismatch("byte string")

    def as_list(self) -> list["Value"]:
        raise self._mismatch("list")

    def as_dict(self) -> dict[bytes, "Value"]:
        raise self._mismatch("dict")

    def to_python(self) -> int | bytes | list | dict:
        raise NotImplementedError

    def _mismatch(self, expected: str) -> TypeMismatch:
        return TypeMismatch(f"invalid type: {self.kind}, expected {expected}")

    @classmethod
    def from_python(cls, obj) -> "Value":
        match obj:
            case Value():
                return obj

            case bool():
                raise TypeError("bool has no bencode representation, use an int")

            case int():
                return Int(obj)

            case bytes() | bytearray() | memoryview():
                return Bytes(bytes(obj))

            case str():
                return Bytes(obj.encode())

            case list() | tuple():
                return List([cls.from_python(x) for x in obj])

            case dict():
                return Dict({_to_key(k): cls.from_python(v) for k, v in obj.items()})

            case _:
                raise TypeError(f"Cannot convert {type(obj).__name__} to a bencode value")


@dataclass(frozen=True)
class Int(Value):
    value: int

    kind = "integer"

    def __post_init__(self):
        if not isinstance(self.value, int):
            raise TypeError(f"Int expects an int, got {type(self.value).__name__}")
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise IntegerOverflow(f"integer {self.value} does not fit in 64 bits")

    def as_int(self) -> int:
        return self.value

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True)
class Bytes(Value):
    value: bytes

    kind = "byte string"

    def __post_init__(self):
        if isinstance(self.value, (bytearray, memoryview)):
            object.__setattr__(self, "value", bytes(self.value))
        elif not isinstance(self.value, bytes):
            raise TypeError(f"Bytes expects bytes, got {type(self.value).__name__}")

    def __len__(self):
        return len(self.value)

    def as_bytes(self) -> bytes:
        return self.value

    def as_str(self) -> str:
        try:
            return self.value.decode()
        except UnicodeDecodeError:
            raise TypeMismatch(
                f"invalid type: non utf-8 byte string {self.value!r}, expected text"
            ) from None

    def to_python(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class List(Value):
    items: list[Value] = field(default_factory=list)

    kind = "list"

    __hash__ = None

    def __post_init__(self):
        for item in self.items:
            if not isinstance(item, Value):
                raise TypeError(f"List items must be values, got {type(item).__name__}")

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def as_list(self) -> list[Value]:
        return self.items

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class Dict(Value):
    entries: dict[bytes, Value] = field(default_factory=dict)

    kind = "dict"

    __hash__ = None

    def __post_init__(self):
        for k, v in self.entries.items():
            if not isinstance(k, bytes):
                raise TypeError(f"Dict keys must be bytes, got {type(k).__name__}")
            if not isinstance(v, Value):
                raise TypeError(f"Dict values must be values, got {type(v).__name__}")

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __contains__(self, key):
        return _to_key(key) in self.entries

    def __getitem__(self, key: bytes | str) -> Value:
        return self.entries[_to_key(key)]

    def get(self, key: bytes | str, default=None) -> Value | None:
        return self.entries.get(_to_key(key), default)

    def as_dict(self) -> dict[bytes, Value]:
        return self.entries

    def to_python(self) -> dict:
        return {k: v.to_python() for k, v in self.entries.items()}


def _to_key(key) -> bytes:
    match key:
        case bytes():
            return key

        case bytearray() | memoryview():
            return bytes(key)

        case str():
            return key.encode()

        case _:
            raise TypeError(f"Dict keys must be bytes or str, got {type(key).__name__}")
