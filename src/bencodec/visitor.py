import types
import typing
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import Custom, TypeMismatch
from .value import Bytes, Dict, Int, List, Value

if TYPE_CHECKING:
    from .decoder import DictAccess, ListAccess


class Visitor:
    """Turns the values the decoder finds into an application representation.

    Each hook is called with the decoded scalar, or with an access object
    that yields the children of a list or dict. Hooks that are not
    overridden reject their kind with TypeMismatch.
    """

    expecting = "a bencode value"

    def visit_int(self, value: int, offset: int) -> Any:
        raise self.invalid_type("integer", offset)

    def visit_bytes(self, value: bytes, offset: int) -> Any:
        raise self.invalid_type("byte string", offset)

    def visit_list(self, access: "ListAccess") -> Any:
        raise self.invalid_type("list", access.offset)

    def visit_dict(self, access: "DictAccess") -> Any:
        raise self.invalid_type("dict", access.offset)

    def invalid_type(self, found: str, offset: int | None) -> TypeMismatch:
        return TypeMismatch(f"invalid type: {found}, expected {self.expecting}", offset)


class Decodable(ABC):
    """A type that knows how to build itself from decoder callbacks."""

    @classmethod
    @abstractmethod
    def bencode_visitor(cls) -> Visitor: ...


class ValueVisitor(Visitor):
    def __init__(self, only: type[Value] = Value):
        self.only = only
        if only is Value:
            self.expecting = "any valid bencode value"
        else:
            self.expecting = f"a bencode {only.kind}"

    def accept(self, variant: type[Value], offset: int):
        if not issubclass(variant, self.only):
            raise self.invalid_type(variant.kind, offset)

    def visit_int(self, value, offset):
        self.accept(Int, offset)
        return Int(value)

    def visit_bytes(self, value, offset):
        self.accept(Bytes, offset)
        return Bytes(value)

    def visit_list(self, access):
        self.accept(List, access.offset)
        element = ValueVisitor()

        items = []
        while access.has_next():
            items.append(access.next_element(element))

        return List(items)

    def visit_dict(self, access):
        self.accept(Dict, access.offset)
        element = ValueVisitor()

        entries = {}
        while (key := access.next_key()) is not None:
            entries[key] = access.next_value(element)

        return Dict(entries)


class IntVisitor(Visitor):
    expecting = "an integer"

    def visit_int(self, value, offset):
        return value


class BoolVisitor(Visitor):
    expecting = "a boolean integer"

    def visit_int(self, value, offset):
        if value not in (0, 1):
            raise Custom(f"invalid value: integer {value}, expected 0 or 1", offset)
        return bool(value)


class BytesVisitor(Visitor):
    expecting = "a byte string"

    def visit_bytes(self, value, offset):
        return value


class StrVisitor(Visitor):
    expecting = "a utf-8 string"

    def visit_bytes(self, value, offset):
        try:
            return value.decode()
        except UnicodeDecodeError:
            raise Custom(
                f"invalid value: {value!r}, expected a utf-8 string", offset
            ) from None


class ListVisitor(Visitor):
    def __init__(self, element: Visitor, container: type = list):
        self.element = element
        self.container = container
        self.expecting = f"a list of {element.expecting}"

    def visit_list(self, access):
        items = []
        while access.has_next():
            items.append(access.next_element(self.element))

        return self.container(items)


class TupleVisitor(Visitor):
    """Fixed-size, positionally typed list."""

    def __init__(self, elements: list[Visitor]):
        self.elements = elements
        self.expecting = f"a list of {len(elements)} elements"

    def visit_list(self, access):
        items = []
        for element in self.elements:
            if not access.has_next():
                raise Custom(
                    f"invalid length {len(items)}, expected {self.expecting}",
                    access.offset,
                )
            items.append(access.next_element(element))

        if access.has_next():
            raise Custom(
                f"invalid length, expected {self.expecting}", access.offset
            )

        return tuple(items)


class DictVisitor(Visitor):
    def __init__(self, value: Visitor, text_keys: bool = False):
        self.value = value
        self.text_keys = text_keys
        self.expecting = f"a dict of {value.expecting}"

    def visit_dict(self, access):
        entries = {}
        while (key := access.next_key()) is not None:
            if self.text_keys:
                key = StrVisitor().visit_bytes(key, access.key_offset)
            entries[key] = access.next_value(self.value)

        return entries


class EnumVisitor(Visitor):
    """Plain enums are read by member name, int and str enums by value."""

    def __init__(self, enum: type[Enum]):
        self.enum = enum
        self.expecting = f"enum {enum.__name__}"

    def visit_int(self, value, offset):
        if not issubclass(self.enum, int):
            raise self.invalid_type("integer", offset)
        return self.member(value, offset)

    def visit_bytes(self, value, offset):
        if issubclass(self.enum, int):
            raise self.invalid_type("byte string", offset)

        text = StrVisitor().visit_bytes(value, offset)
        if issubclass(self.enum, str):
            return self.member(text, offset)

        try:
            return self.enum[text]
        except KeyError:
            raise Custom(
                f"unknown variant `{text}`, expected {self.expecting}", offset
            ) from None

    def member(self, value, offset):
        try:
            return self.enum(value)
        except ValueError:
            raise Custom(
                f"invalid value: {value!r}, expected {self.expecting}", offset
            ) from None


class IgnoreVisitor(Visitor):
    """Accepts anything and keeps nothing; the decoder still validates it."""

    expecting = "anything"

    def visit_int(self, value, offset):
        return None

    def visit_bytes(self, value, offset):
        return None

    def visit_list(self, access):
        return None

    def visit_dict(self, access):
        return None


_SCALARS = {
    bool: BoolVisitor,
    int: IntVisitor,
    bytes: BytesVisitor,
    str: StrVisitor,
}


def visitor_for(target) -> Visitor:
    """Resolve a type specification (or a ready visitor) into a visitor."""
    if isinstance(target, Visitor):
        return target

    origin = typing.get_origin(target)
    args = typing.get_args(target)

    if origin is None and isinstance(target, type):
        if target in _SCALARS:
            return _SCALARS[target]()
        if issubclass(target, Enum):
            return EnumVisitor(target)
        if issubclass(target, Value):
            return ValueVisitor(target)
        if issubclass(target, Decodable):
            return target.bencode_visitor()
        if target is list:
            return ListVisitor(ValueVisitor())
        if target is tuple:
            return ListVisitor(ValueVisitor(), container=tuple)
        if target is dict:
            return DictVisitor(ValueVisitor())

    elif origin is list:
        return ListVisitor(visitor_for(args[0]))

    elif origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return ListVisitor(visitor_for(args[0]), container=tuple)
        return TupleVisitor([visitor_for(arg) for arg in args])

    elif origin is dict:
        key, value = args
        if key not in (bytes, str):
            raise TypeError(f"dict keys must be bytes or str, got {key!r}")
        return DictVisitor(visitor_for(value), text_keys=key is str)

    elif origin is typing.Union or origin is types.UnionType:
        # Optional[T]: absence is handled by the caller's default
        present = [arg for arg in args if arg is not type(None)]
        if len(present) == 1:
            return visitor_for(present[0])

        from .variant import Variant, VariantVisitor  # variant imports this module

        if all(isinstance(arg, type) and issubclass(arg, Variant) for arg in present):
            cases = [case for arg in present for case in arg.cases()]
            names = " | ".join(arg.__name__ for arg in present)
            return VariantVisitor(cases, expecting=f"enum {names}")

    raise TypeError(f"Cannot decode bencode into {target!r}")
