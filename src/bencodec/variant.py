from typing import Any, ClassVar

from .encoder import Encodable, Encoder
from .errors import Custom
from .visitor import Decodable, Visitor, visitor_for


class Variant(Decodable, Encodable):
    """One case of an externally tagged union.

    A case without PAYLOAD is written as its TAG byte string. A case with a
    PAYLOAD type is written as the single-entry dict {TAG: payload}, where
    the payload is whatever `bencode_payload()` returns (by default the
    `value` attribute). The union's base class lists its cases in VARIANTS,
    so decoding into the base accepts any of them.
    """

    TAG: ClassVar[str | bytes]
    PAYLOAD: ClassVar[Any] = None
    VARIANTS: ClassVar[tuple[type["Variant"], ...]] = ()

    @classmethod
    def wire_tag(cls) -> bytes:
        return cls.TAG if isinstance(cls.TAG, bytes) else cls.TAG.encode()

    @classmethod
    def cases(cls) -> tuple[type["Variant"], ...]:
        cases = tuple(case for case in cls.VARIANTS if issubclass(case, cls))
        return cases or (cls,)

    @classmethod
    def unit(cls) -> "Variant":
        return cls()

    @classmethod
    def from_payload(cls, payload) -> "Variant":
        return cls(payload)

    def bencode_payload(self):
        return self.value

    @classmethod
    def bencode_visitor(cls) -> Visitor:
        return VariantVisitor(cls.cases(), expecting=f"enum {cls.__name__}")

    def bencode_describe(self, encoder: Encoder):
        if self.PAYLOAD is None:
            encoder.emit_string(self.wire_tag())
            return

        payload = self.bencode_payload()
        if payload is None:
            raise Custom(f"variant `{self.wire_tag().decode()}` has no payload")

        with encoder.record() as record:
            record.field(self.wire_tag(), payload)


class VariantVisitor(Visitor):
    def __init__(self, cases, expecting: str = "a tagged variant"):
        self.expecting = expecting
        self.by_tag = {}
        for case in cases:
            tag = case.wire_tag()
            if tag in self.by_tag:
                raise TypeError(f"variant tag {tag!r} is used by more than one case")
            self.by_tag[tag] = case

    def lookup(self, tag: bytes, offset: int) -> type[Variant]:
        case = self.by_tag.get(tag)
        if case is None:
            known = ", ".join(f"`{t.decode(errors='replace')}`" for t in self.by_tag)
            raise Custom(f"unknown variant {tag!r}, expected one of {known}", offset)
        return case

    def visit_bytes(self, value, offset):
        case = self.lookup(value, offset)
        if case.PAYLOAD is not None:
            raise Custom(
                f"invalid type: unit variant, expected variant {case.__name__} with a payload",
                offset,
            )
        return case.unit()

    def visit_dict(self, access):
        tag = access.next_key()
        if tag is None:
            raise Custom(f"empty dict, expected {self.expecting}", access.offset)

        case = self.lookup(tag, access.key_offset)
        if case.PAYLOAD is None:
            raise Custom(
                f"invalid type: variant with payload, expected unit variant {case.__name__}",
                access.key_offset,
            )
        result = case.from_payload(access.next_value(visitor_for(case.PAYLOAD)))

        if access.next_key() is not None:
            raise Custom(
                f"more than one entry, expected {self.expecting}", access.key_offset
            )

        return result
