from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from .encoder import Encodable, Encoder
from .errors import Custom
from .visitor import Decodable, Visitor, visitor_for


class _Required:
    def __repr__(self):
        return "REQUIRED"


REQUIRED = _Required()


@dataclass(frozen=True)
class Field:
    """One attribute of a record and how it appears on the wire.

    `key` renames the attribute in the encoded dict; a field without a
    `default` must be present when decoding.
    """

    name: str
    type: Any
    key: str | bytes | None = None
    default: Any = REQUIRED

    @property
    def wire_key(self) -> bytes:
        key = self.name if self.key is None else self.key
        return key if isinstance(key, bytes) else key.encode()

    @property
    def required(self) -> bool:
        return self.default is REQUIRED


class RecordVisitor(Visitor):
    def __init__(self, factory: Callable[..., Any], fields: tuple[Field, ...], expecting: str = "a dict"):
        self.factory = factory
        self.fields = fields
        self.expecting = expecting
        self.by_key = {f.wire_key: f for f in fields}

    def visit_dict(self, access):
        values = {}
        while (key := access.next_key()) is not None:
            field = self.by_key.get(key)
            if field is None:
                access.skip_value()
                continue

            values[field.name] = access.next_value(visitor_for(field.type))

        for field in self.fields:
            if field.name in values:
                continue
            if field.required:
                raise Custom(f"missing field `{field.name}`", access.offset)
            values[field.name] = field.default

        return self.factory(**values)


class Record(Decodable, Encodable):
    """Maps a class to a bencode dict through its declared FIELDS.

    Subclasses are usually dataclasses whose constructor accepts every
    field name as a keyword argument.
    """

    FIELDS: ClassVar[tuple[Field, ...]] = ()

    @classmethod
    def bencode_visitor(cls) -> Visitor:
        return RecordVisitor(cls, cls.FIELDS, expecting=f"struct {cls.__name__}")

    def bencode_describe(self, encoder: Encoder):
        with encoder.record() as record:
            for field in self.FIELDS:
                value = getattr(self, field.name)
                if value is None and field.required:
                    raise Custom(f"missing field `{field.name}`")
                record.field(field.wire_key, value)
