from .decoder import Decoder, DictAccess, ListAccess, decode, decode_as
from .encoder import Encodable, Encoder, RecordBuilder, encode, encode_from, encode_into
from .errors import (
    BencodeError,
    Custom,
    DecodeError,
    DuplicateKey,
    EncodeError,
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
from .record import REQUIRED, Field, Record, RecordVisitor
from .value import Bytes, Dict, Int, List, Value
from .variant import Variant, VariantVisitor
from .visitor import Decodable, Visitor, visitor_for

__all__ = [
    "BencodeError",
    "Bytes",
    "Custom",
    "Decodable",
    "DecodeError",
    "Decoder",
    "Dict",
    "DictAccess",
    "DuplicateKey",
    "Encodable",
    "EncodeError",
    "Encoder",
    "Field",
    "Int",
    "IntegerOverflow",
    "InvalidInteger",
    "InvalidLength",
    "List",
    "ListAccess",
    "NestingTooDeep",
    "REQUIRED",
    "Record",
    "RecordBuilder",
    "RecordVisitor",
    "TrailingData",
    "TypeMismatch",
    "UnexpectedEof",
    "UnknownTypeMarker",
    "UnsortedKeys",
    "Value",
    "Variant",
    "VariantVisitor",
    "Visitor",
    "decode",
    "decode_as",
    "encode",
    "encode_from",
    "encode_into",
    "visitor_for",
]
