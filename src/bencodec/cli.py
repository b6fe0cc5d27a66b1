import argparse
import json
import logging
import sys

from .constants import DEFAULT_MAX_DEPTH
from .decoder import decode_as
from .errors import BencodeError, Custom
from .torrent import Torrent, render_torrent
from .value import Bytes, Dict, Int, List, Value

logger = logging.getLogger(__name__)

HEX_PREFIX = "hex:"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bencodec",
        description="Decode a bencoded document read from standard input.",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="print the document as JSON instead of as torrent metadata",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="ignore trailing data and accept duplicate dict keys",
    )
    parser.add_argument(
        "--canonical",
        action="store_true",
        help="reject dicts whose keys are not in ascending order",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"maximum list/dict nesting (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        format="%(levelname)s:%(name)s:%(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    data = sys.stdin.buffer.read()
    logger.debug(f"Read {len(data)} bytes from stdin")

    try:
        result = decode_as(
            data,
            Value if args.raw else Torrent,
            strict=not args.lenient,
            canonical=args.canonical,
            max_depth=args.max_depth,
        )
        output = json.dumps(to_json(result), indent=2) if args.raw else render_torrent(result)
    except BencodeError as e:
        print(f"ERROR: {e}")
        return 1

    print(output)
    return 0


def to_json(value: Value):
    match value:
        case Int(value=n):
            return n

        case Bytes(value=b):
            return bytes_to_str(b)

        case List(items=items):
            return [to_json(item) for item in items]

        case Dict(entries=entries):
            document = {}
            for k, v in entries.items():
                key = bytes_to_str(k)
                if key in document:
                    raise Custom(f"dict key {k!r} renders as {key!r}, which another key already uses")
                document[key] = to_json(v)
            return document


# json.dumps() can't handle bytes, and bencoded strings are not always text:
# show them as utf-8 when they decode, as prefixed hex otherwise.
def bytes_to_str(data: bytes) -> str:
    try:
        return data.decode()
    except UnicodeDecodeError:
        return HEX_PREFIX + data.hex()
