from dataclasses import dataclass

from .encoder import Encodable, Encoder
from .record import Field, Record
from .visitor import Decodable, IntVisitor, StrVisitor, TupleVisitor, Visitor


@dataclass
class Node(Decodable, Encodable):
    """A DHT bootstrap node, stored as a [host, port] list."""

    host: str
    port: int

    @classmethod
    def bencode_visitor(cls) -> Visitor:
        return NodeVisitor()

    def bencode_describe(self, encoder: Encoder):
        encoder.emit([self.host, self.port])


class NodeVisitor(Visitor):
    expecting = "a [host, port] pair"

    def visit_list(self, access):
        host, port = TupleVisitor([StrVisitor(), IntVisitor()]).visit_list(access)
        return Node(host, port)


@dataclass
class File(Record):
    path: list[str]
    length: int
    md5sum: str | None = None

    FIELDS = (
        Field("path", list[str]),
        Field("length", int),
        Field("md5sum", str, default=None),
    )


@dataclass
class Info(Record):
    name: str
    pieces: bytes
    piece_length: int
    md5sum: str | None = None
    length: int | None = None
    files: list[File] | None = None
    private: int | None = None
    path: list[str] | None = None
    root_hash: str | None = None

    FIELDS = (
        Field("name", str),
        Field("pieces", bytes),
        Field("piece_length", int, key="piece length"),
        Field("md5sum", str, default=None),
        Field("length", int, default=None),
        Field("files", list[File], default=None),
        Field("private", int, default=None),
        Field("path", list[str], default=None),
        Field("root_hash", str, key="root hash", default=None),
    )


@dataclass
class Torrent(Record):
    info: Info
    announce: str | None = None
    nodes: list[Node] | None = None
    encoding: str | None = None
    httpseeds: list[str] | None = None
    announce_list: list[list[str]] | None = None
    creation_date: int | None = None
    comment: str | None = None
    created_by: str | None = None

    FIELDS = (
        Field("info", Info),
        Field("announce", str, default=None),
        Field("nodes", list[Node], default=None),
        Field("encoding", str, default=None),
        Field("httpseeds", list[str], default=None),
        Field("announce_list", list[list[str]], key="announce-list", default=None),
        Field("creation_date", int, key="creation date", default=None),
        Field("comment", str, default=None),
        Field("created_by", str, key="created by", default=None),
    )


def render_torrent(torrent: Torrent) -> str:
    info = torrent.info

    lines = [
        f"name:\t\t{info.name}",
        f"announce:\t{torrent.announce}",
        f"nodes:\t\t{torrent.nodes}",
    ]
    for tier in torrent.announce_list or []:
        if tier:
            lines.append(f"announce list:\t{tier[0]}")
    lines += [
        f"httpseeds:\t{torrent.httpseeds}",
        f"creation date:\t{torrent.creation_date}",
        f"comment:\t{torrent.comment}",
        f"created by:\t{torrent.created_by}",
        f"encoding:\t{torrent.encoding}",
        f"piece length:\t{info.piece_length}",
        f"private:\t{info.private}",
        f"root hash:\t{info.root_hash}",
        f"md5sum:\t\t{info.md5sum}",
        f"path:\t\t{info.path}",
    ]
    for f in info.files or []:
        lines.append(f"file path:\t{f.path}")
        lines.append(f"file length:\t{f.length}")
        lines.append(f"file md5sum:\t{f.md5sum}")

    return "\n".join(lines)
