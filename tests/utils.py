import logging
from pathlib import Path

import libtorrent as lt

logger = logging.getLogger(__name__)


def create_payload(workspace: Path, size: int, name: str = "payload.dat") -> Path:
    """Write a payload of `size` bytes in the workspace"""
    payload = workspace / name
    payload.write_bytes(bytes(range(256)) * (size // 256) + b"A" * (size % 256))
    return payload


def create_torrent(payload: Path, tracker: str, comment: str | None = None) -> Path:
    """Have libtorrent build the .torrent file describing the payload"""
    fs = lt.file_storage()
    lt.add_files(fs, str(payload))

    t = lt.create_torrent(fs)
    t.add_tracker(tracker)
    t.set_creator("bencodec-tests")
    if comment:
        t.set_comment(comment)

    lt.set_piece_hashes(t, str(payload.parent))

    torrent_path = payload.with_suffix(".torrent")
    torrent_path.write_bytes(lt.bencode(t.generate()))

    info = lt.torrent_info(str(torrent_path))
    logger.debug(
        f"Torrent file: {torrent_path} ({info.total_size()} bytes in "
        f"{info.num_pieces()} pieces of {info.piece_length()})"
    )

    return torrent_path


def libtorrent_info_hash(torrent_path: Path) -> str:
    """The v1 info hash as libtorrent computes it, in hex"""
    return str(lt.torrent_info(str(torrent_path)).info_hash())
