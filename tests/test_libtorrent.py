import hashlib

import pytest

pytest.importorskip("libtorrent")

from bencodec import decode, decode_as, encode, encode_from  # noqa: E402
from bencodec.torrent import Torrent  # noqa: E402

from .utils import create_payload, create_torrent, libtorrent_info_hash  # noqa: E402

TRACKER_URL = "http://localhost:8080/announce"


class TestLibtorrentFiles:
    """Interoperability with .torrent files written by libtorrent."""

    @pytest.fixture
    def torrent_file(self, tmp_path):
        payload = create_payload(tmp_path, 1024)
        return create_torrent(payload, TRACKER_URL, comment="interop")

    def test_reencode_is_byte_identical(self, torrent_file):
        """Test that decoding then encoding gives back the exact file."""
        data = torrent_file.read_bytes()
        assert encode(decode(data)) == data

    def test_file_is_canonical(self, torrent_file):
        """Test that libtorrent output passes canonical decoding."""
        decode(torrent_file.read_bytes(), canonical=True)

    def test_decode_as_torrent(self, torrent_file):
        """Test the typed view of a real torrent."""
        torrent = decode_as(torrent_file.read_bytes(), Torrent)
        assert torrent.announce == TRACKER_URL
        assert torrent.comment == "interop"
        assert torrent.created_by == "bencodec-tests"
        assert torrent.info.name == "payload.dat"
        assert torrent.info.length == 1024
        assert torrent.info.piece_length > 0
        assert len(torrent.info.pieces) % 20 == 0
        assert torrent.info.files is None

    def test_info_hash_matches_libtorrent(self, torrent_file):
        """Test that the re-encoded info dict hashes like libtorrent's."""
        info = decode(torrent_file.read_bytes())["info"]
        digest = hashlib.sha1(encode(info)).hexdigest()
        assert digest == libtorrent_info_hash(torrent_file)

    def test_typed_reencode_keeps_known_fields(self, torrent_file):
        """Test that a typed round trip preserves every field it models."""
        torrent = decode_as(torrent_file.read_bytes(), Torrent)
        assert decode_as(encode_from(torrent), Torrent) == torrent
