import hashlib

import pytest

from bencodec import Custom, TypeMismatch, decode_as, encode, encode_from
from bencodec.torrent import File, Info, Node, Torrent, render_torrent


class TestTorrent:
    """Test suite for the typed torrent metainfo records."""

    @pytest.fixture
    def sample_metainfo(self):
        """Create a sample single-file metainfo dict."""
        return {
            b"announce": b"http://tracker.example.com:8080/announce",
            b"info": {
                b"name": b"test.txt",
                b"length": 1024,
                b"piece length": 16384,
                b"pieces": b"12345678901234567890" * 3,  # 3 pieces, 20 bytes each
            },
        }

    @pytest.fixture
    def multi_file_metainfo(self):
        """Create a sample multi-file metainfo dict with the optional keys set."""
        return {
            b"announce": b"http://tracker.example.com:8080/announce",
            b"announce-list": [[b"http://a.example.com/announce"], [b"udp://b.example.com:80"]],
            b"comment": b"two files",
            b"created by": b"mktorrent 1.1",
            b"creation date": 1700000000,
            b"nodes": [[b"router.example.com", 6881], [b"10.0.0.2", 6882]],
            b"info": {
                b"name": b"test_dir",
                b"piece length": 16384,
                b"pieces": b"12345678901234567890" * 2,
                b"private": 1,
                b"files": [
                    {b"length": 512, b"path": [b"file1.txt"]},
                    {b"length": 256, b"path": [b"subdir", b"file2.txt"]},
                ],
            },
        }

    def test_single_file(self, sample_metainfo):
        """Test decoding the fields of a single-file torrent."""
        torrent = decode_as(encode(sample_metainfo), Torrent)
        assert torrent.announce == "http://tracker.example.com:8080/announce"
        assert torrent.info == Info(
            name="test.txt",
            pieces=b"12345678901234567890" * 3,
            piece_length=16384,
            length=1024,
        )
        assert torrent.nodes is None
        assert torrent.info.files is None

    def test_multi_file(self, multi_file_metainfo):
        """Test decoding a multi-file torrent with renamed keys."""
        torrent = decode_as(encode(multi_file_metainfo), Torrent)
        assert torrent.info.length is None
        assert torrent.info.private == 1
        assert torrent.info.files == [
            File(path=["file1.txt"], length=512),
            File(path=["subdir", "file2.txt"], length=256),
        ]
        assert torrent.announce_list == [
            ["http://a.example.com/announce"],
            ["udp://b.example.com:80"],
        ]
        assert torrent.creation_date == 1700000000
        assert torrent.created_by == "mktorrent 1.1"
        assert torrent.nodes == [Node("router.example.com", 6881), Node("10.0.0.2", 6882)]

    def test_reencode(self, multi_file_metainfo):
        """Test that a typed torrent encodes back to the same bytes."""
        data = encode(multi_file_metainfo)
        assert encode_from(decode_as(data, Torrent)) == data

    def test_info_hash(self, sample_metainfo):
        """Test that the typed info dict hashes like the original one."""
        torrent = decode_as(encode(sample_metainfo), Torrent)
        expected = hashlib.sha1(encode(sample_metainfo[b"info"])).hexdigest()
        assert hashlib.sha1(encode_from(torrent.info)).hexdigest() == expected

    def test_unknown_keys_ignored(self, sample_metainfo):
        """Test that keys outside the schema do not stop decoding."""
        sample_metainfo[b"url-list"] = [b"http://mirror.example.com/"]
        sample_metainfo[b"info"][b"x-custom"] = {b"anything": [1, 2]}
        torrent = decode_as(encode(sample_metainfo), Torrent)
        assert torrent.info.name == "test.txt"

    def test_missing_info(self, sample_metainfo):
        """Test that a torrent without info dict is rejected."""
        del sample_metainfo[b"info"]
        with pytest.raises(Custom) as exc_info:
            decode_as(encode(sample_metainfo), Torrent)
        assert "missing field `info`" in str(exc_info.value)
        assert exc_info.value.offset == 0

    def test_missing_piece_length(self, sample_metainfo):
        """Test that the info dict requires its renamed field."""
        del sample_metainfo[b"info"][b"piece length"]
        with pytest.raises(Custom) as exc_info:
            decode_as(encode(sample_metainfo), Torrent)
        assert "missing field `piece_length`" in str(exc_info.value)

    def test_malformed_node(self, sample_metainfo):
        """Test that nodes must be [host, port] pairs."""
        sample_metainfo[b"nodes"] = [[6881, b"router.example.com"]]
        with pytest.raises(TypeMismatch):
            decode_as(encode(sample_metainfo), Torrent)

        sample_metainfo[b"nodes"] = [[b"router.example.com"]]
        with pytest.raises(Custom):
            decode_as(encode(sample_metainfo), Torrent)

    def test_render_single_file(self, sample_metainfo):
        """Test the text rendering of a torrent."""
        text = render_torrent(decode_as(encode(sample_metainfo), Torrent))
        assert "name:\t\ttest.txt" in text
        assert "announce:\thttp://tracker.example.com:8080/announce" in text
        assert "piece length:\t16384" in text
        assert "file path:" not in text

    def test_render_multi_file(self, multi_file_metainfo):
        """Test that every file and tracker tier is listed."""
        text = render_torrent(decode_as(encode(multi_file_metainfo), Torrent))
        assert "announce list:\thttp://a.example.com/announce" in text
        assert "announce list:\tudp://b.example.com:80" in text
        assert "file path:\t['subdir', 'file2.txt']" in text
        assert "file length:\t256" in text

    def test_from_file(self, tmp_path, sample_metainfo):
        """Test reading a torrent from disk."""
        torrent_file = tmp_path / "test.torrent"
        torrent_file.write_bytes(encode(sample_metainfo))

        torrent = decode_as(torrent_file.read_bytes(), Torrent)
        assert torrent.info.length == 1024

    def test_from_file_invalid_content(self, tmp_path):
        """Test that a file which is not bencode is rejected."""
        invalid_file = tmp_path / "invalid.torrent"
        invalid_file.write_bytes(b"not a valid torrent file")

        with pytest.raises(ValueError):
            decode_as(invalid_file.read_bytes(), Torrent)
