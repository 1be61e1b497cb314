import pytest

from tracker_ingest import encode

PIECES = b"\x11" * 20 + b"\x22" * 20


@pytest.fixture
def single_file_info():
    return {
        b"length": 10,
        b"name": b"a.txt",
        b"piece length": 16384,
    }


@pytest.fixture
def multi_file_info():
    return {
        b"files": [
            {b"length": 100, b"path": [b"disc1", b"track01.flac"]},
            {b"length": 250, b"path": [b"disc1", b"track02.flac"]},
            {b"length": 0, b"path": [b"cover.jpg"]},
        ],
        b"name": b"album",
        b"piece length": 262144,
        b"pieces": PIECES,
    }


@pytest.fixture
def file_tree():
    return {
        b"album": {
            b"cover.jpg": {b"": {b"length": 7, b"pieces root": b"r" * 32}},
            b"disc1": {
                b"track01.flac": {b"": {b"length": 100, b"pieces root": b"a" * 32}},
            },
        },
    }


@pytest.fixture
def make_torrent():
    def _make(info, **extra):
        meta = {b"announce": b"http://tracker.example/announce"}
        for key, value in extra.items():
            if key == "announce_list":
                meta[b"announce-list"] = value
            else:
                meta[key.replace("_", " ").encode()] = value
        meta[b"info"] = info
        return encode(meta)
    return _make
