import time
from datetime import datetime, timezone

import pytest

from tracker_ingest import (
    FileEntry,
    InvalidFileEntry,
    InvalidPieceHashes,
    InvalidPieceLength,
    MissingField,
    ingest,
)
from tracker_ingest.normalize import normalize_info, read_top_level


def test_single_file(single_file_info):
    fields = normalize_info(single_file_info)
    assert fields.name == "a.txt"
    assert fields.files == (FileEntry(("a.txt",), 10),)
    assert fields.total_size == 10
    assert fields.piece_length == 16384
    assert fields.private is False
    assert fields.piece_count == 0


def test_multi_file(multi_file_info):
    fields = normalize_info(multi_file_info)
    assert [f.path for f in fields.files] == [
        ("disc1", "track01.flac"),
        ("disc1", "track02.flac"),
        ("cover.jpg",),
    ]
    assert fields.total_size == 350
    assert fields.total_size == sum(f.length for f in fields.files)
    assert fields.piece_count == 2
    assert fields.files[0].path_str == "disc1/track01.flac"


def test_file_tree_layout(file_tree):
    info = {b"file tree": file_tree, b"name": b"album", b"piece length": 16384}
    fields = normalize_info(info)
    assert fields.files == (
        FileEntry(("album", "cover.jpg"), 7),
        FileEntry(("album", "disc1", "track01.flac"), 100),
    )
    assert fields.total_size == 107


def test_files_list_wins_over_file_tree(multi_file_info, file_tree):
    multi_file_info[b"file tree"] = file_tree
    fields = normalize_info(multi_file_info)
    assert fields.total_size == 350


@pytest.mark.parametrize("tree", [
    {},
    {b"a": {}},
    {b"a": b"x"},
    {b"a": {b"": {b"pieces root": b"r"}}},
    {b"..": {b"": {b"length": 1}}},
])
def test_bad_file_tree(tree):
    info = {b"file tree": tree, b"name": b"x", b"piece length": 16384}
    with pytest.raises(InvalidFileEntry):
        normalize_info(info)


@pytest.mark.parametrize("path", [
    [],
    [b""],
    [b"."],
    [b".."],
    [b"ok", b".."],
    [b"/etc", b"passwd"],
    [b"a/b"],
    [b"c:\\windows"],
    [1],
    b"flat",
])
def test_unsafe_or_invalid_paths(multi_file_info, path):
    multi_file_info[b"files"] = [{b"length": 1, b"path": path}]
    with pytest.raises(InvalidFileEntry):
        normalize_info(multi_file_info)


@pytest.mark.parametrize("entry", [
    {b"path": [b"a"]},
    {b"length": 1},
    {b"length": -1, b"path": [b"a"]},
    {b"length": b"1", b"path": [b"a"]},
    [b"a"],
])
def test_invalid_file_entries(multi_file_info, entry):
    multi_file_info[b"files"] = [entry]
    with pytest.raises(InvalidFileEntry):
        normalize_info(multi_file_info)


@pytest.mark.parametrize("files", [[], b"nope"])
def test_files_must_be_non_empty_list(multi_file_info, files):
    multi_file_info[b"files"] = files
    with pytest.raises(InvalidFileEntry):
        normalize_info(multi_file_info)


def test_single_file_unsafe_name(single_file_info):
    single_file_info[b"name"] = b".."
    with pytest.raises(InvalidFileEntry):
        normalize_info(single_file_info)


def test_single_file_negative_length(single_file_info):
    single_file_info[b"length"] = -10
    with pytest.raises(InvalidFileEntry):
        normalize_info(single_file_info)


@pytest.mark.parametrize("key, field", [
    (b"name", "name"),
    (b"piece length", "piece length"),
    (b"length", "length"),
])
def test_missing_field(single_file_info, key, field):
    del single_file_info[key]
    with pytest.raises(MissingField) as exc:
        normalize_info(single_file_info)
    assert exc.value.field == field


def test_name_must_be_bytes(single_file_info):
    single_file_info[b"name"] = 5
    with pytest.raises(MissingField):
        normalize_info(single_file_info)


@pytest.mark.parametrize("value", [0, -16384, b"16384"])
def test_invalid_piece_length(single_file_info, value):
    single_file_info[b"piece length"] = value
    with pytest.raises(InvalidPieceLength):
        normalize_info(single_file_info)


@pytest.mark.parametrize("value, expected", [(1, True), (0, False), (b"1", False)])
def test_private_flag(single_file_info, value, expected):
    single_file_info[b"private"] = value
    assert normalize_info(single_file_info).private is expected


@pytest.mark.parametrize("pieces", [b"x" * 19, b"x" * 41, 20])
def test_invalid_pieces(single_file_info, pieces):
    single_file_info[b"pieces"] = pieces
    with pytest.raises(InvalidPieceHashes):
        normalize_info(single_file_info)


def test_require_pieces_fails_closed(single_file_info):
    with pytest.raises(MissingField) as exc:
        normalize_info(single_file_info, require_pieces=True)
    assert exc.value.field == "pieces"


def test_require_pieces_allows_pure_v2(file_tree):
    info = {b"file tree": file_tree, b"name": b"album", b"piece length": 16384}
    assert normalize_info(info, require_pieces=True).piece_count == 0


def test_non_utf8_name_is_replaced(single_file_info):
    single_file_info[b"name"] = b"caf\xe9.txt"
    assert normalize_info(single_file_info).name == "caf\ufffd.txt"


def test_read_top_level():
    meta = {
        b"announce": b"http://a/announce",
        b"announce-list": [[b"http://a/announce", b"http://b/announce"], [b"udp://c:80"]],
        b"comment": b"hello",
        b"created by": b"mktorrent 1.1",
        b"creation date": 1700000000,
    }
    top = read_top_level(meta)
    assert top.announce == ("http://a/announce", "http://b/announce", "udp://c:80")
    assert top.comment == "hello"
    assert top.created_by == "mktorrent 1.1"
    assert top.creation_date == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_read_top_level_ignores_bad_types():
    top = read_top_level({
        b"announce": 1,
        b"announce-list": [b"flat", [2]],
        b"comment": [b"x"],
        b"creation date": -5,
    })
    assert top.announce == ()
    assert top.comment is None
    assert top.created_by is None
    assert top.creation_date is None


def test_large_announce_list_is_linear(make_torrent, single_file_info):
    urls = [b"http://tracker%d.example/announce" % i for i in range(50000)]
    raw = make_torrent(single_file_info, announce_list=[urls, urls[:10]])

    started = time.perf_counter()
    torrent = ingest(raw)
    elapsed = time.perf_counter() - started

    assert len(torrent.announce) == 50001
    assert torrent.announce[1] == "http://tracker0.example/announce"
    assert elapsed < 5
