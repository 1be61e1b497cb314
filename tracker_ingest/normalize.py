"""
reading decoded torrent fields into plain python values
'info' layouts: multi-file ('files' list), single-file ('length' next to 'name'),
pure v2 (only the BEP 52 'file tree'); all three become one list of FileEntry
"""

from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime, timezone

from .errors import InvalidFileEntry, InvalidPieceHashes, InvalidPieceLength, MissingField
from .identity import FILE_TREE_KEYS

PIECE_HASH_SIZE = 20
_MAX_TIMESTAMP = 253402300800  #year 10000


@dataclass(frozen=True)
class FileEntry:
    path: tuple
    length: int

    @property
    def path_str(self):
        return '/'.join(self.path)


InfoFields = namedtuple('InfoFields', [
    'name', 'files', 'total_size', 'piece_length', 'private', 'piece_count'])

TopLevelFields = namedtuple('TopLevelFields', [
    'announce', 'comment', 'created_by', 'creation_date'])


def _text(raw):
    return raw.decode('utf-8', errors='replace')


def _path_segment(raw):
    if not isinstance(raw, bytes) or not raw:
        raise InvalidFileEntry("File path segment must be a non-empty byte string")
    segment = _text(raw)
    if segment in ('.', '..') or '/' in segment or '\\' in segment or '\x00' in segment:
        raise InvalidFileEntry(f"Unsafe file path segment: {segment!r}")
    return segment


def _file_length(value):
    if not isinstance(value, int) or value < 0:
        raise InvalidFileEntry(f"File length must be a non-negative integer, got {value!r}")
    return value


def _multi_file_entries(files):
    if not isinstance(files, list) or not files:
        raise InvalidFileEntry("'files' must be a non-empty list")

    entries = []
    for index, item in enumerate(files):
        if not isinstance(item, dict):
            raise InvalidFileEntry(f"File entry {index} is not a dictionary")
        path = item.get(b'path')
        if not isinstance(path, list) or not path:
            raise InvalidFileEntry(f"File entry {index} has no path")
        if b'length' not in item:
            raise InvalidFileEntry(f"File entry {index} has no length")
        entries.append(FileEntry(
            tuple(_path_segment(segment) for segment in path),
            _file_length(item[b'length']),
        ))
    return entries


def _walk_file_tree(node, prefix, entries):
    if not isinstance(node, dict) or not node:
        raise InvalidFileEntry(f"Empty or invalid file tree node under {'/'.join(prefix)!r}")

    for key, child in node.items():
        segment = _path_segment(key)
        if not isinstance(child, dict):
            raise InvalidFileEntry(f"Invalid file tree node {segment!r}")
        leaf = child.get(b'')
        if leaf is not None:  #file: {b'': {length, pieces root}}
            if not isinstance(leaf, dict) or b'length' not in leaf:
                raise InvalidFileEntry(f"File tree entry {segment!r} has no length")
            entries.append(FileEntry(prefix + (segment,), _file_length(leaf[b'length'])))
        else:
            _walk_file_tree(child, prefix + (segment,), entries)


def _file_tree(info):
    for key in FILE_TREE_KEYS:
        if key in info:
            return info[key]
    return None


def normalize_info(info, require_pieces=False):
    name = info.get(b'name')
    if not isinstance(name, bytes):
        raise MissingField('name')

    if b'piece length' not in info:
        raise MissingField('piece length')
    piece_length = info[b'piece length']
    if not isinstance(piece_length, int) or piece_length <= 0:
        raise InvalidPieceLength(f"Piece length must be a positive integer, got {piece_length!r}")

    tree = _file_tree(info)
    piece_count = 0
    if b'pieces' in info:
        pieces = info[b'pieces']
        if not isinstance(pieces, bytes) or len(pieces) % PIECE_HASH_SIZE != 0:
            raise InvalidPieceHashes("'pieces' is not a multiple of 20 bytes")
        piece_count = len(pieces) // PIECE_HASH_SIZE
    elif require_pieces and tree is None:
        raise MissingField('pieces')

    if b'files' in info:
        files = _multi_file_entries(info[b'files'])
    elif b'length' not in info and tree is not None:
        files = []
        _walk_file_tree(tree, (), files)
    elif b'length' in info:
        files = [FileEntry((_path_segment(name),), _file_length(info[b'length']))]
    else:
        raise MissingField('length')

    return InfoFields(
        name=_text(name),
        files=tuple(files),
        total_size=sum(entry.length for entry in files),
        piece_length=piece_length,
        private=info.get(b'private') == 1,
        piece_count=piece_count,
    )


def _announce_urls(meta):
    urls = {}  #dict as an ordered set
    announce = meta.get(b'announce')
    if isinstance(announce, bytes):
        urls[_text(announce)] = None

    tiers = meta.get(b'announce-list')
    if isinstance(tiers, list):
        for tier in tiers:
            if not isinstance(tier, list):
                continue
            for url in tier:
                if isinstance(url, bytes):
                    urls.setdefault(_text(url))
    return tuple(urls)


def read_top_level(meta):
    # optional, informational keys outside 'info': bad types are dropped
    comment = meta.get(b'comment')
    created_by = meta.get(b'created by')
    created = meta.get(b'creation date')

    creation_date = None
    if isinstance(created, int) and 0 <= created < _MAX_TIMESTAMP:
        creation_date = datetime.fromtimestamp(created, tz=timezone.utc)

    return TopLevelFields(
        announce=_announce_urls(meta),
        comment=_text(comment) if isinstance(comment, bytes) else None,
        created_by=_text(created_by) if isinstance(created_by, bytes) else None,
        creation_date=creation_date,
    )
