"""
torrent file parser and info_hash calculator
bytes -> decode -> canonical 'info' -> info hashes -> fields -> TorrentDescriptor
nothing is kept between calls, any error means no descriptor at all
"""

import base64
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .bencode import DEFAULT_MAX_DEPTH, decode
from .canonical import canonical_info_bytes, get_info_dict
from .errors import MalformedEncoding
from .identity import TorrentVersion, compute_identity, info_markers
from .normalize import normalize_info, read_top_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TorrentDescriptor:
    name: str
    total_size: int
    files: tuple
    piece_length: int
    private: bool
    version: TorrentVersion
    info_hash_v1: bytes
    info_hash_v2: Optional[bytes] = None
    piece_count: int = 0
    announce: tuple = ()
    comment: Optional[str] = None
    created_by: Optional[str] = None
    creation_date: Optional[datetime] = None

    @property
    def info_hash_v1_hex(self):
        return self.info_hash_v1.hex()

    @property
    def info_hash_v2_hex(self):
        return self.info_hash_v2.hex() if self.info_hash_v2 is not None else None

    @property
    def is_multi_file(self):
        return len(self.files) > 1

    def to_dict(self):
        return {
            "name": self.name,
            "info_hash": self.info_hash_v1_hex,
            "info_hash_v2": self.info_hash_v2_hex,
            "version": self.version.value,
            "total_size": self.total_size,
            "piece_length": self.piece_length,
            "piece_count": self.piece_count,
            "private": self.private,
            "files": [{"path": list(f.path), "length": f.length} for f in self.files],
            "announce": list(self.announce),
            "comment": self.comment,
            "created_by": self.created_by,
            "creation_date": self.creation_date.isoformat() if self.creation_date else None,
        }

    def __repr__(self):
        return (f"TorrentDescriptor(name='{self.name}', "
                f"size={self.total_size}, "
                f"version={self.version.value}, "
                f"info_hash={self.info_hash_v1_hex})")


def ingest(data, max_depth=DEFAULT_MAX_DEPTH, require_pieces=False):
    meta = decode(data, max_depth)
    info = get_info_dict(meta)

    has_pieces, has_file_tree = info_markers(info)
    identity = compute_identity(canonical_info_bytes(meta), has_pieces, has_file_tree)

    fields = normalize_info(info, require_pieces=require_pieces)
    extra = read_top_level(meta)

    torrent = TorrentDescriptor(
        name=fields.name,
        total_size=fields.total_size,
        files=fields.files,
        piece_length=fields.piece_length,
        private=fields.private,
        version=identity.version,
        info_hash_v1=identity.info_hash_v1,
        info_hash_v2=identity.info_hash_v2,
        piece_count=fields.piece_count,
        announce=extra.announce,
        comment=extra.comment,
        created_by=extra.created_by,
        creation_date=extra.creation_date,
    )
    logger.debug("Ingested %r: %s (%s)", torrent.name, torrent.info_hash_v1_hex,
                 torrent.version.value)
    return torrent


def ingest_base64(text, max_depth=DEFAULT_MAX_DEPTH, require_pieces=False):
    try:
        data = base64.b64decode("".join(text.split()), validate=True) #line-wrapped input is fine
    except ValueError as e: #binascii.Error is a ValueError
        raise MalformedEncoding(f"Invalid base64 torrent data: {e}") from e
    return ingest(data, max_depth=max_depth, require_pieces=require_pieces)


def ingest_file(filepath, max_depth=DEFAULT_MAX_DEPTH, require_pieces=False):
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Torrent file not found: {filepath}")

    with open(filepath, 'rb') as f:
        content = f.read()

    return ingest(content, max_depth=max_depth, require_pieces=require_pieces)
