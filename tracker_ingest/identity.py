"""
info hash (v1 SHA1, v2 SHA256) and torrent version detection
"""

import hashlib
from collections import namedtuple
from enum import Enum

from .errors import MalformedEncoding

FILE_TREE_KEYS = (b'file tree', b'file_tree')  #BEP 52 spelling first


class TorrentVersion(Enum):
    V1 = 'v1'
    V2 = 'v2'
    HYBRID = 'hybrid'


Identity = namedtuple('Identity', ['info_hash_v1', 'info_hash_v2', 'version'])


def info_markers(info):
    """Return (has_pieces, has_file_tree) for a decoded info dictionary."""
    has_pieces = b'pieces' in info
    has_file_tree = any(key in info for key in FILE_TREE_KEYS)
    return has_pieces, has_file_tree


def classify_version(has_pieces, has_file_tree):
    # no file tree means v1, even without 'pieces'
    if not has_file_tree:
        return TorrentVersion.V1
    return TorrentVersion.HYBRID if has_pieces else TorrentVersion.V2


def compute_identity(info_bytes, has_pieces, has_file_tree):
    if not info_bytes:
        raise MalformedEncoding("Cannot hash empty info dictionary")

    version = classify_version(has_pieces, has_file_tree)
    info_hash_v1 = hashlib.sha1(info_bytes).digest()
    info_hash_v2 = None
    if version is not TorrentVersion.V1:
        info_hash_v2 = hashlib.sha256(info_bytes).digest()

    return Identity(info_hash_v1, info_hash_v2, version)
