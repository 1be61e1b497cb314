"""
re-encoding the 'info' dictionary, the bytes every client hashes
"""

from .bencode import encode
from .errors import MissingInfoDictionary


def get_info_dict(meta):
    if not isinstance(meta, dict):
        raise MissingInfoDictionary("Invalid torrent file: top level is not a dictionary")

    info = meta.get(b'info')
    if info is None:
        raise MissingInfoDictionary()
    if not isinstance(info, dict):
        raise MissingInfoDictionary("Invalid torrent file: 'info' is not a dictionary")
    return info


def canonical_info_bytes(meta):
    # encoded from the decoded subtree, not sliced out of the raw file
    return encode(get_info_dict(meta))
