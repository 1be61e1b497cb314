from .bencode import DEFAULT_MAX_DEPTH, BencodeDecoder, BencodeEncoder, decode, encode
from .errors import (
    IngestionError,
    InvalidFileEntry,
    InvalidPieceHashes,
    InvalidPieceLength,
    MalformedEncoding,
    MissingField,
    MissingInfoDictionary,
)
from .identity import TorrentVersion
from .normalize import FileEntry
from .torrent import TorrentDescriptor, ingest, ingest_base64, ingest_file
