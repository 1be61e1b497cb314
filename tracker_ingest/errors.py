"""
errors raised while turning uploaded torrent bytes into a descriptor
every one of them means "this is not a valid torrent", nothing is retryable
"""


class IngestionError(ValueError):
    pass


class MalformedEncoding(IngestionError):
    pass


class MissingInfoDictionary(IngestionError):
    def __init__(self, message="Invalid torrent file: missing 'info' dictionary"):
        super().__init__(message)


class MissingField(IngestionError):
    def __init__(self, field):
        self.field = field
        super().__init__(f"Invalid torrent file: missing '{field}'")


class InvalidFileEntry(IngestionError):
    pass


class InvalidPieceLength(IngestionError):
    pass


class InvalidPieceHashes(IngestionError):
    pass
