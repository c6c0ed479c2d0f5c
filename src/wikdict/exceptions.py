"""Custom exception hierarchy for wikdict."""


class WikdictError(Exception):
    """Base exception for all wikdict errors."""


class ResourceNotFoundError(WikdictError):
    """Neither a live store nor a packaged archive is available."""


class OpenFailedError(WikdictError):
    """The store file exists but cannot be opened as a database."""


class QueryFailedError(WikdictError):
    """A query could not be prepared or executed (malformed MATCH, missing table)."""


class DecompressFailedError(WikdictError):
    """Corrupt archive, or payload larger than the provisioned buffer."""


class WriteFailedError(WikdictError):
    """Filesystem or preference-store write error."""


class EntryParseError(WikdictError):
    """A single row's JSON payload is malformed."""


class ConfigError(WikdictError):
    """Invalid configuration file or value."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)
