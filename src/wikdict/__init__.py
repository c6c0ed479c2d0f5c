"""wikdict: offline dictionary lookup over a bundled SQLite store."""

__version__ = "0.3.0"

from wikdict.coalesce import coalesce as coalesce
from wikdict.config import Settings as Settings, load_settings as load_settings
from wikdict.dictionary import Dictionary as Dictionary
from wikdict.exceptions import (
    ConfigError as ConfigError,
    DecompressFailedError as DecompressFailedError,
    EntryParseError as EntryParseError,
    OpenFailedError as OpenFailedError,
    QueryFailedError as QueryFailedError,
    ResourceNotFoundError as ResourceNotFoundError,
    WikdictError as WikdictError,
    WriteFailedError as WriteFailedError,
)
from wikdict.history import HistoryStore as HistoryStore, PreferenceStore as PreferenceStore
from wikdict.models import (
    CoalescedEntry as CoalescedEntry,
    FetchResult as FetchResult,
    HistoryEntry as HistoryEntry,
    LoadResult as LoadResult,
    RawEntry as RawEntry,
    SearchState as SearchState,
    SearchStrategy as SearchStrategy,
    Sense as Sense,
    SkippedRow as SkippedRow,
)
from wikdict.resources import ResourceResolver as ResourceResolver
from wikdict.session import SearchSession as SearchSession, normalize_query as normalize_query
from wikdict.store import EntryStore as EntryStore, parse_entry as parse_entry

__all__ = [
    # Entry point
    "Dictionary",
    # Components
    "EntryStore",
    "HistoryStore",
    "PreferenceStore",
    "ResourceResolver",
    "SearchSession",
    # Functions
    "coalesce",
    "load_settings",
    "normalize_query",
    "parse_entry",
    # Models
    "CoalescedEntry",
    "FetchResult",
    "HistoryEntry",
    "LoadResult",
    "RawEntry",
    "SearchState",
    "SearchStrategy",
    "Sense",
    "Settings",
    "SkippedRow",
    # Exceptions
    "ConfigError",
    "DecompressFailedError",
    "EntryParseError",
    "OpenFailedError",
    "QueryFailedError",
    "ResourceNotFoundError",
    "WikdictError",
    "WriteFailedError",
]
