"""Recently-viewed history and the key-value store that persists it."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Optional

from wikdict.exceptions import WriteFailedError
from wikdict.models import CoalescedEntry, HistoryEntry

logger = logging.getLogger(__name__)

HISTORY_KEY = "viewingHistory"
DEFAULT_MAX_SIZE = 20

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS preferences (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL
);
"""


class PreferenceStore:
    """A small key-value store in its own SQLite file.

    A connection is opened for each operation; values are bytes.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def _get_connection(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.executescript(SCHEMA_SQL)
        return conn

    def get(self, key: str) -> Optional[bytes]:
        """Return the stored value, or None if the key is absent.

        Raises:
            sqlite3.Error, OSError: if the store cannot be read.
        """
        with closing(self._get_connection()) as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        # Records written as TEXT by other tools read back as str
        if isinstance(row[0], str):
            return row[0].encode("utf-8")
        return bytes(row[0])

    def set(self, key: str, value: bytes) -> None:
        """Overwrite the value stored under ``key``.

        Raises:
            WriteFailedError: if the value cannot be written.
        """
        try:
            with closing(self._get_connection()) as conn, conn:
                conn.execute(
                    "INSERT OR REPLACE INTO preferences (key, value) VALUES (?, ?)",
                    (key, value),
                )
        except (sqlite3.Error, OSError) as e:
            raise WriteFailedError(f"Cannot write preference {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with closing(self._get_connection()) as conn, conn:
                conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
        except (sqlite3.Error, OSError) as e:
            raise WriteFailedError(f"Cannot delete preference {key!r}: {e}") from e


class HistoryStore:
    """Bounded, most-recent-first list of viewed entries.

    The in-memory list and the persisted record always hold the same words
    in the same order; every mutation rewrites the whole record, and the
    in-memory list only changes once that write has succeeded.
    """

    def __init__(
        self,
        preferences: PreferenceStore,
        *,
        max_size: int = DEFAULT_MAX_SIZE,
        key: str = HISTORY_KEY,
    ) -> None:
        self.preferences = preferences
        self.max_size = max_size
        self.key = key
        self._entries: list[CoalescedEntry] = []

    @property
    def entries(self) -> list[CoalescedEntry]:
        return list(self._entries)

    def record_view(self, entry: CoalescedEntry) -> None:
        """Move ``entry`` to the front, dropping older views of the same word.

        Raises:
            WriteFailedError: if persisting fails; the list is left unchanged.
        """
        updated = self.with_view(entry)
        self.write(updated)
        self.replace(updated)
        logger.debug(f"Recorded view of {entry.word!r}; {len(updated)} in history")

    def with_view(self, entry: CoalescedEntry) -> list[CoalescedEntry]:
        """The list as it would be after viewing ``entry``; nothing is changed."""
        updated = [e for e in self._entries if e.word != entry.word]
        updated.insert(0, entry)
        return updated[: self.max_size]

    def replace(self, entries: list[CoalescedEntry]) -> None:
        self._entries = list(entries[: self.max_size])

    def load(self) -> list[CoalescedEntry]:
        """Replace the in-memory list with the persisted one."""
        self.replace(self.read())
        return self.entries

    def read(self) -> list[CoalescedEntry]:
        """Decode the persisted list without touching the in-memory one.

        Unreadable or malformed data reads as empty.
        """
        try:
            raw = self.preferences.get(self.key)
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Failed to read history: {e}")
            return []

        if raw is None:
            logger.debug("No saved history found")
            return []

        try:
            items = json.loads(raw.decode("utf-8"))
            if not isinstance(items, list):
                raise TypeError("History record is not a list")
            history = [HistoryEntry.from_dict(item) for item in items]
        except (UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to decode history: {e}")
            return []

        logger.debug(f"Read {len(history)} entries from history")
        return [h.to_coalesced() for h in history[: self.max_size]]

    def persist(self) -> None:
        """Overwrite the persisted record with the current list.

        Raises:
            WriteFailedError: if the record cannot be written.
        """
        self.write(self._entries)

    def write(self, entries: list[CoalescedEntry]) -> None:
        payload = [HistoryEntry.from_coalesced(e).to_dict() for e in entries]
        self.preferences.set(
            self.key, json.dumps(payload, ensure_ascii=False).encode("utf-8"),
        )

    def clear(self) -> None:
        self.write([])
        self.replace([])
