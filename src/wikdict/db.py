"""Database connection, DDL, and store building for wikdict."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterable
from contextlib import closing
from pathlib import Path

from wikdict.exceptions import OpenFailedError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = """
CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY,
    word TEXT NOT NULL,
    pos TEXT,
    data TEXT
);
CREATE INDEX IF NOT EXISTS entry_word_index ON entries (word);

-- Prefix-oriented index (unicode61 tokens)
CREATE VIRTUAL TABLE IF NOT EXISTS entries_fts USING fts5(
    word,
    content='entries',
    content_rowid='id'
);

-- Substring-oriented index
CREATE VIRTUAL TABLE IF NOT EXISTS entries_fts_trigram USING fts5(
    word,
    content='entries',
    content_rowid='id',
    tokenize='trigram'
);
"""


def connect(db_path: str | Path, *, readonly: bool = True) -> sqlite3.Connection:
    """Open a store connection.

    Read-only connections never create the file. The database header is
    read eagerly so a missing or corrupt file fails here rather than on the
    first query.

    Raises:
        OpenFailedError: if the file cannot be opened as a database.
    """
    path = Path(db_path)
    try:
        if readonly:
            conn = sqlite3.connect(
                f"{path.resolve().as_uri()}?mode=ro", uri=True,
            )
        else:
            conn = sqlite3.connect(str(path))
    except sqlite3.Error as e:
        raise OpenFailedError(f"Unable to open database {path}: {e}") from e
    try:
        conn.execute("PRAGMA schema_version").fetchone()
    except sqlite3.Error as e:
        conn.close()
        raise OpenFailedError(f"Unable to open database {path}: {e}") from e
    conn.row_factory = sqlite3.Row
    return conn


def init_store(conn: sqlite3.Connection) -> None:
    """Create the entry table and both full-text indexes if missing."""
    conn.executescript(_DDL)
    conn.commit()


def insert_entries(
    conn: sqlite3.Connection,
    rows: Iterable[tuple[str, str | None, str | dict]],
) -> int:
    """Insert ``(word, pos, data)`` rows; ``data`` may be a mapping.

    Indexes are not updated; call :func:`rebuild_indexes` afterwards.
    """
    count = 0
    for word, pos, data in rows:
        payload = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
        conn.execute(
            "INSERT INTO entries (word, pos, data) VALUES (?, ?, ?)",
            (word, pos, payload),
        )
        count += 1
    conn.commit()
    return count


def rebuild_indexes(conn: sqlite3.Connection) -> None:
    """Repopulate both external-content FTS indexes from ``entries``."""
    conn.execute("INSERT INTO entries_fts(entries_fts) VALUES ('rebuild')")
    conn.execute(
        "INSERT INTO entries_fts_trigram(entries_fts_trigram) VALUES ('rebuild')"
    )
    conn.commit()


def create_store(
    db_path: str | Path,
    rows: Iterable[tuple[str, str | None, str | dict]],
) -> int:
    """Build a complete store at ``db_path`` from ``(word, pos, data)`` rows."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with closing(connect(path, readonly=False)) as conn:
        init_store(conn)
        count = insert_entries(conn, rows)
        rebuild_indexes(conn)
    logger.info(f"Built store {path} with {count} entries")
    return count


# ---------------------------------------------------------------------------
# wiktextract import
# ---------------------------------------------------------------------------

def _iter_jsonl(source: Path, stats: dict[str, int]):
    with open(source, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                stats["skipped"] += 1
                continue
            if not isinstance(obj, dict):
                stats["skipped"] += 1
                continue
            word = obj.get("word")
            if not isinstance(word, str) or not word:
                stats["skipped"] += 1
                continue
            pos = obj.get("pos")
            yield word, pos if isinstance(pos, str) else None, obj


def import_jsonl(source: str | Path, db_path: str | Path) -> tuple[int, int]:
    """Build a store from a wiktextract JSONL dump.

    Each line is one word object with ``word`` and ``pos`` keys; the whole
    object becomes the row payload. Blank lines are ignored; malformed
    lines and lines without a word are skipped.

    Returns:
        ``(imported, skipped)`` line counts.
    """
    stats = {"skipped": 0}
    imported = create_store(db_path, _iter_jsonl(Path(source), stats))
    if stats["skipped"]:
        logger.info(f"Skipped {stats['skipped']} unusable lines in {source}")
    return imported, stats["skipped"]
