"""Entry store: bulk load and full-text search over the dictionary database."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from wikdict import db as _db
from wikdict.exceptions import EntryParseError, QueryFailedError
from wikdict.models import FetchResult, RawEntry, SearchStrategy, SkippedRow

logger = logging.getLogger(__name__)

DEFAULT_LOAD_LIMIT = 1000
DEFAULT_SEARCH_LIMIT = 100

_LOAD_SQL = "SELECT id, word, pos, data FROM entries ORDER BY word LIMIT ?"

# Table names are fixed per strategy, never taken from input.
_SEARCH_SQL = """
SELECT e.id, e.word, e.pos, e.data
FROM {index}
JOIN entries e ON {index}.rowid = e.id
WHERE {index} MATCH ?
ORDER BY rank
LIMIT ?
"""

_INDEXES = {
    SearchStrategy.PREFIX: "entries_fts",
    SearchStrategy.TRIGRAM: "entries_fts_trigram",
}


def parse_entry(word: str, pos: str | None, data: str | None) -> RawEntry:
    """Build a :class:`RawEntry` from one row's JSON sense payload.

    Raises:
        EntryParseError: if ``data`` is not a JSON object.
    """
    try:
        obj = json.loads(data) if data is not None else None
    except (json.JSONDecodeError, TypeError) as e:
        raise EntryParseError(f"Malformed payload for {word!r}: {e}") from e
    if not isinstance(obj, dict):
        raise EntryParseError(f"Payload for {word!r} is not an object")

    gloss = ""
    definition = ""
    examples: list[str] = []

    senses = obj.get("senses")
    first: dict[str, Any] = {}
    if isinstance(senses, list) and senses and isinstance(senses[0], dict):
        first = senses[0]

    glosses = _strings(first.get("glosses"))
    raw_glosses = _strings(first.get("raw_glosses"))
    if glosses:
        gloss = glosses[0]
    if raw_glosses:
        definition = raw_glosses[0]
    elif glosses:
        definition = "; ".join(glosses)

    raw_examples = first.get("examples")
    if not isinstance(raw_examples, list):
        raw_examples = []
    for example in raw_examples:
        if isinstance(example, dict) and isinstance(example.get("text"), str):
            examples.append(example["text"])

    etymology = None
    etymology_texts = _strings(obj.get("etymology_texts"))
    if etymology_texts:
        etymology = " ".join(etymology_texts)

    return RawEntry(
        word=word,
        part_of_speech=pos or "unknown",
        gloss=gloss or definition,
        definition=definition or gloss,
        examples=tuple(examples),
        etymology=etymology,
    )


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def prefix_pattern(query: str) -> str:
    """MATCH expression for prefix search: the quoted query plus ``*``."""
    return _quote(query) + "*"


def trigram_pattern(query: str) -> str:
    """MATCH expression for substring search: the quoted query, no wildcard."""
    return _quote(query)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


class EntryStore:
    """Read-only query layer over a dictionary store.

    Every call opens and closes its own connection, so concurrent callers
    never share a handle.
    """

    def __init__(
        self,
        db_path: str | Path,
        *,
        load_limit: int = DEFAULT_LOAD_LIMIT,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> None:
        self.db_path = Path(db_path)
        self.load_limit = load_limit
        self.search_limit = search_limit

    def load_all(self) -> FetchResult:
        """Load up to ``load_limit`` entries ordered by word.

        Raises:
            OpenFailedError: if the store cannot be opened.
            QueryFailedError: if the query fails.
        """
        result = self._fetch(_LOAD_SQL, (self.load_limit,))
        logger.debug(
            f"Loaded {len(result.entries)} entries from {self.db_path} "
            f"({len(result.skipped)} skipped)"
        )
        return result

    def search(
        self,
        query: str,
        strategy: SearchStrategy = SearchStrategy.PREFIX,
    ) -> FetchResult:
        """Search headwords using the index for ``strategy``, best rank first.

        Raises:
            OpenFailedError: if the store cannot be opened.
            QueryFailedError: if the MATCH expression or query is rejected.
        """
        strategy = SearchStrategy(strategy)
        if strategy is SearchStrategy.PREFIX:
            pattern = prefix_pattern(query)
        else:
            pattern = trigram_pattern(query)
        sql = _SEARCH_SQL.format(index=_INDEXES[strategy])
        result = self._fetch(sql, (pattern, self.search_limit))
        logger.debug(
            f"{strategy.value} search {pattern!r} returned {len(result.entries)} rows"
        )
        return result

    def _fetch(self, sql: str, params: tuple) -> FetchResult:
        entries: list[RawEntry] = []
        skipped: list[SkippedRow] = []
        with closing(_db.connect(self.db_path)) as conn:
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise QueryFailedError(f"Query failed on {self.db_path}: {e}") from e
        for row in rows:
            try:
                entries.append(parse_entry(row["word"], row["pos"], row["data"]))
            except EntryParseError as e:
                logger.debug(f"Skipping row {row['id']}: {e}")
                skipped.append(SkippedRow(rowid=row["id"], word=row["word"], reason=str(e)))
        return FetchResult(entries=tuple(entries), skipped=tuple(skipped))
