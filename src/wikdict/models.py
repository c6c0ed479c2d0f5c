"""Domain model dataclasses and enums for wikdict."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SearchStrategy(str, Enum):
    """Full-text index used to answer a search."""

    PREFIX = "prefix"
    TRIGRAM = "trigram"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RawEntry:
    """One stored row: a word, its part of speech and one parsed sense payload."""

    word: str
    part_of_speech: str
    gloss: str
    definition: str
    examples: tuple[str, ...] = ()
    etymology: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4, compare=False)


@dataclass(frozen=True, slots=True, eq=False)
class Sense:
    """A part-of-speech/definition/example/etymology unit attached to a word.

    Equality and hashing use ``id`` only.
    """

    id: uuid.UUID
    part_of_speech: str
    gloss: str
    definition: str
    examples: tuple[str, ...]
    etymology: str | None

    @classmethod
    def from_raw(cls, entry: RawEntry) -> Sense:
        return cls(
            id=entry.id,
            part_of_speech=entry.part_of_speech,
            gloss=entry.gloss,
            definition=entry.definition,
            examples=entry.examples,
            etymology=entry.etymology,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sense):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True, slots=True, eq=False)
class CoalescedEntry:
    """All senses sharing one exact headword.

    Every sense was grouped under ``word`` by the coalescer; this is not
    re-checked here.
    """

    id: uuid.UUID
    word: str
    senses: tuple[Sense, ...]

    @property
    def primary_gloss(self) -> str:
        return self.senses[0].gloss if self.senses else ""

    @property
    def parts_of_speech(self) -> str:
        return ", ".join(sorted({s.part_of_speech for s in self.senses}))

    def grouped_by_part_of_speech(self) -> list[tuple[str, tuple[Sense, ...]]]:
        """Senses partitioned by part of speech, keys in alphabetical order."""
        groups: dict[str, list[Sense]] = {}
        for sense in self.senses:
            groups.setdefault(sense.part_of_speech, []).append(sense)
        return [(pos, tuple(groups[pos])) for pos in sorted(groups)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CoalescedEntry):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Lightweight persisted projection of a viewed entry.

    Only the three display strings survive; converting back yields a single
    synthetic sense that is good enough for a list row but not for a detail
    view.
    """

    id: uuid.UUID
    word: str
    primary_gloss: str
    parts_of_speech: str

    @classmethod
    def from_coalesced(cls, entry: CoalescedEntry) -> HistoryEntry:
        return cls(
            id=uuid.uuid4(),
            word=entry.word,
            primary_gloss=entry.primary_gloss,
            parts_of_speech=entry.parts_of_speech,
        )

    def to_coalesced(self) -> CoalescedEntry:
        sense = Sense(
            id=uuid.uuid4(),
            part_of_speech=self.parts_of_speech.split(", ")[0],
            gloss=self.primary_gloss,
            definition=self.primary_gloss,
            examples=(),
            etymology=None,
        )
        return CoalescedEntry(id=self.id, word=self.word, senses=(sense,))

    def to_dict(self) -> dict[str, str]:
        return {
            "id": str(self.id),
            "word": self.word,
            "primaryGloss": self.primary_gloss,
            "partsOfSpeech": self.parts_of_speech,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Build from a persisted mapping.

        Raises:
            KeyError, TypeError, ValueError: if the mapping is incomplete or
                holds values of the wrong type.
        """
        fields = ("id", "word", "primaryGloss", "partsOfSpeech")
        for name in fields:
            if not isinstance(data[name], str):
                raise TypeError(f"History field {name!r} must be a string")
        return cls(
            id=uuid.UUID(data["id"]),
            word=data["word"],
            primary_gloss=data["primaryGloss"],
            parts_of_speech=data["partsOfSpeech"],
        )


@dataclass(frozen=True, slots=True)
class SkippedRow:
    """A stored row dropped because its payload could not be parsed."""

    rowid: int
    word: str
    reason: str


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Parsed rows from one store query plus the rows that were skipped.

    Iterating or taking ``len()`` addresses ``entries``.
    """

    entries: tuple[RawEntry, ...]
    skipped: tuple[SkippedRow, ...] = ()

    def __iter__(self) -> Iterator[RawEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of a successful dictionary load."""

    path: Path
    entries: tuple[RawEntry, ...]
    coalesced: tuple[CoalescedEntry, ...]
    skipped: tuple[SkippedRow, ...]


@dataclass(frozen=True, slots=True)
class SearchState:
    """Snapshot of a search session, emitted to subscribers on every change."""

    query: str
    strategy: SearchStrategy
    generation: int
    results: tuple[CoalescedEntry, ...]
    error: Exception | None = None
