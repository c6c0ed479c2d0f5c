"""Group raw entries sharing a headword into coalesced entries."""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from wikdict.models import CoalescedEntry, RawEntry, Sense


def coalesce(entries: Iterable[RawEntry]) -> list[CoalescedEntry]:
    """Fold entries into one :class:`CoalescedEntry` per exact word.

    Grouping is case-sensitive ("Run" and "run" stay apart). Senses keep
    their input order within a group, and the result is sorted by
    ``word.lower()``; ties keep first-appearance order.
    """
    groups: dict[str, list[Sense]] = {}
    for entry in entries:
        groups.setdefault(entry.word, []).append(Sense.from_raw(entry))

    coalesced = [
        CoalescedEntry(id=uuid.uuid4(), word=word, senses=tuple(senses))
        for word, senses in groups.items()
    ]
    coalesced.sort(key=lambda e: e.word.lower())
    return coalesced
