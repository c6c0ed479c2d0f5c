"""Tests for model derived views and history projection."""

import uuid

import pytest

from wikdict.coalesce import coalesce
from wikdict.models import (
    CoalescedEntry,
    FetchResult,
    HistoryEntry,
    RawEntry,
    Sense,
    SkippedRow,
)


def _sense(pos, gloss="g"):
    return Sense(
        id=uuid.uuid4(), part_of_speech=pos, gloss=gloss,
        definition=gloss, examples=(), etymology=None,
    )


class TestSense:

    def test_equality_is_by_id(self):
        a = _sense("noun", "one")
        b = Sense(
            id=a.id, part_of_speech="verb", gloss="two",
            definition="two", examples=("x",), etymology="e",
        )
        assert a == b
        assert hash(a) == hash(b)
        assert a != _sense("noun", "one")

    def test_from_raw(self):
        raw = RawEntry("w", "noun", "g", "d", ("ex",), "ety")
        sense = Sense.from_raw(raw)
        assert sense.id == raw.id
        assert (sense.part_of_speech, sense.gloss, sense.definition) == ("noun", "g", "d")
        assert sense.examples == ("ex",)
        assert sense.etymology == "ety"


class TestCoalescedEntry:

    def test_primary_gloss(self):
        entry = CoalescedEntry(uuid.uuid4(), "w", (_sense("verb", "first"), _sense("noun", "second")))
        assert entry.primary_gloss == "first"

    def test_primary_gloss_empty(self):
        assert CoalescedEntry(uuid.uuid4(), "w", ()).primary_gloss == ""

    def test_parts_of_speech_unique_and_sorted(self):
        senses = (_sense("verb"), _sense("noun"), _sense("verb"), _sense("adj"))
        entry = CoalescedEntry(uuid.uuid4(), "w", senses)
        assert entry.parts_of_speech == "adj, noun, verb"

    def test_grouped_by_part_of_speech(self):
        v1, n1, v2, n2 = _sense("verb"), _sense("noun"), _sense("verb"), _sense("noun")
        entry = CoalescedEntry(uuid.uuid4(), "w", (v1, n1, v2, n2))
        assert entry.grouped_by_part_of_speech() == [
            ("noun", (n1, n2)),
            ("verb", (v1, v2)),
        ]

    def test_equality_is_by_id(self):
        ident = uuid.uuid4()
        assert CoalescedEntry(ident, "a", ()) == CoalescedEntry(ident, "b", (_sense("x"),))
        assert CoalescedEntry(uuid.uuid4(), "a", ()) != CoalescedEntry(uuid.uuid4(), "a", ())


class TestHistoryEntry:

    def test_projection(self):
        (entry,) = coalesce([
            RawEntry("run", "verb", "to move", "to move quickly"),
            RawEntry("run", "noun", "a run", "an act of running"),
        ])
        history = HistoryEntry.from_coalesced(entry)
        assert history.id != entry.id
        assert history.word == "run"
        assert history.primary_gloss == "to move"
        assert history.parts_of_speech == "noun, verb"

    def test_reconstruction_is_lossy(self):
        history = HistoryEntry(uuid.uuid4(), "run", "to move", "noun, verb")
        entry = history.to_coalesced()

        assert entry.id == history.id
        assert entry.word == "run"
        (sense,) = entry.senses
        assert sense.part_of_speech == "noun"
        assert sense.gloss == sense.definition == "to move"
        assert sense.examples == ()
        assert sense.etymology is None
        assert entry.primary_gloss == "to move"
        assert entry.parts_of_speech == "noun"

    def test_dict_round_trip(self):
        history = HistoryEntry(uuid.uuid4(), "été", "summer", "noun")
        data = history.to_dict()
        assert set(data) == {"id", "word", "primaryGloss", "partsOfSpeech"}
        assert HistoryEntry.from_dict(data) == history

    @pytest.mark.parametrize("data", [
        {"word": "w", "primaryGloss": "g", "partsOfSpeech": "p"},
        {"id": "not-a-uuid", "word": "w", "primaryGloss": "g", "partsOfSpeech": "p"},
        {"id": str(uuid.uuid4()), "word": 3, "primaryGloss": "g", "partsOfSpeech": "p"},
    ])
    def test_from_dict_rejects_bad_data(self, data):
        with pytest.raises((KeyError, TypeError, ValueError)):
            HistoryEntry.from_dict(data)


class TestFetchResult:

    def test_behaves_as_entry_sequence(self):
        entries = (RawEntry("a", "n", "", ""), RawEntry("b", "n", "", ""))
        result = FetchResult(entries, (SkippedRow(3, "c", "bad"),))
        assert len(result) == 2
        assert list(result) == list(entries)
