"""Tests for the recently-viewed history and its preference store."""

import json
import sqlite3
import uuid
from contextlib import closing

import pytest

from wikdict.coalesce import coalesce
from wikdict.exceptions import WriteFailedError
from wikdict.history import HISTORY_KEY, HistoryStore, PreferenceStore
from wikdict.models import RawEntry


def _entry(word, pos="noun", gloss=None):
    (entry,) = coalesce([RawEntry(word, pos, gloss or f"{word} gloss", gloss or word)])
    return entry


@pytest.fixture
def preferences(tmp_path):
    return PreferenceStore(tmp_path / "prefs" / "preferences.db")


@pytest.fixture
def history(preferences):
    return HistoryStore(preferences)


class TestPreferenceStore:

    def test_missing_key(self, preferences):
        assert preferences.get("absent") is None

    def test_set_get_overwrite(self, preferences):
        preferences.set("k", b"one")
        preferences.set("k", b"two")
        assert preferences.get("k") == b"two"

    def test_delete(self, preferences):
        preferences.set("k", b"v")
        preferences.delete("k")
        assert preferences.get("k") is None

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = PreferenceStore(blocker / "preferences.db")
        with pytest.raises(WriteFailedError):
            store.set("k", b"v")


class TestRecordView:

    def test_most_recent_first(self, history):
        for word in ("run", "cours", "heure"):
            history.record_view(_entry(word))
        assert [e.word for e in history.entries] == ["heure", "cours", "run"]

    def test_revisit_moves_to_front_without_duplicates(self, history):
        for word in ("run", "cours", "run"):
            history.record_view(_entry(word))
        assert [e.word for e in history.entries] == ["run", "cours"]

    def test_dedup_is_by_word_not_id(self, history):
        history.record_view(_entry("run", "verb"))
        history.record_view(_entry("run", "noun"))
        assert len(history.entries) == 1
        assert history.entries[0].parts_of_speech == "noun"

    def test_bounded_to_twenty(self, history):
        for i in range(25):
            history.record_view(_entry(f"w{i}"))
        words = [e.word for e in history.entries]
        assert len(words) == 20
        assert words[0] == "w24"
        assert words[-1] == "w5"

    def test_custom_bound(self, preferences):
        history = HistoryStore(preferences, max_size=2)
        for word in ("a", "b", "c"):
            history.record_view(_entry(word))
        assert [e.word for e in history.entries] == ["c", "b"]

    def test_entries_is_a_copy(self, history):
        history.record_view(_entry("run"))
        history.entries.clear()
        assert len(history.entries) == 1

    def test_write_failure_leaves_list_unchanged(self, tmp_path):
        good = HistoryStore(PreferenceStore(tmp_path / "ok.db"))
        good.record_view(_entry("run"))

        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        broken = HistoryStore(PreferenceStore(blocker / "prefs.db"))
        broken.replace(good.entries)

        with pytest.raises(WriteFailedError):
            broken.record_view(_entry("cours"))
        assert [e.word for e in broken.entries] == ["run"]

    def test_with_view_is_pure(self, history):
        history.record_view(_entry("run"))
        preview = history.with_view(_entry("cours"))
        assert [e.word for e in preview] == ["cours", "run"]
        assert [e.word for e in history.entries] == ["run"]


class TestPersistence:

    def test_round_trip_through_fresh_instance(self, preferences, history):
        for word in ("run", "cours", "été"):
            history.record_view(_entry(word, "verb"))

        restored = HistoryStore(preferences)
        loaded = restored.load()
        assert [e.word for e in loaded] == ["été", "cours", "run"]
        assert [e.word for e in restored.entries] == ["été", "cours", "run"]
        assert loaded[0].primary_gloss == "été gloss"
        assert loaded[0].parts_of_speech == "verb"

    def test_record_is_a_json_array(self, preferences, history):
        history.record_view(_entry("run"))
        items = json.loads(preferences.get(HISTORY_KEY).decode("utf-8"))
        assert isinstance(items, list)
        assert set(items[0]) == {"id", "word", "primaryGloss", "partsOfSpeech"}
        uuid.UUID(items[0]["id"])

    def test_non_ascii_is_stored_verbatim(self, preferences, history):
        history.record_view(_entry("été"))
        assert "été".encode("utf-8") in preferences.get(HISTORY_KEY)

    def test_no_record_loads_empty(self, history):
        assert history.load() == []

    @pytest.mark.parametrize("payload", [
        b"{not json",
        b'{"id": "x"}',
        b'[{"word": "run"}]',
        b"\xff\xfe",
        b'[{"id": "bad", "word": "w", "primaryGloss": "g", "partsOfSpeech": "p"}]',
    ])
    def test_corrupt_record_loads_empty(self, preferences, history, payload):
        preferences.set(HISTORY_KEY, payload)
        assert history.load() == []
        assert history.entries == []

    def test_text_record_loads_empty(self, preferences, history):
        history.record_view(_entry("run"))
        with closing(sqlite3.connect(preferences.db_path)) as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO preferences VALUES (?, ?)",
                (HISTORY_KEY, "not json"),
            )
        assert preferences.get(HISTORY_KEY) == b"not json"
        assert HistoryStore(preferences).load() == []

    def test_text_record_with_valid_json_loads(self, preferences, history):
        history.record_view(_entry("run"))
        text = preferences.get(HISTORY_KEY).decode("utf-8")
        with closing(sqlite3.connect(preferences.db_path)) as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO preferences VALUES (?, ?)", (HISTORY_KEY, text),
            )
        assert [e.word for e in HistoryStore(preferences).load()] == ["run"]

    def test_load_truncates_oversized_record(self, preferences):
        big =HistoryStore(preferences, max_size=30)
        big.replace([_entry(f"w{i}") for i in range(30)])
        big.persist()

        small = HistoryStore(preferences, max_size=20)
        assert len(small.load()) == 20

    def test_clear(self, preferences, history):
        history.record_view(_entry("run"))
        history.clear()
        assert history.entries == []
        assert HistoryStore(preferences).load() == []
