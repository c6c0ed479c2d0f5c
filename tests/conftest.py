"""Shared test fixtures for wikdict."""

import pytest

from wikdict import Dictionary, Settings
from wikdict import db
from wikdict.resources import pack

SAMPLE_ROWS = [
    ("run", "verb", {
        "senses": [{
            "glosses": ["to move quickly on foot"],
            "raw_glosses": ["(intransitive) to move quickly on foot"],
            "examples": [{"text": "She runs every morning."}, {"ref": "no text"}],
        }],
        "etymology_texts": ["From Old English rinnan.", "Compare Dutch rennen."],
    }),
    ("run", "noun", {
        "senses": [{"glosses": ["an act of running"]}],
    }),
    ("Run", "name", {
        "senses": [{"glosses": ["a surname"]}],
    }),
    ("courir", "verb", {
        "senses": [{"glosses": ["to run"], "examples": [{"text": "Il court vite."}]}],
    }),
    ("cours", "noun", {
        "senses": [{"glosses": ["course, class"]}],
    }),
    ("discourir", "verb", {
        "senses": [{"glosses": ["to discourse"]}],
    }),
    ("heure", "noun", {
        "senses": [{"glosses": ["hour"]}],
    }),
    ("broken", "noun", "{not json"),
]


@pytest.fixture
def store_path(tmp_path):
    """A complete store (entries + both FTS indexes) with sample rows."""
    path = tmp_path / "store" / "dictionary.db"
    db.create_store(path, SAMPLE_ROWS)
    return path


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at an empty data dir and a resources dir."""
    resources = tmp_path / "resources"
    resources.mkdir()
    return Settings(
        data_dir=tmp_path / "data",
        resource_dirs=[resources],
        preferences_path=tmp_path / "prefs" / "preferences.db",
        buffer_multiplier=1000,
    )


@pytest.fixture
def packaged_settings(settings, store_path):
    """Settings whose resources dir holds a packed copy of the sample store."""
    pack(store_path, settings.resource_dirs[0] / settings.archive_name)
    return settings


@pytest.fixture
def dictionary(packaged_settings):
    """Dictionary that materialises the sample store on first use."""
    return Dictionary(packaged_settings)
