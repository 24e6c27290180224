from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from typed_settings.disk_store import JsonFilePreferenceBackend, PreferencesDocument
from typed_settings.kinds import ValueKind
from typed_settings.locks import PREFERENCE_FILE_LOCKS, PathLockRegistry
from typed_settings.store import TypedSettingsStore


def test_values_survive_a_new_backend_instance(prefs_path: Path):
    store = TypedSettingsStore(JsonFilePreferenceBackend(prefs_path))
    store.add_or_update_value("theme", "dark")
    store.add_or_update_value("volume", 0.75)
    store.add_or_update_value("launches", 3, kind=ValueKind.INT32)
    store.add_or_update_value("tour_done", True)
    store.add_or_update_value("budget", Decimal("19.99"))
    store.add_or_update_value("last_run", datetime(2024, 1, 1))

    reopened = TypedSettingsStore(JsonFilePreferenceBackend(prefs_path))
    assert reopened.get_value_or_default("theme", "light") == "dark"
    assert reopened.get_value_or_default("volume", 1.0) == 0.75
    assert reopened.get_value_or_default("launches", 0, kind=ValueKind.INT32) == 3
    assert reopened.get_value_or_default("tour_done", False) is True
    assert reopened.get_value_or_default("budget", Decimal(0)) == Decimal("19.99")
    assert reopened.get_value_or_default("last_run", datetime.min) == datetime(2024, 1, 1)


def test_file_layout(prefs_path: Path):
    store = TypedSettingsStore(JsonFilePreferenceBackend(prefs_path))
    store.add_or_update_value("b", 2.0)
    store.add_or_update_value("a", 1)

    doc = json.loads(prefs_path.read_text(encoding="utf-8"))
    assert doc == {"values": {"a": 1, "b": 2.0}, "version": 1}
    assert isinstance(doc["values"]["b"], float)
    assert not prefs_path.with_suffix(".json.tmp").exists()


def test_native_types_are_preserved_on_disk(prefs_path: Path):
    backend = JsonFilePreferenceBackend(prefs_path)
    backend.set("flag", True)
    backend.set("one", 1)
    backend.set("real", 1.0)
    backend.set("text", "1")
    backend.flush()

    reopened = JsonFilePreferenceBackend(prefs_path)
    assert reopened.get("flag") is True
    assert type(reopened.get("one")) is int
    assert type(reopened.get("real")) is float
    assert reopened.get("text") == "1"


def test_non_finite_floats_survive_a_flush(prefs_path: Path):
    backend = JsonFilePreferenceBackend(prefs_path)
    backend.set("nan", float("nan"))
    backend.set("inf", float("inf"))
    backend.flush()

    reopened = JsonFilePreferenceBackend(prefs_path)
    assert math.isnan(reopened.get("nan"))
    assert reopened.get("inf") == float("inf")


def test_missing_file_starts_empty(prefs_path: Path):
    backend = JsonFilePreferenceBackend(prefs_path)
    assert not backend.contains("anything")
    assert not prefs_path.exists()


def test_corrupt_file_starts_empty(prefs_path: Path, caplog):
    prefs_path.parent.mkdir(parents=True)
    prefs_path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        backend = JsonFilePreferenceBackend(prefs_path)

    assert backend.get("anything") is None
    assert any("Invalid JSON" in r.getMessage() for r in caplog.records)


def test_invalid_document_starts_empty(prefs_path: Path, caplog):
    prefs_path.parent.mkdir(parents=True)
    prefs_path.write_text(json.dumps({"values": {"a": [1, 2]}}), encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="typed_settings.disk_store"):
        backend = JsonFilePreferenceBackend(prefs_path)

    assert not backend.contains("a")
    assert any("failed validation" in r.getMessage() for r in caplog.records)


def test_non_object_document_starts_empty(prefs_path: Path):
    prefs_path.parent.mkdir(parents=True)
    prefs_path.write_text("[1, 2, 3]", encoding="utf-8")
    assert not JsonFilePreferenceBackend(prefs_path).contains("0")


def test_reload_picks_up_external_changes(prefs_path: Path):
    backend = JsonFilePreferenceBackend(prefs_path)
    other = JsonFilePreferenceBackend(prefs_path)
    other.set("k", "from-other")
    other.flush()

    assert not backend.contains("k")
    backend.reload()
    assert backend.get("k") == "from-other"


def test_unwritable_path_is_logged_by_the_store(tmp_path: Path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("i am a file", encoding="utf-8")
    store = TypedSettingsStore(JsonFilePreferenceBackend(blocker / "settings.json"))

    with caplog.at_level(logging.WARNING, logger="typed_settings.store"):
        assert store.add_or_update_value("k", "v") is True

    # the cache still holds the value even though the flush failed
    assert store.get_value_or_default("k", "") == "v"
    assert any("Unable to save settings" in r.getMessage() for r in caplog.records)


def test_preferences_document_roundtrip():
    doc = PreferencesDocument.from_disk_doc({"values": {"a": True, "b": "x"}})
    assert doc.version == 1
    assert doc.to_disk_doc() == {"version": 1, "values": {"a": True, "b": "x"}}


def test_path_locks_are_shared_per_file(tmp_path: Path):
    (tmp_path / "sub").mkdir()
    registry = PathLockRegistry()
    a = registry.lock_for(tmp_path / "x.json")
    b = registry.lock_for(tmp_path / "sub" / ".." / "x.json")
    c = registry.lock_for(tmp_path / "y.json")
    assert a is b
    assert a is not c
    assert len(registry) == 2


def test_backends_on_one_path_share_the_global_lock(prefs_path: Path):
    JsonFilePreferenceBackend(prefs_path)
    assert PREFERENCE_FILE_LOCKS.lock_for(prefs_path) is PREFERENCE_FILE_LOCKS.lock_for(Path(str(prefs_path)))


def test_two_backends_on_one_file_keep_each_others_keys(prefs_path: Path):
    first = TypedSettingsStore(JsonFilePreferenceBackend(prefs_path))
    second = TypedSettingsStore(JsonFilePreferenceBackend(prefs_path))

    first.add_or_update_value("a", "1")
    second.add_or_update_value("b", "2")

    doc = json.loads(prefs_path.read_text(encoding="utf-8"))
    assert doc["values"] == {"a": "1", "b": "2"}
    # the flush also refreshes the writer's cache
    assert second.get_value_or_default("a", "") == "1"


def test_removal_merges_with_other_writers(prefs_path: Path):
    first = TypedSettingsStore(JsonFilePreferenceBackend(prefs_path))
    first.add_or_update_value("a", "1")
    first.add_or_update_value("gone", "x")

    second = TypedSettingsStore(JsonFilePreferenceBackend(prefs_path))
    first.add_or_update_value("c", "3")
    second.remove_value("gone")

    doc = json.loads(prefs_path.read_text(encoding="utf-8"))
    assert doc["values"] == {"a": "1", "c": "3"}


def test_failed_flush_keeps_changes_pending(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("i am a file", encoding="utf-8")
    backend = JsonFilePreferenceBackend(blocker / "settings.json")
    backend.set("k", "v")

    with pytest.raises(OSError):
        backend.flush()
    assert backend.get("k") == "v"

    blocker.unlink()
    backend.flush()
    assert JsonFilePreferenceBackend(blocker / "settings.json").get("k") == "v"


def test_for_path_shares_one_backend_per_file(prefs_path: Path, tmp_path: Path):
    a = JsonFilePreferenceBackend.for_path(prefs_path)
    b = JsonFilePreferenceBackend.for_path(prefs_path.parent / "." / prefs_path.name)
    c = JsonFilePreferenceBackend.for_path(tmp_path / "other.json")
    assert a is b
    assert a is not c

    first, second = TypedSettingsStore(a), TypedSettingsStore(b)
    first.add_or_update_value("theme", "dark")
    assert second.get_value_or_default("theme", "light") == "dark"
