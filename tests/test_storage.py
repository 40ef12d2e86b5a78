"""Tests for clipstack.storage"""

import json
from datetime import datetime, timezone

from clipstack.constants import DEFAULT_HOTKEY, IMAGE, TEXT
from clipstack.history import HistoryEntry
from clipstack.preferences import Preferences
from clipstack.storage import Storage, safe_json_load


def test_history_round_trip(storage):
    entries = [
        HistoryEntry.create(TEXT, "hello", created_at=datetime(2025, 5, 1, 8, 0, 0, 250)),
        HistoryEntry.create(IMAGE, "data:image/png;base64,iVBORw0KGgo=", created_at=datetime(2025, 5, 1, 7, 0)),
        HistoryEntry.create(TEXT, "z" * 300, created_at=datetime(2025, 4, 30, 23, 59, 59, 999999)),
    ]
    assert storage.save_history(entries) is True
    assert storage.load_history() == entries


def test_history_document_layout(storage):
    entry = HistoryEntry.create(IMAGE, "data:image/png;base64,AAAA", created_at=datetime(2025, 1, 2, 3, 4, 5))
    storage.save_history([entry, HistoryEntry.create(TEXT, "t")])
    doc = json.loads(storage.history_path.read_text(encoding="utf-8"))
    assert isinstance(doc, list)
    assert doc[0] == {
        "id": entry.id,
        "type": "image",
        "content": "data:image/png;base64,AAAA",
        "timestamp": "2025-01-02T03:04:05.000000",
        "preview": "Image (20 Bytes)",
        "size": 20,
    }
    assert "size" not in doc[1]


def test_invalid_records_are_dropped(storage):
    good = HistoryEntry.create(TEXT, "keep me", created_at=datetime(2025, 1, 1))
    doc = [
        good.to_dict(),
        "not an object",
        {"id": "1", "type": "video", "content": "x", "timestamp": "2025-01-01T00:00:00"},
        {"id": "2", "type": "text", "content": "", "timestamp": "2025-01-01T00:00:00"},
        {"id": "3", "type": "text", "content": "x", "timestamp": "yesterday"},
        {"type": "text", "content": "no id", "timestamp": "2025-01-01T00:00:00"},
    ]
    storage.data_dir.mkdir(parents=True)
    storage.history_path.write_text(json.dumps(doc), encoding="utf-8")
    assert storage.load_history() == [good]
    assert "dropped 5 invalid" in storage.log_path.read_text(encoding="utf-8")


def test_stored_preview_is_rederived(storage):
    storage.data_dir.mkdir(parents=True)
    storage.history_path.write_text(json.dumps([
        {"id": "a", "type": "text", "content": "real", "timestamp": "2025-01-01T00:00:00", "preview": "edited"},
    ]), encoding="utf-8")
    assert storage.load_history()[0].preview == "real"


def test_corrupt_files_fall_back_to_defaults(storage):
    storage.data_dir.mkdir(parents=True)
    storage.history_path.write_text("{not json", encoding="utf-8")
    storage.preferences_path.write_text("[1, 2", encoding="utf-8")
    assert storage.load_history() == []
    assert storage.load_preferences() == Preferences()


def test_history_object_instead_of_list(storage):
    storage.data_dir.mkdir(parents=True)
    storage.history_path.write_text('{"id": "x"}', encoding="utf-8")
    assert storage.load_history() == []


def test_missing_files(storage):
    assert storage.load_history() == []
    assert storage.load_preferences() == Preferences()


def test_preferences_round_trip(storage):
    p = Preferences(
        max_history_items=40,
        launch_at_startup=True,
        show_notifications=False,
        hotkey="ctrl+alt+h",
        auto_clear_interval=24,
        exclude_passwords=False,
    )
    assert storage.save_preferences(p) is True
    assert storage.load_preferences() == p


def test_partial_preferences_use_defaults(storage):
    storage.data_dir.mkdir(parents=True)
    storage.preferences_path.write_text(json.dumps({"max_history_items": 500, "hotkey": "  "}), encoding="utf-8")
    p = storage.load_preferences()
    assert p.max_history_items == 100
    assert p.hotkey == DEFAULT_HOTKEY
    assert p.exclude_passwords is True


def test_save_is_idempotent(storage):
    entries = [HistoryEntry.create(TEXT, "a")]
    storage.save_history(entries)
    first = storage.history_path.read_text(encoding="utf-8")
    storage.save_history(entries)
    assert storage.history_path.read_text(encoding="utf-8") == first
    assert not storage.history_path.with_name("history.json.tmp").exists()


def test_save_failure_is_logged_not_raised(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a folder", encoding="utf-8")
    storage = Storage(blocker / "data")
    assert storage.save_history([HistoryEntry.create(TEXT, "a")]) is False
    assert storage.save_preferences(Preferences()) is False


def test_safe_json_load_default(tmp_path):
    assert safe_json_load(tmp_path / "missing.json", {"d": 1}) == {"d": 1}


def test_offset_timestamps_load_as_local_time(storage):
    storage.data_dir.mkdir(parents=True)
    storage.history_path.write_text(json.dumps([
        {"id": "z", "type": "text", "content": "aware", "timestamp": "2020-01-01T00:00:00+00:00"},
        {"id": "n", "type": "text", "content": "naive", "timestamp": "2020-01-01T00:00:00"},
    ]), encoding="utf-8")
    aware, naive = storage.load_history()
    assert aware.created_at.tzinfo is None
    assert naive.created_at.tzinfo is None
    expected = datetime(2020, 1, 1, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert aware.created_at == expected
