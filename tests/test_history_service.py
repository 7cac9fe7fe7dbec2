"""HistoryStore persistence tests."""

from __future__ import annotations

import json
import logging
from itertools import count

import pytest

from modules.forms.form_state import FormStateHolder
from modules.services.history_service import HistoryItem, HistoryStore, new_history_id

FORM = {
    "name": "NOITADA DE TRAVESSURAS",
    "theme": "Halloween",
    "colors": "Laranja, Roxo",
    "effects": "Glow, Fogo",
}


def ticking_clock(start: int = 1_700_000_000_000):
    ticks = count(start, 1000)
    return lambda: next(ticks)


def test_missing_file_starts_empty(tmp_path):
    store = HistoryStore(tmp_path / "history.json")

    assert store.items() == []


def test_record_persists_and_reloads_newest_first(tmp_path):
    path = tmp_path / "nested" / "history.json"
    store = HistoryStore(path, clock=ticking_clock())

    first = store.record("prompt one", FORM)
    second = store.record("prompt two", {**FORM, "name": "SEGUNDO"})

    reloaded = HistoryStore(path)
    items = reloaded.items()
    assert [item.id for item in items] == [second.id, first.id]
    assert items[0].prompt == "prompt two"
    assert items[0].form_data == {**FORM, "name": "SEGUNDO"}
    assert items[0].timestamp >= items[1].timestamp


def test_record_never_stores_images(tmp_path):
    path = tmp_path / "history.json"
    store = HistoryStore(path)

    store.record("prompt", {**FORM, "images": ["ref.png"]})

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw[0]["formData"] == FORM
    assert set(raw[0]) == {"id", "timestamp", "prompt", "formData"}


def test_record_generates_distinct_ids(tmp_path):
    store = HistoryStore(tmp_path / "history.json", clock=lambda: 1_700_000_000_000)

    ids = {store.record(f"prompt {i}", FORM).id for i in range(25)}

    assert len(ids) == 25


def test_history_id_shape():
    item_id = new_history_id(1_700_000_000_000)

    assert item_id.startswith("1700000000000")
    assert len(item_id) == len("1700000000000") + 9


@pytest.mark.parametrize("content", ["{not json", '{"id": "x"}', "42"])
def test_corrupt_file_is_logged_and_ignored(tmp_path, caplog, content):
    path = tmp_path / "history.json"
    path.write_text(content, encoding="utf-8")

    with caplog.at_level(logging.ERROR):
        store = HistoryStore(path)

    assert store.items() == []
    assert "Failed to parse history" in caplog.text


def test_malformed_entries_are_skipped(tmp_path):
    path = tmp_path / "history.json"
    good = HistoryItem(id="abc", timestamp=1, prompt="ok", form_data=FORM).to_dict()
    path.write_text(json.dumps([good, {"prompt": "missing id"}]), encoding="utf-8")

    store = HistoryStore(path)

    assert [item.id for item in store.items()] == ["abc"]


def test_clear_without_confirmation_keeps_history(tmp_path):
    path = tmp_path / "history.json"
    store = HistoryStore(path)
    store.record("prompt", FORM)

    assert store.clear(lambda: False) is False

    assert len(store) == 1
    assert len(HistoryStore(path)) == 1


def test_clear_with_confirmation_empties_store_and_file(tmp_path):
    path = tmp_path / "history.json"
    store = HistoryStore(path)
    store.record("prompt", FORM)

    assert store.clear(True) is True

    assert store.items() == []
    assert not path.exists()
    assert HistoryStore(path).items() == []


def test_restore_populates_form_and_resets_images(tmp_path):
    store = HistoryStore(tmp_path / "history.json")
    item = store.record("prompt", FORM)
    form_state = FormStateHolder()
    form_state.set_field("name", "OUTRO")
    form_state.add_images(["a.png", "b.png"])

    store.restore(item, form_state)

    assert form_state.scalar_fields() == FORM
    assert form_state.images == []


def test_get_by_id(tmp_path):
    store = HistoryStore(tmp_path / "history.json")
    item = store.record("prompt", FORM)

    assert store.get(item.id) == item
    assert store.get("missing") is None


def test_failed_write_leaves_memory_unchanged(tmp_path, monkeypatch):
    path = tmp_path / "history.json"
    store = HistoryStore(path)
    first = store.record("saved prompt", FORM)

    def disk_full(*_args, **_kwargs):
        raise OSError("No space left on device")

    monkeypatch.setattr("modules.services.history_service.os.replace", disk_full)

    with pytest.raises(OSError):
        store.record("lost prompt", FORM)

    assert [item.id for item in store.items()] == [first.id]
    assert [item.id for item in HistoryStore(path).items()] == [first.id]
    assert list(tmp_path.glob(".history-*")) == []
