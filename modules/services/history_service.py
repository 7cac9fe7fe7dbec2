"""Generation history tracking."""

from __future__ import annotations

import json
import logging
import os
import random
import string
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from modules.errors import StorageParseError
from modules.forms.form_state import SCALAR_FIELDS, FormStateHolder

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase

Confirmation = Union[bool, Callable[[], bool]]


def _now_ms() -> int:
    return int(time.time() * 1000)


def new_history_id(now_ms: Optional[int] = None) -> str:
    """Time-based id with a random base36 suffix; unique enough for one user."""
    stamp = _now_ms() if now_ms is None else now_ms
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{stamp}{suffix}"


@dataclass(frozen=True, slots=True)
class HistoryItem:
    """One past successful generation, without any image data."""

    id: str
    timestamp: int
    prompt: str
    form_data: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "prompt": self.prompt,
            "formData": dict(self.form_data),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "HistoryItem":
        raw_form = payload.get("formData") or {}
        if not isinstance(raw_form, Mapping):
            raise ValueError("formData must be an object")
        return cls(
            id=str(payload["id"]),
            timestamp=int(payload["timestamp"]),
            prompt=str(payload["prompt"]),
            form_data={key: str(raw_form.get(key, "") or "") for key in SCALAR_FIELDS},
        )


class HistoryStore:
    """JSON-backed history list, newest entry first.

    The file is read once when the store is created and rewritten in full on
    every ``record``/``clear``. A corrupt file is logged and treated as empty.
    """

    def __init__(self, history_path: Path, clock: Callable[[], int] = _now_ms) -> None:
        self.history_path = Path(history_path)
        self._clock = clock
        self._items: List[HistoryItem] = []
        try:
            self._items = self._load()
        except StorageParseError as exc:
            logger.error("Failed to parse history at %s: %s", self.history_path, exc)
            self._items = []

    # Persistence ---------------------------------------------------------------
    def _load(self) -> List[HistoryItem]:
        if not self.history_path.exists():
            return []
        try:
            raw = self.history_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageParseError(str(exc)) from exc
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageParseError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise StorageParseError("expected a JSON array of history items")

        items: List[HistoryItem] = []
        for entry in data:
            try:
                items.append(HistoryItem.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed history entry: %s", exc)
        return items

    def _save(self, items: List[HistoryItem]) -> None:
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=2)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.history_path.parent, prefix=".history-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                fp.write(payload)
            os.replace(tmp_name, self.history_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # Public API ---------------------------------------------------------------
    def items(self) -> List[HistoryItem]:
        """Return the history, newest first."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> Optional[HistoryItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def record(self, prompt: str, form_data: Mapping[str, Any]) -> HistoryItem:
        """Prepend a new entry and persist the full list."""
        now = self._clock()
        existing = {item.id for item in self._items}
        item_id = new_history_id(now)
        while item_id in existing:
            item_id = new_history_id(now)

        item = HistoryItem(
            id=item_id,
            timestamp=now,
            prompt=prompt,
            form_data={key: str(form_data.get(key, "") or "") for key in SCALAR_FIELDS},
        )
        updated = [item, *self._items]
        self._save(updated)
        self._items = updated
        logger.info("Recorded history item %s (%d total)", item.id, len(self._items))
        return item

    def restore(self, item: HistoryItem, form_state: FormStateHolder) -> None:
        """Load an entry's fields back into the form; images are reset."""
        form_state.restore(item.form_data)

    def clear(self, confirm: Confirmation) -> bool:
        """Drop every entry when ``confirm`` agrees. Returns True when cleared."""
        confirmed = confirm() if callable(confirm) else bool(confirm)
        if not confirmed:
            return False
        self._items = []
        self.history_path.unlink(missing_ok=True)
        logger.info("History cleared")
        return True
