"""Display helpers for generated prompts."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, Optional

from modules.generation.controller import GeneratedResult

COPY_FEEDBACK_SECONDS = 2.0
RESULT_TAGS = ("8K", "3D Render", "Octane")


def format_timestamp(timestamp_ms: int) -> str:
    """Render an epoch-millisecond timestamp as ``dd/mm HH:MM`` local time."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d/%m %H:%M")


class CopyFeedback:
    """Transient "copied" acknowledgement for one item at a time."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._key: Optional[str] = None
        self._copied_at: Optional[float] = None

    def mark(self, key: str = "") -> None:
        self._key = key
        self._copied_at = self._clock()

    def reset(self) -> None:
        self._key = None
        self._copied_at = None

    def is_active(self, key: str = "") -> bool:
        if self._copied_at is None:
            return False
        if self._clock() - self._copied_at >= COPY_FEEDBACK_SECONDS:
            self.reset()
            return False
        return self._key == key


class ResultPresenter:
    """Hold the displayed result and the transient "copied" acknowledgement."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.result: Optional[GeneratedResult] = None
        self._feedback = CopyFeedback(clock)

    def show(self, result: Optional[GeneratedResult]) -> None:
        self.result = result
        self._feedback.reset()

    def copy(self) -> str:
        """Return the raw prompt for the clipboard and start the copied state."""
        if self.result is None:
            return ""
        self._feedback.mark()
        return self.result.prompt

    def is_copied(self) -> bool:
        return self._feedback.is_active()

    def copy_label(self) -> str:
        return "Copiado!" if self.is_copied() else "Copiar Prompt"

    def render_markdown(self) -> str:
        """Markdown body for the result panel."""
        if self.result is None:
            return "Preencha os dados e clique em Gerar."
        tags = " · ".join(f"`{tag}`" for tag in RESULT_TAGS)
        return (
            f"**Prompt Gerado** · {format_timestamp(self.result.timestamp)}\n\n"
            f"{tags}"
        )
