"""ResultPresenter tests."""

from __future__ import annotations

from datetime import datetime

from modules.generation.controller import GeneratedResult
from modules.ui.presenter import CopyFeedback, ResultPresenter, format_timestamp


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_copy_returns_raw_prompt_and_expires_after_two_seconds():
    clock = FakeClock()
    presenter = ResultPresenter(clock=clock)
    presenter.show(GeneratedResult(prompt="Selo 3D\ncom glow", timestamp=0))

    assert presenter.copy() == "Selo 3D\ncom glow"
    assert presenter.is_copied()
    assert presenter.copy_label() == "Copiado!"

    clock.now += 1.9
    assert presenter.is_copied()

    clock.now += 0.1
    assert not presenter.is_copied()
    assert presenter.copy_label() == "Copiar Prompt"


def test_copy_without_result_is_noop():
    presenter = ResultPresenter(clock=FakeClock())

    assert presenter.copy() == ""
    assert not presenter.is_copied()


def test_new_result_resets_copied_state():
    presenter = ResultPresenter(clock=FakeClock())
    presenter.show(GeneratedResult(prompt="one", timestamp=0))
    presenter.copy()

    presenter.show(GeneratedResult(prompt="two", timestamp=0))

    assert not presenter.is_copied()


def test_render_markdown_includes_timestamp():
    stamp = int(datetime(2024, 10, 31, 21, 5).timestamp() * 1000)
    presenter = ResultPresenter()
    presenter.show(GeneratedResult(prompt="p", timestamp=stamp))

    assert "31/10 21:05" in presenter.render_markdown()
    assert format_timestamp(stamp) == "31/10 21:05"


def test_render_markdown_placeholder():
    assert "Gerar" in ResultPresenter().render_markdown()


def test_copy_feedback_follows_latest_key():
    clock = FakeClock()
    feedback = CopyFeedback(clock=clock)

    feedback.mark("a")
    feedback.mark("b")

    assert not feedback.is_active("a")
    assert feedback.is_active("b")
    clock.now += 2.0
    assert not feedback.is_active("b")
