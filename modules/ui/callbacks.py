"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence, Tuple

from config.settings import AppConfig
from modules.errors import GenerationInProgressError
from modules.forms.form_state import SCALAR_FIELDS, FormStateHolder
from modules.generation.controller import GenerationController, ProcessingState
from modules.generation.prompt_client import PromptGenerationClient
from modules.services.history_service import HistoryItem, HistoryStore
from modules.ui.presenter import (
    COPY_FEEDBACK_SECONDS,
    CopyFeedback,
    ResultPresenter,
    format_timestamp,
)

logger = logging.getLogger(__name__)

HISTORY_PREVIEW_CHARS = 160
HISTORY_COPY_LABEL = "Copiar Prompt do histórico"
COPIED_LABEL = "Copiado!"


def render_history(items: Sequence[HistoryItem]) -> str:
    """Markdown listing of history entries, newest first."""
    if not items:
        return "_Nenhum histórico ainda._"
    blocks: List[str] = []
    for item in items:
        form = item.form_data
        preview = item.prompt.strip().replace("\n", " ")
        if len(preview) > HISTORY_PREVIEW_CHARS:
            preview = preview[:HISTORY_PREVIEW_CHARS].rstrip() + "…"
        blocks.append(
            f"`{format_timestamp(item.timestamp)}` **{form.get('name', '')}**  \n"
            f"{form.get('theme', '')} • {form.get('effects', '')}  \n"
            f"> {preview}"
        )
    return "\n\n---\n\n".join(blocks)


def history_choices(items: Sequence[HistoryItem]) -> List[Tuple[str, str]]:
    """(label, id) pairs for the history selector."""
    return [
        (f"{format_timestamp(item.timestamp)} · {item.form_data.get('name', '')}", item.id)
        for item in items
    ]


def build_callbacks(
    config: AppConfig,
    history: HistoryStore,
    form_state: Optional[FormStateHolder] = None,
    client: Optional[Any] = None,
    presenter: Optional[ResultPresenter] = None,
    controller: Optional[GenerationController] = None,
    history_feedback: Optional[CopyFeedback] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    state = form_state or FormStateHolder()
    generator = client or PromptGenerationClient(config)
    view = presenter or ResultPresenter()
    flow = controller or GenerationController(state, generator, history)
    copied = history_feedback or CopyFeedback()

    def _gallery() -> List[str]:
        return [str(image.path) for image in state.images]

    def _history_outputs() -> Tuple[str, List[Tuple[str, str]]]:
        items = history.items()
        return render_history(items), history_choices(items)

    def on_add_images(files: Optional[Sequence[Any]]) -> List[str]:
        paths = [getattr(item, "name", item) for item in files or []]
        state.add_images(paths)
        return _gallery()

    def on_remove_image(index: Any) -> List[str]:
        try:
            position = int(index)
        except (TypeError, ValueError):
            return _gallery()
        state.remove_image(position)
        return _gallery()

    async def on_generate(
        name: str,
        theme: str,
        colors: str,
        effects: str,
    ) -> Tuple[str, str, str, str, List[Tuple[str, str]]]:
        for key, value in zip(SCALAR_FIELDS, (name, theme, colors, effects)):
            state.set_field(key, value)

        try:
            outcome = await flow.submit()
        except GenerationInProgressError as exc:
            history_md, choices = _history_outputs()
            prompt = view.result.prompt if view.result else ""
            return prompt, view.render_markdown(), str(exc), history_md, choices

        if outcome is ProcessingState.SUCCESS and flow.result is not None:
            view.show(flow.result)
        elif outcome is ProcessingState.ERROR:
            view.show(None)

        history_md, choices = _history_outputs()
        prompt = view.result.prompt if view.result else ""
        return prompt, view.render_markdown(), flow.error_message, history_md, choices

    def on_copy_result() -> Tuple[str, str]:
        text = view.copy()
        return text, view.copy_label()

    async def on_copy_feedback_done() -> str:
        await asyncio.sleep(COPY_FEEDBACK_SECONDS)
        return view.copy_label()

    def on_restore_history(item_id: str) -> Tuple[str, str, str, str, List[str]]:
        item = history.get(item_id) if item_id else None
        if item is None:
            data = state.data
            return data.name, data.theme, data.colors, data.effects, _gallery()
        history.restore(item, state)
        logger.info("Restored form fields from history item %s", item.id)
        data = state.data
        return data.name, data.theme, data.colors, data.effects, []

    def _history_copy_label(item_id: str) -> str:
        return COPIED_LABEL if item_id and copied.is_active(item_id) else HISTORY_COPY_LABEL

    def on_copy_history(item_id: str) -> Tuple[str, str]:
        item = history.get(item_id) if item_id else None
        if item is None:
            return "", HISTORY_COPY_LABEL
        copied.mark(item.id)
        return item.prompt, _history_copy_label(item.id)

    async def on_copy_history_feedback_done(item_id: str) -> str:
        await asyncio.sleep(COPY_FEEDBACK_SECONDS)
        return _history_copy_label(item_id)

    def on_clear_history(confirmed: Any) -> Tuple[str, List[Tuple[str, str]]]:
        history.clear(bool(confirmed))
        return _history_outputs()

    def on_load() -> Tuple[str, List[Tuple[str, str]], List[str]]:
        # a fresh page starts with no pending images
        state.clear_images()
        history_md, choices = _history_outputs()
        return history_md, choices, _gallery()

    return {
        "on_add_images": on_add_images,
        "on_remove_image": on_remove_image,
        "on_generate": on_generate,
        "on_copy_result": on_copy_result,
        "on_copy_feedback_done": on_copy_feedback_done,
        "on_restore_history": on_restore_history,
        "on_copy_history": on_copy_history,
        "on_copy_history_feedback_done": on_copy_history_feedback_done,
        "on_clear_history": on_clear_history,
        "on_load": on_load,
    }
