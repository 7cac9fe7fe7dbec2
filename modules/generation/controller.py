"""Submission lifecycle: validation, the single in-flight request and its outcome."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from modules.errors import GenerationInProgressError, ValidationError
from modules.forms.form_state import FormStateHolder, StampFormData
from modules.services.history_service import HistoryStore

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Erro ao conectar com a IA. Verifique sua chave de API ou tente novamente."
INTERRUPTED_MESSAGE = "A geração foi interrompida. Tente novamente."


class ProcessingState(str, Enum):
    """UI-facing state of the current submission."""

    IDLE = "IDLE"
    GENERATING = "GENERATING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True, slots=True)
class GeneratedResult:
    """Prompt text returned by one successful generation."""

    prompt: str
    timestamp: int


class PromptGenerator(Protocol):
    async def generate(self, form: StampFormData) -> str:
        ...


class GenerationController:
    """Drive ProcessingState for form submissions.

    Only one request may be outstanding: submitting while GENERATING raises
    GenerationInProgressError and leaves the running request alone.
    """

    def __init__(
        self,
        form_state: FormStateHolder,
        client: PromptGenerator,
        history: HistoryStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.form_state = form_state
        self.client = client
        self.history = history
        self._clock = clock
        self.state = ProcessingState.IDLE
        self.result: Optional[GeneratedResult] = None
        self.error_message = ""

    @property
    def is_generating(self) -> bool:
        return self.state is ProcessingState.GENERATING

    async def submit(self) -> ProcessingState:
        """Validate the form and, if valid, run one generation to completion."""
        if self.is_generating:
            raise GenerationInProgressError("Uma geração já está em andamento.")

        try:
            self.form_state.validate()
        except ValidationError as exc:
            self.error_message = str(exc)
            return self.state

        form = self.form_state.snapshot()
        self.state = ProcessingState.GENERATING
        self.error_message = ""
        self.result = None

        try:
            prompt = await self.client.generate(form)
        except Exception as exc:  # noqa: BLE001
            return self._fail(str(exc) or GENERIC_ERROR_MESSAGE, exc)
        except BaseException as exc:
            # cancelled or interrupted: free the slot, then let it propagate
            self._fail(INTERRUPTED_MESSAGE, exc)
            raise

        self.result = GeneratedResult(prompt=prompt, timestamp=int(self._clock() * 1000))
        try:
            self.history.record(prompt, form.scalar_fields())
        except OSError as exc:
            logger.error("Could not persist history: %s", exc)
        self.state = ProcessingState.SUCCESS
        return self.state

    def _fail(self, message: str, exc: BaseException) -> ProcessingState:
        logger.error("Generation failed: %s", exc)
        self.error_message = message or GENERIC_ERROR_MESSAGE
        self.state = ProcessingState.ERROR
        return self.state
