"""Stamp prompt generation through the Gemini API."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config.settings import API_KEY_SOURCES, AppConfig, resolve_api_key
from modules.errors import AuthError, UpstreamError
from modules.forms.form_state import StampFormData
from modules.generation.system_instruction import (
    REFERENCE_IMAGES_NOTE,
    SYSTEM_INSTRUCTION,
    USER_PROMPT_TEMPLATE,
)
from modules.utils.image_utils import InlinePayload, encode_images

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Não foi possível gerar o prompt. Tente novamente."
UNKNOWN_API_ERROR = "Erro desconhecido na API do Gemini"
MISSING_KEY_MESSAGE = (
    "Chave de API não encontrada.\n"
    "Defina 'API_KEY' (ou GEMINI_API_KEY) nas variáveis de ambiente ou no arquivo .env."
)

ClientFactory = Callable[[str], Any]


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


def build_user_prompt(form: StampFormData) -> str:
    """Render the text part describing the requested stamp."""
    text = USER_PROMPT_TEMPLATE.format(
        name=form.name.strip(),
        theme=form.theme.strip(),
        colors=form.colors.strip(),
        effects=form.effects.strip(),
    )
    if form.images:
        text += "\n" + REFERENCE_IMAGES_NOTE + "\n"
    return text


def build_parts(text: str, payloads: List[InlinePayload]) -> List[types.Part]:
    """Text part first, then one inline part per image in attachment order."""
    parts = [types.Part(text=text)]
    for payload in payloads:
        parts.append(types.Part.from_bytes(data=payload.raw_bytes(), mime_type=payload.mime_type))
    return parts


def _error_message(exc: Exception) -> str:
    if isinstance(exc, genai_errors.APIError):
        message = exc.message or str(exc)
    else:
        message = str(exc)
    return message.strip() or UNKNOWN_API_ERROR


class PromptGenerationClient:
    """Send the stamp request to Gemini and return the generated prompt."""

    def __init__(
        self,
        config: AppConfig,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory or _default_client_factory

    def resolve_api_key(self) -> str:
        """Return the configured credential or raise AuthError."""
        api_key = self.config.api_key or resolve_api_key(sources=API_KEY_SOURCES)
        if not api_key:
            raise AuthError(MISSING_KEY_MESSAGE)
        return api_key

    def build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            temperature=self.config.temperature,
        )

    async def generate(self, form: StampFormData) -> str:
        """Return the generated prompt text for ``form``."""
        api_key = self.resolve_api_key()

        payloads = await encode_images(form.images)
        parts = build_parts(build_user_prompt(form), payloads)
        client = self._client_factory(api_key)

        logger.info(
            "Requesting stamp prompt (model=%s, images=%d)",
            self.config.model_name,
            len(payloads),
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.config.model_name,
                contents=[types.Content(role="user", parts=parts)],
                config=self.build_config(),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Gemini API error: %s", exc)
            raise UpstreamError(_error_message(exc)) from exc

        text = getattr(response, "text", None)
        if not text or not text.strip():
            logger.warning("Gemini returned an empty response")
            return FALLBACK_MESSAGE
        return text
