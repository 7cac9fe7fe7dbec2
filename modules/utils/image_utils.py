"""Helpers turning picked reference images into inline API payloads."""

from __future__ import annotations

import asyncio
import base64
import io
import mimetypes
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from modules.errors import ImageReadError
from modules.forms.form_state import ImageAttachment

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class InlinePayload:
    """Base64 image bytes plus MIME type, ready to attach to a request."""

    data: str
    mime_type: str
    raw: bytes = field(default=b"", repr=False, compare=False)

    def raw_bytes(self) -> bytes:
        if self.raw:
            return self.raw
        return base64.b64decode(self.data)


def detect_mime_type(raw: bytes, filename: str = "") -> str:
    """Identify the image MIME type from its content, falling back to the name."""
    try:
        with Image.open(io.BytesIO(raw)) as image:
            mime = Image.MIME.get(image.format or "")
    except (UnidentifiedImageError, OSError):
        mime = None
    if mime:
        return mime
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME_TYPE


def _read_attachment(attachment: ImageAttachment) -> bytes:
    try:
        return attachment.path.read_bytes()
    except OSError as exc:
        raise ImageReadError(f"Não foi possível ler a imagem '{attachment.name}': {exc}") from exc


def encode_bytes(raw: bytes, mime_type: Optional[str] = None, filename: str = "") -> InlinePayload:
    """Build an inline payload for already-loaded bytes."""
    return InlinePayload(
        data=base64.b64encode(raw).decode("ascii"),
        mime_type=mime_type or detect_mime_type(raw, filename),
        raw=raw,
    )


async def encode_image(attachment: ImageAttachment) -> InlinePayload:
    """Read one attachment off the event loop and encode it."""
    raw = await asyncio.to_thread(_read_attachment, attachment)
    return encode_bytes(raw, attachment.mime_type, attachment.name)


async def encode_images(attachments: Sequence[ImageAttachment]) -> List[InlinePayload]:
    """Encode all attachments concurrently; results keep the input order."""
    if not attachments:
        return []
    return list(await asyncio.gather(*(encode_image(item) for item in attachments)))
