"""Mutable form state collected from the UI before submission."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from modules.errors import ValidationError

SCALAR_FIELDS: tuple[str, ...] = ("name", "theme", "colors", "effects")
REQUIRED_FIELDS: tuple[str, ...] = ("name", "theme")
VALIDATION_MESSAGE = "O nome e o tema são obrigatórios."


@dataclass(frozen=True, slots=True)
class ImageAttachment:
    """One reference image picked by the user."""

    path: Path
    mime_type: Optional[str] = None

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(slots=True)
class StampFormData:
    """Field values for one stamp prompt request."""

    name: str = ""
    theme: str = ""
    colors: str = ""
    effects: str = ""
    images: List[ImageAttachment] = field(default_factory=list)

    def scalar_fields(self) -> Dict[str, str]:
        """Return the persisted subset of the form (everything but images)."""
        return {key: getattr(self, key) for key in SCALAR_FIELDS}


AttachmentLike = Union[ImageAttachment, str, Path]


def _as_attachment(item: AttachmentLike) -> ImageAttachment:
    if isinstance(item, ImageAttachment):
        return item
    return ImageAttachment(path=Path(item))


class FormStateHolder:
    """Own the current form values and pending image attachments."""

    def __init__(self, data: Optional[StampFormData] = None) -> None:
        self._data = data or StampFormData()

    @property
    def data(self) -> StampFormData:
        return self._data

    @property
    def images(self) -> List[ImageAttachment]:
        return list(self._data.images)

    def set_field(self, name: str, value: str) -> None:
        """Replace one scalar field."""
        if name not in SCALAR_FIELDS:
            raise KeyError(f"Unknown form field '{name}'")
        setattr(self._data, name, value or "")

    def add_images(self, files: Iterable[AttachmentLike]) -> None:
        """Append attachments, keeping the order they were picked in."""
        self._data.images.extend(_as_attachment(item) for item in files or [])

    def remove_image(self, index: int) -> None:
        """Drop the attachment at ``index``; out-of-range indexes are ignored."""
        if 0 <= index < len(self._data.images):
            del self._data.images[index]

    def clear_images(self) -> None:
        self._data.images = []

    def restore(self, fields: Mapping[str, str]) -> None:
        """Load scalar fields from a history entry and drop pending images."""
        for key in SCALAR_FIELDS:
            setattr(self._data, key, str(fields.get(key, "") or ""))
        self.clear_images()

    def validate(self) -> None:
        """Raise ValidationError when a required field is blank."""
        for key in REQUIRED_FIELDS:
            if not getattr(self._data, key).strip():
                raise ValidationError(VALIDATION_MESSAGE)

    def snapshot(self) -> StampFormData:
        """Return a detached copy for an outbound request."""
        return replace(self._data, images=list(self._data.images))

    def scalar_fields(self) -> Dict[str, str]:
        return self._data.scalar_fields()
