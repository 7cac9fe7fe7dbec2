"""Exception hierarchy shared across the stamp prompt generator."""

from __future__ import annotations


class StampGenError(Exception):
    """Base class for all application errors."""


class ValidationError(StampGenError):
    """Required form fields are missing."""


class AuthError(StampGenError):
    """No API credential could be resolved."""


class UpstreamError(StampGenError):
    """The generative API rejected or failed the call."""


class ImageReadError(StampGenError, OSError):
    """An attached image could not be read."""


class StorageParseError(StampGenError):
    """Persisted history is not valid JSON of the expected shape."""


class GenerationInProgressError(StampGenError):
    """A generation request is already in flight."""
