"""Configuration helpers for the 3D stamp prompt generator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

# Checked in order; the first non-blank value wins.
API_KEY_SOURCES: tuple[str, ...] = (
    "API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "REACT_APP_API_KEY",
    "NEXT_PUBLIC_API_KEY",
    "VITE_API_KEY",
)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.7


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_key: Optional[str] = None
    model_name: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    history_path: Path = Path("data/history.json")
    server_name: str = "127.0.0.1"
    server_port: int = 7860


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))


def resolve_api_key(
    environ: Optional[Mapping[str, str]] = None,
    sources: tuple[str, ...] = API_KEY_SOURCES,
) -> Optional[str]:
    """Return the first configured API key among ``sources``, or None."""
    env = os.environ if environ is None else environ
    for name in sources:
        value = env.get(name)
        if value and value.strip():
            return value.strip()
    return None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    history_path = Path(os.getenv("HISTORY_PATH", "data/history.json")).expanduser()
    log_dir = Path(os.getenv("LOG_DIR", "logs")).expanduser()

    return AppConfig(
        api_key=resolve_api_key(),
        model_name=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
        log_dir=log_dir,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        history_path=history_path,
        server_name=os.getenv("GRADIO_SERVER_NAME", "127.0.0.1"),
        server_port=_int_env("GRADIO_SERVER_PORT", 7860),
    )
