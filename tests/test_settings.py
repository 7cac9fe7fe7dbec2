"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import API_KEY_SOURCES, DEFAULT_MODEL, AppConfig, load_config, resolve_api_key


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so values written by the .env loader are undone afterwards
    for name in API_KEY_SOURCES + ("GEMINI_MODEL", "HISTORY_PATH", "GRADIO_SERVER_PORT"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield


def test_resolve_api_key_prefers_earlier_sources():
    env = {"VITE_API_KEY": "vite", "GEMINI_API_KEY": "gemini", "API_KEY": "plain"}

    assert resolve_api_key(env) == "plain"
    del env["API_KEY"]
    assert resolve_api_key(env) == "gemini"


def test_resolve_api_key_skips_blank_values():
    assert resolve_api_key({"API_KEY": "  ", "NEXT_PUBLIC_API_KEY": "next"}) == "next"


def test_resolve_api_key_returns_none_when_absent():
    assert resolve_api_key({}) is None


def test_load_config_reads_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\n"
        "GEMINI_API_KEY='from-file'\n"
        f"HISTORY_PATH={tmp_path / 'h.json'}\n"
        "GRADIO_SERVER_PORT=not-a-number\n",
        encoding="utf-8",
    )

    config = load_config(str(env_file))

    assert config.api_key == "from-file"
    assert config.history_path == Path(tmp_path / "h.json")
    assert config.server_port == 7860
    assert config.model_name == DEFAULT_MODEL
    assert config.temperature == pytest.approx(0.7)


def test_environment_overrides_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("GEMINI_MODEL=gemini-from-file\n", encoding="utf-8")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")

    config = load_config(str(env_file))

    assert config.model_name == "gemini-2.0-flash"


def test_setup_logging_creates_log_dir(tmp_path):
    from modules.utils.logging import setup_logging

    config = AppConfig(log_dir=tmp_path / "logs", log_level="debug")
    logger = setup_logging(config)

    assert (tmp_path / "logs").is_dir()
    assert logger.name == "stamp_prompt_generator"
