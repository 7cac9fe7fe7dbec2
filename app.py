"""Application entry point for the 3D stamp prompt generator."""

from __future__ import annotations

from typing import Optional

from config.settings import load_config
from modules.services.history_service import HistoryStore
from modules.ui.layout import build_app
from modules.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> None:
    """Load configuration, open the history store and launch the Gradio interface."""
    config = load_config(config_path)
    logger = setup_logging(config)
    if not config.api_key:
        logger.warning("No API key configured; generation requests will fail until one is set.")

    history = HistoryStore(config.history_path)
    logger.info("Loaded %d history item(s) from %s", len(history), config.history_path)

    app = build_app(config, history=history)
    app.queue()
    app.launch(
        server_name=config.server_name,
        server_port=config.server_port,
        share=False,
        inbrowser=False,
    )


if __name__ == "__main__":
    main()
