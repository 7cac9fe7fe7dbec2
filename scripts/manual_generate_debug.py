"""One-off script for debugging a full stamp prompt generation."""

import asyncio
import sys
from pathlib import Path

from config.settings import load_config
from modules.forms.form_state import FormStateHolder
from modules.services.history_service import HistoryStore
from modules.ui.callbacks import build_callbacks
from modules.utils.logging import setup_logging


def main() -> None:
    # 1. real config, but a throwaway history file
    config = load_config()
    setup_logging(config)
    history = HistoryStore(Path("debug_history.json"))
    form_state = FormStateHolder()

    callbacks = build_callbacks(config, history=history, form_state=form_state)

    # 2. optional reference images from the command line
    if len(sys.argv) > 1:
        callbacks["on_add_images"](sys.argv[1:])

    # 3. run the same callback the submit button uses
    prompt, _, error, _, _ = asyncio.run(
        callbacks["on_generate"](
            "NOITADA DE TRAVESSURAS",
            "Halloween",
            "Laranja, Roxo",
            "Glow, Fogo",
        )
    )

    if error:
        print("Erro:", error)
    else:
        print(prompt)
        print("Histórico salvo em:", history.history_path.resolve())


if __name__ == "__main__":
    main()
