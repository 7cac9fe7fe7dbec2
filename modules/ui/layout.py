"""Gradio layout for the 3D stamp prompt generator."""

from __future__ import annotations

from typing import Any, Optional

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.services.history_service import HistoryStore
from modules.ui.callbacks import build_callbacks

CLEAR_CONFIRM_JS = "(confirmed) => confirm('Tem certeza que deseja limpar todo o histórico?')"
CLIPBOARD_JS = "(text) => { if (text) { navigator.clipboard.writeText(text); } return text; }"


def build_app(config: AppConfig, history: Optional[HistoryStore] = None) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio não está instalado; instale as dependências primeiro.")

    store = history or HistoryStore(config.history_path)
    callbacks_map = build_callbacks(config, history=store)

    def _selector(choices: list[tuple[str, str]]) -> Any:
        return gr.update(choices=choices, value=None)

    async def _generate(name: str, theme: str, colors: str, effects: str):
        prompt, result_md, error, history_md, choices = await callbacks_map["on_generate"](
            name, theme, colors, effects
        )
        return prompt, result_md, error, history_md, _selector(choices)

    def _add_images(files):
        return callbacks_map["on_add_images"](files), None

    def _clear(confirmed: bool):
        history_md, choices = callbacks_map["on_clear_history"](confirmed)
        return history_md, _selector(choices)

    def _load():
        history_md, choices, images = callbacks_map["on_load"]()
        return history_md, _selector(choices), images

    with gr.Blocks(title="Gerador de Selos 3D") as demo:
        gr.Markdown(
            "## Gerador de Selos 3D\n"
            "Crie prompts ultra-realistas para cartazes e selos 3D com texturas, "
            "iluminação de estúdio e efeitos visuais cinematográficos."
        )

        with gr.Row():
            # Configuração
            with gr.Column():
                name = gr.Textbox(
                    label="Nome do Selo (Texto Central)",
                    placeholder="Ex: NOITADA DE TRAVESSURAS",
                )
                theme = gr.Textbox(
                    label="Tema",
                    placeholder="Ex: Halloween, Cyberpunk, Festa Junina...",
                )
                with gr.Row():
                    colors = gr.Textbox(
                        label="Cores Principais",
                        placeholder="Ex: Laranja, Roxo, Neon",
                    )
                    effects = gr.Textbox(
                        label="Efeitos Desejados",
                        placeholder="Ex: Glow, Fogo, Metálico",
                    )

                uploader = gr.File(
                    label="Referências Visuais (Opcional)",
                    file_count="multiple",
                    file_types=["image"],
                    type="filepath",
                )
                gallery = gr.Gallery(label="Imagens anexadas", columns=6, height=140)
                with gr.Row():
                    remove_index = gr.Number(label="Posição da imagem (0 = primeira)", precision=0, value=0)
                    remove_btn = gr.Button("Remover imagem")

                error_box = gr.Markdown("")
                generate_btn = gr.Button("Gerar Prompt 3D ✨", variant="primary")

            # Resultado
            with gr.Column():
                result_info = gr.Markdown("Preencha os dados e clique em Gerar.")
                result_text = gr.Textbox(label="Prompt Gerado", lines=14, interactive=False)
                copy_btn = gr.Button("Copiar Prompt")
                clipboard = gr.Textbox(visible=False)

                gr.Markdown("### Histórico Recente")
                history_select = gr.Dropdown(label="Selecionar item", choices=[], value=None)
                with gr.Row():
                    restore_btn = gr.Button("Reutilizar configurações")
                    copy_history_btn = gr.Button("Copiar Prompt do histórico")
                    clear_btn = gr.Button("Limpar Histórico", variant="stop")
                confirm_flag = gr.Checkbox(visible=False, value=False)
                history_md = gr.Markdown("")

        uploader.upload(fn=_add_images, inputs=[uploader], outputs=[gallery, uploader])
        remove_btn.click(
            fn=callbacks_map["on_remove_image"],
            inputs=[remove_index],
            outputs=[gallery],
        )

        generate_btn.click(
            fn=lambda: gr.update(value="Gerando Prompt...", interactive=False),
            outputs=[generate_btn],
        ).then(
            fn=_generate,
            inputs=[name, theme, colors, effects],
            outputs=[result_text, result_info, error_box, history_md, history_select],
        ).then(
            fn=lambda: gr.update(value="Gerar Prompt 3D ✨", interactive=True),
            outputs=[generate_btn],
        )

        copy_btn.click(
            fn=callbacks_map["on_copy_result"],
            outputs=[clipboard, copy_btn],
        ).then(fn=None, inputs=[clipboard], js=CLIPBOARD_JS).then(
            fn=callbacks_map["on_copy_feedback_done"],
            outputs=[copy_btn],
        )

        restore_btn.click(
            fn=callbacks_map["on_restore_history"],
            inputs=[history_select],
            outputs=[name, theme, colors, effects, gallery],
        )
        copy_history_btn.click(
            fn=callbacks_map["on_copy_history"],
            inputs=[history_select],
            outputs=[clipboard, copy_history_btn],
        ).then(fn=None, inputs=[clipboard], js=CLIPBOARD_JS).then(
            fn=callbacks_map["on_copy_history_feedback_done"],
            inputs=[history_select],
            outputs=[copy_history_btn],
        )

        clear_btn.click(
            fn=_clear,
            inputs=[confirm_flag],
            outputs=[history_md, history_select],
            js=CLEAR_CONFIRM_JS,
        )

        demo.load(fn=_load, outputs=[history_md, history_select, gallery])

        gr.Markdown(f"Powered by Google Gemini · `{config.model_name}`")

    return demo
