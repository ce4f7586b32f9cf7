import logging
from typing import Final

import gradio as gr
from PIL import Image

from readout_overlay.models import FrameReadout
from readout_overlay.pipeline import CameraFrame, OverlaySession

_READOUT_COLUMNS: Final = ("Field", "Status", "Value")
_STREAM_INTERVAL_S: Final = 0.2

logger = logging.getLogger(__name__)


def _readout_rows(readout: FrameReadout | None) -> list[list[str]]:
    if readout is None:
        return []
    return [
        [field.label, field.status, field.value if field.value is not None else "-"]
        for field in readout.fields
    ]


def _readout_payload(readout: FrameReadout | None) -> dict[str, object]:
    if readout is None:
        return {}
    return readout.model_dump()


def _process_frame(
    session: OverlaySession,
    image: Image.Image | None,
    mirror: bool,
) -> tuple[Image.Image | None, list[list[str]], dict[str, object]]:
    if image is None:
        return None, [], {}
    # Browser webcam frames arrive upright, so no rotation is applied.
    frame = CameraFrame(image=image, rotation_degrees=0, is_flipped=bool(mirror))
    annotated, readout = session.annotate(frame)
    return annotated, _readout_rows(readout), _readout_payload(readout)


def create_app(session: OverlaySession | None = None) -> gr.Blocks:
    resolved_session = session or OverlaySession()
    labels = ", ".join(spec.label for spec in resolved_session.labels)

    with gr.Blocks(title="Readout Overlay") as app:
        gr.Markdown(
            "# Readout Overlay\n"
            f"Point the camera at a display showing **{labels}** to annotate "
            "each readout next to its label."
        )
        with gr.Row():
            camera = gr.Image(
                label="Camera",
                sources=["webcam"],
                streaming=True,
                type="pil",
            )
            annotated = gr.Image(label="Annotated", type="pil", interactive=False)
        mirror = gr.Checkbox(label="Mirror preview", value=False)
        readout_table = gr.Dataframe(
            headers=list(_READOUT_COLUMNS),
            datatype=["str", "str", "str"],
            interactive=False,
            label="Readouts",
        )
        readout_json = gr.JSON(label="Frame readout")

        def process_frame(
            image: Image.Image | None,
            mirror_enabled: bool,
        ) -> tuple[Image.Image | None, list[list[str]], dict[str, object]]:
            return _process_frame(resolved_session, image, mirror_enabled)

        def restart_session() -> None:
            resolved_session.restart()

        camera.stream(
            process_frame,
            inputs=[camera, mirror],
            outputs=[annotated, readout_table, readout_json],
            stream_every=_STREAM_INTERVAL_S,
            concurrency_limit=1,
        )
        mirror.change(restart_session, inputs=None, outputs=None)

    return app


def main() -> None:
    from readout_overlay.ocr.clients import preload_default_ocr_client

    logging.basicConfig(level=logging.INFO)
    preload_default_ocr_client()
    logger.info("PaddleOCR client loaded at startup.")
    app = create_app()
    app.launch()


if __name__ == "__main__":
    main()
