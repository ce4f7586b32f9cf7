import gradio as gr
from PIL import Image

from readout_overlay import gradio_app
from readout_overlay.models import FieldReading, FrameReadout
from readout_overlay.pipeline import CameraFrame


class _StubSession:
    labels = ()

    def __init__(self, readout: FrameReadout | None) -> None:
        self._readout = readout
        self.frames: list[CameraFrame] = []
        self.restarts = 0

    def annotate(self, frame: CameraFrame) -> tuple[Image.Image, FrameReadout | None]:
        self.frames.append(frame)
        return frame.image, self._readout

    def restart(self) -> None:
        self.restarts += 1


def _readout() -> FrameReadout:
    return FrameReadout(
        fields=[
            FieldReading(
                label="Volume",
                status="located",
                value="450 mL",
                bbox=(120.0, 42.0, 180.0, 58.0),
                confidence=0.9,
            ),
            FieldReading(label="Pressure"),
        ],
        all_found=False,
    )


def test_readout_rows_formats_missing_values() -> None:
    assert gradio_app._readout_rows(_readout()) == [
        ["Volume", "located", "450 mL"],
        ["Pressure", "missing", "-"],
    ]
    assert gradio_app._readout_rows(None) == []


def test_readout_payload_dumps_model() -> None:
    payload = gradio_app._readout_payload(_readout())

    assert payload["all_found"] is False
    assert payload["fields"][0]["value"] == "450 mL"
    assert gradio_app._readout_payload(None) == {}


def test_process_frame_without_image() -> None:
    session = _StubSession(_readout())

    assert gradio_app._process_frame(session, None, False) == (None, [], {})
    assert session.frames == []


def test_process_frame_passes_mirror_flag() -> None:
    session = _StubSession(_readout())
    image = Image.new("RGB", (8, 4))

    annotated, rows, payload = gradio_app._process_frame(session, image, True)

    assert annotated is image
    assert rows[0] == ["Volume", "located", "450 mL"]
    assert payload["fields"][1]["status"] == "missing"
    assert session.frames == [
        CameraFrame(image=image, rotation_degrees=0, is_flipped=True)
    ]


def test_process_frame_on_skipped_frame() -> None:
    session = _StubSession(None)
    image = Image.new("RGB", (8, 4))

    annotated, rows, payload = gradio_app._process_frame(session, image, False)

    assert annotated is image
    assert rows == []
    assert payload == {}


def test_create_app_builds_blocks() -> None:
    app = gradio_app.create_app(_StubSession(None))

    assert isinstance(app, gr.Blocks)
