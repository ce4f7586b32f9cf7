from PIL import Image

from readout_overlay.models import FrameRecognitionResult
from readout_overlay.ocr.lines import _text_lines_from_prediction
from readout_overlay.ocr.orientation import _as_rgb, _upright_image
from readout_overlay.ocr.types import (
    DEFAULT_OCR_OPTIONS,
    EngineFailure,
    OcrOptions,
    RecognitionErr,
    RecognitionOk,
    RecognitionOutcome,
)
from readout_overlay.overlay.transform import require_rotation

__all__ = [
    "DEFAULT_OCR_OPTIONS",
    "EngineFailure",
    "OcrOptions",
    "RecognitionErr",
    "RecognitionOk",
    "RecognitionOutcome",
    "recognize_frame",
]


def _resolve_client(ocr_client: object | None) -> object:
    if ocr_client is not None:
        return ocr_client
    from readout_overlay.ocr.clients import _get_default_ocr_client

    return _get_default_ocr_client()


def recognize_frame(
    image: Image.Image,
    *,
    rotation_degrees: int = 0,
    is_flipped: bool = False,
    ocr_client: object | None = None,
    options: OcrOptions = DEFAULT_OCR_OPTIONS,
) -> RecognitionOutcome:
    """Recognize the text lines of one camera frame.

    Args:
        image: Raw camera frame in sensor orientation.
        rotation_degrees: Clockwise rotation needed to display the frame upright.
        is_flipped: Whether the preview mirrors the frame horizontally.
        ocr_client: Optional OCR backend implementation for dependency injection.
        options: Flags forwarded to the backend's ``predict``.
    Returns:
        ``RecognitionOk`` with the frame's lines, or ``RecognitionErr`` when the
        engine raised. Line coordinates are in display orientation.
    """
    import numpy as np

    require_rotation(rotation_degrees)
    width, height = image.size
    upright = _as_rgb(_upright_image(image, rotation_degrees))
    resolved_client = _resolve_client(ocr_client)
    try:
        pages = resolved_client.predict(
            np.array(upright),
            use_doc_orientation_classify=options.use_doc_orientation_classify,
            use_doc_unwarping=options.use_doc_unwarping,
            use_textline_orientation=options.use_textline_orientation,
        )
    except Exception as exc:
        return RecognitionErr(
            EngineFailure(message=str(exc), exception_type=type(exc).__name__)
        )
    lines = _text_lines_from_prediction(pages)
    return RecognitionOk(
        FrameRecognitionResult(
            lines=tuple(lines),
            source_width=width,
            source_height=height,
            rotation_degrees=rotation_degrees,
            is_flipped=is_flipped,
        )
    )
