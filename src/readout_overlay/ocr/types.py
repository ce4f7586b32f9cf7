from dataclasses import dataclass
from typing import Final

from readout_overlay.models import FrameRecognitionResult


@dataclass(frozen=True)
class OcrOptions:
    """Runtime options passed to the OCR backend."""

    use_doc_orientation_classify: bool
    use_doc_unwarping: bool
    use_textline_orientation: bool


# Frames are rotated upright before recognition, so whole-page orientation and
# unwarping stay off; individual upside-down lines are still handled.
DEFAULT_OCR_OPTIONS: Final = OcrOptions(
    use_doc_orientation_classify=False,
    use_doc_unwarping=False,
    use_textline_orientation=True,
)


@dataclass(frozen=True)
class EngineFailure:
    """Error reported by the recognition engine for one frame."""

    message: str
    exception_type: str


@dataclass(frozen=True)
class RecognitionOk:
    result: FrameRecognitionResult


@dataclass(frozen=True)
class RecognitionErr:
    failure: EngineFailure


RecognitionOutcome = RecognitionOk | RecognitionErr
