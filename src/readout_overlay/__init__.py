from readout_overlay.matching import build_readout, find_associations
from readout_overlay.models import (
    Association,
    BoundingBox,
    DataContractError,
    FieldReading,
    FrameReadout,
    FrameRecognitionResult,
    LabelSpec,
    TextLine,
)
from readout_overlay.taxonomy import DEFAULT_LABELS

__all__ = [
    "DEFAULT_LABELS",
    "Association",
    "BoundingBox",
    "DataContractError",
    "FieldReading",
    "FrameReadout",
    "FrameRecognitionResult",
    "LabelSpec",
    "TextLine",
    "build_readout",
    "find_associations",
]
