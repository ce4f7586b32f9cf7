from readout_overlay.overlay.rendering import (
    DEFAULT_STYLE,
    DrawCommand,
    DrawText,
    FillRect,
    OverlayStyle,
    RenderResult,
    StrokeRect,
    render_associations,
)
from readout_overlay.overlay.transform import (
    CoordinateTranslator,
    DisplayTransform,
    InvalidTransformError,
    TransformCell,
)

__all__ = [
    "DEFAULT_STYLE",
    "CoordinateTranslator",
    "DisplayTransform",
    "DrawCommand",
    "DrawText",
    "FillRect",
    "InvalidTransformError",
    "OverlayStyle",
    "RenderResult",
    "StrokeRect",
    "TransformCell",
    "render_associations",
]
