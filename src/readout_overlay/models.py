from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Point = tuple[float, float]
Color = tuple[int, int, int]


class DataContractError(ValueError):
    """Raised when OCR data violates the shape the matcher relies on."""


def require_corner_points(points: Sequence[Point]) -> tuple[Point, Point, Point, Point]:
    """Return the 4 corner points of a text line or fail fast.

    Used by `TextLine` construction and by the matcher, which may also be handed
    duck-typed lines straight from an OCR adapter.
    """
    if points is None or len(points) != 4:
        count = 0 if points is None else len(points)
        raise DataContractError(
            f"Text line must have exactly 4 corner points, got {count}."
        )
    return (points[0], points[1], points[2], points[3])


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in source-image pixel coordinates."""

    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_points(cls, points: Sequence[Point]) -> "BoundingBox":
        xs = [float(point[0]) for point in points]
        ys = [float(point[1]) for point in points]
        return cls(left=min(xs), top=min(ys), right=max(xs), bottom=max(ys))

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class TextLine:
    """One OCR-recognized line with its quadrilateral corners."""

    content: str
    corner_points: tuple[Point, Point, Point, Point]
    confidence: float | None = None

    def __post_init__(self) -> None:
        corners = tuple(
            (float(x), float(y)) for x, y in require_corner_points(self.corner_points)
        )
        object.__setattr__(self, "corner_points", corners)

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.corner_points)


@dataclass(frozen=True)
class FrameRecognitionResult:
    """Text lines recognized in one analyzed frame plus the frame metadata.

    `lines` keeps the order the OCR engine produced them in, which carries no
    meaning. `source_width`/`source_height` are the raw frame dimensions before
    rotation correction.
    """

    lines: tuple[TextLine, ...]
    source_width: int
    source_height: int
    rotation_degrees: int = 0
    is_flipped: bool = False


@dataclass(frozen=True)
class LabelSpec:
    """A field label to look for and the color its readout is drawn in."""

    label: str
    color: Color


@dataclass(frozen=True)
class Association:
    """A label paired with the value line found in its vertical band."""

    label: str
    line: TextLine

    @property
    def value_text(self) -> str:
        return self.line.content


class FieldReading(BaseModel):
    """Readout for a single configured label in one frame."""

    model_config = ConfigDict(frozen=True)

    label: str
    status: Literal["located", "missing"] = "missing"
    value: str | None = None
    bbox: tuple[float, float, float, float] | None = None
    confidence: float | None = None


class FrameReadout(BaseModel):
    """Per-frame summary of every configured label, in label order."""

    model_config = ConfigDict(frozen=True)

    fields: list[FieldReading] = Field(default_factory=list)
    all_found: bool = False
