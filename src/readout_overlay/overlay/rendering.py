import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Final

from readout_overlay.models import Association, BoundingBox, Color, LabelSpec
from readout_overlay.overlay.transform import CoordinateTranslator
from readout_overlay.taxonomy import BLACK

TextMeasure = Callable[[str, float], float]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlayStyle:
    """Sizes and colors shared by every drawn readout."""

    text_size: float = 24.0
    stroke_width: float = 2.0
    text_color: Color = BLACK


DEFAULT_STYLE: Final = OverlayStyle()


@dataclass(frozen=True)
class StrokeRect:
    box: BoundingBox
    color: Color
    width: float


@dataclass(frozen=True)
class FillRect:
    box: BoundingBox
    color: Color


@dataclass(frozen=True)
class DrawText:
    """Text whose bottom-left corner sits at (x, y)."""

    text: str
    x: float
    y: float
    color: Color
    size: float


DrawCommand = StrokeRect | FillRect | DrawText


@dataclass(frozen=True)
class RenderResult:
    """Draw commands for one frame, in label order."""

    commands: tuple[DrawCommand, ...]
    all_found: bool


def format_readout_text(label: str, value_text: str) -> str:
    return f"{label}\n{value_text}"


def _text_block_height(text: str, style: OverlayStyle) -> float:
    line_count = text.count("\n") + 1
    return line_count * style.text_size + 2 * style.stroke_width


def render_association(
    association: Association,
    color: Color,
    translator: CoordinateTranslator,
    measure: TextMeasure,
    style: OverlayStyle = DEFAULT_STYLE,
) -> list[DrawCommand]:
    """Build the box, label background and text for one association."""
    box = translator.translate_box(association.line.bounding_box)
    text = format_readout_text(association.label, association.value_text)
    text_width = measure(text, style.text_size)
    text_height = _text_block_height(text, style)
    stroke = style.stroke_width
    background = BoundingBox(
        left=box.left - stroke,
        top=box.top - text_height,
        right=box.left + text_width + 2 * stroke,
        bottom=box.top,
    )
    return [
        StrokeRect(box=box, color=color, width=stroke),
        FillRect(box=background, color=color),
        DrawText(
            text=text,
            x=box.left,
            y=box.top - stroke,
            color=style.text_color,
            size=style.text_size,
        ),
    ]


def render_associations(
    associations: Sequence[Association],
    labels: Sequence[LabelSpec],
    translator: CoordinateTranslator,
    *,
    measure: TextMeasure,
    style: OverlayStyle = DEFAULT_STYLE,
) -> RenderResult:
    """Turn one frame's associations into draw commands.

    Commands follow the order of `labels`, whatever order the associations
    arrive in. When every configured label was matched, an "All fields located"
    debug record is logged.
    """
    positions = {spec.label: index for index, spec in enumerate(labels)}
    colors = {spec.label: spec.color for spec in labels}
    ordered = sorted(
        (item for item in associations if item.label in positions),
        key=lambda item: positions[item.label],
    )
    commands: list[DrawCommand] = []
    for association in ordered:
        commands.extend(
            render_association(
                association,
                colors[association.label],
                translator,
                measure,
                style,
            )
        )
    found = {association.label for association in ordered}
    all_found = bool(labels) and found == set(positions)
    if all_found:
        logger.debug("All fields located")
    return RenderResult(commands=tuple(commands), all_found=all_found)
