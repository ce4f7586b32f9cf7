import logging
from collections.abc import Iterable, Sequence
from typing import Literal, Protocol

from readout_overlay.models import (
    Association,
    BoundingBox,
    FieldReading,
    FrameReadout,
    LabelSpec,
    Point,
    require_corner_points,
)

TieBreak = Literal["first", "nearest"]

logger = logging.getLogger(__name__)


class LineLike(Protocol):
    content: str
    corner_points: Sequence[Point]


def _vertical_span(points: Sequence[Point]) -> tuple[float, float]:
    ys = [float(point[1]) for point in require_corner_points(points)]
    return min(ys), max(ys)


def _vertical_center(points: Sequence[Point]) -> float:
    corners = require_corner_points(points)
    return sum(float(point[1]) for point in corners) / 4.0


def _horizontal_gap(a: Sequence[Point], b: Sequence[Point]) -> float:
    first = BoundingBox.from_points(a)
    second = BoundingBox.from_points(b)
    if first.right < second.left:
        return second.left - first.right
    if second.right < first.left:
        return first.left - second.right
    return 0.0


def _find_label_line(lines: Sequence[LineLike], label: str) -> LineLike | None:
    for line in lines:
        if line.content == label:
            return line
    return None


def _value_candidates(
    lines: Sequence[LineLike],
    label_line: LineLike,
) -> list[LineLike]:
    """Lines whose vertical center lies strictly inside the label's band."""
    min_y, max_y = _vertical_span(label_line.corner_points)
    candidates: list[LineLike] = []
    for line in lines:
        # Also skips repeats of the label text, not just the label line itself.
        if line.content == label_line.content:
            continue
        center = _vertical_center(line.corner_points)
        if min_y < center < max_y:
            candidates.append(line)
    return candidates


def _pick_value_line(
    candidates: Sequence[LineLike],
    label_line: LineLike,
    tie_break: TieBreak,
) -> LineLike | None:
    if not candidates:
        return None
    if tie_break == "first":
        return candidates[0]
    if tie_break == "nearest":
        # min() keeps the earliest candidate among equal gaps.
        return min(
            candidates,
            key=lambda line: _horizontal_gap(
                label_line.corner_points, line.corner_points
            ),
        )
    raise ValueError(f"Unknown tie-break strategy: {tie_break!r}")


def find_associations(
    lines: Iterable[LineLike],
    labels: Sequence[LabelSpec],
    *,
    tie_break: TieBreak = "first",
) -> list[Association]:
    """Pair each label with the text line that sits in its vertical band.

    For every label, in the order given, the first line whose content equals the
    label exactly is taken as the label line. The value is the first other line
    (by engine order) whose mean corner y lies strictly between the label line's
    minimum and maximum corner y. Labels without a label line or a value line are
    simply absent from the result.

    Args:
        lines: Text lines recognized in one frame. Order carries no meaning other
            than breaking ties.
        labels: Labels to match; their order is the order of the output.
        tie_break: ``"first"`` keeps the first qualifying line in engine order;
            ``"nearest"`` prefers the line horizontally closest to the label.
    Returns:
        Zero or one association per label, in label order.
    """
    frame_lines = list(lines)
    associations: list[Association] = []
    for spec in labels:
        label_line = _find_label_line(frame_lines, spec.label)
        if label_line is None:
            continue
        candidates = _value_candidates(frame_lines, label_line)
        value_line = _pick_value_line(candidates, label_line, tie_break)
        if value_line is None:
            logger.debug("Label %r found without a value line.", spec.label)
            continue
        associations.append(Association(label=spec.label, line=value_line))
    return associations


def build_readout(
    associations: Sequence[Association],
    labels: Sequence[LabelSpec],
) -> FrameReadout:
    """Summarize associations as one reading per configured label."""
    by_label = {association.label: association for association in associations}
    fields: list[FieldReading] = []
    for spec in labels:
        association = by_label.get(spec.label)
        if association is None:
            fields.append(FieldReading(label=spec.label))
            continue
        fields.append(
            FieldReading(
                label=spec.label,
                status="located",
                value=association.value_text,
                bbox=BoundingBox.from_points(
                    association.line.corner_points
                ).as_tuple(),
                confidence=getattr(association.line, "confidence", None),
            )
        )
    all_found = bool(labels) and all(field.status == "located" for field in fields)
    return FrameReadout(fields=fields, all_found=all_found)
