import logging
from collections.abc import Sequence

from readout_overlay.models import Point, TextLine

logger = logging.getLogger(__name__)


def _as_sequence(value: object) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return value
    tolist = getattr(value, "tolist", None)
    if callable(tolist):
        converted = tolist()
        if isinstance(converted, list):
            return converted
    return []


def _select_polys(
    texts: Sequence[object],
    *candidates: Sequence[object],
) -> Sequence[object]:
    for candidate in candidates:
        if len(candidate) == len(texts):
            return candidate
    return []


def _bounding_corners(points: Sequence[Point]) -> tuple[Point, Point, Point, Point]:
    xs = [point[0] for point in points]
    ys = [point[1] for point in points]
    left, right = min(xs), max(xs)
    top, bottom = min(ys), max(ys)
    return ((left, top), (right, top), (right, bottom), (left, bottom))


def _polygon_to_corners(poly: object) -> tuple[Point, Point, Point, Point] | None:
    """Read a detection polygon as 4 corner points.

    Accepts (x, y) points or their flat coordinates, or an (x0, y0, x1, y1) box,
    which is expanded clockwise from its top-left corner. Polygons with more than
    4 points (curved text) are reduced to their axis-aligned bounding corners.
    """
    if isinstance(poly, (str, bytes)):
        return None

    tolist = getattr(poly, "tolist", None)
    if callable(tolist):
        poly = tolist()

    if not isinstance(poly, Sequence):
        return None

    if len(poly) >= 4 and all(
        isinstance(point, Sequence) and not isinstance(point, (str, bytes))
        for point in poly
    ):
        try:
            points = [(float(point[0]), float(point[1])) for point in poly]
        except (IndexError, TypeError, ValueError):
            return None
    else:
        try:
            values = [float(value) for value in poly]
        except (TypeError, ValueError):
            return None
        if len(values) == 4:
            x0, y0, x1, y1 = values
            return _bounding_corners([(x0, y0), (x1, y1)])
        if len(values) < 8 or len(values) % 2:
            return None
        points = list(zip(values[0::2], values[1::2]))

    if len(points) == 4:
        return (points[0], points[1], points[2], points[3])
    return _bounding_corners(points)


def _parse_score(value: object) -> float | None:
    if isinstance(value, (int, float, str)):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _lines_from_pairs(page: Sequence[object]) -> list[TextLine]:
    """Lines from the ``[(polygon, (text, score)), ...]`` result shape."""
    lines: list[TextLine] = []
    for item in page:
        if not isinstance(item, (list, tuple)) or len(item) < 2:
            continue
        text_info = item[1]
        if not isinstance(text_info, (list, tuple)) or not text_info:
            continue
        content = str(text_info[0])
        if not content:
            continue
        corners = _polygon_to_corners(item[0])
        if corners is None:
            logger.debug("Dropped OCR line %r with unreadable polygon.", content)
            continue
        score = _parse_score(text_info[1]) if len(text_info) > 1 else None
        lines.append(
            TextLine(content=content, corner_points=corners, confidence=score)
        )
    return lines


def _lines_from_mapping(page: object) -> list[TextLine]:
    """Lines from the ``{"rec_texts": ..., "rec_polys": ...}`` result shape."""
    getter = getattr(page, "get", None)
    if not callable(getter):
        return []
    texts = _as_sequence(getter("rec_texts"))
    scores = _as_sequence(getter("rec_scores"))
    polys = _select_polys(
        texts,
        _as_sequence(getter("rec_polys")),
        _as_sequence(getter("dt_polys")),
        _as_sequence(getter("rec_boxes")),
    )
    lines: list[TextLine] = []
    for index, raw_text in enumerate(texts):
        if index >= len(polys):
            break
        content = str(raw_text)
        if not content:
            continue
        corners = _polygon_to_corners(polys[index])
        if corners is None:
            logger.debug("Dropped OCR line %r with unreadable polygon.", content)
            continue
        score = _parse_score(scores[index]) if index < len(scores) else None
        lines.append(
            TextLine(content=content, corner_points=corners, confidence=score)
        )
    return lines


def _text_lines_from_prediction(pages: Sequence[object]) -> list[TextLine]:
    """Convert a PaddleOCR ``predict`` result into text lines in engine order.

    Line text is kept exactly as recognized; label matching is exact, so no
    whitespace normalization happens here.
    """
    lines: list[TextLine] = []
    for page in pages:
        if isinstance(page, list):
            lines.extend(_lines_from_pairs(page))
            continue
        lines.extend(_lines_from_mapping(page))
    return lines
