from collections.abc import Callable, Sequence

import pytest

from readout_overlay.models import TextLine

LineFactory = Callable[..., TextLine]


def _corners(
    left: float,
    top: float,
    right: float,
    bottom: float,
) -> tuple[tuple[float, float], ...]:
    return ((left, top), (right, top), (right, bottom), (left, bottom))


@pytest.fixture
def make_line() -> LineFactory:
    """Build a rectangular text line, or one with explicit corner y values."""

    def _make(
        content: str,
        top: float = 0.0,
        bottom: float = 10.0,
        *,
        left: float = 0.0,
        right: float = 100.0,
        ys: Sequence[float] | None = None,
    ) -> TextLine:
        if ys is not None:
            corners = (
                (left, ys[0]),
                (right, ys[1]),
                (right, ys[2]),
                (left, ys[3]),
            )
        else:
            corners = _corners(left, top, right, bottom)
        return TextLine(content=content, corner_points=corners)

    return _make


@pytest.fixture
def ocr_page() -> Callable[..., dict[str, object]]:
    """Build a PaddleOCR-style result page from (text, box) pairs."""

    def _page(
        items: Sequence[tuple[str, tuple[float, float, float, float]]],
    ) -> dict[str, object]:
        return {
            "rec_texts": [text for text, _ in items],
            "rec_scores": [0.9 for _ in items],
            "rec_polys": [
                [list(point) for point in _corners(*box)] for _, box in items
            ],
        }

    return _page
