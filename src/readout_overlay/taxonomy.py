from typing import Final

from readout_overlay.models import Color, LabelSpec

GREEN: Final[Color] = (0, 255, 0)
RED: Final[Color] = (255, 0, 0)
YELLOW: Final[Color] = (255, 255, 0)
MAGENTA: Final[Color] = (255, 0, 255)
BLACK: Final[Color] = (0, 0, 0)
WHITE: Final[Color] = (255, 255, 255)

# Order is both the match order and the draw order.
DEFAULT_LABELS: Final = (
    LabelSpec("Volume", GREEN),
    LabelSpec("Compliance", RED),
    LabelSpec("Pressure", YELLOW),
    LabelSpec("Gradient", MAGENTA),
)
