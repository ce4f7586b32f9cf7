from collections.abc import Iterable
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

from readout_overlay.overlay.rendering import (
    DrawCommand,
    DrawText,
    FillRect,
    StrokeRect,
)

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont


@lru_cache(maxsize=8)
def load_font(size: float) -> FontType:
    return ImageFont.load_default(size=size)


def measure_text_width(text: str, size: float) -> float:
    """Width of the widest line of `text` at `size`, in pixels."""
    font = load_font(size)
    return max(font.getlength(line) for line in text.split("\n"))


class PillowCanvas:
    """Drawing sink that executes overlay commands on a Pillow image."""

    def __init__(self, image: Image.Image) -> None:
        if image.mode != "RGB":
            image = image.convert("RGB")
        self.image = image
        self._draw = ImageDraw.Draw(image)

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def execute(self, commands: Iterable[DrawCommand]) -> Image.Image:
        for command in commands:
            if isinstance(command, StrokeRect):
                self._draw.rectangle(
                    command.box.as_tuple(),
                    outline=command.color,
                    width=max(1, round(command.width)),
                )
            elif isinstance(command, FillRect):
                self._draw.rectangle(command.box.as_tuple(), fill=command.color)
            elif isinstance(command, DrawText):
                self._draw.multiline_text(
                    (command.x, command.y),
                    command.text,
                    fill=command.color,
                    font=load_font(command.size),
                    anchor="ld",
                    spacing=0,
                )
            else:
                raise TypeError(f"Unsupported draw command: {command!r}")
        return self.image
