#!/usr/bin/env python3
"""
Generate synthetic instrument-display frames for exercising the readout overlay.

Outputs a fixtures directory with one folder per sample:
  <out>/<sample_id>/data.json
  <out>/<sample_id>/frame.jpg

Frames are saved in sensor orientation: a sample with rotation 90 must be
turned 90 degrees clockwise to be read upright, like a portrait phone camera.
"""

from __future__ import annotations

import argparse
import json
import random
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageDraw, ImageEnhance, ImageFilter, ImageFont

IMAGE_TAGS = [
    "image.blur.gaussian",
    "image.grain.low",
    "image.grain.high",
    "image.glare",
    "image.low_contrast",
    "image.tilt",
]

BACKGROUND = (12, 14, 18)
LABEL_COLOR = (170, 178, 190)
VALUE_COLOR = (235, 240, 245)
FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
]

READOUT_UNITS = {
    "Volume": ("mL", 250, 650, 0),
    "Compliance": ("mL/cmH2O", 20, 80, 0),
    "Pressure": ("cmH2O", 5, 40, 0),
    "Gradient": ("mmHg", 2, 30, 1),
}


@dataclass(frozen=True)
class Readout:
    label: str
    value: str


def available_fonts() -> list[str]:
    return [path for path in FONT_CANDIDATES if Path(path).exists()]


def load_font(size: int, font_path: str | None) -> ImageFont.ImageFont:
    if font_path:
        try:
            return ImageFont.truetype(font_path, size=size)
        except OSError:
            pass
    return ImageFont.load_default(size=size)


def generate_readouts(rng: random.Random, labels: list[str]) -> list[Readout]:
    readouts: list[Readout] = []
    for label in labels:
        unit, low, high, decimals = READOUT_UNITS[label]
        value = rng.uniform(low, high)
        readouts.append(Readout(label=label, value=f"{value:.{decimals}f} {unit}"))
    return readouts


def render_display(
    readouts: list[Readout],
    size: tuple[int, int],
    font_path: str | None,
) -> Image.Image:
    width, height = size
    img = Image.new("RGB", size, BACKGROUND)
    draw = ImageDraw.Draw(img)
    row_height = height // (len(readouts) + 1)
    label_font = load_font(int(row_height * 0.3), font_path)
    value_font = load_font(int(row_height * 0.45), font_path)
    label_x = int(width * 0.08)
    value_x = int(width * 0.45)
    for index, readout in enumerate(readouts, start=1):
        center_y = row_height * index
        # Both columns are centered on the row so values sit in the label's band.
        draw.text(
            (label_x, center_y), readout.label, font=label_font, fill=LABEL_COLOR,
            anchor="lm",
        )
        draw.text(
            (value_x, center_y), readout.value, font=value_font, fill=VALUE_COLOR,
            anchor="lm",
        )
    return img


def apply_glare(img: Image.Image, intensity: float) -> Image.Image:
    width, height = img.size
    gradient = Image.new("L", (width, 1))
    gradient.putdata([int(255 * (x / max(1, width - 1))) for x in range(width)])
    gradient = gradient.resize((width, height))
    alpha = gradient.point(lambda v: int(v * intensity))
    overlay = Image.new("RGBA", img.size, (255, 255, 255, 0))
    overlay.putalpha(alpha)
    return Image.alpha_composite(img.convert("RGBA"), overlay).convert("RGB")


def apply_grain(img: Image.Image, sigma: float, alpha: float) -> Image.Image:
    noise = Image.effect_noise(img.size, sigma).convert("RGB")
    return Image.blend(img, noise, alpha)


def apply_image_effects(
    img: Image.Image,
    tags: list[str],
    rng: random.Random,
) -> Image.Image:
    if "image.tilt" in tags:
        angle = rng.uniform(-3.0, 3.0)
        img = img.rotate(angle, resample=Image.BICUBIC, fillcolor=BACKGROUND)
    if "image.glare" in tags:
        img = apply_glare(img, intensity=0.3)
    if "image.low_contrast" in tags:
        img = ImageEnhance.Contrast(img).enhance(0.7)
    if "image.grain.high" in tags:
        img = apply_grain(img, sigma=22.0, alpha=0.18)
    elif "image.grain.low" in tags:
        img = apply_grain(img, sigma=12.0, alpha=0.1)
    if "image.blur.gaussian" in tags:
        img = img.filter(ImageFilter.GaussianBlur(radius=1.2))
    return img


def to_sensor_orientation(img: Image.Image, rotation: int) -> Image.Image:
    # Undo the clockwise turn the viewer would apply.
    if rotation == 0:
        return img
    return img.rotate(rotation, expand=True)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", default="tests/fixtures/readouts_synthetic")
    ap.add_argument("--count", type=int, default=10)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--width", type=int, default=1280)
    ap.add_argument("--height", type=int, default=720)
    ap.add_argument("--max-tags", type=int, default=2)
    args = ap.parse_args()

    rng = random.Random(args.seed)
    font_paths = available_fonts()
    out_root = Path(args.out)
    out_root.mkdir(parents=True, exist_ok=True)
    all_labels = list(READOUT_UNITS)

    for i in range(1, args.count + 1):
        sample_id = f"readout-{i:04d}"
        labels = rng.sample(all_labels, k=rng.randint(3, len(all_labels)))
        readouts = generate_readouts(rng, labels)
        font_path = rng.choice(font_paths) if font_paths else None
        tags = rng.sample(IMAGE_TAGS, k=rng.randint(0, args.max_tags))
        rotation = rng.choice([0, 90, 180, 270])

        display = render_display(readouts, (args.width, args.height), font_path)
        display = apply_image_effects(display, tags, rng)
        frame = to_sensor_orientation(display, rotation)

        sample_dir = out_root / sample_id
        sample_dir.mkdir(parents=True, exist_ok=True)
        frame.save(sample_dir / "frame.jpg", format="JPEG", quality=90)

        data = {
            "id": sample_id,
            "rotation_degrees": rotation,
            "edge_cases": tags,
            "readouts": {readout.label: readout.value for readout in readouts},
            "frame": "frame.jpg",
        }
        (sample_dir / "data.json").write_text(
            json.dumps(data, indent=2), encoding="utf-8"
        )

    print(f"Wrote {args.count} synthetic frame(s) to {out_root}")


if __name__ == "__main__":
    main()
