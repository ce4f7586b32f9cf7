from typing import Final

from PIL import Image

from readout_overlay.overlay.transform import require_rotation

# Camera rotation is the clockwise turn needed to show the frame upright;
# Pillow's transpose constants rotate counter-clockwise.
_UPRIGHT_TRANSPOSE: Final = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def _upright_image(image: Image.Image, rotation_degrees: int) -> Image.Image:
    """Rotate a camera frame so recognized coordinates are in display orientation."""
    transpose = _UPRIGHT_TRANSPOSE.get(require_rotation(rotation_degrees))
    if transpose is None:
        return image
    return image.transpose(transpose)


def _as_rgb(image: Image.Image) -> Image.Image:
    # Paddle expects 3-channel input; palette and RGBA frames are normalized.
    return image.convert("RGB") if image.mode != "RGB" else image
