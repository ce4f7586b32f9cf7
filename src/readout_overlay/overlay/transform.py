from dataclasses import dataclass
from threading import Event, Lock
from typing import Final

from readout_overlay.models import BoundingBox, FrameRecognitionResult

VALID_ROTATIONS: Final = (0, 90, 180, 270)


class InvalidTransformError(ValueError):
    """Raised for display transforms that cannot map coordinates."""


def require_rotation(rotation_degrees: int) -> int:
    if rotation_degrees not in VALID_ROTATIONS:
        raise InvalidTransformError(
            f"Rotation must be one of {VALID_ROTATIONS}, got {rotation_degrees!r}."
        )
    return rotation_degrees


@dataclass(frozen=True)
class DisplayTransform:
    """Source dimensions in display orientation plus the mirroring flag."""

    source_width: int
    source_height: int
    is_flipped: bool = False

    def __post_init__(self) -> None:
        if self.source_width <= 0 or self.source_height <= 0:
            raise InvalidTransformError(
                "Source dimensions must be positive, got "
                f"{self.source_width}x{self.source_height}."
            )

    @classmethod
    def from_frame(
        cls,
        width: int,
        height: int,
        rotation_degrees: int,
        *,
        is_flipped: bool = False,
    ) -> "DisplayTransform":
        # Rotated frames are displayed sideways, so their axes swap.
        if require_rotation(rotation_degrees) in (90, 270):
            width, height = height, width
        return cls(source_width=width, source_height=height, is_flipped=is_flipped)

    @classmethod
    def from_result(cls, result: FrameRecognitionResult) -> "DisplayTransform":
        return cls.from_frame(
            result.source_width,
            result.source_height,
            result.rotation_degrees,
            is_flipped=result.is_flipped,
        )


class CoordinateTranslator:
    """Map source-image coordinates onto a drawing surface."""

    def __init__(
        self,
        transform: DisplayTransform,
        surface_width: float,
        surface_height: float,
    ) -> None:
        if surface_width <= 0 or surface_height <= 0:
            raise InvalidTransformError(
                "Drawing surface dimensions must be positive, got "
                f"{surface_width}x{surface_height}."
            )
        self.transform = transform
        self.surface_width = float(surface_width)
        self.surface_height = float(surface_height)
        self.scale_x = self.surface_width / transform.source_width
        self.scale_y = self.surface_height / transform.source_height

    def translate_x(self, x: float) -> float:
        scaled = x * self.scale_x
        if self.transform.is_flipped:
            return self.surface_width - scaled
        return scaled

    def translate_y(self, y: float) -> float:
        return y * self.scale_y

    def translate_box(self, box: BoundingBox) -> BoundingBox:
        # A horizontal flip swaps which edge ends up on the left.
        x0 = self.translate_x(box.left)
        x1 = self.translate_x(box.right)
        return BoundingBox(
            left=min(x0, x1),
            top=self.translate_y(box.top),
            right=max(x0, x1),
            bottom=self.translate_y(box.bottom),
        )


class TransformCell:
    """Holder for the display transform of the active camera session.

    The analysis worker publishes the transform from the first frame after a
    session (re)start and replaces it when a frame arrives with a different
    rotation, flip or size; the rendering side reads the immutable snapshot.
    The lock makes the write visible to readers on other threads.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._ready = Event()
        self._transform: DisplayTransform | None = None
        self._needs_update = True

    @property
    def needs_update(self) -> bool:
        with self._lock:
            return self._needs_update

    def reset(self) -> None:
        """Forget the current transform; the next frame publishes a new one."""
        with self._lock:
            self._transform = None
            self._needs_update = True
            self._ready.clear()

    def publish_once(self, transform: DisplayTransform) -> bool:
        """Publish `transform` unless one was already set for this session."""
        with self._lock:
            if not self._needs_update:
                return False
            self._transform = transform
            self._needs_update = False
            self._ready.set()
            return True

    def publish(self, transform: DisplayTransform) -> None:
        """Replace the transform explicitly, e.g. after a rotation change."""
        with self._lock:
            self._transform = transform
            self._needs_update = False
            self._ready.set()

    def get(self) -> DisplayTransform | None:
        with self._lock:
            return self._transform

    def wait(self, timeout: float | None = None) -> DisplayTransform | None:
        if not self._ready.wait(timeout=timeout):
            return None
        return self.get()
