import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from queue import Empty, Queue

from PIL import Image, ImageOps

from readout_overlay.matching import TieBreak, build_readout, find_associations
from readout_overlay.models import (
    Association,
    FrameReadout,
    FrameRecognitionResult,
    LabelSpec,
)
from readout_overlay.ocr import RecognitionErr, recognize_frame
from readout_overlay.ocr.orientation import _upright_image
from readout_overlay.ocr.types import DEFAULT_OCR_OPTIONS, OcrOptions
from readout_overlay.overlay.canvas import PillowCanvas, measure_text_width
from readout_overlay.overlay.rendering import (
    DEFAULT_STYLE,
    OverlayStyle,
    RenderResult,
    TextMeasure,
    render_associations,
)
from readout_overlay.overlay.transform import (
    CoordinateTranslator,
    DisplayTransform,
    TransformCell,
)
from readout_overlay.taxonomy import DEFAULT_LABELS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraFrame:
    """A raw frame handed over by the camera."""

    image: Image.Image
    rotation_degrees: int = 0
    is_flipped: bool = False


@dataclass(frozen=True)
class FrameAnalysis:
    """Recognition and label matching output for one frame."""

    result: FrameRecognitionResult
    associations: tuple[Association, ...]
    readout: FrameReadout


class OverlaySession:
    """Analysis and rendering state for one camera session."""

    def __init__(
        self,
        labels: Sequence[LabelSpec] = DEFAULT_LABELS,
        *,
        ocr_client: object | None = None,
        options: OcrOptions = DEFAULT_OCR_OPTIONS,
        style: OverlayStyle = DEFAULT_STYLE,
        tie_break: TieBreak = "first",
        measure: TextMeasure = measure_text_width,
    ) -> None:
        self.labels = tuple(labels)
        self.style = style
        self.tie_break = tie_break
        self._ocr_client = ocr_client
        self._options = options
        self._measure = measure
        self._transform = TransformCell()

    @property
    def transform_cell(self) -> TransformCell:
        return self._transform

    def restart(self) -> None:
        """Start a new session; the next analyzed frame sets the transform."""
        self._transform.reset()

    def analyze(self, frame: CameraFrame) -> FrameAnalysis | None:
        """Recognize and match one frame, or return None if the engine failed."""
        outcome = recognize_frame(
            frame.image,
            rotation_degrees=frame.rotation_degrees,
            is_flipped=frame.is_flipped,
            ocr_client=self._ocr_client,
            options=self._options,
        )
        if isinstance(outcome, RecognitionErr):
            logger.error(
                "Failed to process image. Error: %s (%s)",
                outcome.failure.message,
                outcome.failure.exception_type,
            )
            return None
        result = outcome.result
        transform = DisplayTransform.from_result(result)
        if self._transform.publish_once(transform):
            logger.debug(
                "Display transform set from %sx%s frame (rotation=%s, flipped=%s).",
                result.source_width,
                result.source_height,
                result.rotation_degrees,
                result.is_flipped,
            )
        elif self._transform.get() != transform:
            # Rotation, mirroring or frame size changed mid-session.
            self._transform.publish(transform)
            logger.debug("Display transform updated to %s.", transform)
        associations = find_associations(
            result.lines,
            self.labels,
            tie_break=self.tie_break,
        )
        return FrameAnalysis(
            result=result,
            associations=tuple(associations),
            readout=build_readout(associations, self.labels),
        )

    def render(
        self,
        analysis: FrameAnalysis,
        surface_width: float,
        surface_height: float,
    ) -> RenderResult:
        transform = self._transform.get()
        if transform is None:
            raise RuntimeError("Display transform has not been set for this session.")
        translator = CoordinateTranslator(transform, surface_width, surface_height)
        return render_associations(
            analysis.associations,
            self.labels,
            translator,
            measure=self._measure,
            style=self.style,
        )

    def annotate(self, frame: CameraFrame) -> tuple[Image.Image, FrameReadout | None]:
        """Analyze a frame and draw its readouts onto the frame as displayed."""
        display = _upright_image(frame.image, frame.rotation_degrees)
        if frame.is_flipped:
            display = ImageOps.mirror(display)
        canvas = PillowCanvas(display.copy())
        analysis = self.analyze(frame)
        if analysis is None:
            return canvas.image, None
        width, height = canvas.size
        rendered = self.render(analysis, width, height)
        return canvas.execute(rendered.commands), analysis.readout


class FrameWorker:
    """Single analysis thread that always works on the newest frame.

    A frame submitted while another is still waiting replaces it; the frame
    being analyzed finishes normally. The latest analysis is readable from any
    thread.
    """

    def __init__(
        self,
        session: OverlaySession,
        *,
        on_result: Callable[[FrameAnalysis], None] | None = None,
    ) -> None:
        self._session = session
        self._on_result = on_result
        self._queue: Queue[CameraFrame | None] = Queue(maxsize=1)
        self._submit_lock = threading.Lock()
        self._lock = threading.Lock()
        self._latest: FrameAnalysis | None = None
        self._worker = threading.Thread(
            target=self._worker_loop,
            name="frame-analysis",
            daemon=True,
        )

    def start(self) -> None:
        self._session.restart()
        self._worker.start()

    def submit(self, frame: CameraFrame) -> None:
        self._replace_pending(frame)

    def latest(self) -> FrameAnalysis | None:
        with self._lock:
            return self._latest

    def stop(self, timeout: float | None = None) -> None:
        self._replace_pending(None)
        if self._worker.is_alive():
            self._worker.join(timeout=timeout)

    def _replace_pending(self, item: CameraFrame | None) -> None:
        with self._submit_lock:
            try:
                self._queue.get_nowait()
                logger.debug("Dropped a frame that was never analyzed.")
            except Empty:
                pass
            self._queue.put_nowait(item)

    def _worker_loop(self) -> None:
        while True:
            frame = self._queue.get()
            if frame is None:
                return
            try:
                analysis = self._session.analyze(frame)
            except Exception:
                logger.exception("Frame analysis failed; skipping frame.")
                continue
            if analysis is None:
                continue
            with self._lock:
                self._latest = analysis
            if self._on_result is None:
                continue
            try:
                self._on_result(analysis)
            except Exception:
                logger.exception("Frame result callback failed.")
