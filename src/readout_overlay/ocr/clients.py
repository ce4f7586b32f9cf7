import logging
from collections.abc import Sequence
from functools import lru_cache
from threading import Lock
from typing import Protocol

import paddle
from paddleocr import PaddleOCR

from readout_overlay.ocr.types import DEFAULT_OCR_OPTIONS, OcrOptions

logger = logging.getLogger(__name__)


class OcrBackend(Protocol):
    def predict(self, image: object, **kwargs: bool) -> Sequence[object]: ...


class ThreadSafeOcrClient:
    """Serialize frame recognition for backends that are not thread-safe.

    The analysis worker and UI callbacks may submit frames at the same time;
    a PaddleOCR pipeline keeps per-instance state and must see one frame at a
    time.
    """

    def __init__(self, inner: OcrBackend) -> None:
        self._inner = inner
        self._lock = Lock()

    def predict(
        self,
        image: object,
        *,
        use_doc_orientation_classify: bool,
        use_doc_unwarping: bool,
        use_textline_orientation: bool,
    ) -> Sequence[object]:
        with self._lock:
            return self._inner.predict(
                image,
                use_doc_orientation_classify=use_doc_orientation_classify,
                use_doc_unwarping=use_doc_unwarping,
                use_textline_orientation=use_textline_orientation,
            )


def _choose_device() -> str:
    if paddle.is_compiled_with_cuda() and paddle.device.cuda.device_count() > 0:
        return "gpu"
    return "cpu"


def _create_paddle_ocr_client(
    device: str,
    options: OcrOptions = DEFAULT_OCR_OPTIONS,
) -> PaddleOCR:
    # Pipeline-level flags decide which sub-models get loaded at all.
    return PaddleOCR(
        lang="en",
        device=device,
        enable_mkldnn=device != "cpu",
        use_doc_orientation_classify=options.use_doc_orientation_classify,
        use_doc_unwarping=options.use_doc_unwarping,
        use_textline_orientation=options.use_textline_orientation,
    )


@lru_cache(maxsize=1)
def _get_default_ocr_client() -> ThreadSafeOcrClient:
    device = _choose_device()
    logger.info("Loading PaddleOCR text pipeline on %s.", device)
    return ThreadSafeOcrClient(_create_paddle_ocr_client(device))


def _reset_default_ocr_client_cache() -> None:
    _get_default_ocr_client.cache_clear()


def preload_default_ocr_client() -> None:
    """Load the shared PaddleOCR pipeline before the first frame arrives."""
    _get_default_ocr_client()
