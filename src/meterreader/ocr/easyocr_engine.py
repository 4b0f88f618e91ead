"""EasyOCR 기반 계량기 OCR 모델."""

from __future__ import annotations

import cv2
import numpy as np

from meterreader.errors import InferenceError
from meterreader.models import ModelExecutionResult, NormalizedImage

_BOX_COLOR = (0, 255, 0)  # BGR


class EasyOcrMeterModel:
    """EasyOCR을 사용하는 OCR 모델.

    MeterOcrModel Protocol 구현. reader는 첫 execute() 호출 시 lazy init.
    """

    def __init__(self, gpu: bool = False, lang: list[str] | None = None) -> None:
        self._reader: object | None = None
        self._gpu = gpu
        self._lang = lang or ["en"]

    def _ensure_reader(self) -> None:
        """reader가 없으면 생성한다."""
        if self._reader is not None:
            return
        try:
            import easyocr  # type: ignore[import-untyped]
        except ImportError:
            raise InferenceError("easyocr not available. Install with: pip install easyocr")
        self._reader = easyocr.Reader(self._lang, gpu=self._gpu)

    def execute(self, image: NormalizedImage) -> ModelExecutionResult:
        """정규화 이미지에서 계량기 숫자를 인식한다."""
        self._ensure_reader()
        pixels: np.ndarray = image.pixels  # type: ignore[assignment]
        results = self._reader.readtext(pixels, allowlist="0123456789")  # type: ignore[union-attr]

        annotated = pixels.copy()
        # 왼쪽에서 오른쪽 순서로 이어 붙인다
        ordered = sorted(results, key=lambda r: min(pt[0] for pt in r[0]))
        for bbox, _text, _conf in ordered:
            pts = np.array(bbox, dtype=np.int32).reshape((-1, 1, 2))
            cv2.polylines(annotated, [pts], isClosed=True, color=_BOX_COLOR, thickness=2)

        reading = "".join(r[1] for r in ordered if r[1]) or None
        return ModelExecutionResult(annotated_image=annotated, reading=reading, raw_output=results)
