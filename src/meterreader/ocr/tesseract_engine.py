"""Tesseract 기반 계량기 OCR 모델."""

from __future__ import annotations

import re

import cv2
import numpy as np

from meterreader.errors import InferenceError
from meterreader.models import ModelExecutionResult, NormalizedImage

_BOX_COLOR = (0, 255, 0)  # BGR
_DIGIT_CONFIG = "--oem 3 --psm 7 -c tessedit_char_whitelist=0123456789"


class TesseractMeterModel:
    """pytesseract로 숫자만 읽는 OCR 모델.

    MeterOcrModel Protocol 구현.
    """

    def __init__(self, config: str = _DIGIT_CONFIG) -> None:
        self._config = config

    def execute(self, image: NormalizedImage) -> ModelExecutionResult:
        """정규화 이미지에서 계량기 숫자를 인식한다."""
        try:
            import pytesseract  # type: ignore[import-untyped]
        except ImportError:
            raise InferenceError("pytesseract not available. Install with: pip install pytesseract")

        pixels: np.ndarray = image.pixels  # type: ignore[assignment]
        gray = cv2.cvtColor(pixels, cv2.COLOR_BGR2GRAY) if pixels.ndim == 3 else pixels

        data = pytesseract.image_to_data(
            gray, config=self._config, output_type=pytesseract.Output.DICT,
        )

        annotated = pixels.copy()
        digits: list[str] = []
        for i, text in enumerate(data.get("text", [])):
            found = re.sub(r"\D", "", text or "")
            if not found:
                continue
            digits.append(found)
            x, y = int(data["left"][i]), int(data["top"][i])
            w, h = int(data["width"][i]), int(data["height"][i])
            cv2.rectangle(annotated, (x, y), (x + w, y + h), _BOX_COLOR, 2)

        reading = "".join(digits) or None
        return ModelExecutionResult(annotated_image=annotated, reading=reading, raw_output=data)
