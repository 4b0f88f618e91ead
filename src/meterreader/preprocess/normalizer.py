"""캡처 이미지 정규화 (디코딩 → 회전 → 리사이즈)."""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from meterreader.errors import DecodeError
from meterreader.models import MODEL_INPUT_SIZE, NormalizedImage, RawCapture

logger = logging.getLogger(__name__)

# 가로로 장착된 센서 보정용 고정 회전값. 실제 장치 방향은 감지하지 않는다.
SENSOR_ROTATION_DEGREES = 90

_ROTATE_CODES: dict[int, int | None] = {
    0: None,
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def decode_image(data: bytes) -> np.ndarray:
    """인코딩된 바이트를 BGR 이미지로 디코딩한다.

    유효한 이미지가 아니면 DecodeError.
    """
    if not data:
        raise DecodeError("빈 이미지 데이터")
    buf = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeError(f"이미지 디코딩 실패: {e}") from e
    if image is None or image.size == 0:
        raise DecodeError(f"유효한 이미지가 아닙니다 ({len(data)} bytes)")
    return image


def rotate_image(image: np.ndarray, rotation_degrees: int) -> np.ndarray:
    """이미지를 시계 방향으로 rotation_degrees만큼 회전한다."""
    if rotation_degrees not in _ROTATE_CODES:
        raise ValueError(f"지원하지 않는 회전 각도: {rotation_degrees}")
    code = _ROTATE_CODES[rotation_degrees]
    if code is None:
        return image
    return cv2.rotate(image, code)


class ImageNormalizer:
    """캡처된 사진을 OCR 모델 입력 규격으로 정규화한다.

    회전을 먼저 적용한 뒤 비율과 무관하게 320x320으로 리사이즈하므로
    종횡비 왜곡은 항상 결정적이다.
    """

    def __init__(self, size: tuple[int, int] = MODEL_INPUT_SIZE) -> None:
        self._size = size

    def normalize(
        self,
        raw: RawCapture,
        rotation_degrees: int | None = None,
    ) -> NormalizedImage:
        """RawCapture를 디코딩하고 정규화한다."""
        rotation = raw.rotation_degrees if rotation_degrees is None else rotation_degrees
        image = decode_image(raw.data)
        logger.debug("캡처 디코딩: %s %dx%d", raw.path, image.shape[1], image.shape[0])
        return self.normalize_array(image, rotation, source_path=raw.path)

    def normalize_array(
        self,
        image: np.ndarray,
        rotation_degrees: int = SENSOR_ROTATION_DEGREES,
        source_path: Path | None = None,
    ) -> NormalizedImage:
        """이미 디코딩된 버퍼를 회전 후 리사이즈한다."""
        if image is None or image.size == 0:
            raise DecodeError("빈 이미지 버퍼")
        rotated = rotate_image(image, rotation_degrees)
        resized = cv2.resize(rotated, self._size, interpolation=cv2.INTER_NEAREST)
        return NormalizedImage(
            pixels=resized,
            rotation_degrees=rotation_degrees,
            source_path=source_path,
        )
