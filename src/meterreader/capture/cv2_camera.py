"""OpenCV 기반 카메라 캡처."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import cv2
import numpy as np

from meterreader.errors import CaptureError
from meterreader.models import RawCapture

logger = logging.getLogger(__name__)

_JPEG_QUALITY = 95


class Cv2Camera:
    """cv2.VideoCapture를 이용한 카메라.

    CameraDevice Protocol 구현.
    """

    def __init__(self, index: int = 0) -> None:
        self._index = index
        self._cap: cv2.VideoCapture | None = None
        self._last_frame: np.ndarray | None = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def open(self) -> None:
        """장치를 연다. 열 수 없으면 CaptureError."""
        if self.is_open:
            return
        self._cap = cv2.VideoCapture(self._index)
        if not self._cap.isOpened():
            self._cap = None
            raise CaptureError(f"카메라 장치 {self._index}를 열 수 없습니다")
        logger.info("카메라 장치 %d 열림", self._index)

    def read_frame(self) -> np.ndarray | None:
        """프리뷰용 프레임을 읽는다. 실패 시 None."""
        if not self.is_open:
            return None
        ret, frame = self._cap.read()  # type: ignore[union-attr]
        if not ret or frame is None:
            return None
        self._last_frame = frame
        return frame

    def take_picture(self, path: Path, rotation_degrees: int) -> RawCapture:
        """현재 프레임을 JPEG로 인코딩해 path에 덮어쓰고 RawCapture를 반환한다."""
        if not self.is_open:
            raise CaptureError("카메라 세션이 열려 있지 않습니다")

        ret, frame = self._cap.read()  # type: ignore[union-attr]
        if not ret or frame is None:
            raise CaptureError("프레임 캡처 실패")

        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, _JPEG_QUALITY])
        if not ok:
            raise CaptureError("JPEG 인코딩 실패")
        data = buf.tobytes()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise CaptureError(f"사진 저장 실패: {e}") from e

        return RawCapture(
            data=data,
            path=path,
            rotation_degrees=rotation_degrees,
            timestamp=time.time(),
        )

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("카메라 장치 %d 해제", self._index)
