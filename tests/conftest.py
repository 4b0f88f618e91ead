"""공용 fixture."""

from __future__ import annotations

import cv2
import numpy as np
import pytest
from PyQt6.QtCore import QCoreApplication

from meterreader.models import NormalizedImage


@pytest.fixture(scope="session")
def qapp() -> QCoreApplication:
    """워커 스레드 테스트용 QCoreApplication."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def normalized_image() -> NormalizedImage:
    return NormalizedImage(pixels=np.zeros((320, 320, 3), dtype=np.uint8))


@pytest.fixture
def jpeg_bytes() -> bytes:
    """640x480 BGR JPEG."""
    image = np.full((480, 640, 3), 128, dtype=np.uint8)
    ok, buf = cv2.imencode(".jpg", image)
    assert ok
    return buf.tobytes()
