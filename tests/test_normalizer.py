"""이미지 정규화 단위 테스트."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest

from meterreader.errors import DecodeError
from meterreader.models import RawCapture
from meterreader.preprocess.normalizer import (
    SENSOR_ROTATION_DEGREES,
    ImageNormalizer,
    decode_image,
    rotate_image,
)


def _make_raw(data: bytes, rotation: int = SENSOR_ROTATION_DEGREES) -> RawCapture:
    """테스트용 RawCapture를 생성한다."""
    return RawCapture(
        data=data,
        path=Path("captured_image.jpg"),
        rotation_degrees=rotation,
        timestamp=0.0,
    )


def _marker_image() -> np.ndarray:
    """방향을 판별할 수 있는 비대칭 320x320 이미지."""
    image = np.zeros((320, 320, 3), dtype=np.uint8)
    image[0:10, 0:40] = (0, 0, 255)  # 좌상단 가로 막대
    image[300:320, 310:320] = (255, 0, 0)  # 우하단 블록
    return image


class TestDecodeImage:
    """decode_image 테스트."""

    def test_decodes_jpeg(self, jpeg_bytes: bytes) -> None:
        image = decode_image(jpeg_bytes)
        assert image.shape == (480, 640, 3)

    def test_empty_bytes_raise(self) -> None:
        with pytest.raises(DecodeError):
            decode_image(b"")

    def test_garbage_bytes_raise(self) -> None:
        """이미지가 아닌 바이트는 빈 프레임이 아니라 DecodeError."""
        with pytest.raises(DecodeError):
            decode_image(b"this is not an image at all")


class TestRotateImage:
    """rotate_image 테스트."""

    def test_unsupported_angle_raises(self) -> None:
        with pytest.raises(ValueError):
            rotate_image(_marker_image(), 45)

    def test_zero_returns_same_buffer(self) -> None:
        image = _marker_image()
        assert rotate_image(image, 0) is image


class TestImageNormalizer:
    """ImageNormalizer 테스트."""

    @pytest.mark.parametrize(
        "shape",
        [(480, 640, 3), (1080, 1920, 3), (1, 1, 3), (37, 911, 3), (320, 320, 3)],
    )
    def test_output_is_always_320x320(self, shape: tuple[int, int, int]) -> None:
        """입력 해상도/비율과 무관하게 320x320을 반환한다."""
        image = np.random.randint(0, 256, shape, dtype=np.uint8)
        normalizer = ImageNormalizer()
        for rotation in (0, 90, 180, 270):
            result = normalizer.normalize_array(image, rotation)
            assert result.pixels.shape[:2] == (320, 320)
            assert result.width == 320
            assert result.height == 320

    def test_grayscale_input(self) -> None:
        image = np.zeros((100, 50), dtype=np.uint8)
        result = ImageNormalizer().normalize_array(image, 90)
        assert result.pixels.shape == (320, 320)

    @pytest.mark.parametrize(
        ("rotation", "k"),
        [(0, 0), (90, -1), (180, 2), (270, 1)],
    )
    def test_rotation_is_exact(self, rotation: int, k: int) -> None:
        """회전 힌트만큼 정확히 시계 방향으로 회전한다."""
        image = _marker_image()
        result = ImageNormalizer().normalize_array(image, rotation)
        expected = np.rot90(image, k=k)
        assert np.array_equal(result.pixels, expected)
        assert result.rotation_degrees == rotation

    def test_rotation_applied_before_resize(self) -> None:
        """가로로 긴 이미지를 90도 회전하면 세로 방향 특징이 유지된다."""
        # 왼쪽 절반 흰색, 오른쪽 절반 검정 (640x320)
        image = np.zeros((320, 640, 3), dtype=np.uint8)
        image[:, :320] = 255
        result = ImageNormalizer().normalize_array(image, 90)
        # 시계 방향 90도: 왼쪽 절반 → 위쪽 절반
        assert np.all(result.pixels[:150] == 255)
        assert np.all(result.pixels[170:] == 0)

    def test_normalize_raw_capture_uses_fixed_rotation(self, jpeg_bytes: bytes) -> None:
        result = ImageNormalizer().normalize(_make_raw(jpeg_bytes))
        assert result.pixels.shape == (320, 320, 3)
        assert result.rotation_degrees == SENSOR_ROTATION_DEGREES
        assert result.source_path == Path("captured_image.jpg")

    def test_normalize_raw_capture_rotation_override(self, jpeg_bytes: bytes) -> None:
        result = ImageNormalizer().normalize(_make_raw(jpeg_bytes), rotation_degrees=0)
        assert result.rotation_degrees == 0

    def test_normalize_invalid_bytes_raises(self) -> None:
        with pytest.raises(DecodeError):
            ImageNormalizer().normalize(_make_raw(b"\x00\x01 garbage"))

    def test_normalize_png_roundtrip_dimensions(self) -> None:
        """PNG도 디코딩된다."""
        ok, buf = cv2.imencode(".png", np.zeros((200, 100, 3), dtype=np.uint8))
        assert ok
        result = ImageNormalizer().normalize(_make_raw(buf.tobytes()))
        assert result.pixels.shape == (320, 320, 3)

    def test_fixed_sensor_rotation_constant(self) -> None:
        assert SENSOR_ROTATION_DEGREES == 90
