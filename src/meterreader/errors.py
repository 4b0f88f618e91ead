"""도메인 예외 정의."""

from __future__ import annotations


class MeterReaderError(Exception):
    """meterreader 예외의 기본 클래스."""


class CaptureError(MeterReaderError):
    """카메라 하드웨어/드라이버 수준의 캡처 실패."""


class DecodeError(MeterReaderError):
    """저장된 사진이 유효한 이미지가 아님."""


class InferenceError(MeterReaderError, RuntimeError):
    """외부 OCR 모델 실행 실패."""
