"""Protocol 인터페이스 정의."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from meterreader.models import ModelExecutionResult, NormalizedImage, RawCapture


@runtime_checkable
class CameraDevice(Protocol):
    """카메라 장치 인터페이스."""

    def open(self) -> None: ...

    def read_frame(self) -> object | None:
        """프리뷰 프레임(numpy ndarray)을 반환. 실패 시 None."""
        ...

    def take_picture(self, path: Path, rotation_degrees: int) -> RawCapture: ...

    def release(self) -> None: ...


@runtime_checkable
class PermissionGate(Protocol):
    """카메라 권한 조회/저장 인터페이스."""

    def is_granted(self) -> bool | None:
        """허용이면 True, 거부면 False, 아직 묻지 않았으면 None."""
        ...

    def record(self, granted: bool) -> None: ...


@runtime_checkable
class MeterOcrModel(Protocol):
    """외부 OCR 모델 인터페이스."""

    def execute(self, image: NormalizedImage) -> ModelExecutionResult: ...
