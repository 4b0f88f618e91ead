"""Frozen dataclass 모델 정의."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# 외부 OCR 모델이 기대하는 입력 크기 (width, height)
MODEL_INPUT_SIZE: tuple[int, int] = (320, 320)


@dataclass(frozen=True)
class RawCapture:
    """카메라가 저장한 인코딩된 사진."""

    data: bytes
    path: Path
    rotation_degrees: int
    timestamp: float


@dataclass(frozen=True)
class NormalizedImage:
    """모델 입력 규격(320x320, 고정 방향)으로 정규화된 이미지."""

    pixels: object  # numpy ndarray
    rotation_degrees: int = 0
    source_path: Path | None = None

    def __post_init__(self) -> None:
        shape = getattr(self.pixels, "shape", None)
        width, height = MODEL_INPUT_SIZE
        if shape is None or tuple(shape[:2]) != (height, width):
            raise ValueError(f"정규화 이미지 크기는 {width}x{height}이어야 합니다: {shape}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])  # type: ignore[attr-defined]

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])  # type: ignore[attr-defined]


@dataclass(frozen=True)
class ModelExecutionResult:
    """외부 OCR 모델의 원시 실행 결과."""

    annotated_image: object  # numpy ndarray
    reading: str | None
    raw_output: object = None


@dataclass(frozen=True)
class InferenceSuccess:
    """추론 성공."""

    annotated_image: object  # numpy ndarray
    reading: str | None


@dataclass(frozen=True)
class InferenceFailure:
    """추론 실패."""

    reason: str

    def __post_init__(self) -> None:
        if not self.reason.strip():
            raise ValueError("실패 사유는 비어 있을 수 없습니다")


ExecutionResult = InferenceSuccess | InferenceFailure


class CaptureState(Enum):
    """캡처 컨트롤러 상태."""

    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    PREVIEWING = "previewing"
    CAPTURING = "capturing"
    PERMISSION_DENIED = "permission_denied"


# ── 카메라 이벤트 ─────────────────────────────────────────


@dataclass(frozen=True)
class ImageSaved:
    """사진 저장 및 정규화 완료."""

    capture: RawCapture
    image: NormalizedImage


@dataclass(frozen=True)
class CaptureFailed:
    """하드웨어/드라이버 수준 캡처 실패."""

    reason: str


@dataclass(frozen=True)
class DecodeFailed:
    """저장된 사진 디코딩 실패."""

    reason: str


@dataclass(frozen=True)
class SessionFailed:
    """카메라 세션 시작 실패."""

    reason: str


CameraEvent = ImageSaved | CaptureFailed | DecodeFailed | SessionFailed


def _default_output_dir() -> Path:
    return Path.home() / ".meterreader" / "captures"


@dataclass
class AppConfig:
    """앱 설정."""

    camera_index: int = 0
    preview_fps: int = 15
    ocr_engine: str = "tesseract"
    easyocr_gpu: bool = False
    output_dir: Path = field(default_factory=_default_output_dir)
    camera_permission: bool | None = None

    def __post_init__(self) -> None:
        if self.preview_fps <= 0:
            raise ValueError(f"preview_fps는 양수여야 합니다: {self.preview_fps}")
        if self.camera_index < 0:
            raise ValueError(f"camera_index는 0 이상이어야 합니다: {self.camera_index}")
