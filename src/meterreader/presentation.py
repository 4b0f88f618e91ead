"""화면 표시 상태 (실행 로그, 계량값, 이미지)."""

from __future__ import annotations

from PyQt6.QtCore import QObject, pyqtSignal

from meterreader.models import ExecutionResult, InferenceFailure, InferenceSuccess

MSG_OCR_SUCCESS = "OCR execution completed successfully."
MSG_NO_READING = "No reading detected"
MSG_OCR_FAILED = "OCR execution failed"
MSG_PERMISSION_REQUIRED = "Camera permission is required"
MSG_RUNNING = "Image captured. Running OCR..."
READING_PREFIX = "Meter Reading: "


class PresentationState(QObject):
    """UI에 표시되는 최신 상태.

    UI 스레드에서만 변경된다. 캡처 시도마다 이전 상태를 통째로 덮어쓴다.
    """

    changed = pyqtSignal()

    def __init__(self) -> None:
        super().__init__()
        self._log_text = ""
        self._reading_text = ""
        self._annotated_image: object | None = None
        self._captured_image: object | None = None

    @property
    def log_text(self) -> str:
        return self._log_text

    @property
    def reading_text(self) -> str:
        return self._reading_text

    @property
    def annotated_image(self) -> object | None:
        return self._annotated_image

    @property
    def captured_image(self) -> object | None:
        return self._captured_image

    def apply(self, result: ExecutionResult) -> None:
        """추론 결과로 로그/계량값/주석 이미지를 갱신한다."""
        if isinstance(result, InferenceSuccess):
            reading = (result.reading or "").strip() or MSG_NO_READING
            self._log_text = MSG_OCR_SUCCESS
            self._reading_text = f"{READING_PREFIX}{reading}"
            self._annotated_image = result.annotated_image
        elif isinstance(result, InferenceFailure):
            self._log_text = f"{MSG_OCR_FAILED}: {result.reason}"
            self._reading_text = f"{READING_PREFIX}{MSG_OCR_FAILED}"
            self._annotated_image = None
        else:
            raise TypeError(f"알 수 없는 결과 타입: {type(result).__name__}")
        self.changed.emit()

    def show_captured(self, image: object) -> None:
        """새 캡처 시도를 시작한다. 이전 결과는 지운다."""
        self._captured_image = image
        self._log_text = MSG_RUNNING
        self._annotated_image = None
        self._reading_text = ""
        self.changed.emit()

    def report_error(self, message: str) -> None:
        """실패한 캡처 시도를 표시한다."""
        self._log_text = message
        self._reading_text = ""
        self._annotated_image = None
        self.changed.emit()

    def report(self, message: str) -> None:
        """로그 메시지만 갱신한다."""
        self._log_text = message
        self.changed.emit()
