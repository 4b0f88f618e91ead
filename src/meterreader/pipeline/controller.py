"""캡처 생명주기 상태 머신."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from meterreader.models import (
    CameraEvent,
    CaptureFailed,
    CaptureState,
    DecodeFailed,
    ExecutionResult,
    ImageSaved,
    InferenceFailure,
    SessionFailed,
)
from meterreader.pipeline.pipeline import MeterReaderPipeline
from meterreader.presentation import MSG_PERMISSION_REQUIRED, PresentationState
from meterreader.protocols import PermissionGate

logger = logging.getLogger(__name__)


class CaptureController(QObject):
    """권한 → 프리뷰 → 캡처 → 추론 흐름을 관리한다.

    상태 전이:
        IDLE → REQUESTING_PERMISSION → PREVIEWING → CAPTURING → PREVIEWING
        REQUESTING_PERMISSION → PERMISSION_DENIED → (권한 허용) → PREVIEWING

    CAPTURING은 추론 결과가 표시될 때까지 유지되므로
    캡처 중 새 캡처 요청은 거절된다.
    모든 메서드는 UI 스레드에서 호출된다.
    """

    state_changed = pyqtSignal(object)  # CaptureState
    permission_required = pyqtSignal()

    def __init__(
        self,
        pipeline: MeterReaderPipeline,
        presentation: PresentationState,
        permission_gate: PermissionGate,
    ) -> None:
        super().__init__()
        self._pipeline = pipeline
        self._presentation = presentation
        self._gate = permission_gate
        self._state = CaptureState.IDLE

        self._pipeline.camera_event.connect(self.handle_event)
        self._pipeline.result_ready.connect(self.on_result)

    @property
    def state(self) -> CaptureState:
        return self._state

    def _set_state(self, state: CaptureState) -> None:
        if state is self._state:
            return
        logger.debug("상태 전이: %s → %s", self._state.value, state.value)
        self._state = state
        self.state_changed.emit(state)

    # ── 권한 / 세션 ───────────────────────────────────────

    def start(self) -> None:
        """권한을 확인하고 카메라 세션을 시작한다. 세션 실패 후 재시도에도 쓰인다."""
        if self._state in (CaptureState.PREVIEWING, CaptureState.CAPTURING):
            logger.debug("세션이 이미 실행 중")
            return
        granted = self._gate.is_granted()
        if granted:
            self._start_session()
        elif granted is None:
            self._set_state(CaptureState.REQUESTING_PERMISSION)
            self.permission_required.emit()
        else:
            self._deny()

    def on_permission_result(self, granted: bool) -> None:
        """권한 요청 결과. 거부 후 다시 허용하면 재시작 없이 세션을 연다."""
        if self._state in (CaptureState.PREVIEWING, CaptureState.CAPTURING):
            return
        self._gate.record(granted)
        if granted:
            self._start_session()
        else:
            self._deny()

    def _start_session(self) -> None:
        self._set_state(CaptureState.PREVIEWING)
        self._pipeline.start_camera()
        logger.info("카메라 세션 시작")

    def _deny(self) -> None:
        logger.warning("카메라 권한 없음, 세션을 시작하지 않음")
        self._set_state(CaptureState.PERMISSION_DENIED)
        self._presentation.report(MSG_PERMISSION_REQUIRED)

    # ── 캡처 ──────────────────────────────────────────────

    def capture(self) -> bool:
        """캡처를 요청한다. 프리뷰 상태가 아니면 거절하고 False."""
        if self._state is not CaptureState.PREVIEWING:
            logger.debug("캡처 거절: 현재 상태 %s", self._state.value)
            return False
        if not self._pipeline.request_capture():
            logger.warning("캡처 거절: 카메라 세션 없음")
            return False
        self._set_state(CaptureState.CAPTURING)
        return True

    def handle_event(self, event: CameraEvent) -> None:
        """카메라 실행기에서 온 이벤트를 처리한다."""
        if isinstance(event, SessionFailed):
            self._presentation.report_error(f"Error starting camera: {event.reason}")
            self._set_state(CaptureState.IDLE)
            return

        if self._state is not CaptureState.CAPTURING:
            logger.debug("캡처 중이 아닐 때 도착한 이벤트 무시: %r", event)
            return

        if isinstance(event, CaptureFailed):
            self._presentation.report_error(f"Error capturing image: {event.reason}")
            self._set_state(CaptureState.PREVIEWING)
        elif isinstance(event, DecodeFailed):
            self._presentation.report_error(f"Error decoding image: {event.reason}")
            self._set_state(CaptureState.PREVIEWING)
        elif isinstance(event, ImageSaved):
            self._presentation.show_captured(event.image.pixels)
            if not self._pipeline.submit(event.image):
                self.on_result(InferenceFailure(reason="inference already in progress"))
        else:
            logger.warning("알 수 없는 카메라 이벤트: %r", event)

    def on_result(self, result: ExecutionResult) -> None:
        """추론 결과를 표시 상태에 반영하고 프리뷰로 돌아간다."""
        self._presentation.apply(result)
        if self._state is CaptureState.CAPTURING:
            self._set_state(CaptureState.PREVIEWING)

    def shutdown(self) -> None:
        self._pipeline.stop()
        self._set_state(CaptureState.IDLE)
