"""앱 메인 엔트리포인트."""

from __future__ import annotations

import logging
import sys

from PyQt6.QtWidgets import QApplication

from meterreader.capture.permission import ConfigPermissionGate
from meterreader.config import ConfigManager
from meterreader.logging_config import setup_logging
from meterreader.ocr.factory import create_ocr_model
from meterreader.pipeline.controller import CaptureController
from meterreader.pipeline.pipeline import MeterReaderPipeline
from meterreader.presentation import PresentationState
from meterreader.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


class App:
    """앱 클래스: 설정 로드, 파이프라인↔컨트롤러↔윈도우 연결."""

    def __init__(self) -> None:
        setup_logging()
        self._app = QApplication(sys.argv)

        # 설정 로드
        self._config_manager = ConfigManager()
        self._config = self._config_manager.load()

        # 파이프라인
        self._pipeline = MeterReaderPipeline(
            config=self._config,
            model=create_ocr_model(self._config),
        )

        # 상태 + 컨트롤러
        self._presentation = PresentationState()
        self._controller = CaptureController(
            pipeline=self._pipeline,
            presentation=self._presentation,
            permission_gate=ConfigPermissionGate(self._config, self._config_manager),
        )

        # UI
        self._window = MainWindow(self._presentation)
        self._window.capture_clicked.connect(self._controller.capture)
        self._window.permission_answered.connect(self._controller.on_permission_result)
        self._window.retry_clicked.connect(self._controller.start)
        self._controller.permission_required.connect(self._window.ask_camera_permission)
        self._controller.state_changed.connect(self._window.set_capture_state)
        self._pipeline.frame_ready.connect(self._window.show_preview)
        self._app.aboutToQuit.connect(self._quit)
        self._window.show()

        self._controller.start()

    def _quit(self) -> None:
        logger.info("종료")
        self._controller.shutdown()

    def run(self) -> int:
        return self._app.exec()


def main() -> None:
    app = App()
    sys.exit(app.run())
