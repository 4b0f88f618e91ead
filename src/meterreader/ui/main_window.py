"""메인 윈도우: 프리뷰, 캡처/주석 이미지, 실행 로그, 계량값."""

from __future__ import annotations

import numpy as np
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QFont, QImage, QPixmap
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from meterreader.models import CaptureState
from meterreader.preprocess.normalizer import SENSOR_ROTATION_DEGREES, rotate_image
from meterreader.presentation import PresentationState

_VIEW_SIZE = 320


def ndarray_to_pixmap(image: np.ndarray) -> QPixmap:
    """BGR/그레이 numpy 배열을 QPixmap으로 변환한다."""
    image = np.ascontiguousarray(image)
    h, w = image.shape[:2]
    if image.ndim == 2:
        qimage = QImage(image.data, w, h, image.strides[0], QImage.Format.Format_Grayscale8)
    else:
        qimage = QImage(image.data, w, h, image.strides[0], QImage.Format.Format_BGR888)
    # QImage는 버퍼를 복사하지 않으므로 copy()로 분리
    return QPixmap.fromImage(qimage.copy())


def _image_label(title: str) -> QLabel:
    label = QLabel(title)
    label.setFixedSize(_VIEW_SIZE, _VIEW_SIZE)
    label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    label.setStyleSheet("background-color: #202020; color: #888888;")
    return label


class MainWindow(QMainWindow):
    """계량기 판독 메인 윈도우."""

    capture_clicked = pyqtSignal()
    permission_answered = pyqtSignal(bool)
    retry_clicked = pyqtSignal()

    def __init__(self, presentation: PresentationState) -> None:
        super().__init__()
        self.setWindowTitle("Meter Reader")
        self._presentation = presentation

        font = QFont("Consolas", 11)
        font_large = QFont("Consolas", 16, QFont.Weight.Bold)

        self._preview_view = _image_label("Preview")
        self._captured_view = _image_label("Captured")
        self._annotated_view = _image_label("Annotated")

        self._log_label = QLabel("")
        self._log_label.setFont(font)
        self._log_label.setWordWrap(True)

        self._reading_label = QLabel("")
        self._reading_label.setFont(font_large)

        self._capture_button = QPushButton("Capture Photo")
        self._capture_button.clicked.connect(self.capture_clicked.emit)

        self._grant_button = QPushButton("Grant Camera Permission")
        self._grant_button.setVisible(False)
        self._grant_button.clicked.connect(lambda: self.permission_answered.emit(True))

        self._retry_button = QPushButton("Retry Camera")
        self._retry_button.setVisible(False)
        self._retry_button.clicked.connect(self.retry_clicked.emit)

        images = QHBoxLayout()
        images.addWidget(self._preview_view)
        images.addWidget(self._captured_view)
        images.addWidget(self._annotated_view)

        buttons = QHBoxLayout()
        buttons.addWidget(self._capture_button)
        buttons.addWidget(self._grant_button)
        buttons.addWidget(self._retry_button)

        layout = QVBoxLayout()
        layout.addLayout(images)
        layout.addWidget(self._reading_label)
        layout.addWidget(self._log_label)
        layout.addLayout(buttons)

        central = QWidget(self)
        central.setLayout(layout)
        self.setCentralWidget(central)

        presentation.changed.connect(self.refresh)
        self.set_capture_state(CaptureState.IDLE)

    def refresh(self) -> None:
        """PresentationState 내용을 위젯에 반영한다."""
        state = self._presentation
        self._log_label.setText(f"Execution Log: {state.log_text}" if state.log_text else "")
        self._reading_label.setText(state.reading_text)
        self._set_image(self._captured_view, state.captured_image, "Captured")
        self._set_image(self._annotated_view, state.annotated_image, "Annotated")

    @staticmethod
    def _set_image(label: QLabel, image: object | None, placeholder: str) -> None:
        if image is None:
            label.clear()
            label.setText(placeholder)
            return
        label.setPixmap(ndarray_to_pixmap(image))  # type: ignore[arg-type]

    def show_preview(self, frame: np.ndarray) -> None:
        """프리뷰 프레임 표시. 캡처와 같은 고정 회전을 적용한다."""
        rotated = rotate_image(frame, SENSOR_ROTATION_DEGREES)
        pixmap = ndarray_to_pixmap(rotated).scaled(
            _VIEW_SIZE,
            _VIEW_SIZE,
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.FastTransformation,
        )
        self._preview_view.setPixmap(pixmap)

    def set_capture_state(self, state: CaptureState) -> None:
        """캡처 상태에 따라 버튼을 활성/비활성화한다."""
        self._capture_button.setEnabled(state is CaptureState.PREVIEWING)
        self._grant_button.setVisible(state is CaptureState.PERMISSION_DENIED)
        # 세션 시작 실패 후 IDLE에서 다시 시도할 수 있다
        self._retry_button.setVisible(state is CaptureState.IDLE)
        if state is not CaptureState.PREVIEWING and state is not CaptureState.CAPTURING:
            self._preview_view.clear()
            self._preview_view.setText("Preview")

    def ask_camera_permission(self) -> None:
        """카메라 사용 동의를 묻는다."""
        answer = QMessageBox.question(
            self,
            "Camera Permission",
            "This app needs access to the camera to read the meter. Allow?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        self.permission_answered.emit(answer == QMessageBox.StandardButton.Yes)
