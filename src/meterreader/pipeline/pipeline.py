"""카메라 → 정규화 → OCR 추론 워커 및 파이프라인."""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from meterreader.capture.cv2_camera import Cv2Camera
from meterreader.errors import CaptureError, DecodeError
from meterreader.models import (
    AppConfig,
    CameraEvent,
    CaptureFailed,
    DecodeFailed,
    ExecutionResult,
    ImageSaved,
    InferenceFailure,
    InferenceSuccess,
    NormalizedImage,
    SessionFailed,
)
from meterreader.preprocess.normalizer import SENSOR_ROTATION_DEGREES, ImageNormalizer
from meterreader.protocols import CameraDevice, MeterOcrModel

logger = logging.getLogger(__name__)

CAPTURE_FILENAME = "captured_image.jpg"


def execute_model(model: MeterOcrModel, image: NormalizedImage) -> ExecutionResult:
    """외부 모델을 한 번 실행하고 결과를 ExecutionResult로 변환한다.

    모델이 던진 예외는 InferenceFailure로 바뀌며 밖으로 전파되지 않는다.
    """
    try:
        result = model.execute(image)
    except Exception as e:
        logger.warning("OCR 실행 실패", exc_info=True)
        reason = str(e).strip() or type(e).__name__
        return InferenceFailure(reason=reason)

    if result is None:
        return InferenceFailure(reason="모델이 결과를 반환하지 않았습니다")
    return InferenceSuccess(
        annotated_image=getattr(result, "annotated_image", None),
        reading=getattr(result, "reading", None),
    )


class CameraWorker(QThread):
    """카메라 세션 워커 스레드.

    프리뷰 프레임을 내보내고, 캡처 요청이 오면 사진을 저장/정규화한 뒤
    결과를 카메라 이벤트로 내보낸다.
    """

    frame_ready = pyqtSignal(object)  # numpy ndarray
    camera_event = pyqtSignal(object)  # CameraEvent

    def __init__(
        self,
        camera: CameraDevice,
        normalizer: ImageNormalizer,
        output_path: Path,
        fps: int = 15,
    ) -> None:
        super().__init__()
        self._camera = camera
        self._normalizer = normalizer
        self._output_path = output_path
        self._fps = fps
        self._capture_requested = threading.Event()
        self._running = False

    def run(self) -> None:
        try:
            self._camera.open()
        except Exception as e:
            logger.warning("카메라 세션 시작 실패", exc_info=True)
            self.camera_event.emit(SessionFailed(reason=str(e) or type(e).__name__))
            return

        self._running = True
        interval = 1.0 / self._fps
        try:
            while self._running:
                start = time.monotonic()
                if self._capture_requested.is_set():
                    self._capture_requested.clear()
                    self.camera_event.emit(self._take_picture())
                    continue
                try:
                    frame = self._camera.read_frame()
                    if frame is not None:
                        self.frame_ready.emit(frame)
                except Exception:
                    logger.warning("프리뷰 프레임 읽기 실패", exc_info=True)
                elapsed = time.monotonic() - start
                sleep_time = interval - elapsed
                if sleep_time > 0:
                    # 캡처 요청이 오면 즉시 깨어난다
                    self._capture_requested.wait(sleep_time)
        finally:
            self._camera.release()

    def _take_picture(self) -> CameraEvent:
        """사진을 저장하고 정규화한다. 실패는 이벤트로 변환한다."""
        try:
            raw = self._camera.take_picture(self._output_path, SENSOR_ROTATION_DEGREES)
        except CaptureError as e:
            logger.warning("캡처 실패: %s", e)
            return CaptureFailed(reason=str(e))
        except Exception as e:
            logger.warning("캡처 실패", exc_info=True)
            return CaptureFailed(reason=str(e) or type(e).__name__)

        try:
            image = self._normalizer.normalize(raw)
        except DecodeError as e:
            logger.warning("디코딩 실패: %s", e)
            return DecodeFailed(reason=str(e))
        except Exception as e:
            logger.warning("정규화 실패", exc_info=True)
            return DecodeFailed(reason=str(e).strip() or type(e).__name__)
        return ImageSaved(capture=raw, image=image)

    def request_capture(self) -> None:
        self._capture_requested.set()

    def stop(self) -> None:
        self._running = False


class InferenceWorker(QThread):
    """OCR 추론 워커 스레드.

    깊이 1의 큐를 사용한다. 추론이 진행 중이면 새 요청은 거절된다.
    """

    result_ready = pyqtSignal(object)  # ExecutionResult

    def __init__(self, model: MeterOcrModel) -> None:
        super().__init__()
        self._model = model
        self._queue: queue.Queue[NormalizedImage] = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._busy = False
        self._running = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    def submit(self, image: NormalizedImage) -> bool:
        """이미지를 추론 큐에 넣는다. 진행 중인 추론이 있으면 False."""
        with self._lock:
            if self._busy:
                logger.debug("추론 진행 중, 요청 거절")
                return False
            self._busy = True
            self._queue.put_nowait(image)
        return True

    def run(self) -> None:
        self._running = True
        while self._running:
            try:
                image = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue
            self.result_ready.emit(self._process(image))

    def _process(self, image: NormalizedImage) -> ExecutionResult:
        started = time.monotonic()
        try:
            result = execute_model(self._model, image)
        finally:
            with self._lock:
                self._busy = False
        logger.info("추론 완료 (%.0f ms): %s", (time.monotonic() - started) * 1000, type(result).__name__)
        return result

    def stop(self) -> None:
        self._running = False


class MeterReaderPipeline(QObject):
    """카메라/추론 워커 조립 및 제어.

    워커 스레드의 신호는 이 객체의 신호로 다시 내보내므로
    수신 측 슬롯은 UI 스레드에서 실행된다.
    """

    frame_ready = pyqtSignal(object)  # numpy ndarray
    camera_event = pyqtSignal(object)  # CameraEvent
    result_ready = pyqtSignal(object)  # ExecutionResult

    def __init__(
        self,
        config: AppConfig,
        model: MeterOcrModel,
        camera: CameraDevice | None = None,
        normalizer: ImageNormalizer | None = None,
    ) -> None:
        super().__init__()
        self._config = config
        self._camera = camera or Cv2Camera(index=config.camera_index)
        self._normalizer = normalizer or ImageNormalizer()
        self._model = model

        self._camera_worker: CameraWorker | None = None
        self._inference_worker: InferenceWorker | None = None

    @property
    def output_path(self) -> Path:
        return self._config.output_dir / CAPTURE_FILENAME

    def start_camera(self) -> None:
        """카메라 세션과 추론 워커를 시작한다."""
        if self._camera_worker is not None:
            self.stop_camera()

        if self._inference_worker is None:
            self._inference_worker = InferenceWorker(model=self._model)
            self._inference_worker.result_ready.connect(self.result_ready.emit)
            self._inference_worker.start()

        self._camera_worker = CameraWorker(
            camera=self._camera,
            normalizer=self._normalizer,
            output_path=self.output_path,
            fps=self._config.preview_fps,
        )
        self._camera_worker.frame_ready.connect(self.frame_ready.emit)
        self._camera_worker.camera_event.connect(self.camera_event.emit)
        self._camera_worker.start()

    def stop_camera(self) -> None:
        if self._camera_worker is not None:
            self._camera_worker.stop()
            self._camera_worker.wait(2000)
            self._camera_worker = None

    def request_capture(self) -> bool:
        """캡처를 요청한다. 카메라 세션이 없으면 False."""
        if self._camera_worker is None:
            return False
        self._camera_worker.request_capture()
        return True

    def submit(self, image: NormalizedImage) -> bool:
        """정규화 이미지를 추론 워커에 넘긴다."""
        if self._inference_worker is None:
            return False
        return self._inference_worker.submit(image)

    def stop(self) -> None:
        """모든 워커 정지. 진행 중인 추론은 끝날 때까지 기다린다."""
        self.stop_camera()
        if self._inference_worker is not None:
            self._inference_worker.stop()
            self._inference_worker.wait(5000)
            self._inference_worker = None

    @property
    def is_camera_running(self) -> bool:
        return self._camera_worker is not None and self._camera_worker.isRunning()
