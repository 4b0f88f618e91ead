"""로깅 설정."""
from __future__ import annotations
import logging
from pathlib import Path

_LOG_DIR = Path.home() / ".meterreader" / "logs"
_LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

# OCR 백엔드가 DEBUG로 쏟아내는 로그
_NOISY_LOGGERS = ("PIL", "easyocr", "pytesseract")


def setup_logging(level: int = logging.INFO, log_dir: Path | None = None) -> Path:
    """파일 + 콘솔 로깅을 설정하고 로그 파일 경로를 반환한다."""
    target = log_dir or _LOG_DIR
    target.mkdir(parents=True, exist_ok=True)
    log_file = target / "meterreader.log"
    logging.basicConfig(
        level=level,
        format=_LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return log_file
