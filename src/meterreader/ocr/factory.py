from __future__ import annotations

from meterreader.models import AppConfig
from meterreader.protocols import MeterOcrModel


def create_ocr_model(config: AppConfig) -> MeterOcrModel:
    key = (config.ocr_engine or "").strip().lower()
    if key in {"tesseract", "pytesseract", "default"}:
        from meterreader.ocr.tesseract_engine import TesseractMeterModel

        return TesseractMeterModel()
    if key in {"easyocr", "easy"}:
        from meterreader.ocr.easyocr_engine import EasyOcrMeterModel

        return EasyOcrMeterModel(gpu=config.easyocr_gpu)
    raise ValueError(
        f"Unknown OCR engine '{config.ocr_engine}'. Use one of: 'tesseract', 'easyocr'"
    )
