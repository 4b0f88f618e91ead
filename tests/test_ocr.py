"""OCR 모델 어댑터 단위 테스트."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from meterreader.errors import InferenceError
from meterreader.models import AppConfig, ModelExecutionResult, NormalizedImage
from meterreader.ocr.easyocr_engine import EasyOcrMeterModel
from meterreader.ocr.factory import create_ocr_model
from meterreader.ocr.tesseract_engine import TesseractMeterModel
from meterreader.protocols import MeterOcrModel


def _image() -> NormalizedImage:
    return NormalizedImage(pixels=np.zeros((320, 320, 3), dtype=np.uint8))


def _fake_pytesseract(data: dict) -> MagicMock:
    fake = MagicMock()
    fake.Output.DICT = "dict"
    fake.image_to_data.return_value = data
    return fake


class TestTesseractMeterModel:
    """TesseractMeterModel 테스트."""

    def test_implements_protocol(self) -> None:
        assert isinstance(TesseractMeterModel(), MeterOcrModel)

    def test_execute_joins_digits_and_annotates(self) -> None:
        data = {
            "text": ["", "012", "3a4", " "],
            "left": [0, 10, 60, 0],
            "top": [0, 20, 20, 0],
            "width": [0, 40, 40, 0],
            "height": [0, 30, 30, 0],
        }
        fake = _fake_pytesseract(data)
        image = _image()

        with patch.dict(sys.modules, {"pytesseract": fake}):
            result = TesseractMeterModel().execute(image)

        assert isinstance(result, ModelExecutionResult)
        assert result.reading == "01234"
        assert result.raw_output is data
        annotated: np.ndarray = result.annotated_image  # type: ignore[assignment]
        assert annotated.shape == (320, 320, 3)
        # 박스가 그려졌고 원본은 그대로
        assert annotated[20, 10].tolist() == [0, 255, 0]
        assert not np.any(image.pixels)

    def test_execute_uses_gray_and_digit_whitelist(self) -> None:
        fake = _fake_pytesseract({"text": []})
        with patch.dict(sys.modules, {"pytesseract": fake}):
            TesseractMeterModel().execute(_image())
        args, kwargs = fake.image_to_data.call_args
        assert args[0].ndim == 2
        assert "tessedit_char_whitelist=0123456789" in kwargs["config"]

    def test_no_digits_is_null_reading(self) -> None:
        fake = _fake_pytesseract({"text": ["", "abc"], "left": [0, 0], "top": [0, 0],
                                  "width": [0, 1], "height": [0, 1]})
        with patch.dict(sys.modules, {"pytesseract": fake}):
            result = TesseractMeterModel().execute(_image())
        assert result.reading is None

    def test_missing_pytesseract(self) -> None:
        with patch.dict(sys.modules, {"pytesseract": None}):
            with pytest.raises(InferenceError):
                TesseractMeterModel().execute(_image())


class TestEasyOcrMeterModel:
    """EasyOcrMeterModel 테스트."""

    def test_implements_protocol(self) -> None:
        assert isinstance(EasyOcrMeterModel(), MeterOcrModel)

    def test_execute_orders_left_to_right(self) -> None:
        model = EasyOcrMeterModel()
        mock_reader = MagicMock()
        mock_reader.readtext.return_value = [
            ([[100, 10], [160, 10], [160, 40], [100, 40]], "34", 0.9),
            ([[10, 10], [90, 10], [90, 40], [10, 40]], "012", 0.8),
        ]
        model._reader = mock_reader

        result = model.execute(_image())

        assert result.reading == "01234"
        mock_reader.readtext.assert_called_once()
        assert mock_reader.readtext.call_args.kwargs["allowlist"] == "0123456789"
        annotated: np.ndarray = result.annotated_image  # type: ignore[assignment]
        assert annotated[10, 10].tolist() == [0, 255, 0]

    def test_empty_result_is_null_reading(self) -> None:
        model = EasyOcrMeterModel()
        model._reader = MagicMock()
        model._reader.readtext.return_value = []
        result = model.execute(_image())
        assert result.reading is None

    def test_lazy_reader_init(self) -> None:
        fake = MagicMock()
        with patch.dict(sys.modules, {"easyocr": fake}):
            model = EasyOcrMeterModel(gpu=True)
            model._ensure_reader()
            model._ensure_reader()
        fake.Reader.assert_called_once_with(["en"], gpu=True)

    def test_missing_easyocr(self) -> None:
        with patch.dict(sys.modules, {"easyocr": None}):
            with pytest.raises(InferenceError):
                EasyOcrMeterModel().execute(_image())


class TestFactory:
    """create_ocr_model 테스트."""

    def test_tesseract(self) -> None:
        assert isinstance(create_ocr_model(AppConfig(ocr_engine="tesseract")), TesseractMeterModel)

    def test_easyocr(self) -> None:
        model = create_ocr_model(AppConfig(ocr_engine=" EasyOCR ", easyocr_gpu=True))
        assert isinstance(model, EasyOcrMeterModel)
        assert model._gpu is True

    def test_unknown(self) -> None:
        with pytest.raises(ValueError):
            create_ocr_model(AppConfig(ocr_engine="winocr"))
