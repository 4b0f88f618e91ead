"""카메라로 계량기를 촬영해 OCR로 판독하는 데스크톱 앱."""

__version__ = "0.1.0"
