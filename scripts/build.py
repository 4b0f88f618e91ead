"""PyInstaller 빌드 스크립트.

설치된 OCR 백엔드만 번들에 포함한다.
"""

import importlib.util
import subprocess
import sys

OCR_BACKENDS = ("pytesseract", "easyocr")


def build_command(backends: list[str]) -> list[str]:
    cmd = [
        sys.executable, "-m", "PyInstaller",
        "--onefile",
        "--windowed",
        "--name", "meterreader",
        "--paths", "src",
    ]
    for name in backends:
        # execute() 안에서 lazy import 되므로 명시가 필요하다
        cmd += ["--hidden-import", name]
    if "easyocr" in backends:
        cmd += ["--collect-data", "easyocr"]
    cmd.append("src/meterreader/__main__.py")
    return cmd


def installed_backends() -> list[str]:
    return [name for name in OCR_BACKENDS if importlib.util.find_spec(name) is not None]


def main() -> None:
    backends = installed_backends()
    if not backends:
        print("경고: OCR 백엔드가 설치되어 있지 않습니다 (pip install .[tesseract])", file=sys.stderr)
    subprocess.run(build_command(backends), check=True)


if __name__ == "__main__":
    main()
