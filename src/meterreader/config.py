"""TOML 기반 설정 관리."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from meterreader.models import AppConfig

logger = logging.getLogger(__name__)

_DEFAULT_PATH = Path.home() / ".meterreader" / "config.toml"


class ConfigManager:
    """AppConfig를 TOML 파일로 로드/저장하는 관리자."""

    def __init__(self, default_path: Path | None = None) -> None:
        self.default_path = default_path or _DEFAULT_PATH

    # ── 로드 ──────────────────────────────────────────────

    def load(self, path: Path | None = None) -> AppConfig:
        """TOML 파일에서 설정을 로드한다. 파일이 없으면 기본값을 반환."""
        target = path or self.default_path
        if not target.exists():
            return AppConfig()

        with open(target, "rb") as f:
            data = tomllib.load(f)

        defaults = AppConfig()

        output_dir_raw = data.get("output_dir")
        output_dir = Path(output_dir_raw).expanduser() if output_dir_raw else defaults.output_dir

        # 권한은 키가 없으면 아직 묻지 않은 상태
        permission = data.get("camera_permission")

        return AppConfig(
            camera_index=int(data.get("camera_index", defaults.camera_index)),
            preview_fps=int(data.get("preview_fps", defaults.preview_fps)),
            ocr_engine=str(data.get("ocr_engine", defaults.ocr_engine)),
            easyocr_gpu=bool(data.get("easyocr_gpu", defaults.easyocr_gpu)),
            output_dir=output_dir,
            camera_permission=bool(permission) if permission is not None else None,
        )

    # ── 저장 ──────────────────────────────────────────────

    def save(self, config: AppConfig, path: Path | None = None) -> None:
        """AppConfig를 TOML 문자열로 직렬화하여 저장한다."""
        target = path or self.default_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self._serialize(config), encoding="utf-8")
        logger.debug("설정 저장: %s", target)

    # ── 직렬화 ────────────────────────────────────────────

    @staticmethod
    def _escape_toml_str(value: str) -> str:
        """TOML 문자열 값을 이스케이프한다."""
        return value.replace("\\", "\\\\").replace('"', '\\"')

    @staticmethod
    def _serialize(config: AppConfig) -> str:
        """AppConfig를 TOML 문자열로 변환한다 (외부 의존성 없음)."""
        _esc = ConfigManager._escape_toml_str
        lines: list[str] = []

        lines.append(f"camera_index = {config.camera_index}")
        lines.append(f"preview_fps = {config.preview_fps}")
        lines.append(f'ocr_engine = "{_esc(config.ocr_engine)}"')
        lines.append(f"easyocr_gpu = {'true' if config.easyocr_gpu else 'false'}")
        lines.append(f'output_dir = "{_esc(str(config.output_dir))}"')
        if config.camera_permission is not None:
            lines.append(
                f"camera_permission = {'true' if config.camera_permission else 'false'}"
            )

        lines.append("")  # trailing newline
        return "\n".join(lines)
