"""설정 파일 기반 카메라 권한 저장소."""

from __future__ import annotations

import logging

from meterreader.config import ConfigManager
from meterreader.models import AppConfig

logger = logging.getLogger(__name__)


class ConfigPermissionGate:
    """카메라 사용 동의 여부를 AppConfig에 저장한다.

    PermissionGate Protocol 구현. 저장에 실패해도 메모리의 동의 값은 유지된다.
    """

    def __init__(self, config: AppConfig, config_manager: ConfigManager | None = None) -> None:
        self._config = config
        self._config_manager = config_manager

    def is_granted(self) -> bool | None:
        return self._config.camera_permission

    def record(self, granted: bool) -> None:
        self._config.camera_permission = granted
        logger.info("카메라 권한 %s", "허용" if granted else "거부")
        if self._config_manager is None:
            return
        try:
            self._config_manager.save(self._config)
        except OSError:
            logger.error("카메라 권한 저장 실패", exc_info=True)
