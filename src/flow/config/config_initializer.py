"""
Config Initializer 유틸리티

flow --init=<path> 명령으로 시작용 .flow 설정 파일을 생성하는 유틸리티 모듈입니다.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from .config_manager import (
    CONFIG_FILE_NAME,
    DEFAULT_LINES,
    DEFAULT_MAX_LINES,
    Configuration,
    ConfigurationError,
)

logger = logging.getLogger(__name__)


class ConfigInitializer:
    """
    설정 파일 생성 클래스

    예제 필터가 포함된 설정 파일을 생성합니다. 기존 파일은 덮어쓰지 않습니다.
    """

    # 생성되는 설정 파일의 예제 필터
    TEMPLATE: Dict[str, Any] = {
        "lines": DEFAULT_LINES,
        "max_lines": DEFAULT_MAX_LINES,
        "highlight_ignore_case": True,
        "filters": [
            {"name": "All"},
            {"name": "Errors", "regex": r"\b(ERROR|FATAL|CRITICAL)\b"},
            {"name": "Warnings", "contains": "WARN"},
            {
                "name": "Exceptions",
                "contains": "Exception",
                "start": {"regex": r"^\d{4}-\d{2}-\d{2}"},
            },
            {
                "name": "Failed requests",
                "regex": r"\b5\d\d\b",
                "start": {"contains": "Started"},
                "end": {"contains": "Completed"},
            },
        ],
    }

    def __init__(self, target_path: Union[str, Path]):
        """
        ConfigInitializer 초기화

        Args:
            target_path: 생성할 파일 경로 (디렉터리이면 그 안의 .flow 파일)
        """
        path = Path(target_path).expanduser()
        if path.is_dir():
            path = path / CONFIG_FILE_NAME
        self.config_file_path = path

    def build(self) -> Dict[str, Any]:
        """
        설정 데이터를 생성합니다.

        Returns:
            Dict[str, Any]: 검증된 설정 데이터
        """
        # 템플릿 자체가 스키마를 통과하는지 확인
        Configuration(**self.TEMPLATE)
        return json.loads(json.dumps(self.TEMPLATE))

    def write(self, force: bool = False) -> Path:
        """
        설정 파일을 기록합니다.

        Args:
            force: True인 경우 기존 파일을 덮어씀 (기본값: False)

        Returns:
            Path: 기록된 파일 경로

        Raises:
            ConfigurationError: 파일이 이미 있거나 기록에 실패한 경우
        """
        path = self.config_file_path
        if path.exists() and not force:
            raise ConfigurationError(f"설정 파일이 이미 존재합니다: {path}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.build(), f, ensure_ascii=False, indent=2)
                f.write("\n")
        except OSError as e:
            raise ConfigurationError(f"설정 파일을 쓰는 중 오류가 발생했습니다: {e}")

        logger.info(f"설정 파일 생성 완료: {path}")
        return path


def initialize_config(target_path: Union[str, Path], force: bool = False) -> Path:
    """
    시작용 설정 파일을 생성하는 편의 함수

    Args:
        target_path: 생성할 파일 또는 디렉터리 경로
        force: 기존 파일 덮어쓰기 여부

    Returns:
        Path: 기록된 파일 경로
    """
    return ConfigInitializer(target_path).write(force=force)
