"""
Settings 모듈

명령줄 옵션, 환경변수(.env), 설정 파일, 기본값 순서로 실행 설정값을 결정합니다.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .config_manager import (
    DEFAULT_LINES,
    DEFAULT_MAX_LINES,
    Configuration,
    read_env_int,
)

logger = logging.getLogger(__name__)

ENV_LINES = "FLOW_LINES"
ENV_MAX_LINES = "FLOW_MAX"
ENV_LOG_DIR = "FLOW_LOG_DIR"


@dataclass
class Settings:
    """
    실행 설정값

    Attributes:
        lines: 처음 출력할 마지막 줄 수
        max_lines: 메모리에 유지할 최대 줄 수
        config_path: 사용된 설정 파일 경로 (기본 설정이면 None)
    """

    lines: int
    max_lines: int
    config_path: Optional[Path] = None


def load_env_file(env_file: Path = Path(".env")) -> bool:
    """
    .env 파일이 있으면 환경변수로 로드합니다. 이미 설정된 환경변수는 덮어쓰지 않습니다.

    Returns:
        bool: 파일을 로드했는지 여부
    """
    if not env_file.is_file():
        return False
    load_dotenv(env_file, override=False)
    logger.debug(f".env 파일 로드: {env_file}")
    return True


def resolve_settings(
    config: Configuration,
    cli_lines: Optional[int] = None,
    cli_max_lines: Optional[int] = None,
    config_path: Optional[Path] = None,
) -> Settings:
    """
    우선순위에 따라 lines / max_lines 값을 결정합니다.

    Args:
        config: 로드된 설정 객체
        cli_lines: --lines 값 (지정하지 않았으면 None)
        cli_max_lines: --max 값 (지정하지 않았으면 None)
        config_path: 설정 파일 경로

    Returns:
        Settings: 결정된 설정값

    Raises:
        ConfigurationError: 환경변수 값이 올바르지 않을 때
    """
    lines = _first_defined(
        cli_lines, read_env_int(ENV_LINES, 0), config.lines, DEFAULT_LINES
    )
    max_lines = _first_defined(
        cli_max_lines,
        read_env_int(ENV_MAX_LINES, 1),
        config.max_lines,
        DEFAULT_MAX_LINES,
    )

    if lines > max_lines:
        logger.warning(
            f"출력할 줄 수({lines})가 최대 줄 수({max_lines})보다 많아 {max_lines}로 조정합니다"
        )
        lines = max_lines

    return Settings(lines=lines, max_lines=max_lines, config_path=config_path)


def _first_defined(*values: Optional[int]) -> int:
    for value in values:
        if value is not None:
            return value
    raise ValueError("기본값이 필요합니다")
