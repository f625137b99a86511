"""
Configuration Manager 모듈

JSON 설정 파일(.flow)을 탐색, 로드하고 검증하는 Configuration Manager를 구현합니다.
화면 하단 메뉴에 표시될 필터 목록과 줄 수 기본값을 파싱하고 스키마 검증을 수행합니다.
"""

import json
import os
import re
from pathlib import Path
from typing import List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

CONFIG_FILE_NAME = ".flow"

DEFAULT_LINES = 10
DEFAULT_MAX_LINES = 3000


class ConfigurationError(Exception):
    """설정 관련 에러를 나타내는 사용자 정의 예외 클래스"""

    pass


class Condition(BaseModel):
    """
    한 줄에 대한 매칭 조건

    지정된 항목은 모두 만족해야 하며(AND), 아무 항목도 없으면 모든 줄과 매칭됩니다.
    """

    model_config = ConfigDict(extra="forbid")

    contains: Optional[str] = Field(None, description="포함해야 하는 문자열")
    starts_with: Optional[str] = Field(None, description="줄의 시작 문자열")
    ends_with: Optional[str] = Field(None, description="줄의 끝 문자열")
    regex: Optional[str] = Field(None, description="정규식 (re.search)")
    ignore_case: bool = Field(False, description="대소문자 무시 여부")

    @field_validator("regex")
    @classmethod
    def _check_regex(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"정규식이 올바르지 않습니다: {e}")
        return value

    def is_empty(self) -> bool:
        """조건 항목이 하나도 없는지 여부"""
        return (
            self.contains is None
            and self.starts_with is None
            and self.ends_with is None
            and self.regex is None
        )


class Filter(Condition):
    """
    메뉴에 표시되는 필터

    start가 지정되면 start 줄부터 시작하는 여러 줄을 하나의 항목(entry)으로 묶고,
    end가 지정되면 end 줄까지만 묶습니다.
    """

    name: str = Field(..., min_length=1, description="메뉴에 표시될 필터 이름")
    start: Optional[Condition] = Field(None, description="여러 줄 항목의 시작 조건")
    end: Optional[Condition] = Field(None, description="여러 줄 항목의 종료 조건")

    @model_validator(mode="after")
    def _check_boundaries(self) -> "Filter":
        if self.end is not None and self.start is None:
            raise ValueError("end 조건은 start 조건과 함께 지정해야 합니다")
        return self


class Configuration(BaseModel):
    model_config = ConfigDict(extra="forbid")

    filters: List[Filter] = Field(
        default_factory=lambda: [Filter(name="All")],
        min_length=1,
        description="메뉴에 표시될 필터 목록",
    )
    lines: Optional[int] = Field(None, ge=0, description="처음 출력할 마지막 줄 수")
    max_lines: Optional[int] = Field(
        None, ge=1, description="메모리에 유지할 최대 줄 수"
    )
    highlight_ignore_case: bool = Field(
        True, description="검색 시 대소문자 무시 여부"
    )

    @field_validator("filters")
    @classmethod
    def _check_unique_names(cls, filters: List[Filter]) -> List[Filter]:
        seen = set()
        for item in filters:
            if item.name in seen:
                raise ValueError(f"필터 이름이 중복되었습니다: {item.name}")
            seen.add(item.name)
        return filters

    def get_filter_names(self) -> List[str]:
        """
        메뉴에 표시할 필터 이름 목록을 반환합니다.

        Returns:
            List[str]: 필터 이름 목록
        """
        return [item.name for item in self.filters]

    def get_filter(self, name: str) -> Optional[Filter]:
        """
        이름으로 필터를 찾습니다.

        Args:
            name: 필터 이름

        Returns:
            Optional[Filter]: 필터 (없으면 None)
        """
        for item in self.filters:
            if item.name == name:
                return item
        return None


# 전역 설정 인스턴스
_config: Optional[Configuration] = None


def default_config() -> Configuration:
    """설정 파일이 없을 때 사용하는 기본 설정"""
    return Configuration()


def resolve_config_path(
    explicit_path: Optional[Union[str, Path]] = None,
    cwd: Optional[Path] = None,
    home: Optional[Path] = None,
) -> Optional[Path]:
    """
    사용할 설정 파일 경로를 결정합니다.

    명시적 경로가 없으면 현재 디렉터리, 사용자 홈 디렉터리 순서로 .flow 파일을 찾습니다.

    Args:
        explicit_path: --config 로 지정된 경로
        cwd: 현재 디렉터리 (테스트용, 기본값: Path.cwd())
        home: 사용자 홈 디렉터리 (테스트용, 기본값: Path.home())

    Returns:
        Optional[Path]: 설정 파일 경로 (찾지 못하면 None)

    Raises:
        ConfigurationError: 명시적 경로의 파일이 없을 때
    """
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"설정 파일을 찾을 수 없습니다: {path}")
        return path

    for directory in (cwd or Path.cwd(), home or Path.home()):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate

    return None


def load_config(config_file_path: Union[str, Path]) -> Configuration:
    """
    설정 파일을 로드하고 전역 설정 인스턴스를 설정합니다.

    Args:
        config_file_path: 설정 파일 경로

    Returns:
        Configuration: 로드된 설정 객체

    Raises:
        ConfigurationError: 설정 로드 실패 시
    """
    global _config

    path = Path(config_file_path)
    if not path.exists():
        raise ConfigurationError(f"설정 파일을 찾을 수 없습니다: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            config_data = json.load(f)

        if not isinstance(config_data, dict):
            raise ConfigurationError(
                f"설정 파일의 최상위 값은 JSON 객체여야 합니다: {path}"
            )

        _config = Configuration(**config_data)
        return _config
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"설정 파일의 JSON 형식이 올바르지 않습니다: {e}")
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"설정 파일의 인코딩이 올바르지 않습니다: {e}")
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = " -> ".join(map(str, error["loc"])) or "(root)"
            msg = error["msg"]
            if error["type"] == "missing":
                msg = "필수 항목이 누락되었습니다"
            elif error["type"] == "extra_forbidden":
                msg = "알 수 없는 항목입니다"

            error_messages.append(f"  - 필드: {loc}, 원인: {msg}")

        formatted_error = "\n".join(error_messages)
        raise ConfigurationError(f"설정 파일 검증 실패:\n{formatted_error}")
    except OSError as e:
        raise ConfigurationError(f"설정 파일을 읽는 중 오류가 발생했습니다: {e}")


def set_config(config: Configuration) -> Configuration:
    """파일 없이 만든 설정 객체를 전역 설정으로 등록합니다."""
    global _config
    _config = config
    return _config


def get_config() -> Configuration:
    """
    로드된 전역 설정 객체를 반환합니다.

    Returns:
        Configuration: 설정 객체

    Raises:
        ConfigurationError: 설정이 로드되지 않은 경우
    """
    if _config is None:
        raise ConfigurationError(
            "설정이 아직 로드되지 않았습니다. load_config()를 먼저 호출하세요."
        )
    return _config


def read_env_int(name: str, minimum: int) -> Optional[int]:
    """
    환경변수에서 정수 설정값을 읽습니다.

    Args:
        name: 환경변수 이름
        minimum: 허용되는 최솟값

    Returns:
        Optional[int]: 설정값 (환경변수가 없으면 None)

    Raises:
        ConfigurationError: 정수가 아니거나 최솟값보다 작을 때
    """
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None

    try:
        number = int(value.strip())
    except ValueError:
        raise ConfigurationError(f"환경변수 {name}의 값이 정수가 아닙니다: {value}")

    if number < minimum:
        raise ConfigurationError(
            f"환경변수 {name}의 값은 {minimum} 이상이어야 합니다: {number}"
        )
    return number
