"""
Configuration Manager 단위 테스트

다음 시나리오를 검증합니다:
1. 유효한 설정 파일 로드 성공
2. 필수 필드 누락/잘못된 값 시 예외 발생
3. 잘못된 JSON 형식 처리
4. 기본값 적용
5. 파일 없음 예외 처리
6. 설정 파일 탐색 순서 (--config, 현재 디렉터리, 홈)
"""

import json
import tempfile
from pathlib import Path

import pytest

from flow.config.config_manager import (
    CONFIG_FILE_NAME,
    Configuration,
    ConfigurationError,
    default_config,
    get_config,
    load_config,
    resolve_config_path,
)


@pytest.fixture
def valid_config_data():
    """유효한 설정 데이터를 반환하는 픽스처"""
    return {
        "lines": 20,
        "max_lines": 500,
        "filters": [
            {"name": "All"},
            {"name": "Errors", "contains": "ERROR"},
            {
                "name": "Stack traces",
                "regex": "Exception$",
                "ignore_case": True,
                "start": {"regex": "^\\d{4}-"},
            },
        ],
    }


@pytest.fixture
def temp_config_file(valid_config_data):
    """임시 설정 파일을 생성하는 픽스처"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(valid_config_data, f, ensure_ascii=False, indent=2)
        temp_path = f.name

    yield temp_path

    # 테스트 후 파일 삭제
    Path(temp_path).unlink(missing_ok=True)


def write_config(tmp_path: Path, data) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_valid_config(temp_config_file):
    """유효한 설정 파일 로드 성공 테스트"""
    config = load_config(temp_config_file)

    assert config.get_filter_names() == ["All", "Errors", "Stack traces"]
    assert config.lines == 20
    assert config.max_lines == 500
    assert config.get_filter("Errors").contains == "ERROR"
    assert config.get_filter("Stack traces").start.regex == "^\\d{4}-"
    assert config.get_filter("Stack traces").ignore_case is True
    assert config.get_filter("Missing") is None


def test_get_config_returns_loaded_config(temp_config_file):
    config = load_config(temp_config_file)

    assert get_config() is config


def test_default_config():
    """기본 설정은 All 필터 하나"""
    config = default_config()

    assert config.get_filter_names() == ["All"]
    assert config.lines is None
    assert config.max_lines is None
    assert config.highlight_ignore_case is True


def test_missing_filter_name(tmp_path):
    """필수 필드 누락 시 예외 발생 테스트"""
    path = write_config(tmp_path, {"filters": [{"contains": "x"}]})

    with pytest.raises(ConfigurationError, match="설정 파일 검증 실패") as exc_info:
        load_config(path)
    assert "필수 항목이 누락되었습니다" in str(exc_info.value)
    assert "filters -> 0 -> name" in str(exc_info.value)


def test_invalid_regex(tmp_path):
    path = write_config(tmp_path, {"filters": [{"name": "Bad", "regex": "(unclosed"}]})

    with pytest.raises(ConfigurationError, match="설정 파일 검증 실패") as exc_info:
        load_config(path)
    assert "정규식이 올바르지 않습니다" in str(exc_info.value)


def test_end_without_start(tmp_path):
    path = write_config(
        tmp_path, {"filters": [{"name": "Block", "end": {"contains": "done"}}]}
    )

    with pytest.raises(ConfigurationError, match="start 조건과 함께"):
        load_config(path)


def test_duplicate_filter_names(tmp_path):
    path = write_config(tmp_path, {"filters": [{"name": "A"}, {"name": "A"}]})

    with pytest.raises(ConfigurationError, match="필터 이름이 중복되었습니다"):
        load_config(path)


def test_empty_filter_list(tmp_path):
    path = write_config(tmp_path, {"filters": []})

    with pytest.raises(ConfigurationError, match="설정 파일 검증 실패"):
        load_config(path)


def test_unknown_field(tmp_path):
    """오타가 있는 항목은 거부"""
    path = write_config(tmp_path, {"filters": [{"name": "A", "contain": "x"}]})

    with pytest.raises(ConfigurationError, match="알 수 없는 항목입니다"):
        load_config(path)


def test_negative_lines(tmp_path):
    path = write_config(tmp_path, {"lines": -1})

    with pytest.raises(ConfigurationError, match="필드: lines"):
        load_config(path)


def test_invalid_json_format(tmp_path):
    """잘못된 JSON 형식 처리 테스트"""
    path = tmp_path / "config.json"
    path.write_text("{ invalid json }", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="JSON 형식이 올바르지 않습니다"):
        load_config(path)


def test_invalid_encoding(tmp_path):
    """UTF-8이 아닌 설정 파일 처리 테스트"""
    path = tmp_path / ".flow"
    path.write_bytes(b'{"filters": [{"name": "\xff"}]}')

    with pytest.raises(ConfigurationError, match="인코딩이 올바르지 않습니다"):
        load_config(path)


def test_top_level_must_be_object(tmp_path):
    path = write_config(tmp_path, [{"name": "All"}])

    with pytest.raises(ConfigurationError, match="JSON 객체여야 합니다"):
        load_config(path)


def test_file_not_found():
    """파일 없음 예외 처리 테스트"""
    with pytest.raises(ConfigurationError, match="설정 파일을 찾을 수 없습니다"):
        load_config("/nonexistent/path/.flow")


def test_resolve_explicit_path(tmp_path):
    path = write_config(tmp_path, {})

    assert resolve_config_path(str(path)) == path


def test_resolve_explicit_path_missing(tmp_path):
    with pytest.raises(ConfigurationError, match="설정 파일을 찾을 수 없습니다"):
        resolve_config_path(tmp_path / "missing.json")


def test_resolve_prefers_current_directory(tmp_path):
    """현재 디렉터리의 .flow가 홈 디렉터리보다 우선"""
    cwd = tmp_path / "work"
    home = tmp_path / "home"
    cwd.mkdir()
    home.mkdir()
    (cwd / CONFIG_FILE_NAME).write_text("{}", encoding="utf-8")
    (home / CONFIG_FILE_NAME).write_text("{}", encoding="utf-8")

    assert resolve_config_path(cwd=cwd, home=home) == cwd / CONFIG_FILE_NAME


def test_resolve_falls_back_to_home(tmp_path):
    cwd = tmp_path / "work"
    home = tmp_path / "home"
    cwd.mkdir()
    home.mkdir()
    (home / CONFIG_FILE_NAME).write_text("{}", encoding="utf-8")

    assert resolve_config_path(cwd=cwd, home=home) == home / CONFIG_FILE_NAME


def test_resolve_returns_none_when_not_found(tmp_path):
    assert resolve_config_path(cwd=tmp_path, home=tmp_path) is None


def test_configuration_model_defaults():
    config = Configuration(filters=[{"name": "Only"}])

    assert config.get_filter("Only").is_empty()
    assert config.get_filter("Only").start is None
