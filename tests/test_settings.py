"""
Settings 테스트

lines / max_lines 값의 우선순위(명령줄 > 환경변수 > 설정 파일 > 기본값)를 검증합니다.
"""

import os

import pytest

from flow.config.config_manager import Configuration, ConfigurationError
from flow.config.settings import load_env_file, resolve_settings


def test_defaults():
    settings = resolve_settings(Configuration())

    assert settings.lines == 10
    assert settings.max_lines == 3000


def test_config_values():
    settings = resolve_settings(Configuration(lines=5, max_lines=100))

    assert settings.lines == 5
    assert settings.max_lines == 100


def test_env_overrides_config(monkeypatch):
    monkeypatch.setenv("FLOW_LINES", "7")
    monkeypatch.setenv("FLOW_MAX", "70")

    settings = resolve_settings(Configuration(lines=5, max_lines=100))

    assert settings.lines == 7
    assert settings.max_lines == 70


def test_cli_overrides_env(monkeypatch):
    monkeypatch.setenv("FLOW_LINES", "7")

    settings = resolve_settings(Configuration(), cli_lines=3, cli_max_lines=30)

    assert settings.lines == 3
    assert settings.max_lines == 30


def test_cli_zero_lines_is_respected():
    settings = resolve_settings(Configuration(lines=5), cli_lines=0)

    assert settings.lines == 0


def test_lines_clamped_to_max():
    """출력 줄 수가 최대 줄 수보다 많으면 최대 줄 수로 조정"""
    settings = resolve_settings(Configuration(), cli_lines=50, cli_max_lines=20)

    assert settings.lines == 20
    assert settings.max_lines == 20


def test_invalid_env_value(monkeypatch):
    monkeypatch.setenv("FLOW_MAX", "lots")

    with pytest.raises(ConfigurationError, match="정수가 아닙니다"):
        resolve_settings(Configuration())


def test_env_value_below_minimum(monkeypatch):
    monkeypatch.setenv("FLOW_MAX", "0")

    with pytest.raises(ConfigurationError, match="1 이상이어야 합니다"):
        resolve_settings(Configuration())


def test_load_env_file(tmp_path, monkeypatch):
    """.env 파일의 값을 환경변수로 로드"""
    # 테스트 후 환경변수가 남지 않도록 monkeypatch에 원래 상태를 기록
    monkeypatch.setenv("FLOW_MAX", "placeholder")
    monkeypatch.delenv("FLOW_MAX")
    env_file = tmp_path / ".env"
    env_file.write_text("FLOW_MAX=42\n", encoding="utf-8")

    assert load_env_file(env_file) is True
    assert os.environ["FLOW_MAX"] == "42"
    assert resolve_settings(Configuration()).max_lines == 42


def test_load_env_file_missing(tmp_path):
    assert load_env_file(tmp_path / ".env") is False
