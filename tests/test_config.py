from __future__ import annotations

import pytest

from cmdexec.config import Config


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("CMDEXEC_API_KEY", "CMDEXEC_WORK_PATH", "CMDEXEC_LOG_LEVEL", "PORT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = Config.load()
    assert config.api_key == ""
    assert config.work_path == "/tmp/cmdexec"
    assert config.log_level == "INFO"
    assert config.port == 8080


def test_overrides(clean_env):
    clean_env.setenv("CMDEXEC_API_KEY", "secret")
    clean_env.setenv("CMDEXEC_WORK_PATH", "/srv/cmdexec")
    clean_env.setenv("CMDEXEC_LOG_LEVEL", "debug")
    clean_env.setenv("PORT", "9000")
    config = Config.from_env()
    assert config.api_key == "secret"
    assert config.work_path == "/srv/cmdexec"
    assert config.log_level == "DEBUG"
    assert config.port == 9000


def test_invalid_log_level(clean_env):
    clean_env.setenv("CMDEXEC_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError, match="CMDEXEC_LOG_LEVEL"):
        Config.load()


def test_invalid_port(clean_env):
    clean_env.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT"):
        Config.load()
