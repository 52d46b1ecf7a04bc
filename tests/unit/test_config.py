# pylint: disable=missing-module-docstring,missing-function-docstring
import pytest

from config import AppConfig
from constants import SPEECH_LANG_DEFAULT
from orchestrator.enums.page_context import PageContext


_VARS = (
    "ENV", "LOG_LEVEL", "ENABLE_JSON_LOGS", "HOST", "PORT", "CORS_ORIGINS",
    "SPEECH_LANG", "VOICE_AUTO_START", "DEFAULT_PAGE", "STORE_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = AppConfig.load_from_env()

    assert config.env == "dev"
    assert config.log_level == "INFO"
    assert config.enable_json_logs is True
    assert config.port == 8000
    assert config.cors_origins == ("*",)
    assert config.speech_lang == SPEECH_LANG_DEFAULT
    assert config.auto_start_voice is True
    assert config.default_page is PageContext.LOGIN
    assert config.store_path is None


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, ,http://b.test")
    monkeypatch.setenv("VOICE_AUTO_START", "off")
    monkeypatch.setenv("DEFAULT_PAGE", "voting")
    monkeypatch.setenv("STORE_PATH", "/tmp/votes.json")

    config = AppConfig.load_from_env()

    assert config.log_level == "DEBUG"
    assert config.port == 9001
    assert config.cors_origins == ("http://a.test", "http://b.test")
    assert config.auto_start_voice is False
    assert config.default_page is PageContext.VOTING
    assert config.store_path == "/tmp/votes.json"


def test_invalid_default_page_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_PAGE", "results")
    with pytest.raises(ValueError):
        AppConfig.load_from_env()


def test_invalid_port_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError):
        AppConfig.load_from_env()
