import io
import logging

import pytest

from concord.app import ChatApp
from concord.config import Settings, load_settings
from concord.logging_config import LOGGER_NAME, setup_logging


def test_load_settings_defaults(monkeypatch):
    for name in (
        "CONCORD_MIN_PASSWORD_LENGTH",
        "CONCORD_INVITE_CODE_LENGTH",
        "CONCORD_TEXT_MAX_LENGTH",
        "CONCORD_VOICE_CAPACITY",
        "CONCORD_SEED_DEMO",
        "CONCORD_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    assert load_settings() == Settings()


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("CONCORD_MIN_PASSWORD_LENGTH", "6")
    monkeypatch.setenv("CONCORD_TEXT_MAX_LENGTH", "500")
    monkeypatch.setenv("CONCORD_VOICE_CAPACITY", "10")
    monkeypatch.setenv("CONCORD_SEED_DEMO", "yes")
    monkeypatch.setenv("CONCORD_LOG_LEVEL", "debug")
    s = load_settings()
    assert s.min_password_length == 6
    assert s.text_max_length == 500
    assert s.voice_capacity == 10
    assert s.seed_demo is True
    assert s.log_level == "DEBUG"


def test_load_settings_ignores_bad_values(monkeypatch):
    monkeypatch.setenv("CONCORD_INVITE_CODE_LENGTH", "eight")
    monkeypatch.setenv("CONCORD_VOICE_CAPACITY", "-3")
    monkeypatch.setenv("CONCORD_SEED_DEMO", "nope")
    monkeypatch.setenv("CONCORD_LOG_LEVEL", "LOUD")
    s = load_settings()
    assert s.invite_code_length == 8
    assert s.voice_capacity == 99
    assert s.seed_demo is False
    assert s.log_level == "INFO"


@pytest.fixture
def concord_logger():
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_setup_logging_idempotent(concord_logger):
    logger1 = setup_logging(logging.DEBUG)
    logger2 = setup_logging(logging.DEBUG)
    assert logger1 is logger2 is concord_logger
    assert len(logger1.handlers) == 1


def test_setup_logging_applies_new_level(concord_logger):
    stream = io.StringIO()
    concord_logger.handlers.clear()
    setup_logging("INFO", stream=stream)
    setup_logging("WARNING")
    assert concord_logger.level == logging.WARNING
    assert len(concord_logger.handlers) == 1
    concord_logger.info("hidden")
    concord_logger.warning("shown")
    assert stream.getvalue().count("\n") == 1
    assert "WARNING concord: shown" in stream.getvalue()


def test_chat_app_leaves_handlers_alone(concord_logger):
    before = list(concord_logger.handlers)
    app = ChatApp(Settings(log_level="DEBUG"))
    assert concord_logger.handlers == before
    assert app.log is concord_logger


def test_from_env_drives_log_level(monkeypatch, concord_logger):
    monkeypatch.setenv("CONCORD_LOG_LEVEL", "warning")
    app = ChatApp.from_env()
    assert app.settings.log_level == "WARNING"
    assert app.log is concord_logger
    assert concord_logger.level == logging.WARNING
    assert concord_logger.handlers
