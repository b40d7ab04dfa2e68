import logging
import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    min_password_length: int = 3  # placeholder policy, not a strength check
    invite_code_length: int = 8
    text_max_length: int = 2000
    voice_capacity: int = 99
    # Display caps only; search and delete always see the full history.
    text_history_limit: int = 20
    voice_history_limit: int = 10
    seed_demo: bool = False
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _level_env(name: str, default: str) -> str:
    raw = os.getenv(name, "").strip().upper()
    # getLevelName maps known names to their numeric level
    return raw if raw and isinstance(logging.getLevelName(raw), int) else default


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        min_password_length=_int_env(
            "CONCORD_MIN_PASSWORD_LENGTH", defaults.min_password_length
        ),
        invite_code_length=_int_env(
            "CONCORD_INVITE_CODE_LENGTH", defaults.invite_code_length
        ),
        text_max_length=_int_env("CONCORD_TEXT_MAX_LENGTH", defaults.text_max_length),
        voice_capacity=_int_env("CONCORD_VOICE_CAPACITY", defaults.voice_capacity),
        seed_demo=os.getenv("CONCORD_SEED_DEMO", "").strip().lower() in _TRUTHY,
        log_level=_level_env("CONCORD_LOG_LEVEL", defaults.log_level),
    )
