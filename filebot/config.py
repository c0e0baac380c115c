"""
Central configuration for filebot.
Uses Pydantic BaseSettings for type-safe configuration from environment variables.
"""

import os
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to this file (filebot/config.py → project root)
_ENV_FILE = Path(__file__).parent.parent / ".env"


def _load_env_file() -> None:
    """
    Load .env into os.environ, but only for keys that are currently unset
    or set to empty strings. This ensures .env values win over blank shell
    env vars (e.g. TELEGRAM_BOT_TOKEN='') while still allowing explicit
    non-empty shell overrides.
    """
    if not _ENV_FILE.exists():
        return
    from dotenv import dotenv_values
    for key, value in dotenv_values(_ENV_FILE).items():
        if value and not os.environ.get(key):
            os.environ[key] = value


# Run at import time so Settings() sees the correct values
_load_env_file()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Telegram
    telegram_bot_token: str
    # The single privileged sender; compared against the inbound sender id
    owner_id: str

    # Web server
    port: int = 3000
    base_url: str = ""  # empty → http://localhost:<port>

    # Environment
    data_dir: str = "./data"
    uploads_dir: str = "uploads"
    temp_dir: str = ""  # empty → <data_dir>/temp
    allowed_groups_file: str = ""  # empty → <data_dir>/allowed-groups.json

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # ── Timeouts (seconds) ──────────────────────────────────────────────────────
    telegram_timeout: float = 30.0
    download_timeout: float = 120.0
    session_check_interval: float = 60.0  # getMe watchdog period

    @field_validator("owner_id", mode="before")
    @classmethod
    def strip_owner_id(cls, v):
        return str(v).strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def configure_paths(self) -> "Settings":
        if not self.temp_dir:
            self.temp_dir = os.path.join(self.data_dir, "temp")
        if not self.allowed_groups_file:
            self.allowed_groups_file = os.path.join(self.data_dir, "allowed-groups.json")
        return self

    @property
    def public_base_url(self) -> str:
        """Base URL used when minting direct download links."""
        return self.base_url or f"http://localhost:{self.port}"

    @property
    def logs_dir(self) -> str:
        return os.path.join(self.data_dir, "logs")


def get_settings() -> "Settings":
    """Return the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


_settings: Settings | None = None


class _SettingsProxy:
    """Lazy proxy so `from filebot.config import settings` works without eager init."""
    def __getattr__(self, name):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
