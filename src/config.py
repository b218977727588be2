"""Process configuration, read once from the environment at startup."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"


class ConfigError(Exception):
    """Raised when required startup configuration is missing."""


class Settings(BaseModel):
    """Immutable runtime configuration shared by the completion client and dispatcher."""

    model_config = ConfigDict(frozen=True)

    telegram_bot_token: str
    webhook_url: str
    groq_api_key: str | None = None
    audit_log_path: str | None = None
    audit_log_max_bytes: int = 10_485_760
    audit_log_backup_count: int = 5

    @property
    def webhook_endpoint(self) -> str:
        """Externally reachable URL Telegram should POST updates to."""
        return f"{self.webhook_url.rstrip('/')}/"

    @classmethod
    def from_env(cls, env_file: str | None = DEFAULT_ENV_FILE) -> Settings:
        """Build settings from environment variables.

        Values from ``env_file`` are merged in without overriding variables
        that are already set. A missing file is tolerated.
        """
        if env_file is not None:
            path = Path(env_file)
            if path.is_file():
                load_dotenv(path)
            else:
                logger.warning("%s not found, using process environment only", env_file)

        bot_token = os.environ.get("TELEGRAM_BOT_TOKEN", "")
        if not bot_token:
            raise ConfigError("TELEGRAM_BOT_TOKEN is not set")

        webhook_url = os.environ.get("WEBHOOK_URL", "")
        if not webhook_url:
            raise ConfigError(
                "WEBHOOK_URL is not set (for example: https://123456.ngrok-free.app)"
            )

        return cls(
            telegram_bot_token=bot_token,
            webhook_url=webhook_url,
            groq_api_key=os.environ.get("GROQ_API_KEY") or None,
            audit_log_path=os.environ.get("AUDIT_LOG_PATH") or None,
            audit_log_max_bytes=_int_env("AUDIT_LOG_MAX_BYTES", 10_485_760),
            audit_log_backup_count=_int_env("AUDIT_LOG_BACKUP_COUNT", 5),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
