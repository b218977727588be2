"""Shared test fixtures for the tutor relay."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.config import Settings
from src.models import InboundUpdate

BOT_TOKEN = "123:ABC"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def audit_log_path(tmp_path: Path) -> Path:
    return tmp_path / "audit" / "dispatch.jsonl"


# --- Factory functions for test data ---


def make_settings(**kwargs: Any) -> Settings:
    """Factory for Settings with sensible defaults."""
    defaults: dict[str, Any] = {
        "telegram_bot_token": BOT_TOKEN,
        "webhook_url": "https://relay.example.com",
        "groq_api_key": "gsk_test",
    }
    defaults.update(kwargs)
    return Settings(**defaults)


def make_update(**kwargs: Any) -> InboundUpdate:
    """Factory for InboundUpdate with sensible defaults."""
    defaults: dict[str, Any] = {
        "update_id": 1,
        "chat_id": 12345,
        "message_id": 7,
        "text": "I goed to school yesterday",
    }
    defaults.update(kwargs)
    return InboundUpdate(**defaults)


def make_telegram_update(
    update_id: int = 1,
    text: str | None = "hello",
    chat_id: int = 12345,
    message_id: int = 7,
) -> dict[str, Any]:
    """Raw Bot API update payload as Telegram POSTs it."""
    message: dict[str, Any] = {
        "message_id": message_id,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": chat_id, "is_bot": False, "first_name": "Learner"},
        "date": 1_700_000_000,
    }
    if text is not None:
        message["text"] = text
    return {"update_id": update_id, "message": message}


def make_completion_body(content: str = "Hello!") -> dict[str, Any]:
    """Groq chat-completions response body with a single candidate."""
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": "llama-3.3-70b-versatile",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 80, "completion_tokens": 12, "total_tokens": 92},
    }


def mock_async_client(mock_client_cls: MagicMock, **post_kwargs: Any) -> AsyncMock:
    """Wire a patched ``httpx.AsyncClient`` class to return an async-context client.

    ``post_kwargs`` are applied to the client's ``post`` mock
    (``return_value``, ``side_effect``).
    """
    mock_client = AsyncMock()
    for name, value in post_kwargs.items():
        setattr(mock_client.post, name, value)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client
