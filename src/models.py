"""Shared Pydantic data models for the tutor relay."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class DispatchEventType(str, Enum):
    REPLY_SENT = "reply_sent"
    FALLBACK_SENT = "fallback_sent"
    SEND_FAILED = "send_failed"
    WEBHOOK_REJECTED = "webhook_rejected"


# --- Completion Models ---


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class CompletionRequest(BaseModel):
    """Chat-completions request body; built fresh for every call."""

    model_config = ConfigDict(frozen=True)

    model: str
    messages: list[ChatMessage]
    temperature: float
    max_tokens: int = Field(gt=0)


class CompletionMessage(BaseModel):
    """Generated message; only the text is read, role and tool fields are ignored."""

    content: str


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionResponse(BaseModel):
    """Provider reply. Only ``choices`` is interpreted; everything else is ignored."""

    choices: list[CompletionChoice]

    def first_content(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].message.content


# --- Telegram Models ---


class InboundUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    update_id: int
    chat_id: int
    message_id: int
    text: str = ""


class OutboundReply(BaseModel):
    model_config = ConfigDict(frozen=True)

    chat_id: int
    reply_to_message_id: int
    text: str
    parse_mode: str = "Markdown"

    def to_payload(self) -> dict[str, Any]:
        """Render the Bot API ``sendMessage`` body."""
        return {
            "chat_id": self.chat_id,
            "text": self.text,
            "reply_to_message_id": self.reply_to_message_id,
            "parse_mode": self.parse_mode,
        }


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class DispatchEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: DispatchEventType
    chat_id: int | None = None
    message_id: int | None = None
    details: dict[str, object] | None = None
