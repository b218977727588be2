"""Telegram Bot API client for the webhook relay.

Covers the three Bot API calls the relay makes (getMe, setWebhook,
sendMessage), webhook secret verification, and update extraction.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any

import httpx

from src.models import InboundUpdate, OutboundReply

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
SECRET_HEADER = "x-telegram-bot-api-secret-token"


class TelegramAPIError(Exception):
    """Raised when the Bot API rejects a call or returns a non-ok body."""

    def __init__(self, method: str, status_code: int, description: str) -> None:
        self.method = method
        self.status_code = status_code
        self.description = description
        super().__init__(f"Telegram {method} failed ({status_code}): {description}")


class TelegramBotClient:
    """Thin async wrapper over the Bot API methods the relay needs."""

    def __init__(self, bot_token: str, api_base: str = TELEGRAM_API_BASE) -> None:
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._secret_hash = hashlib.sha256(bot_token.encode()).hexdigest()

    @property
    def secret_token(self) -> str:
        """Secret registered with setWebhook and echoed back on every update."""
        return self._secret_hash

    def verify_webhook(self, headers: dict[str, str]) -> bool:
        """Check the secret token header using a constant-time comparison."""
        secret = headers.get(SECRET_HEADER, "")
        if not secret:
            return False
        return hmac.compare_digest(secret, self._secret_hash)

    def extract_update(self, update: dict[str, Any]) -> InboundUpdate | None:
        """Pull chat id, message id and text out of a raw update.

        Returns None for updates that carry no message (edits, callbacks,
        channel posts) or are missing the identifiers a reply needs.
        """
        message = update.get("message")
        if not isinstance(message, dict):
            return None
        chat = message.get("chat") or {}
        ids = (update.get("update_id"), chat.get("id"), message.get("message_id"))
        if not all(isinstance(i, int) for i in ids):
            return None
        update_id, chat_id, message_id = ids
        text = message.get("text")
        return InboundUpdate(
            update_id=update_id,
            chat_id=chat_id,
            message_id=message_id,
            text=text if isinstance(text, str) else "",
        )

    async def get_me(self) -> dict[str, Any]:
        result: dict[str, Any] = await self._call("getMe", {})
        return result

    async def set_webhook(self, url: str) -> None:
        await self._call(
            "setWebhook",
            {
                "url": url,
                "secret_token": self._secret_hash,
                "allowed_updates": ["message"],
            },
        )
        logger.info("Webhook registered at %s", url)

    async def send_reply(self, reply: OutboundReply) -> None:
        await self._call("sendMessage", reply.to_payload())

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        url = f"{self._api_base}/bot{self._bot_token}/{method}"

        async with httpx.AsyncClient(verify=True) as client:
            resp = await client.post(url, json=payload)

        try:
            data = resp.json()
        except ValueError:
            raise TelegramAPIError(method, resp.status_code, resp.text) from None
        if not isinstance(data, dict):
            raise TelegramAPIError(method, resp.status_code, resp.text)

        if resp.status_code >= 400 or not data.get("ok"):
            description = data.get("description", resp.text)
            raise TelegramAPIError(method, resp.status_code, description)
        return data.get("result")
