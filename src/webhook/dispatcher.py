"""Update dispatcher — serial consumer of inbound Telegram updates.

The webhook route only enqueues; a single task drains the queue and
handles each update to completion (completion call and reply send)
before taking the next one, so replies go out in arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from src.completion.client import CompletionError
from src.models import DispatchEvent, DispatchEventType, InboundUpdate, OutboundReply
from src.webhook.telegram import TelegramAPIError

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.completion.client import CompletionClient
    from src.webhook.telegram import TelegramBotClient

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't process that. Try again?"


class UpdateDispatcher:
    """Turns each inbound update into at most one threaded reply."""

    def __init__(
        self,
        completion: CompletionClient,
        telegram: TelegramBotClient,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._completion = completion
        self._telegram = telegram
        self._audit = audit_logger
        self._queue: asyncio.Queue[InboundUpdate] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, update: InboundUpdate) -> None:
        self._queue.put_nowait(update)

    def start(self) -> asyncio.Task[None]:
        if self.running:
            raise RuntimeError("Dispatcher already running")
        self._task = asyncio.create_task(self.run(), name="update-dispatcher")
        self._task.add_done_callback(self._on_task_done)
        return self._task

    async def stop(self) -> None:
        """Cancel the consumer task. Queued updates are dropped."""
        task, self._task = self._task, None
        if task is None or task.done():
            # A crashed task was already reported by _on_task_done.
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def join(self) -> None:
        """Wait until every submitted update has been handled."""
        await self._queue.join()

    async def run(self) -> None:
        while True:
            update = await self._queue.get()
            try:
                await self.handle(update)
            except Exception:
                logger.exception("Unexpected error handling update %d", update.update_id)
            finally:
                self._queue.task_done()

    async def handle(self, update: InboundUpdate) -> OutboundReply | None:
        if not update.text.strip():
            return None

        logger.info("Message from chat %d: %s", update.chat_id, update.text)

        event_type = DispatchEventType.REPLY_SENT
        details: dict[str, object] = {}
        try:
            text = await self._completion.generate_reply(update.text)
        except CompletionError as exc:
            logger.warning("Completion failed for chat %d: %s", update.chat_id, exc)
            text = FALLBACK_REPLY
            event_type = DispatchEventType.FALLBACK_SENT
            details["error"] = type(exc).__name__
        except Exception as exc:
            logger.exception("Unexpected completion failure for chat %d", update.chat_id)
            text = FALLBACK_REPLY
            event_type = DispatchEventType.FALLBACK_SENT
            details["error"] = type(exc).__name__

        reply = OutboundReply(
            chat_id=update.chat_id,
            reply_to_message_id=update.message_id,
            text=text,
        )
        try:
            await self._telegram.send_reply(reply)
        except (TelegramAPIError, httpx.HTTPError) as exc:
            logger.error("Failed to send reply to chat %d: %s", update.chat_id, exc)
            event_type = DispatchEventType.SEND_FAILED
            details["error"] = str(exc)

        self._record(event_type, update, details)
        return reply

    def _record(
        self,
        event_type: DispatchEventType,
        update: InboundUpdate,
        details: dict[str, object],
    ) -> None:
        if self._audit is None:
            return
        try:
            self._audit.log(DispatchEvent(
                event_type=event_type,
                chat_id=update.chat_id,
                message_id=update.message_id,
                details=details or None,
            ))
        except OSError:
            logger.exception("Failed to write audit event for chat %d", update.chat_id)

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.critical("Update dispatcher stopped", exc_info=exc)
