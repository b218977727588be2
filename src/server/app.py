"""FastAPI application receiving Telegram webhook callbacks."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.audit.logger import AuditLogger
from src.completion.client import CompletionClient
from src.config import Settings
from src.models import DispatchEvent, DispatchEventType
from src.webhook.dispatcher import UpdateDispatcher
from src.webhook.telegram import TelegramBotClient

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/"


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    return create_app(Settings.from_env())


def create_app(
    settings: Settings,
    completion: CompletionClient | None = None,
    telegram: TelegramBotClient | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the webhook app.

    Startup registers the webhook with Telegram and starts the dispatcher;
    any failure there aborts startup.
    """
    completion = completion or CompletionClient(api_key=settings.groq_api_key)
    telegram = telegram or TelegramBotClient(settings.telegram_bot_token)
    if audit_logger is None:
        audit_logger = AuditLogger.from_settings(settings)
    dispatcher = UpdateDispatcher(completion, telegram, audit_logger)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        me = await telegram.get_me()
        logger.info("Bot started as @%s", me.get("username"))
        await telegram.set_webhook(settings.webhook_endpoint)
        dispatcher.start()
        try:
            yield
        finally:
            await dispatcher.stop()

    app = FastAPI(docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.dispatcher = dispatcher

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(WEBHOOK_PATH)
    async def telegram_webhook(request: Request) -> JSONResponse:
        if not telegram.verify_webhook(dict(request.headers)):
            if audit_logger:
                audit_logger.log(DispatchEvent(
                    event_type=DispatchEventType.WEBHOOK_REJECTED,
                    details={
                        "source_ip": request.client.host if request.client else None,
                    },
                ))
            return JSONResponse({"error": "Invalid webhook signature"}, status_code=401)

        try:
            payload = json.loads(await request.body())
        except json.JSONDecodeError:
            return JSONResponse({"error": "Invalid JSON"}, status_code=400)

        update = telegram.extract_update(payload) if isinstance(payload, dict) else None
        if update is not None:
            dispatcher.submit(update)
        return JSONResponse({"ok": True})

    return app
