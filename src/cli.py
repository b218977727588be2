"""Click entrypoint that serves the tutor relay."""

from __future__ import annotations

import logging

import click
import uvicorn

from src.config import ConfigError, Settings
from src.server.app import create_app

LISTEN_HOST = "0.0.0.0"
LISTEN_PORT = 1984


@click.command()
def main() -> None:
    """Serve the English tutor relay on the Telegram webhook port."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    app = create_app(settings)
    logging.getLogger(__name__).info("Listening on port %d for Telegram webhook", LISTEN_PORT)
    uvicorn.run(app, host=LISTEN_HOST, port=LISTEN_PORT)
