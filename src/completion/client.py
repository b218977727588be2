"""Chat-completions client for the tutor persona.

Sends one OpenAI-compatible request per user message to Groq and returns
the first candidate's text. No retries: every failure surfaces as a
``CompletionError`` and the caller decides what the user sees.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from src.completion.persona import SYSTEM_PROMPT
from src.models import ChatMessage, CompletionRequest, CompletionResponse, Role

logger = logging.getLogger(__name__)

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
MODEL_NAME = "llama-3.3-70b-versatile"
TEMPERATURE = 0.7
MAX_TOKENS = 500
REQUEST_TIMEOUT_SECONDS = 20.0


class CompletionError(Exception):
    """Base class for every completion failure."""


class MissingCredentialError(CompletionError):
    def __init__(self) -> None:
        super().__init__("GROQ_API_KEY is not set")


class ProviderUnavailableError(CompletionError):
    """Raised when the request fails: refused connection, timeout, DNS, undecodable body."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Request to Groq failed: {cause!r}")


class ProviderStatusError(CompletionError):
    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Groq API error ({status_code}): {body}")


class MalformedResponseError(CompletionError):
    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Could not parse Groq response: {cause}")


class EmptyCompletionError(CompletionError):
    def __init__(self) -> None:
        super().__init__("Empty response from Groq")


class CompletionClient:
    """Builds tutor requests and extracts the generated reply."""

    def __init__(self, api_key: str | None, api_url: str = GROQ_API_URL) -> None:
        self._api_key = api_key
        self._api_url = api_url

    def build_request(self, user_text: str) -> CompletionRequest:
        return CompletionRequest(
            model=MODEL_NAME,
            messages=[
                ChatMessage(role=Role.SYSTEM, content=SYSTEM_PROMPT),
                ChatMessage(role=Role.USER, content=user_text),
            ],
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )

    async def generate_reply(self, user_text: str) -> str:
        """Return the tutor's reply to ``user_text``.

        The content is returned as-is, including any Markdown the model
        produced.
        """
        if not self._api_key:
            raise MissingCredentialError()

        request_body = self.build_request(user_text).model_dump(mode="json")
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS) as client:
                resp = await client.post(self._api_url, json=request_body, headers=headers)
        except httpx.RequestError as exc:
            raise ProviderUnavailableError(exc) from exc

        if resp.status_code != 200:
            raise ProviderStatusError(resp.status_code, resp.text)

        try:
            parsed = CompletionResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise MalformedResponseError(exc) from exc

        content = parsed.first_content()
        if content is None or not content.strip():
            raise EmptyCompletionError()

        logger.debug("Groq returned %d characters", len(content))
        return content
