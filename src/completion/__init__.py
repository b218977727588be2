"""Completion client for the English tutor persona."""

from src.completion.client import (
    CompletionClient,
    CompletionError,
    EmptyCompletionError,
    MalformedResponseError,
    MissingCredentialError,
    ProviderStatusError,
    ProviderUnavailableError,
)
from src.completion.persona import SYSTEM_PROMPT

__all__ = [
    # Exceptions
    "CompletionError",
    "EmptyCompletionError",
    "MalformedResponseError",
    "MissingCredentialError",
    "ProviderStatusError",
    "ProviderUnavailableError",
    # Components
    "CompletionClient",
    "SYSTEM_PROMPT",
]
