"""Generative backend client exports."""

from .completion_client import (
    BackendError,
    CompletionClient,
    OpenAICompletionClient,
    create_completion_client,
    decode_completion_content,
)

__all__ = [
    "BackendError",
    "CompletionClient",
    "OpenAICompletionClient",
    "create_completion_client",
    "decode_completion_content",
]
