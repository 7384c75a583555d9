"""Generative backend client used for JSON completions."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from openai import AsyncOpenAI, OpenAIError

from genai_test_assistant.configuration.runtime_settings import BackendSettings

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the generative backend call fails."""


class CompletionClient(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for JSON-returning completion backends."""

    async def complete(
        self,
        system: str,
        user: str,
        schema: Mapping[str, Any] | None = None,
    ) -> Any: ...


class OpenAICompletionClient:  # pylint: disable=too-few-public-methods
    """Completion client backed by the OpenAI chat completions API.

    The caller owns the client lifecycle; one instance can serve several requests.
    """

    def __init__(self, settings: BackendSettings, *, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        if client is None:
            try:
                client = AsyncOpenAI(
                    api_key=settings.api_key,
                    base_url=settings.base_url,
                    timeout=settings.timeout_seconds,
                )
            except OpenAIError as exc:
                raise BackendError(f"Could not create OpenAI client: {exc}") from exc
        self._client = client

    @property
    def model(self) -> str:
        return self._settings.model

    async def complete(
        self,
        system: str,
        user: str,
        schema: Mapping[str, Any] | None = None,
    ) -> Any:
        """Request one completion and decode its content as JSON.

        Content that is not valid JSON is returned as ``{"output": <content>}``.
        """
        response_format: dict[str, Any]
        if schema is not None:
            response_format = {
                "type": "json_schema",
                "json_schema": {"name": "schema", "schema": dict(schema)},
            }
        else:
            response_format = {"type": "json_object"}

        logger.debug("Requesting completion from %s", self._settings.model)
        try:
            response = await self._client.chat.completions.create(
                model=self._settings.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                response_format=response_format,  # type: ignore[arg-type]
            )
        except OpenAIError as exc:
            raise BackendError(f"Generative backend request failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        return decode_completion_content(content)


def decode_completion_content(content: str | None) -> Any:
    """Decode completion text, tolerating markdown fences and non-JSON replies."""
    text = (content or "{}").strip()
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:-1]) if len(lines) > 2 else text
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Backend returned non-JSON content; wrapping it as 'output'.")
        return {"output": text}


def create_completion_client(settings: BackendSettings) -> CompletionClient:
    """Build the completion client for the configured provider."""
    if settings.provider == "openai":
        return OpenAICompletionClient(settings)
    raise BackendError(f"Unsupported generative backend provider: {settings.provider}")
