"""Artifact request and classification tests."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest
from genai_test_assistant.artifact_generation import (
    ApiArtifact,
    GenerationRequest,
    GenerationValidationError,
    TestType,
    UiArtifact,
    classify_artifact,
    request_artifact,
)
from genai_test_assistant.artifact_generation.artifact_requester import (
    ARTIFACT_RESPONSE_SCHEMA,
    build_user_prompt,
)
from genai_test_assistant.configuration.runtime_settings import BackendSettings


class _RecordingClient:
    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.calls: list[tuple[str, str, Mapping[str, Any] | None]] = []

    async def complete(
        self, system: str, user: str, schema: Mapping[str, Any] | None = None
    ) -> Any:
        self.calls.append((system, user, schema))
        return self.payload


def _request(tmp_path: Path) -> GenerationRequest:
    return GenerationRequest(
        story_text="As a user I want weather\nAC: 200",
        output_base_dir=tmp_path,
        backend=BackendSettings(provider="openai", model="gpt-4o-mini"),
    )


def test_request_artifact_returns_api_artifact(tmp_path: Path) -> None:
    client = _RecordingClient(
        {"testType": "api", "featureText": "Feature: W", "stepsText": "steps();"}
    )

    artifact = asyncio.run(request_artifact(_request(tmp_path), client))

    assert artifact == ApiArtifact(feature_text="Feature: W", steps_text="steps();")
    assert artifact.test_type is TestType.API
    system, user, schema = client.calls[0]
    assert "Gherkin" in system
    assert user.startswith("USER STORY & AC:\n\nAs a user I want weather")
    assert user.endswith("Follow the instructions strictly.")
    assert schema == ARTIFACT_RESPONSE_SCHEMA


def test_classify_ui_artifact_keeps_page_text() -> None:
    artifact = classify_artifact(
        {
            "testType": "ui",
            "featureText": "Feature: Login",
            "stepsText": "steps();",
            "pagesText": "class LoginPage {}",
        }
    )

    assert isinstance(artifact, UiArtifact)
    assert artifact.pages_text == "class LoginPage {}"


def test_classify_api_artifact_ignores_page_text() -> None:
    artifact = classify_artifact(
        {"testType": "api", "featureText": "F", "stepsText": "S", "pagesText": "P"}
    )

    assert isinstance(artifact, ApiArtifact)


def test_classify_ui_without_page_text_is_rejected() -> None:
    with pytest.raises(GenerationValidationError, match="pagesText"):
        classify_artifact({"testType": "ui", "featureText": "F", "stepsText": "S"})


def test_classify_reports_every_missing_required_field() -> None:
    with pytest.raises(GenerationValidationError) as exc_info:
        classify_artifact({"testType": "api", "featureText": "  "})

    assert "featureText, stepsText" in str(exc_info.value)


def test_classify_rejects_unknown_test_type() -> None:
    with pytest.raises(GenerationValidationError, match="unknown testType 'e2e'"):
        classify_artifact({"testType": "e2e", "featureText": "F", "stepsText": "S"})


def test_classify_rejects_non_object_payload() -> None:
    with pytest.raises(GenerationValidationError, match="must be a JSON object"):
        classify_artifact(["api"])


def test_classify_normalizes_test_type_case() -> None:
    artifact = classify_artifact({"testType": " API ", "featureText": "F", "stepsText": "S"})

    assert artifact.test_type is TestType.API


def test_build_user_prompt_wraps_story() -> None:
    assert build_user_prompt("Story") == (
        "USER STORY & AC:\n\nStory\n\nFollow the instructions strictly."
    )
