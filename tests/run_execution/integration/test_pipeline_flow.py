"""Generate-and-run pipeline tests."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest
from genai_test_assistant.artifact_generation import (
    GenerationRequest,
    GenerationValidationError,
)
from genai_test_assistant.configuration.runtime_settings import (
    BackendSettings,
    ExecutionSettings,
)
from genai_test_assistant.run_execution import generate_and_run_tests, generate_artifacts

_BACKEND = BackendSettings(provider="openai", model="gpt-4o-mini")


class _StaticClient:
    def __init__(self, payload: Any) -> None:
        self.payload = payload

    async def complete(
        self, system: str, user: str, schema: Mapping[str, Any] | None = None
    ) -> Any:
        return self.payload


def test_generate_artifacts_writes_ui_artifact_set(tmp_path: Path) -> None:
    client = _StaticClient(
        {
            "testType": "ui",
            "featureText": "Feature: Login",
            "stepsText": "steps();",
            "pagesText": "class LoginPage {}",
        }
    )
    request = GenerationRequest(
        story_text="Login with valid credentials\nAC: lands on dashboard",
        output_base_dir=tmp_path,
        backend=_BACKEND,
    )

    artifact_set = asyncio.run(generate_artifacts(request, client))

    assert artifact_set.directory == tmp_path / "ui" / "login-with-valid-credentials"
    assert set(artifact_set.files) == {"feature", "steps", "pages"}


def test_invalid_backend_payload_writes_nothing(tmp_path: Path) -> None:
    client = _StaticClient({"testType": "ui", "featureText": "F", "stepsText": "S"})
    request = GenerationRequest(story_text="Login", output_base_dir=tmp_path, backend=_BACKEND)

    with pytest.raises(GenerationValidationError):
        asyncio.run(generate_artifacts(request, client))

    assert list(tmp_path.iterdir()) == []


def test_generate_and_run_tests_runs_generated_directory(tmp_path: Path) -> None:
    client = _StaticClient(
        {"testType": "api", "featureText": "Feature: Weather", "stepsText": "steps();"}
    )
    execution = ExecutionSettings(
        output_base_dir=tmp_path / "out",
        runner_command=(sys.executable, "-c", "print('runner finished')"),
    )

    artifact_set, result = asyncio.run(
        generate_and_run_tests(
            "Weather by city\nAC: 200",
            client,
            backend=_BACKEND,
            execution=execution,
            output_sink=lambda stream_name, chunk: None,
        )
    )

    assert artifact_set.directory == tmp_path / "out" / "api" / "weather-by-city"
    assert (artifact_set.directory / "cucumber.js").is_file()
    assert result.success is True
    assert "runner finished" in result.raw_output
    assert (result.tests_passed, result.tests_failed) == (0, 0)
