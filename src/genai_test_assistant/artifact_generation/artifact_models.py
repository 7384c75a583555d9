"""Artifact generation entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from genai_test_assistant.configuration.runtime_settings import BackendSettings


class TestType(str, Enum):
    """Classification tag deciding required artifact files and target directory."""

    __test__ = False

    API = "api"
    UI = "ui"


@dataclass(frozen=True)
class GenerationRequest:
    """Input contract for one artifact generation."""

    story_text: str
    output_base_dir: Path
    backend: BackendSettings


@dataclass(frozen=True)
class ApiArtifact:
    """API-level artifact: feature plus step implementations."""

    feature_text: str
    steps_text: str

    @property
    def test_type(self) -> TestType:
        return TestType.API


@dataclass(frozen=True)
class UiArtifact:
    """UI-level artifact: feature, step implementations and a page abstraction."""

    feature_text: str
    steps_text: str
    pages_text: str

    @property
    def test_type(self) -> TestType:
        return TestType.UI


ClassifiedArtifact = ApiArtifact | UiArtifact
