"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

SUPPORTED_PROVIDERS = ("openai",)
SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

DEFAULT_PROVIDER = "openai"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BROWSER = "chromium"
DEFAULT_OUTPUT_DIR = "out"
DEFAULT_PROJECT_NAME = "GenAI Test Assistant"
DEFAULT_RUNNER_COMMAND = ("npx", "cucumber-js")


@dataclass(frozen=True)
class BackendSettings:
    """Generative backend selection and connectivity."""

    provider: str
    model: str
    api_key: str | None = None
    base_url: str | None = None
    timeout_seconds: float = 120.0


@dataclass(frozen=True)
class ExecutionSettings:
    """Runner invocation defaults."""

    browser: str = DEFAULT_BROWSER
    headless: bool = True
    output_base_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    runner_command: tuple[str, ...] = DEFAULT_RUNNER_COMMAND
    project_name: str = DEFAULT_PROJECT_NAME


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path | None
    backend: BackendSettings
    execution: ExecutionSettings
