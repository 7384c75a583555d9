"""Configuration loader service."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_BROWSER,
    DEFAULT_MODEL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PROJECT_NAME,
    DEFAULT_PROVIDER,
    DEFAULT_RUNNER_COMMAND,
    SUPPORTED_BROWSERS,
    SUPPORTED_PROVIDERS,
    BackendSettings,
    Configuration,
    ExecutionSettings,
)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})

# Environment variable -> (section, key)
ENVIRONMENT_OVERRIDES: Mapping[str, tuple[str, str]] = {
    "LLM_PROVIDER": ("backend", "provider"),
    "LLM_MODEL": ("backend", "model"),
    "OPENAI_API_KEY": ("backend", "api_key"),
    "OPENAI_BASE_URL": ("backend", "base_url"),
    "BROWSER": ("execution", "browser"),
    "HEADLESS": ("execution", "headless"),
    "GTA_OUTPUT_DIR": ("execution", "output_base_dir"),
}


class ConfigurationError(Exception):
    """Raised when the configuration file or environment is invalid."""


def load_configuration(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Configuration:
    """Load settings from an optional YAML/JSON file, then apply environment overrides.

    Args:
      config_path: Optional configuration file. ``None`` means defaults plus environment.
      environ: Environment mapping; defaults to ``os.environ``.

    Returns:
      The validated configuration aggregate.

    Raises:
      ConfigurationError: If the file is missing or unparsable, or a value is invalid.
    """
    environment = os.environ if environ is None else environ
    path = Path(config_path) if config_path is not None else None
    parsed = _read_configuration_file(path) if path is not None else {}

    backend_section = dict(_optional_mapping(parsed.get("backend"), "backend"))
    execution_section = dict(_optional_mapping(parsed.get("execution"), "execution"))
    sections = {"backend": backend_section, "execution": execution_section}
    for variable, (section, key) in ENVIRONMENT_OVERRIDES.items():
        value = environment.get(variable)
        if value is not None and value.strip():
            sections[section][key] = value.strip()

    base_path = path.parent if path is not None else Path.cwd()
    return Configuration(
        path=path,
        backend=_parse_backend_section(backend_section),
        execution=_parse_execution_section(execution_section, base_path),
    )


def parse_bool(value: Any, field_name: str) -> bool:
    """Interpret booleans and their common string spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ConfigurationError(f"{field_name} must be a boolean (true/false).")


def _read_configuration_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")
    return parsed


def _parse_backend_section(section: Mapping[str, Any]) -> BackendSettings:
    provider = _require_non_empty_string(
        section.get("provider", DEFAULT_PROVIDER), "backend.provider"
    ).lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"backend.provider '{provider}' is not supported "
            f"(expected one of: {', '.join(SUPPORTED_PROVIDERS)})."
        )
    model = _require_non_empty_string(section.get("model", DEFAULT_MODEL), "backend.model")
    timeout_seconds = _require_positive_number(
        section.get("timeout_seconds", 120), "backend.timeout_seconds"
    )
    return BackendSettings(
        provider=provider,
        model=model,
        api_key=_optional_string(section.get("api_key"), "backend.api_key"),
        base_url=_optional_string(section.get("base_url"), "backend.base_url"),
        timeout_seconds=timeout_seconds,
    )


def _parse_execution_section(section: Mapping[str, Any], base_path: Path) -> ExecutionSettings:
    browser = _require_non_empty_string(
        section.get("browser", DEFAULT_BROWSER), "execution.browser"
    ).lower()
    if browser not in SUPPORTED_BROWSERS:
        raise ConfigurationError(
            f"execution.browser '{browser}' is not supported "
            f"(expected one of: {', '.join(SUPPORTED_BROWSERS)})."
        )
    headless = parse_bool(section.get("headless", True), "execution.headless")
    output_dir = _require_non_empty_string(
        section.get("output_base_dir", DEFAULT_OUTPUT_DIR), "execution.output_base_dir"
    )
    project_name = _require_non_empty_string(
        section.get("project_name", DEFAULT_PROJECT_NAME), "execution.project_name"
    )
    return ExecutionSettings(
        browser=browser,
        headless=headless,
        output_base_dir=_resolve_path(base_path, output_dir),
        runner_command=_normalize_runner_command(section.get("runner_command")),
        project_name=project_name,
    )


def _normalize_runner_command(value: Any) -> tuple[str, ...]:
    if value is None:
        return DEFAULT_RUNNER_COMMAND
    parts: list[str] = []
    if isinstance(value, str):
        parts = value.split()
    elif isinstance(value, Sequence):
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError("execution.runner_command entries must be strings.")
            if item.strip():
                parts.append(item.strip())
    else:
        raise ConfigurationError(
            "execution.runner_command must be a string or list of strings."
        )
    if not parts:
        raise ConfigurationError("execution.runner_command must not be empty.")
    return tuple(parts)


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return base_path / candidate
    return candidate


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_positive_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a number.")
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError as exc:
            raise ConfigurationError(f"{field_name} must be a number.") from exc
    if not isinstance(value, int | float):
        raise ConfigurationError(f"{field_name} must be a number.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return float(value)
