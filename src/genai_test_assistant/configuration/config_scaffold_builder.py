"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Configuration template for genai-test-assistant.
# Every value is optional; environment variables and command flags override it.
# Replace <OPTIONAL> placeholders you need and delete the others.

backend:
  # Generative backend used by generate, run, synthesize-data and triage.
  # Overridden by LLM_PROVIDER / LLM_MODEL.
  provider: "openai"
  model: "gpt-4o-mini"
  # Prefer OPENAI_API_KEY in the environment or a .env file.
  # api_key: "<OPTIONAL>"
  # base_url: "<OPTIONAL>"
  timeout_seconds: 120

execution:
  # Browser engine for UI scenarios (chromium, firefox or webkit). Overridden by BROWSER.
  browser: "chromium"
  # Overridden by HEADLESS.
  headless: true
  # Generated artifacts land in <output_base_dir>/<api|ui>/<story-slug>/.
  # Overridden by GTA_OUTPUT_DIR.
  output_base_dir: "out"
  # Command that starts the cucumber runner inside an artifact directory.
  runner_command:
    - "npx"
    - "cucumber-js"
  # Title used in consolidated reports.
  # project_name: "<OPTIONAL>"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML configuration template with defaults and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
