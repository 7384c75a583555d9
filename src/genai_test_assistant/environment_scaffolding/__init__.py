"""Environment scaffolding domain exports."""

from .environment_scaffolder import ScaffoldBundle, build_scaffold_contents, scaffold_environment
from .scaffold_templates import (
    HTML_REPORT_FILENAME,
    JSON_REPORT_FILENAME,
    REPORTS_DIRNAME,
    RUNNER_FORMATS,
    RUNNER_IMPORT_MODULE,
)

__all__ = [
    "ScaffoldBundle",
    "build_scaffold_contents",
    "scaffold_environment",
    "HTML_REPORT_FILENAME",
    "JSON_REPORT_FILENAME",
    "REPORTS_DIRNAME",
    "RUNNER_FORMATS",
    "RUNNER_IMPORT_MODULE",
]
