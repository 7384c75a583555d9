"""Test data synthesis exports."""

from .record_synthesis import (
    DEFAULT_RECORD_COUNT,
    DataSynthesisError,
    SynthesisSummary,
    build_validator,
    extract_records,
    filter_valid_records,
    load_json_schema,
    synthesize_records,
)

__all__ = [
    "DEFAULT_RECORD_COUNT",
    "DataSynthesisError",
    "SynthesisSummary",
    "build_validator",
    "extract_records",
    "filter_valid_records",
    "load_json_schema",
    "synthesize_records",
]
