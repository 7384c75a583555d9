"""Runner result file exports."""

from .cucumber_results import (
    PASSED_STATUS,
    RunnerResultParseError,
    ScenarioCounts,
    count_scenarios,
    entries_of,
    is_scenario_passed,
    load_result_document,
    parse_result_file,
)

__all__ = [
    "PASSED_STATUS",
    "RunnerResultParseError",
    "ScenarioCounts",
    "count_scenarios",
    "entries_of",
    "is_scenario_passed",
    "load_result_document",
    "parse_result_file",
]
