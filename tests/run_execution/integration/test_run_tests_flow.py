"""Runner execution flow tests against a scripted stand-in runner."""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest
from genai_test_assistant.results_writing import (
    MARKDOWN_FILENAME,
    WORKBOOK_FILENAME,
    ReportCollectionError,
)
from genai_test_assistant.run_execution import (
    CancellationToken,
    DirectoryNotFoundError,
    ExecutionResult,
    MissingArtifactError,
    run_tests,
)
from openpyxl import load_workbook

_FAKE_RUNNER = """
import json
import os
import pathlib
import sys

plan = json.loads(pathlib.Path("fake-run.json").read_text(encoding="utf-8"))
pathlib.Path("received.json").write_text(
    json.dumps(
        {
            "argv": sys.argv[1:],
            "cwd": os.getcwd(),
            "env": {
                name: os.environ.get(name)
                for name in ("BROWSER", "HEADLESS", "NODE_OPTIONS")
            },
        }
    ),
    encoding="utf-8",
)
if plan.get("report") is not None:
    pathlib.Path("reports", "cucumber-report.json").write_text(
        json.dumps(plan["report"]), encoding="utf-8"
    )
sys.stdout.write(plan.get("stdout", ""))
sys.stderr.write(plan.get("stderr", ""))
sys.exit(plan.get("exit_code", 0))
"""


def _scenario(name: str, *statuses: str) -> dict[str, object]:
    return {
        "name": name,
        "steps": [
            {
                "keyword": "Then ",
                "name": f"step {index}",
                "result": {"status": status, "duration": 2_000_000},
            }
            for index, status in enumerate(statuses)
        ],
    }


def _artifact_dir(tmp_path: Path, *, pages: bool = False, plan: Mapping[str, object]) -> Path:
    directory = tmp_path / "out" / "api" / "weather"
    directory.mkdir(parents=True)
    (directory / "generated.feature").write_text("Feature: Weather", encoding="utf-8")
    (directory / "steps.generated.ts").write_text("// steps", encoding="utf-8")
    if pages:
        (directory / "pages.generated.ts").write_text("// pages", encoding="utf-8")
    (directory / "fake-run.json").write_text(json.dumps(plan), encoding="utf-8")
    return directory


def _runner_command(tmp_path: Path) -> tuple[str, ...]:
    script = tmp_path / "fake_runner.py"
    script.write_text(_FAKE_RUNNER, encoding="utf-8")
    return (sys.executable, str(script))


def _run(
    directory: Path, tmp_path: Path, chunks: list[tuple[str, str]], **kwargs
) -> ExecutionResult:
    return asyncio.run(
        run_tests(
            directory,
            kwargs.pop("browser", "chromium"),
            kwargs.pop("headless", True),
            runner_command=kwargs.pop("runner_command", _runner_command(tmp_path)),
            output_sink=lambda stream_name, chunk: chunks.append((stream_name, chunk)),
            **kwargs,
        )
    )


def test_passing_run_reports_counts_and_consolidated_reports(tmp_path: Path) -> None:
    report = [{"name": "Weather", "elements": [_scenario("ok", "passed", "passed")]}]
    directory = _artifact_dir(
        tmp_path, plan={"exit_code": 0, "report": report, "stdout": "1 scenario (1 passed)\n"}
    )
    chunks: list[tuple[str, str]] = []

    result = _run(directory, tmp_path, chunks)

    assert result.success is True
    assert result.exit_code == 0
    assert (result.tests_passed, result.tests_failed) == (1, 0)
    assert result.raw_output == "1 scenario (1 passed)\n"
    assert ("stdout", "1 scenario (1 passed)\n") in chunks
    assert (directory / "cucumber.js").is_file()
    assert (directory / "support" / "world.ts").is_file()
    assert (directory / "reports" / WORKBOOK_FILENAME).is_file()
    assert (directory / "reports" / MARKDOWN_FILENAME).is_file()


def test_runner_receives_cucumber_arguments_and_browser_environment(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, pages=True, plan={"exit_code": 0, "report": []})
    chunks: list[tuple[str, str]] = []

    _run(directory, tmp_path, chunks, browser="firefox", headless=False)

    received = json.loads((directory / "received.json").read_text(encoding="utf-8"))
    root = directory.resolve()
    assert received["argv"] == [
        str(root / "generated.feature"),
        "--import",
        "tsx/esm",
        "--require",
        str(root / "steps.generated.ts"),
        "--format",
        "progress",
        "--format",
        "json:reports/cucumber-report.json",
        "--format",
        "html:reports/cucumber-report.html",
    ]
    assert Path(received["cwd"]).resolve() == root
    assert received["env"] == {
        "BROWSER": "firefox",
        "HEADLESS": "false",
        "NODE_OPTIONS": "--import tsx/esm",
    }


def test_failing_scenarios_are_counted(tmp_path: Path) -> None:
    report = [
        {
            "name": "Weather",
            "elements": [_scenario("ok", "passed"), _scenario("broken", "passed", "failed")],
        }
    ]
    directory = _artifact_dir(
        tmp_path,
        plan={"exit_code": 1, "report": report, "stdout": "progress\n", "stderr": "boom\n"},
    )
    chunks: list[tuple[str, str]] = []

    result = _run(directory, tmp_path, chunks)

    assert result.success is False
    assert result.exit_code == 1
    assert (result.tests_passed, result.tests_failed) == (1, 1)
    assert result.raw_output == "progress\n\n--- ERRORS ---\nboom\n"
    assert ("stderr", "boom\n") in chunks


def test_nonzero_exit_fails_even_when_every_scenario_passed(tmp_path: Path) -> None:
    report = [{"name": "Weather", "elements": [_scenario("ok", "passed")]}]
    directory = _artifact_dir(tmp_path, plan={"exit_code": 2, "report": report})

    result = _run(directory, tmp_path, [])

    assert result.success is False
    assert (result.tests_passed, result.tests_failed) == (1, 0)


def test_missing_result_file_yields_zero_counts(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, plan={"exit_code": 0})

    result = _run(directory, tmp_path, [])

    assert result.success is True
    assert (result.tests_passed, result.tests_failed) == (0, 0)


def test_previous_result_file_is_not_reused(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, plan={"exit_code": 0})
    stale = directory / "reports" / "cucumber-report.json"
    stale.parent.mkdir()
    stale.write_text(
        json.dumps([{"elements": [_scenario("old", "passed")] * 3}]), encoding="utf-8"
    )

    result = _run(directory, tmp_path, [])

    assert (result.tests_passed, result.tests_failed) == (0, 0)


def test_missing_steps_file_fails_before_spawn(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, plan={"exit_code": 0})
    (directory / "steps.generated.ts").unlink()
    launches: list[Sequence[str]] = []

    async def launcher(command, cwd, env):  # pragma: no cover - must not run
        launches.append(command)
        raise AssertionError("runner must not be spawned")

    with pytest.raises(MissingArtifactError) as exc_info:
        asyncio.run(run_tests(directory, launcher=launcher))

    assert exc_info.value.missing_files == ("steps.generated.ts",)
    assert str(exc_info.value) == "Missing required files: steps.generated.ts"
    assert launches == []
    assert not (directory / "cucumber.js").exists()


def test_missing_directory_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(DirectoryNotFoundError, match="Test directory not found"):
        asyncio.run(run_tests(tmp_path / "absent"))


def test_spawn_failure_is_folded_into_result(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, plan={"exit_code": 0})

    result = _run(
        directory, tmp_path, [], runner_command=(str(tmp_path / "no-such-runner"),)
    )

    assert result.success is False
    assert result.exit_code is None
    assert (result.tests_passed, result.tests_failed) == (0, 1)
    assert result.raw_output.startswith("Process error: Failed to start test process")


def test_report_collection_failure_does_not_change_result(tmp_path: Path) -> None:
    report = [{"name": "Weather", "elements": [_scenario("ok", "passed")]}]
    directory = _artifact_dir(tmp_path, plan={"exit_code": 0, "report": report})
    collected: list[tuple[Path, str, str, str]] = []

    def failing_collector(path: Path, project_name: str, browser: str, test_type: str) -> None:
        collected.append((path, project_name, browser, test_type))
        raise ReportCollectionError("disk full")

    result = _run(directory, tmp_path, [], report_collector=failing_collector, project_name="Demo")

    assert result.success is True
    assert result.tests_passed == 1
    assert collected == [(directory.resolve(), "Demo", "chromium", "api")]


def test_cancellation_terminates_the_runner(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, plan={})
    token = CancellationToken()

    async def scenario() -> ExecutionResult:
        async def cancel_soon() -> None:
            await asyncio.sleep(0.5)
            token.cancel()

        canceller = asyncio.create_task(cancel_soon())
        result = await run_tests(
            directory,
            runner_command=(sys.executable, "-c", "import time; time.sleep(30)"),
            output_sink=lambda stream_name, chunk: None,
            cancellation=token,
        )
        await canceller
        return result

    result = asyncio.run(scenario())

    assert token.cancelled is True
    assert result.success is False
    assert result.exit_code != 0
    assert result.duration_ms < 20_000


def test_clean_exit_succeeds_even_with_a_failed_scenario(tmp_path: Path) -> None:
    report = [
        {
            "name": "Weather",
            "elements": [_scenario("ok", "passed"), _scenario("broken", "failed")],
        }
    ]
    directory = _artifact_dir(tmp_path, plan={"exit_code": 0, "report": report})

    result = _run(directory, tmp_path, [])

    assert result.success is True
    assert (result.tests_passed, result.tests_failed) == (1, 1)


def test_colour_coded_failure_message_still_yields_result_and_reports(tmp_path: Path) -> None:
    failed_step = {
        "keyword": "Then ",
        "name": "the status is 200",
        "result": {
            "status": "failed",
            "error_message": "expect(received).toBe(expected)\n\x1b[31mExpected: 200\x1b[39m",
        },
    }
    report = [{"name": "Weather", "elements": [{"name": "broken", "steps": [failed_step]}]}]
    directory = _artifact_dir(tmp_path, plan={"exit_code": 1, "report": report})

    result = _run(directory, tmp_path, [])

    assert result.success is False
    assert (result.tests_passed, result.tests_failed) == (0, 1)
    workbook = load_workbook(directory / "reports" / WORKBOOK_FILENAME)
    assert workbook["Scenarios"]["F2"].value == (
        "expect(received).toBe(expected)\nExpected: 200"
    )


def test_unexpected_report_collector_error_does_not_change_result(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, plan={"exit_code": 0, "report": []})

    def broken_collector(path: Path, project_name: str, browser: str, test_type: str) -> None:
        raise RuntimeError("collector bug")

    result = _run(directory, tmp_path, [], report_collector=broken_collector)

    assert result.success is True


def test_malformed_result_entries_yield_zero_counts(tmp_path: Path) -> None:
    directory = _artifact_dir(
        tmp_path, plan={"exit_code": 0, "report": [{"name": "Weather", "elements": 5}]}
    )

    result = _run(directory, tmp_path, [])

    assert result.success is True
    assert (result.tests_passed, result.tests_failed) == (0, 0)
    assert not (directory / "reports" / WORKBOOK_FILENAME).exists()


def test_cancelled_run_fails_even_when_runner_exits_cleanly(tmp_path: Path) -> None:
    directory = _artifact_dir(tmp_path, plan={})
    token = CancellationToken()
    trap_sigterm = (
        "import signal, sys, time\n"
        "signal.signal(signal.SIGTERM, lambda signum, frame: sys.exit(0))\n"
        "print('ready', flush=True)\n"
        "time.sleep(30)\n"
    )

    def cancel_when_ready(stream_name: str, chunk: str) -> None:
        if stream_name == "stdout" and "ready" in chunk:
            token.cancel()

    result = asyncio.run(
        run_tests(
            directory,
            runner_command=(sys.executable, "-c", trap_sigterm),
            output_sink=cancel_when_ready,
            cancellation=token,
        )
    )

    assert result.exit_code == 0
    assert result.success is False
    assert result.duration_ms < 20_000
