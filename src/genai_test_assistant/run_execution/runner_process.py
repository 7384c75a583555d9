"""Supervision of the external test runner child process."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from .run_contracts import ProcessSpawnError

logger = logging.getLogger(__name__)

OutputSink = Callable[[str, str], None]
ProcessLauncher = Callable[
    [Sequence[str], Path, Mapping[str, str]], Awaitable[asyncio.subprocess.Process]
]

_READ_CHUNK_BYTES = 4096
_TERMINATE_GRACE_SECONDS = 5.0
IS_POSIX = os.name == "posix"


class CancellationToken:
    """Cooperative cancellation signal for a running runner task."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(frozen=True)
class RunnerCompletion:
    """Structured completion of one runner process."""

    exit_code: int | None
    stdout: str
    stderr: str
    duration_ms: int
    spawn_error: ProcessSpawnError | None = None
    cancelled: bool = False


def echo_to_console(stream_name: str, chunk: str) -> None:
    """Default sink: mirror each chunk to the matching console stream as it arrives."""
    target = sys.stderr if stream_name == "stderr" else sys.stdout
    target.write(chunk)
    target.flush()


async def launch_subprocess(
    command: Sequence[str], cwd: Path, env: Mapping[str, str]
) -> asyncio.subprocess.Process:
    return await asyncio.create_subprocess_exec(
        *command,
        cwd=str(cwd),
        env=dict(env),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        # npx and the node processes it starts share one signalable group.
        start_new_session=IS_POSIX,
    )


class RunnerProcessTask:
    """Runs the runner as an asyncio task, streaming stdout and stderr independently."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        launcher: ProcessLauncher | None = None,
        output_sink: OutputSink | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._command = tuple(command)
        self._cwd = cwd
        self._env = dict(env)
        self._launcher = launcher or launch_subprocess
        self._output_sink = output_sink or echo_to_console
        self._cancellation = cancellation or CancellationToken()
        self._task: asyncio.Task[RunnerCompletion] | None = None

    @property
    def cancellation(self) -> CancellationToken:
        return self._cancellation

    def start(self) -> asyncio.Task[RunnerCompletion]:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
        return self._task

    def cancel(self) -> None:
        self._cancellation.cancel()

    async def wait(self) -> RunnerCompletion:
        return await self.start()

    async def _run(self) -> RunnerCompletion:
        started = time.monotonic()
        try:
            process = await self._launcher(self._command, self._cwd, self._env)
        except OSError as exc:
            error = ProcessSpawnError(f"Failed to start test process: {exc}")
            logger.error("%s", error)
            return RunnerCompletion(
                exit_code=None,
                stdout="",
                stderr="",
                duration_ms=_elapsed_ms(started),
                spawn_error=error,
            )

        logger.debug("Runner process %s started", process.pid)
        stdout_chunks: list[str] = []
        stderr_chunks: list[str] = []
        exit_waiter = asyncio.create_task(
            self._stream_until_exit(process, stdout_chunks, stderr_chunks)
        )
        cancel_waiter = asyncio.create_task(self._cancellation.wait())
        cancelled = False
        try:
            done, _ = await asyncio.wait(
                {exit_waiter, cancel_waiter}, return_when=asyncio.FIRST_COMPLETED
            )
            if exit_waiter not in done:
                cancelled = True
                logger.warning(
                    "Cancellation requested; terminating runner process %s", process.pid
                )
                await _terminate(process)
            exit_code = await exit_waiter
        finally:
            cancel_waiter.cancel()

        return RunnerCompletion(
            exit_code=exit_code,
            stdout="".join(stdout_chunks),
            stderr="".join(stderr_chunks),
            duration_ms=_elapsed_ms(started),
            cancelled=cancelled,
        )

    async def _stream_until_exit(
        self,
        process: asyncio.subprocess.Process,
        stdout_chunks: list[str],
        stderr_chunks: list[str],
    ) -> int:
        await asyncio.gather(
            self._pump(process.stdout, "stdout", stdout_chunks),
            self._pump(process.stderr, "stderr", stderr_chunks),
        )
        return await process.wait()

    async def _pump(
        self,
        stream: asyncio.StreamReader | None,
        stream_name: str,
        chunks: list[str],
    ) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await stream.read(_READ_CHUNK_BYTES)
            text = decoder.decode(data, final=not data)
            if text:
                chunks.append(text)
                self._output_sink(stream_name, text)
            if not data:
                return


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        _signal_process_group(process, kill=False)
        try:
            await asyncio.wait_for(process.wait(), timeout=_TERMINATE_GRACE_SECONDS)
        except TimeoutError:
            logger.debug("Runner process %s ignored SIGTERM; killing it", process.pid)
            _signal_process_group(process, kill=True)
    except ProcessLookupError:
        logger.debug("Runner process %s already exited", process.pid)


def _signal_process_group(process: asyncio.subprocess.Process, *, kill: bool) -> None:
    if IS_POSIX and os.getpgid(process.pid) == process.pid:
        os.killpg(process.pid, signal.SIGKILL if kill else signal.SIGTERM)
    elif kill:
        process.kill()
    else:
        process.terminate()


def _elapsed_ms(started: float) -> int:
    return max(0, int((time.monotonic() - started) * 1000))
