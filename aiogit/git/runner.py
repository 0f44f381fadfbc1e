"""Spawn git processes and classify how they exited."""

from __future__ import annotations

import asyncio
import contextlib
import os
import subprocess
from typing import TYPE_CHECKING

import structlog

from aiogit.exceptions import GitError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from pathlib import Path

logger = structlog.get_logger()

# Commands that must not run inside the repository directory.
NO_CHDIR_COMMANDS = frozenset({"clone"})

_ENV_OVERRIDES = {"GIT_EDITOR": ""}

_READ_SIZE = 65536


def git_env(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Build the child environment; git must never wait on an editor."""
    env = os.environ.copy()
    env.update(_ENV_OVERRIDES)
    if overrides:
        env.update(overrides)
    return env


def command_cwd(command: str, directory: Path) -> Path | None:
    return None if command in NO_CHDIR_COMMANDS else directory


def classify_exit(
    command: str, out: list[str], err: list[str], returncode: int
) -> GitError | None:
    """Return the failure for an exited git process, or None on success.

    ``git status`` may exit non-zero while still printing valid output; that
    exit is ignored as long as nothing was written to stderr.
    """
    benign_status = command == "status" and bool(out) and not err
    if returncode != 0 and not benign_status:
        return GitError(output=out, error=err, status=returncode)
    return None


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    while lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


class ProcessRunner:
    """Run one process, streaming each output line to a sink as it arrives."""

    def __init__(
        self,
        *,
        on_stdout: Callable[[str], None],
        on_stderr: Callable[[str], None],
        encoding: str = "utf-8",
    ) -> None:
        self._on_stdout = on_stdout
        self._on_stderr = on_stderr
        self._encoding = encoding

    async def run(
        self,
        argv: Sequence[str],
        *,
        stdin: str | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Run *argv* to completion and return its exit status.

        A negative status means the process was killed by that signal.
        ``OSError`` propagates when the process cannot be spawned.
        """
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=env,
        )
        logger.debug("process_spawned", pid=proc.pid, command=list(argv))
        readers = [
            asyncio.create_task(self._pump(proc.stdout, self._on_stdout)),
            asyncio.create_task(self._pump(proc.stderr, self._on_stderr)),
        ]
        try:
            await self._feed(proc, stdin)
            await asyncio.gather(*readers)
        except BaseException:
            for reader in readers:
                reader.cancel()
            await asyncio.gather(*readers, return_exceptions=True)
            await self._reap(proc)
            raise
        return await proc.wait()

    async def _reap(self, proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            logger.warning("process_killed", pid=proc.pid)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
        await proc.wait()

    async def _feed(self, proc: asyncio.subprocess.Process, stdin: str | None) -> None:
        if proc.stdin is None:
            return
        # git may exit before reading its input
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            if stdin is not None:
                proc.stdin.write(stdin.encode(self._encoding))
                await proc.stdin.drain()
            proc.stdin.close()

    async def _pump(
        self,
        stream: asyncio.StreamReader | None,
        sink: Callable[[str], None],
    ) -> None:
        if stream is None:
            return
        # lines may exceed the StreamReader limit that readline() enforces
        buffer = bytearray()
        while chunk := await stream.read(_READ_SIZE):
            scan_from = len(buffer)
            buffer.extend(chunk)
            start = 0
            while (end := buffer.find(b"\n", scan_from)) != -1:
                sink(self._decode(buffer[start:end]))
                start = scan_from = end + 1
            del buffer[:start]
        if buffer:
            sink(self._decode(buffer))

    def _decode(self, line: bytes | bytearray) -> str:
        return line.decode(self._encoding, errors="replace").removesuffix("\r")


class BlockingRunner:
    """Run one process synchronously via :func:`subprocess.run`."""

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def run(
        self,
        argv: Sequence[str],
        *,
        stdin: str | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> tuple[int, list[str], list[str]]:
        """Return ``(returncode, stdout_lines, stderr_lines)``."""
        completed = subprocess.run(
            list(argv),
            input=stdin if stdin is not None else "",
            capture_output=True,
            text=True,
            encoding=self._encoding,
            errors="replace",
            cwd=cwd,
            env=env,
            check=False,
        )
        return (
            completed.returncode,
            _split_lines(completed.stdout or ""),
            _split_lines(completed.stderr or ""),
        )
