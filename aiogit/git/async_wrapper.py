"""Non-blocking wrapper around the git command-line interface.

Every operation returns an :class:`asyncio.Future` immediately and resolves
it once git exits, so several git calls can be interleaved with other work
on one event loop::

    git = AsyncGitWrapper("/path/to/repo")

    out, err = await git.run("branch")
    statuses = await git.status()
    git.log("-1", completion=lambda fut: print(fut.result()[0].message))

A failed operation raises from ``future.result()`` (or ``await future``),
never at the call site. Blocking versions of the same operations live on
:attr:`AsyncGitWrapper.blocking`.

Running several write operations against one repository at the same time
is left to the caller to avoid.
"""

from __future__ import annotations

import asyncio
import functools
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from aiogit.exceptions import GitLaunchError
from aiogit.git import features
from aiogit.git.args import parse_args
from aiogit.git.models import GitOutput
from aiogit.git.parsers import parse_log, parse_status, parse_version
from aiogit.git.runner import ProcessRunner, classify_exit, command_cwd, git_env
from aiogit.git.wrapper import GitWrapper, log_options, status_options

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping

    from aiogit.core.config import AiogitConfig
    from aiogit.git.models import LogEntry, Statuses

logger = structlog.get_logger()

T = TypeVar("T")


def completion_future(completion: Any) -> asyncio.Future[Any]:
    """Return the future an operation resolves for *completion*.

    ``None`` creates a fresh future, a future is used as-is and a callable is
    attached to a fresh future as its done-callback.
    """
    if isinstance(completion, asyncio.Future):
        return completion
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()
    if completion is None:
        return future
    if not callable(completion):
        raise TypeError(
            f"completion must be a callable or an asyncio.Future, got {completion!r}"
        )
    future.add_done_callback(completion)
    return future


class AsyncGitWrapper:
    """Run git commands against one repository without blocking the event loop."""

    def __init__(
        self,
        directory: str | Path,
        *,
        git_binary: str | None = None,
        config: AiogitConfig | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.git_binary = git_binary or (config.git_binary if config else "git")
        self._encoding = config.encoding if config else "utf-8"
        self.blocking = GitWrapper(
            self.directory, git_binary=self.git_binary, config=config
        )
        self._version: str | None = None
        self._version_probe: asyncio.Future[str] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self.last_output: list[str] = []
        self.last_error: list[str] = []

    def __getattr__(self, name: str) -> Callable[..., asyncio.Future[GitOutput]]:
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.run, name.replace("_", "-"))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.directory)!r})"

    # -- engine ---------------------------------------------------------

    def run(
        self,
        command: str,
        *args: Any,
        options: Mapping[str, Any] | None = None,
        stdin: str | None = None,
        completion: Any = None,
    ) -> asyncio.Future[GitOutput]:
        """Start ``git <command>`` and return a future for ``(out, err)``.

        The future fails with :class:`GitLaunchError` when git cannot be
        started and with :class:`GitError` when it exits with a failure
        status. A non-zero ``git status`` that printed output and no errors
        counts as success.
        """
        return self._spawn(
            self._execute(command, args, options, stdin), completion
        )

    def _spawn(
        self, coro: Coroutine[Any, Any, T], completion: Any
    ) -> asyncio.Future[T]:
        try:
            future = completion_future(completion)
        except TypeError:
            coro.close()
            raise
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._settle, future))
        return future

    def _settle(self, future: asyncio.Future[Any], task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if future.done():
            logger.warning(
                "git_future_already_resolved",
                cancelled=future.cancelled(),
                directory=str(self.directory),
            )
            if not task.cancelled():
                task.exception()  # mark retrieved
            return
        if task.cancelled():
            future.cancel()
            return
        error = task.exception()
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(task.result())

    async def _execute(
        self,
        command: str,
        args: tuple[Any, ...],
        options: Mapping[str, Any] | None,
        stdin: str | None,
    ) -> GitOutput:
        out: list[str] = []
        err: list[str] = []

        argv, payload = parse_args(command, options, *args)
        if stdin is not None:
            payload = stdin
        cmd = [self.git_binary, *argv]
        logger.debug("git_exec", command=cmd, cwd=str(self.directory))

        runner = ProcessRunner(
            on_stdout=out.append, on_stderr=err.append, encoding=self._encoding
        )
        try:
            returncode = await runner.run(
                cmd,
                stdin=payload,
                cwd=command_cwd(command, self.directory),
                env=git_env(),
            )
        except OSError as e:
            logger.error("git_launch_failed", command=cmd, error=str(e))
            raise GitLaunchError(output=out, error=err, reason=str(e)) from e

        failure = classify_exit(command, out, err, returncode)
        if failure is not None:
            logger.debug("git_exec_failed", command=cmd, status=returncode)
            raise failure

        self.last_output = out
        self.last_error = err
        return GitOutput(out, err)

    # -- parsed operations ----------------------------------------------

    def status(
        self,
        *args: Any,
        options: Mapping[str, Any] | None = None,
        completion: Any = None,
    ) -> asyncio.Future[Statuses]:
        """Resolve with the classified ``git status --porcelain`` output."""
        return self._spawn(self._status(args, options), completion)

    async def _status(
        self, args: tuple[Any, ...], options: Mapping[str, Any] | None
    ) -> Statuses:
        out, _err = await self.run("status", *args, options=status_options(options))
        return parse_status(out)

    def log(
        self,
        *args: Any,
        options: Mapping[str, Any] | None = None,
        completion: Any = None,
    ) -> asyncio.Future[list[LogEntry]]:
        """Resolve with the commits of ``git log``, newest first.

        Pass ``options={"raw": True}`` to also collect the raw file
        modifications of each commit.
        """
        return self._spawn(self._log(args, options), completion)

    async def _log(
        self, args: tuple[Any, ...], options: Mapping[str, Any] | None
    ) -> list[LogEntry]:
        no_abbrev = await self.supports_log_no_abbrev_commit()
        opts = log_options(options, no_abbrev_commit=no_abbrev)
        out, _err = await self.run("log", *args, options=opts)
        return parse_log(out, raw=bool(opts.get("raw")))

    def version(self, *, completion: Any = None) -> asyncio.Future[str]:
        """Resolve with the installed git version, e.g. ``2.40.1``."""
        return self._spawn(self._version_of_git(), completion)

    async def _version_of_git(self) -> str:
        out, _err = await self.run("version")
        self._version = parse_version(out)
        return self._version

    def supports_status_porcelain(self, *, completion: Any = None) -> asyncio.Future[bool]:
        return self._spawn(
            self._supports(features.supports_status_porcelain), completion
        )

    def supports_log_no_abbrev_commit(
        self, *, completion: Any = None
    ) -> asyncio.Future[bool]:
        return self._spawn(
            self._supports(features.supports_log_no_abbrev_commit), completion
        )

    async def _supports(self, check: Callable[[str], bool]) -> bool:
        version = self._version or await self._probe_version()
        return check(version)

    def _probe_version(self) -> asyncio.Future[str]:
        # concurrent callers share one in-flight ``git version`` run
        if self._version_probe is None:
            self._version_probe = self.version()
            self._version_probe.add_done_callback(self._forget_version_probe)
        return asyncio.shield(self._version_probe)

    def _forget_version_probe(self, future: asyncio.Future[str]) -> None:
        self._version_probe = None
