"""Blocking wrapper around the git command-line interface."""

from __future__ import annotations

import functools
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from aiogit.exceptions import GitLaunchError
from aiogit.git import features
from aiogit.git.args import parse_args
from aiogit.git.parsers import parse_log, parse_status, parse_version
from aiogit.git.runner import BlockingRunner, classify_exit, command_cwd, git_env

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from aiogit.core.config import AiogitConfig
    from aiogit.git.models import LogEntry, Statuses

logger = structlog.get_logger()

LOG_DEFAULTS: dict[str, Any] = {"no_color": True, "pretty": "medium"}


def status_options(options: Mapping[str, Any] | None) -> dict[str, Any]:
    """Copy *options* and force machine-readable status output."""
    return {**(options or {}), "porcelain": True}


def log_options(
    options: Mapping[str, Any] | None, *, no_abbrev_commit: bool
) -> dict[str, Any]:
    opts = {**(options or {}), **LOG_DEFAULTS}
    if no_abbrev_commit:
        opts["no_abbrev_commit"] = True
    return opts


class GitWrapper:
    """Run git commands against one repository, blocking until they finish.

    Any git subcommand is available as a method, with underscores mapped to
    dashes::

        git = GitWrapper("/path/to/repo")
        git.add(".")
        git.commit(options={"message": "initial commit"})
        git.ls_files()
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        git_binary: str | None = None,
        config: AiogitConfig | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.git_binary = git_binary or (config.git_binary if config else "git")
        self._runner = BlockingRunner(encoding=config.encoding if config else "utf-8")
        self._version: str | None = None
        self.last_output: list[str] = []
        self.last_error: list[str] = []

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.run, name.replace("_", "-"))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.directory)!r})"

    def has_git_in_path(self) -> bool:
        return shutil.which(self.git_binary) is not None

    def run(
        self,
        command: str,
        *args: Any,
        options: Mapping[str, Any] | None = None,
        stdin: str | None = None,
    ) -> list[str]:
        """Run ``git <command>`` and return its stdout lines.

        Raises
        ------
        GitLaunchError
            If the git executable cannot be started.
        GitError
            If git exits with a failure status.
        """
        argv, payload = parse_args(command, options, *args)
        if stdin is not None:
            payload = stdin
        cmd = [self.git_binary, *argv]
        logger.debug("git_exec", command=cmd, cwd=str(self.directory))

        try:
            returncode, out, err = self._runner.run(
                cmd,
                stdin=payload,
                cwd=command_cwd(command, self.directory),
                env=git_env(),
            )
        except OSError as e:
            logger.error("git_launch_failed", command=cmd, error=str(e))
            raise GitLaunchError(reason=str(e)) from e

        failure = classify_exit(command, out, err, returncode)
        if failure is not None:
            logger.debug("git_exec_failed", command=cmd, status=returncode)
            raise failure

        self.last_output = out
        self.last_error = err
        return out

    def status(
        self, *args: Any, options: Mapping[str, Any] | None = None
    ) -> Statuses:
        out = self.run("status", *args, options=status_options(options))
        return parse_status(out)

    def log(self, *args: Any, options: Mapping[str, Any] | None = None) -> list[LogEntry]:
        opts = log_options(options, no_abbrev_commit=self.supports_log_no_abbrev_commit())
        out = self.run("log", *args, options=opts)
        return parse_log(out, raw=bool(opts.get("raw")))

    def version(self) -> str:
        self._version = parse_version(self.run("version"))
        return self._version

    def supports_status_porcelain(self) -> bool:
        return features.supports_status_porcelain(self._version or self.version())

    def supports_log_no_abbrev_commit(self) -> bool:
        return features.supports_log_no_abbrev_commit(self._version or self.version())
