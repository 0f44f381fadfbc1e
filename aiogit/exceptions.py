"""Shared exception types for aiogit."""

from __future__ import annotations


class AiogitError(Exception):
    """Base exception for all aiogit errors."""


class ConfigError(AiogitError):
    """Configuration is invalid or missing."""


class GitError(AiogitError):
    """git exited with a failure status."""

    def __init__(
        self,
        *,
        output: list[str] | None = None,
        error: list[str] | None = None,
        status: int,
    ) -> None:
        self.output = list(output or [])
        self.error = list(error or [])
        self.status = status
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.error:
            return "\n".join(self.error)
        return "git exited non-zero but had no output to stderr"


class GitLaunchError(GitError):
    """The git executable could not be started."""

    def __init__(
        self,
        *,
        output: list[str] | None = None,
        error: list[str] | None = None,
        reason: str = "",
    ) -> None:
        self.reason = reason
        super().__init__(output=output, error=error, status=-1)

    @property
    def message(self) -> str:
        return f"could not launch git: {self.reason}" if self.reason else super().message


class GitParseError(AiogitError):
    """git output did not have the expected structure."""

    def __init__(self, message: str, *, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line
