"""Serialize git subcommands and their options into an argument vector."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

STDIN_KEY = "stdin"


def _option(name: str, value: Any) -> list[str]:
    name = name.replace("_", "-")
    flag = f"-{name}" if len(name) == 1 else f"--{name}"
    if value is True:
        return [flag]
    if len(name) == 1:
        return [flag, str(value)]
    return [f"{flag}={value}"]


def _expand(name: str, value: Any) -> list[str]:
    if value is None or value is False:
        return []
    if isinstance(value, list | tuple):
        parts: list[str] = []
        for item in value:
            parts.extend(_expand(name, item))
        return parts
    return _option(name, value)


def parse_args(
    command: str,
    options: Mapping[str, Any] | None = None,
    *args: Any,
) -> tuple[list[str], str | None]:
    """Return ``(argv, stdin)`` for ``git <command>``.

    Option keys are sorted, underscores become dashes, one-letter keys
    render as ``-k [value]`` and longer keys as ``--key[=value]``. Keys that
    start with ``-`` are global git options and go before the subcommand.
    A ``stdin`` key is not an option: its value is returned as the payload
    to write to the process.

    >>> parse_args("log", {"max_count": 1, "p": True}, "HEAD")
    (['log', '--max-count=1', '-p', 'HEAD'], None)
    >>> parse_args("status", {"-C": "/tmp"})
    (['-C', '/tmp', 'status'], None)
    """
    if not isinstance(command, str) or not command:
        raise ValueError(f"git command must be a non-empty string, got {command!r}")

    opts = dict(options or {})
    stdin = opts.pop(STDIN_KEY, None)

    pre_cmd: list[str] = []
    cmd: list[str] = [command]
    for name in sorted(opts):
        value = opts[name]
        if name.startswith("-"):
            pre_cmd.extend(_expand(name[1:], value))
        else:
            cmd.extend(_expand(name, value))

    post_cmd = [str(arg) for arg in args]
    return [*pre_cmd, *cmd, *post_cmd], None if stdin is None else str(stdin)
