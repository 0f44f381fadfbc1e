"""CLI entry point for aiogit."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from aiogit.app import build_wrapper
from aiogit.core.config import AiogitConfig
from aiogit.exceptions import AiogitError, ConfigError
from aiogit.git import formatter

if TYPE_CHECKING:
    from aiogit.git.async_wrapper import AsyncGitWrapper

logger = structlog.get_logger()

COMMANDS = ("status", "log", "version", "summary")
USAGE = "Usage: aiogit [status|log|version|summary] [DIRECTORY]"


async def _run_command(git: AsyncGitWrapper, command: str, config: AiogitConfig) -> str:
    log_opts = {"max_count": config.log_max_entries}
    match command:
        case "status":
            return formatter.format_statuses(await git.status())
        case "log":
            entries = await git.log(options=log_opts)
            return formatter.format_log(entries, config.log_max_entries)
        case "version":
            return formatter.format_version(await git.version())
        case _:
            # status, log and version run concurrently on one loop
            statuses, entries, version = await asyncio.gather(
                git.status(), git.log(options=log_opts), git.version()
            )
            return "\n\n".join(
                [
                    formatter.format_version(version),
                    formatter.format_statuses(statuses),
                    formatter.format_log(entries, config.log_max_entries),
                ]
            )


async def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    command = args[0] if args else "summary"
    if command not in COMMANDS or len(args) > 2:
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    # a DIRECTORY argument takes precedence over AIOGIT_REPOSITORY
    overrides = {"repository": Path(args[1])} if len(args) > 1 else {}
    try:
        config = AiogitConfig(**overrides)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        print("Set AIOGIT_REPOSITORY or create a .env file.", file=sys.stderr)
        sys.exit(1)

    try:
        git = build_wrapper(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        output = await _run_command(git, command, config)
    except AiogitError as e:
        logger.error("cli_command_failed", command=command, error=str(e))
        print(f"git {command} failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(output)


def run() -> None:
    asyncio.run(main())
