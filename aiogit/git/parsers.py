"""Parsers turning line-oriented git output into typed results.

All parsers are pure functions over a list of output lines (trailing newlines
already stripped), so the blocking and the async wrappers share them.
"""

from __future__ import annotations

import re
from collections import deque
from typing import TYPE_CHECKING

from aiogit.exceptions import GitParseError
from aiogit.git.models import LogEntry, RawModification, Statuses

if TYPE_CHECKING:
    from collections.abc import Iterable

STATUS_CONFLICTS = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

_VERSION_PREFIX = "git version "

_STATUS_RE = re.compile(r"^(.)(.) (.*?)(?: -> (.*))?$")
_COMMIT_RE = re.compile(r"^commit (\S+)")
_HEADER_RE = re.compile(r"^(\S+):\s+(.+)$")
_INDENT_RE = re.compile(r"^(\s*)")
_RAW_RE = re.compile(
    r"^:(\d{6}) (\d{6}) ([0-9a-f]{7,})(?:\.\.\.)? ([0-9a-f]{7,})(?:\.\.\.)? "
    r"([A-Z])(\d*)\t(.*)$"
)


def parse_status(lines: Iterable[str]) -> Statuses:
    """Classify ``git status --porcelain`` lines.

    A single line yields up to two entries: ``indexed`` for the index column
    and ``changed`` for the work-tree column. Conflicts and untracked paths
    yield exactly one entry.

    Raises
    ------
    GitParseError
        If a line does not look like porcelain output.
    """
    statuses = Statuses()
    for line in lines:
        match = _STATUS_RE.match(line)
        if match is None:
            raise GitParseError(f"unhandled status line: {line!r}", line=line)
        x, y, from_path, to_path = match.groups()

        if x + y in STATUS_CONFLICTS:
            statuses.add("conflict", x + y, from_path, to_path)
        elif x == "?" and y == "?":
            statuses.add("unknown", "?", from_path, to_path)
        else:
            if y != " ":
                statuses.add("changed", y, from_path, to_path)
            if x != " ":
                statuses.add("indexed", x, from_path, to_path)
    return statuses


def parse_log(lines: Iterable[str], *, raw: bool = False) -> list[LogEntry]:
    """Parse ``git log --pretty=medium`` output into commit records.

    Parameters
    ----------
    lines:
        Output lines in git's order.
    raw:
        Also consume the ``--raw`` modification lines following each message.

    Raises
    ------
    GitParseError
        On a missing ``commit <id>`` header or a header block that is not
        followed by a blank line.
    """
    buffer = deque(lines)
    entries: list[LogEntry] = []

    while buffer:
        line = buffer.popleft()
        match = _COMMIT_RE.match(line)
        if match is None:
            raise GitParseError(f"unhandled: {line}", line=line)
        commit_id = match.group(1)

        attr: dict[str, str] = {}
        line = buffer.popleft() if buffer else ""
        while header := _HEADER_RE.match(line):
            attr[header.group(1).lower()] = header.group(2)
            line = buffer.popleft() if buffer else ""

        if line:
            raise GitParseError(
                "no blank line separating head from message", line=line
            )

        indent = _INDENT_RE.match(buffer[0]).group(1) if buffer else ""

        message_lines: list[str] = []
        while buffer and not _COMMIT_RE.match(buffer[0]):
            line = buffer.popleft()
            if not line:
                break
            if indent and line.startswith(indent):
                line = line[len(indent) :]
            message_lines.append(f"{line}\n")

        modifications: list[RawModification] = []
        if raw:
            while buffer and (mod := _RAW_RE.match(buffer[0])):
                buffer.popleft()
                src_mode, dst_mode, src_blob, dst_blob, change, score, path = (
                    mod.groups()
                )
                modifications.append(
                    RawModification(
                        path=path,
                        change_type=change,
                        src_mode=src_mode,
                        dst_mode=dst_mode,
                        src_blob=src_blob,
                        dst_blob=dst_blob,
                        score=int(score) if score else None,
                    )
                )
            # git separates the raw block from the next commit with one blank line
            if modifications and buffer and not buffer[0]:
                buffer.popleft()

        entries.append(
            LogEntry(
                id=commit_id,
                attr=attr,
                message="".join(message_lines),
                modifications=modifications,
            )
        )

    return entries


def parse_version(lines: list[str]) -> str:
    """Return the version from ``git version`` output, e.g. ``2.40.1``."""
    if not lines:
        raise GitParseError("git version produced no output")
    first = lines[0]
    if first.startswith(_VERSION_PREFIX):
        return first[len(_VERSION_PREFIX) :]
    return first
