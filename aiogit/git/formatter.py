"""Pure functions to format git data for terminal display."""

from aiogit.git.models import LogEntry, StatusEntry, Statuses

_SECTIONS = (
    ("conflict", "Conflicts:"),
    ("indexed", "Staged:"),
    ("changed", "Unstaged:"),
    ("unknown", "Untracked:"),
)


def _format_entry(entry: StatusEntry) -> str:
    path = entry.from_path
    if entry.to_path:
        path = f"{path} -> {entry.to_path}"
    return f"  {entry.mode:<2} {path} ({entry.description})"


def format_statuses(statuses: Statuses) -> str:
    """Format classified status entries, one section per category."""
    if not statuses.is_dirty():
        return "Working tree clean"

    lines: list[str] = []
    for category, title in _SECTIONS:
        entries = statuses.get(category)
        if not entries:
            continue
        if lines:
            lines.append("")
        lines.append(title)
        lines.extend(_format_entry(entry) for entry in entries)
    return "\n".join(lines)


def format_log(entries: list[LogEntry], max_entries: int = 10) -> str:
    """Format log entries for display."""
    if not entries:
        return "No commits found."

    shown = entries[:max_entries]
    lines: list[str] = ["Recent commits:"]
    for entry in shown:
        lines.append(f"  {entry.id[:12]} {entry.summary}")
        byline = ", ".join(part for part in (entry.author, entry.date) if part)
        if byline:
            lines.append(f"    {byline}")
        for mod in entry.modifications:
            lines.append(f"    {mod.change_type} {mod.path}")

    if len(entries) > max_entries:
        lines.append(f"\n... and {len(entries) - max_entries} more")
    return "\n".join(lines)


def format_version(version: str) -> str:
    return f"git {version}"
