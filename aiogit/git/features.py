"""Version gates for git options that older releases do not understand."""

import re

from packaging.version import Version

from aiogit.exceptions import GitParseError

_NUMERIC_PREFIX_RE = re.compile(r"\d+(?:\.\d+)*")

STATUS_PORCELAIN_SINCE = Version("1.7.0")
LOG_NO_ABBREV_COMMIT_SINCE = Version("1.7.6")


def numeric_version(version: str) -> Version:
    """Reduce a git version string to a comparable :class:`Version`.

    Vendor suffixes such as ``2.39.3 (Apple Git-146)`` or
    ``2.40.1.windows.1`` are dropped.
    """
    match = _NUMERIC_PREFIX_RE.search(version)
    if match is None:
        raise GitParseError(f"unrecognised git version: {version!r}", line=version)
    return Version(match.group(0))


def supports_status_porcelain(version: str) -> bool:
    return numeric_version(version) >= STATUS_PORCELAIN_SINCE


def supports_log_no_abbrev_commit(version: str) -> bool:
    return numeric_version(version) >= LOG_NO_ABBREV_COMMIT_SINCE
