"""Data models for git command results."""

from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

StatusCategory = Literal["conflict", "unknown", "changed", "indexed"]

STATUS_CATEGORIES: tuple[StatusCategory, ...] = (
    "conflict",
    "unknown",
    "changed",
    "indexed",
)

_MODE_DESCRIPTIONS = {
    "M": "modified",
    "A": "added",
    "D": "deleted",
    "R": "renamed",
    "C": "copied",
    "T": "type changed",
    "U": "conflict",
    "?": "unknown",
    "DD": "both deleted",
    "AA": "both added",
    "UU": "both modified",
    "AU": "added by us",
    "DU": "deleted by us",
    "UA": "added by them",
    "UD": "deleted by them",
}


class GitOutput(NamedTuple):
    """Collected output of one git invocation."""

    out: list[str]
    err: list[str]


class StatusEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: str = Field(min_length=1, max_length=2)
    from_path: str
    to_path: str | None = None

    @property
    def description(self) -> str:
        return _MODE_DESCRIPTIONS.get(self.mode, self.mode)


class Statuses(BaseModel):
    """Classified output of ``git status --porcelain``."""

    conflict: list[StatusEntry] = []
    unknown: list[StatusEntry] = []
    changed: list[StatusEntry] = []
    indexed: list[StatusEntry] = []

    def add(
        self,
        category: StatusCategory,
        mode: str,
        from_path: str,
        to_path: str | None = None,
    ) -> StatusEntry:
        if category not in STATUS_CATEGORIES:
            raise ValueError(f"Unknown status category: {category}")
        entry = StatusEntry(mode=mode, from_path=from_path, to_path=to_path)
        getattr(self, category).append(entry)
        return entry

    def get(self, category: StatusCategory) -> list[StatusEntry]:
        if category not in STATUS_CATEGORIES:
            raise ValueError(f"Unknown status category: {category}")
        return list(getattr(self, category))

    def is_dirty(self) -> bool:
        return any(getattr(self, category) for category in STATUS_CATEGORIES)


class RawModification(BaseModel):
    """One line of ``--raw`` diff output."""

    model_config = ConfigDict(frozen=True)

    path: str
    change_type: str
    src_mode: str
    dst_mode: str
    src_blob: str
    dst_blob: str
    score: int | None = None


class LogEntry(BaseModel):
    """A single commit parsed from ``git log --pretty=medium``."""

    model_config = ConfigDict(frozen=True)

    id: str
    attr: dict[str, str] = {}
    message: str = ""
    modifications: list[RawModification] = []

    @property
    def author(self) -> str | None:
        return self.attr.get("author")

    @property
    def date(self) -> str | None:
        return self.attr.get("date")

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]
