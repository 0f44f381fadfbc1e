"""Tests for git data models."""

import pytest
from pydantic import ValidationError

from aiogit.git.models import (
    GitOutput,
    LogEntry,
    RawModification,
    StatusEntry,
    Statuses,
)


class TestStatusEntry:
    def test_create_with_valid_data(self):
        entry = StatusEntry(mode="M", from_path="src/app.py")
        assert entry.mode == "M"
        assert entry.from_path == "src/app.py"
        assert entry.to_path is None

    def test_frozen_immutability(self):
        entry = StatusEntry(mode="M", from_path="src/app.py")
        with pytest.raises(ValidationError):
            entry.from_path = "other.py"  # type: ignore[misc]

    def test_descriptions(self):
        assert StatusEntry(mode="A", from_path="x").description == "added"
        assert StatusEntry(mode="?", from_path="x").description == "unknown"
        assert StatusEntry(mode="UD", from_path="x").description == "deleted by them"

    def test_unknown_mode_described_by_code(self):
        assert StatusEntry(mode="X", from_path="x").description == "X"

    def test_mode_length_validated(self):
        with pytest.raises(ValidationError):
            StatusEntry(mode="", from_path="x")
        with pytest.raises(ValidationError):
            StatusEntry(mode="MMM", from_path="x")


class TestStatuses:
    def test_empty_is_clean(self):
        statuses = Statuses()
        assert statuses.is_dirty() is False
        assert statuses.get("changed") == []

    def test_add_and_get(self):
        statuses = Statuses()
        entry = statuses.add("indexed", "R", "old.py", "new.py")
        assert statuses.get("indexed") == [entry]
        assert statuses.is_dirty() is True

    def test_get_returns_copy(self):
        statuses = Statuses()
        statuses.add("unknown", "?", "a.txt")
        statuses.get("unknown").clear()
        assert len(statuses.unknown) == 1

    def test_unknown_category_rejected(self):
        statuses = Statuses()
        with pytest.raises(ValueError, match="Unknown status category"):
            statuses.add("staged", "M", "a.py")  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="Unknown status category"):
            statuses.get("staged")  # type: ignore[arg-type]

    def test_instances_do_not_share_lists(self):
        first = Statuses()
        first.add("changed", "M", "a.py")
        assert Statuses().changed == []


class TestLogEntry:
    def test_convenience_properties(self):
        entry = LogEntry(
            id="abc",
            attr={"author": "A <a@example.com>", "date": "today"},
            message="Subject\n\nBody\n",
        )
        assert entry.author == "A <a@example.com>"
        assert entry.date == "today"
        assert entry.summary == "Subject"

    def test_missing_attributes(self):
        entry = LogEntry(id="abc")
        assert entry.author is None
        assert entry.date is None
        assert entry.summary == ""
        assert entry.modifications == []

    def test_frozen(self):
        entry = LogEntry(id="abc")
        with pytest.raises(ValidationError):
            entry.message = "changed"  # type: ignore[misc]

    def test_modifications(self):
        mod = RawModification(
            path="a.py",
            change_type="M",
            src_mode="100644",
            dst_mode="100644",
            src_blob="1234567",
            dst_blob="89abcde",
        )
        entry = LogEntry(id="abc", modifications=[mod])
        assert entry.modifications[0].score is None


class TestGitOutput:
    def test_unpacks_to_out_and_err(self):
        result = GitOutput(["line"], ["warning"])
        out, err = result
        assert out == ["line"]
        assert err == ["warning"]
        assert result.out == ["line"]
