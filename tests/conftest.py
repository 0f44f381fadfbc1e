"""Shared fixtures for aiogit tests."""

from __future__ import annotations

import os
import stat
import subprocess

import pytest

from aiogit.core.config import AiogitConfig


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(AiogitConfig.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("AIOGIT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_fake_git(tmp_path):
    """Write an executable shell script that stands in for the git binary."""

    def _make(body: str, name: str = "fake-git") -> str:
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


def _git(repo, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path):
    """A real repository with two commits, one modified and one untracked file."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "commit.gpgsign", "false")

    (repo / "README.md").write_text("hello\n")
    _git(repo, "add", "README.md")
    _git(repo, "commit", "-q", "-m", "Initial commit")

    (repo / "app.py").write_text("print('hi')\n")
    _git(repo, "add", "app.py")
    _git(repo, "commit", "-q", "-m", "Add app\n\nWith a longer body.")

    (repo / "README.md").write_text("hello world\n")
    (repo / "notes.txt").write_text("scratch\n")
    return repo
