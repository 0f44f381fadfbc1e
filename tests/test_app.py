"""Tests for logging setup and the build_wrapper() bootstrap function."""

from __future__ import annotations

import json
import logging
import logging.handlers
from unittest.mock import patch

import pytest
import structlog

from aiogit.app import build_wrapper, configure_logging
from aiogit.core.config import AiogitConfig
from aiogit.exceptions import ConfigError
from aiogit.git.async_wrapper import AsyncGitWrapper


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestBuildWrapper:
    def test_returns_wrapper_for_repository(self, tmp_path):
        config = AiogitConfig(repository=tmp_path)
        with patch("aiogit.app.configure_logging"):
            git = build_wrapper(config)
        assert isinstance(git, AsyncGitWrapper)
        assert git.directory == tmp_path.resolve()

    def test_directory_overrides_config(self, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        config = AiogitConfig(repository=tmp_path)
        with patch("aiogit.app.configure_logging"):
            git = build_wrapper(config, other)
        assert git.directory == other

    def test_git_binary_from_config(self, tmp_path):
        config = AiogitConfig(repository=tmp_path, git_binary="/opt/git")
        with patch("aiogit.app.configure_logging"):
            git = build_wrapper(config)
        assert git.git_binary == "/opt/git"
        assert git.blocking.git_binary == "/opt/git"

    def test_logging_configured(self, tmp_path):
        config = AiogitConfig(repository=tmp_path)
        with patch("aiogit.app.configure_logging") as mock_configure:
            build_wrapper(config)
        mock_configure.assert_called_once_with(config)


class TestConfigureLogging:
    def test_console_handler_and_level(self, tmp_path, restore_logging):
        config = AiogitConfig(repository=tmp_path, log_level="DEBUG")
        configure_logging(config)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_rotating_json_file(self, tmp_path, restore_logging):
        config = AiogitConfig(repository=tmp_path, log_backup_count=2)
        log_dir = tmp_path / "logs"
        configure_logging(config, log_dir=log_dir)

        root = logging.getLogger()
        file_handlers = [
            h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount == 2

        structlog.get_logger().info("git_exec", command=["git", "status"])
        file_handlers[0].flush()
        record = json.loads((log_dir / "aiogit.log").read_text().splitlines()[-1])
        assert record["event"] == "git_exec"
        assert record["command"] == ["git", "status"]
        assert record["level"] == "info"


class TestBuildWrapperErrors:
    def test_missing_directory_rejected(self, tmp_path):
        config = AiogitConfig(repository=tmp_path)
        with patch("aiogit.app.configure_logging"):
            with pytest.raises(ConfigError, match="does not exist"):
                build_wrapper(config, tmp_path / "missing")
