"""Bootstrap: logging setup and wrapper construction."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import structlog

from aiogit.core.config import AiogitConfig
from aiogit.exceptions import ConfigError
from aiogit.git.async_wrapper import AsyncGitWrapper

logger = structlog.get_logger()


def configure_logging(config: AiogitConfig, *, log_dir: Path | None = None) -> None:
    """Set up structlog with console output and optional rotating JSON file handler."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(),
        )
    )
    root_logger.addHandler(console_handler)

    log_dir = log_dir or config.log_dir
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "aiogit.log",
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
            )
        )
        root_logger.addHandler(file_handler)

    # asyncio logs every subprocess transport at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_wrapper(
    config: AiogitConfig | None = None,
    directory: Path | None = None,
) -> AsyncGitWrapper:
    """Create an :class:`AsyncGitWrapper` for *directory* (default: the configured repository)."""
    if config is None:
        config = AiogitConfig()
    configure_logging(config)

    repository = directory or config.repository
    if not repository.is_dir():
        raise ConfigError(f"repository directory does not exist: {repository}")
    wrapper = AsyncGitWrapper(repository, config=config)
    logger.info(
        "wrapper_ready",
        repository=str(repository),
        git_binary=config.git_binary,
    )
    return wrapper
