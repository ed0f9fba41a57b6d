"""Centralized logging configuration for CLI and serverless environments."""

import logging
import logging.handlers
from pathlib import Path

import structlog

from watch_core.config import LoggingConfig

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def configure_logging(config: LoggingConfig | None = None, json_output: bool = False) -> None:
    """
    Configure structlog and stdlib logging.

    Args:
        config: Logging section of the settings. Defaults are used when omitted, which
            lets the serverless handler log before the rest of the settings validate.
        json_output: If True, use JSON rendering (serverless). If False, use
            human-readable console output (CLI).

    Note:
        Idempotent; safe to call on every invocation. Falls back to console-only
        output when the log file cannot be created.
    """
    config = config or LoggingConfig()
    log_level = _parse_level(config.level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_build_formatter(json_output, colors=not json_output))
    handlers: list[logging.Handler] = [console_handler]

    log_path = Path(config.file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10_485_760,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(_build_formatter(json_output, colors=False))
        handlers.append(file_handler)
    except (OSError, PermissionError) as e:
        print(f"Warning: Could not create log file {log_path}: {e}")
        print("Falling back to console-only logging")

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _parse_level(level: str) -> int:
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        print(f"Warning: Invalid log level '{level}', defaulting to INFO")
        return logging.INFO
    return level_value


def _build_formatter(json_output: bool, colors: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=colors)
    )
    return structlog.stdlib.ProcessorFormatter(
        processors=_SHARED_PROCESSORS
        + [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=_SHARED_PROCESSORS,
    )
