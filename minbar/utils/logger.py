"""Structured logging setup (structlog over the stdlib logging module)"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import structlog


_configured = False


def setup_logger(
    log_level: str = "INFO",
    log_format: str = "console",
    file_path: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        log_level: Standard level name (DEBUG, INFO, ...)
        log_format: "json" for machine-readable lines, anything else for console
        file_path: Optional rotating log file, written in addition to stderr
        max_bytes: Rotation size for the log file
        backup_count: Number of rotated files to keep
    """
    global _configured

    level = getattr(logging, str(log_level).upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers = []
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(level)

    # Uvicorn access logs are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))

    _configured = True


def get_logger(name: str):
    """Return a structlog logger bound to the given module name"""
    if not _configured:
        setup_logger()
    return structlog.get_logger(name)
