"""Logging configuration for kinoparse."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Playwright's driver and asyncio are chatty at DEBUG
QUIET_LOGGERS = ('asyncio', 'playwright')


def _resolve_log_file(log_file: str) -> Path:
    """A directory (existing, or given with a trailing slash) gets a per-run file name."""
    path = Path(log_file)
    if path.is_dir() or log_file.endswith(("/", "\\")):
        path = path / f"kinoparse_{datetime.now().strftime('%Y-%m-%d_%H%M%S')}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    quiet_loggers: Iterable[str] = QUIET_LOGGERS,
) -> Optional[Path]:
    """Configure logging for a scraping run.

    Batches run for hours, so the log file is the usual record of which
    titles hit a captcha or an unexpected page layout.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, or a directory for per-run files
        format_string: Optional custom format string
        quiet_loggers: Library loggers capped at WARNING

    Returns:
        Path of the log file in use, if any
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]

    log_path = None
    if log_file:
        log_path = _resolve_log_file(log_file)
        # Movie names are Cyrillic
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=numeric_level,
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_path


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
