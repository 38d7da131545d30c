"""Logging configuration for the UX audit engine."""

import logging
import sys
from pathlib import Path
from typing import Optional

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """Configure logging for the audit engine.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        format_string: Optional custom format string
    """
    if format_string is None:
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def format_event(event: str, **context) -> str:
    """Render an event name with key=value context for log messages.

    Args:
        event: Dotted event name, e.g. "llm.audit.retry"
        **context: Values appended as key=value pairs (None values skipped)

    Returns:
        Single-line log message
    """
    parts = [event]
    parts.extend(f"{key}={value}" for key, value in context.items() if value is not None)
    return " ".join(parts)
