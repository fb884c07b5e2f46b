"""Structured logging setup for blockclip."""

import structlog
from pathlib import Path
from typing import Any, Optional
import os


VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(log_file: Optional[Path] = None) -> Path:
    """
    Configure structlog for JSON logging to ~/.cache/blockclip/logs/blockclip.log.

    Log level can be controlled via BLOCKCLIP_LOG_LEVEL environment variable:
    - Set to "DEBUG" to see per-field validation and reconciliation details
    - Defaults to "INFO" if not set

    Log levels:
    - DEBUG: Per-block sanitization steps, decoded payload shape
    - INFO: Copy/paste started and completed, symbols created
    - WARNING: Symbol renames, replaced field values, merge retry
    - ERROR: Clipboard failures, rejected merges, malformed payloads

    Args:
        log_file: Override log file location (tests use tmp_path)

    Returns:
        Path of the log file in use

    Example:
        # Enable debug logging
        export BLOCKCLIP_LOG_LEVEL=DEBUG
        blockclip paste doc.json --at 300 200

        # View logs with jq for readability:
        tail -f ~/.cache/blockclip/logs/blockclip.log | jq .
    """
    if log_file is None:
        log_dir = Path.home() / ".cache" / "blockclip" / "logs"
        log_file = log_dir / "blockclip.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    log_level = os.environ.get("BLOCKCLIP_LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LEVELS:
        log_level = "INFO"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a", encoding="utf-8")),
        cache_logger_on_first_use=True,
    )

    return log_file


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("paste_completed", roots=2, created_symbols=1)
    """
    return structlog.get_logger(name)
