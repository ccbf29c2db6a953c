"""Structured logging for the org-outline command line.

Library modules (parser, exporter, config) never log; parse problems reach
the caller as ``ParseWarning`` values. Only the CLI configures structlog and
records what it did, so importing ``org_outline`` leaves the host
application's logging alone.
"""

import os
import sys
from pathlib import Path
from typing import Any, Optional, TextIO, Union

import structlog


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
STDERR = "-"

# Stream opened by the last configure_logging() call, closed on reconfigure
_owned_stream: Optional[TextIO] = None


def default_log_file() -> Path:
    """Return ~/.cache/org-outline/logs/org-outline.log."""
    return Path.home() / ".cache" / "org-outline" / "logs" / "org-outline.log"


def resolve_log_level(level: Optional[str] = None) -> str:
    """Pick the level from the argument, then ORG_OUTLINE_LOG_LEVEL, then INFO.

    Unknown names fall back to INFO.
    """
    level = (level or os.environ.get("ORG_OUTLINE_LOG_LEVEL") or "INFO").upper()
    return level if level in LOG_LEVELS else "INFO"


def configure_logging(destination: Union[Path, str, None] = None, level: Optional[str] = None) -> None:
    """
    Point structlog at a log file, or at stderr.

    Files get one JSON object per line; stderr gets plain key=value lines.
    Calling this again closes the file opened by the previous call.

    Args:
        destination: Log file path, ``"-"`` for stderr, or None for
            ORG_OUTLINE_LOG_FILE or else ~/.cache/org-outline/logs/org-outline.log
        level: DEBUG, INFO, WARNING or ERROR (default: ORG_OUTLINE_LOG_LEVEL or INFO)

    Example:
        ORG_OUTLINE_LOG_LEVEL=DEBUG org-outline --log-file - check notes.org

        # View the file log with jq:
        tail -f ~/.cache/org-outline/logs/org-outline.log | jq .
    """
    global _owned_stream

    if destination is None:
        destination = os.environ.get("ORG_OUTLINE_LOG_FILE") or default_log_file()

    if _owned_stream is not None:
        _owned_stream.close()
        _owned_stream = None

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if str(destination) == STDERR:
        stream = sys.stderr
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        log_file = Path(destination)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        stream = _owned_stream = log_file.open("a", encoding="utf-8")
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level(level)),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        # Module-level loggers must follow a reconfigured destination
        cache_logger_on_first_use=False,
    )


def reset_logging() -> None:
    """Close the log file and restore structlog's defaults."""
    global _owned_stream

    if _owned_stream is not None:
        _owned_stream.close()
        _owned_stream = None
    structlog.reset_defaults()


def get_logger(name: str) -> Any:
    """Get a structured logger bound to ``name``."""
    return structlog.get_logger(name)
