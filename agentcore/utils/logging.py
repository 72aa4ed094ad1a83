"""Structured logging setup."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

logger = structlog.get_logger()

DEFAULT_LEVEL = "info"

# Accepted level names, lowest severity first
LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_ALIASES = {"warn": "warning", "fatal": "critical"}


def normalize_level(value: Any) -> str | None:
    """Canonical level name for ``value``, or None if it is not a level."""
    if not isinstance(value, str):
        return None
    name = value.strip().lower()
    name = _ALIASES.get(name, name)
    return name if name in LEVELS else None


def coerce_level(value: Any) -> str:
    """Like ``normalize_level`` but falls back to the default with a warning."""
    level = normalize_level(value)
    if level is None:
        logger.warning("Invalid log level, falling back", value=value, fallback=DEFAULT_LEVEL)
        return DEFAULT_LEVEL
    return level


def configure_logging(level: str = DEFAULT_LEVEL, fmt: str = "console") -> None:
    """Configure structlog with a level threshold and a renderer.

    Calls below ``level`` are dropped. ``fmt`` is ``console`` for
    human-readable output or ``json`` for one JSON object per line.
    """
    name = normalize_level(level) or DEFAULT_LEVEL

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LEVELS[name]),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
