"""Structured logging framework using structlog.

This module provides centralized logging configuration with:
- ISO-8601 timestamps
- JSON rendering for structured logs
- Automatic sanitization of credentials and request signatures
- Context binding support
- Output on stderr (stdout belongs to lookup results) plus an optional file

Configuration is loaded from lexicon_hub.config.settings:
- LEXICON_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: WARNING
- LEXICON_LOG_FILE: Append logs to this file as well. Default: disabled

Usage:
    >>> from lexicon_hub.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("lookup.store_hit", query="cat")
"""

import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

import structlog
from structlog.types import EventDict, Processor

from lexicon_hub.config import get_settings

# Sensitive key patterns for sanitization
SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^app_?key$", re.IGNORECASE),
    re.compile(r"^sign$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

_handlers: list = []


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Redacts values for keys matching password, token, api_key, secret
    (case-insensitive, substring match) and the provider signing fields
    appKey and sign (exact match).

    Args:
        data: Dictionary that may contain sensitive data

    Returns:
        New dictionary with sensitive values replaced by [REDACTED]

    Example:
        >>> sanitize_for_logging({"sign": "ab12", "q": "cat"})
        {"sign": "[REDACTED]", "q": "cat"}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(pattern.match(str(key)) for pattern in SENSITIVE_PATTERNS):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that redacts sensitive fields in event_dict."""
    return sanitize_for_logging(dict(event_dict))


def _resolve_level(level_name: Optional[str]) -> int:
    if not level_name:
        return logging.WARNING
    return getattr(logging, level_name.upper(), logging.WARNING)


def configure_logging(
    level: Optional[str] = None, log_file: Optional[Path] = None
) -> None:
    """Configure structlog with JSON rendering and sanitization.

    Safe to call more than once; handlers installed by a previous call are
    replaced so the CLI can apply overrides after settings are loaded.

    Args:
        level: Log level name. Falls back to settings, then WARNING.
        log_file: Optional file receiving a copy of every record.
    """
    if level is None:
        try:
            settings_instance = get_settings()
            level = settings_instance.log_level
            log_file = log_file or settings_instance.log_file
        except Exception:
            # Malformed environment must not prevent logging from starting
            level = "WARNING"

    numeric_level = _resolve_level(level)
    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(numeric_level)
    _handlers.append(stderr_handler)

    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(path), encoding="utf-8")
        file_handler.setLevel(numeric_level)
        _handlers.append(file_handler)

    for handler in _handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(numeric_level)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(ensure_ascii=False),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


# Configure structlog on module import
configure_logging()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        A structlog BoundLogger configured with JSON rendering and sanitization
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Example:
        >>> logger = bind_context(table="en", operation="migration")
        >>> logger.info("migration.batch_written", inserted=100)
    """
    return structlog.get_logger().bind(**kwargs)
