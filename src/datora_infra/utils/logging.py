"""Structured logging for datora-infra using structlog.

Every module logs through :func:`get_logger`, which yields a structlog logger
rendering one JSON object per event with:
- ISO-8601 timestamps, level and logger name
- Redaction of credential-like keys (tokens, passwords, auth headers)
- Dual output (stdout + optional daily rotating file)

Configuration:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: INFO
- LOG_TO_FILE: Enable file logging (1, true, yes). Default: disabled
- LOG_FILE_DIR: Directory for log files. Default: logs/

Usage:
    >>> from datora_infra.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("http.request.completed", status_code=200, elapsed_ms=12)
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping

import structlog
from structlog.types import EventDict, Processor

from datora_infra.config import get_settings

SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api[_-]?key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^(proxy-)?authorization$", re.IGNORECASE),
    re.compile(r"^(set-)?cookie$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"


def _is_sensitive(key: Any) -> bool:
    return isinstance(key, str) and any(p.match(key) for p in SENSITIVE_PATTERNS)


def sanitize_for_logging(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a mapping before logging.

    Nested mappings (e.g. a headers dict inside an event) are sanitized
    recursively.

    Example:
        >>> sanitize_for_logging({"Authorization": "Bearer x", "Accept": "*/*"})
        {'Authorization': '[REDACTED]', 'Accept': '*/*'}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if _is_sensitive(key):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, Mapping):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor applying :func:`sanitize_for_logging` to every event."""
    return sanitize_for_logging(event_dict)


def _get_log_level() -> int:
    try:
        level_name = get_settings().LOG_LEVEL.upper()
    except Exception:
        # Invalid settings must not prevent logging from coming up
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _should_log_to_file() -> bool:
    return os.getenv("LOG_TO_FILE", "").lower() in ("1", "true", "yes")


def _get_log_file_path() -> Path:
    log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    # Format: datora-infra-YYYYMMDD.log
    date_str = datetime.now().strftime("%Y%m%d")
    return log_dir / f"datora-infra-{date_str}.log"


def _configure_structlog() -> None:
    """Configure stdlib handlers and the structlog processor chain."""
    level = _get_log_level()
    logging.basicConfig(format="%(message)s", level=level, handlers=[])

    stdout_handler = logging.StreamHandler()
    stdout_handler.setLevel(level)
    logging.root.addHandler(stdout_handler)

    if _should_log_to_file():
        file_handler = TimedRotatingFileHandler(
            filename=str(_get_log_file_path()),
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        logging.root.addHandler(file_handler)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(default=str),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


_configure_structlog()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Example:
        >>> logger = bind_context(trace_id="t-1", transaction_id="tx-1")
        >>> logger.info("http.audit.written", index="datora-http-request")
    """
    return structlog.get_logger().bind(**kwargs)
