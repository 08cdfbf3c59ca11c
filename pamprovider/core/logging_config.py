"""
Logging for the PAM custom provider.

One root configuration for the whole process: JSON lines for the container
log stream (text for local runs), ARM correlation ids on every record, and
redaction of vault credentials before anything reaches a handler.
"""

import json
import logging
import logging.handlers
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

SERVICE_NAME = "pam-custom-provider"
REDACTED = "***REDACTED***"

# ARM correlation id of the request being served
correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Chatty client libraries; explicit module_levels override these
DEFAULT_MODULE_LEVELS: Dict[str, str] = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
}

_SECRET_KEYS = ("client_secret", "access_token", "password", "secret", "PAMPASS")

_SECRET_PATTERNS = [
    # "Authorization: Bearer <token>" and bare bearer tokens
    re.compile(r"(Bearer\s+)[\w\-.~+/=]+", re.IGNORECASE),
    # key=value, key: value and "key": "value" forms
    re.compile(
        r"(\b(?:" + "|".join(_SECRET_KEYS) + r")\b[\"']?\s*[:=]\s*[\"']?)[^\s&\"',}]+",
        re.IGNORECASE,
    ),
]

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(B|KB|MB|GB)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


def redact(text: str) -> str:
    """Mask bearer tokens, OAuth secrets and vault passwords in ``text``."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + REDACTED, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """Filter that redacts credentials from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        # %-style arguments are merged first so they get the same treatment
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, as the container log stream expects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "module": record.name,
            "message": record.getMessage(),
        }
        corr_id = correlation_id.get()
        if corr_id:
            entry["correlation_id"] = corr_id
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines for local runs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        corr_id = correlation_id.get()
        return f"{line} [correlation_id={corr_id}]" if corr_id else line


_FORMATTERS = {"json": JSONFormatter, "text": TextFormatter}


def _attach(root: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())
    root.addHandler(handler)


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    rotation_count: int = 5,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Configure the root logger for the provider process.

    Replaces any handlers already installed, so calling it again (for
    instance after a config reload) does not duplicate output.

    Args:
        level: Root log level name
        format_type: ``"json"`` or ``"text"``
        log_file: Also write to this file, rotated by size
        rotation_size: Rotation threshold such as ``"10MB"``
        rotation_count: Rotated files to keep
        module_levels: Per-logger levels, e.g. ``{"pamprovider.gateway.reconciler": "DEBUG"}``
    """
    level_name = str(getattr(level, "value", level)).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name))
    root.handlers.clear()

    formatter = _FORMATTERS.get(format_type, TextFormatter)()
    _attach(root, logging.StreamHandler(sys.stdout), formatter)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _attach(
            root,
            logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=_parse_size(rotation_size),
                backupCount=rotation_count,
                encoding="utf-8",
            ),
            formatter,
        )

    levels = {**DEFAULT_MODULE_LEVELS, **(module_levels or {})}
    for name, module_level in levels.items():
        logging.getLogger(name).setLevel(getattr(logging, module_level.upper()))

    root.info(
        f"Logging configured: level={level_name}, format={format_type}"
        + (f", file={log_file}" if log_file else "")
    )


def _parse_size(size_str: str) -> int:
    """Convert ``"10MB"``-style sizes (case and spaces ignored) to bytes."""
    match = _SIZE_PATTERN.match(size_str)
    if not match:
        raise ValueError(f"Invalid size: {size_str!r}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "B").upper()])


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_correlation_id(corr_id: str) -> None:
    correlation_id.set(corr_id)


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def clear_correlation_id() -> None:
    correlation_id.set(None)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log ``message`` with ``context`` attached as structured fields."""
    logger.log(level, message, extra={"context": context} if context else None)
