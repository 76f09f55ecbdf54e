import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from aggregator_service.core.config import get_settings

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Attributes every LogRecord carries; anything else arrived through ``extra=``
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "correlation_id"}

PLAIN_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] [%(correlation_id)s] - %(message)s"

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class CorrelationIdFilter(logging.Filter):
    """Stamps records with the correlation id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or "-"
        return True


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Returns the fields a caller attached with ``logger.x(..., extra={...})``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class StructuredLogFormatter(logging.Formatter):
    """
    One JSON object per line.

    Request metadata passed through ``extra`` (path, method, status, timing)
    becomes top-level keys next to the standard fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        corr_id = correlation_id.get()
        if corr_id:
            entry["correlation_id"] = corr_id

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        for key, value in record_extras(record).items():
            entry.setdefault(key, value)

        return json.dumps(entry, default=str)


def configure_logging(level: Optional[str] = None, structured: Optional[bool] = None) -> None:
    """
    Installs a single stdout handler on the root logger.

    Args:
        level: Log level name; defaults to ``LOG_LEVEL``
        structured: JSON output instead of plain lines; defaults to
            ``ENABLE_STRUCTURED_LOGGING``
    """
    settings = get_settings()
    level = level or settings.LOG_LEVEL
    if structured is None:
        structured = settings.ENABLE_STRUCTURED_LOGGING

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if structured:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_correlation_id(corr_id: Optional[str] = None) -> str:
    """Binds ``corr_id`` (or a fresh UUID) to the current request context."""
    corr_id = corr_id or str(uuid.uuid4())
    correlation_id.set(corr_id)
    return corr_id
