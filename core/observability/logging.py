"""
Structured Logging with Correlation IDs

Provides logging utilities that automatically include:
- request_reference: Links logs to a single proxied ERP request
- method_path: The ERP method being called (e.g. "Item.List")
- storage_id / item_id: The ledger coordinates an operation touched
- operation: The ledger/registry operation name

Usage:
    from core.observability.logging import get_logger, with_correlation

    logger = get_logger(__name__)

    with with_correlation(storage_id="L1", operation="import"):
        logger.info("Importing quantities")  # Automatically includes correlation IDs
"""

import json
import logging
import sys
from contextvars import ContextVar
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from contextlib import contextmanager


# =============================================================================
# Correlation Context
# =============================================================================

@dataclass
class CorrelationContext:
    """Context for correlating logs across a request or store operation."""
    request_reference: Optional[str] = None
    method_path: Optional[str] = None
    storage_id: Optional[str] = None
    item_id: Optional[str] = None
    operation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "CorrelationContext":
        """Create a new context with merged values."""
        data = self.to_dict()
        data.update({k: v for k, v in kwargs.items() if v is not None})
        return CorrelationContext(**data)


_correlation_context: ContextVar[CorrelationContext] = ContextVar(
    "correlation_context",
    default=CorrelationContext()
)


def get_correlation_context() -> CorrelationContext:
    """Get the current correlation context."""
    return _correlation_context.get()


@contextmanager
def with_correlation(**kwargs):
    """
    Context manager to set correlation IDs for logging.

    Usage:
        with with_correlation(method_path="Item.List"):
            logger.info("Proxying")  # Will include method_path
    """
    old_ctx = get_correlation_context()
    new_ctx = old_ctx.merge(**kwargs)
    token = _correlation_context.set(new_ctx)
    try:
        yield new_ctx
    finally:
        _correlation_context.reset(token)


# =============================================================================
# Formatters
# =============================================================================

def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, correlation fields flattened in.

    {"timestamp": "2024-01-09T12:00:00.000+00:00", "level": "INFO",
     "logger": "core.inventory.ledger", "message": "Transferred stock",
     "operation": "transfer", "item_id": "1001", "quantity": 4}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": _record_time(record).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **get_correlation_context().to_dict(),
            **getattr(record, "extra_fields", {}),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """
    2024-01-09 12:00:00 [INFO ] core.inventory.ledger [transfer item:1001]: Transferred stock quantity=4
    """

    _TAGS = (
        ("operation", ""),
        ("method_path", ""),
        ("request_reference", "ref:"),
        ("storage_id", "st:"),
        ("item_id", "item:"),
    )

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_correlation_context().to_dict()
        tags = []
        for name, prefix in self._TAGS:
            if name in ctx:
                value = ctx[name][:12] if name == "request_reference" else ctx[name]
                tags.append(f"{prefix}{value}")

        msg = (
            f"{_record_time(record):%Y-%m-%d %H:%M:%S} [{record.levelname:5}] "
            f"{record.name} [{' '.join(tags) or '-'}]: {record.getMessage()}"
        )
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            msg += " " + " ".join(f"{k}={v}" for k, v in extra_fields.items())
        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        return msg


# =============================================================================
# Logger with Correlation Support
# =============================================================================

class CorrelatedLogger:
    """
    Thin wrapper over logging.Logger.

    Correlation context is read by the formatters at emit time; this wrapper
    only carries per-call `extra_fields` onto the record.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def log(self, level: int, msg: str, *args, extra_fields: Optional[Dict[str, Any]] = None,
            exc_info: Any = None) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if exc_info is True:
            exc_info = sys.exc_info()
        record = self._logger.makeRecord(
            self._logger.name, level, "(unknown file)", 0, msg, args, exc_info,
        )
        record.extra_fields = dict(extra_fields or {})
        self._logger.handle(record)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        kwargs["exc_info"] = True
        self.log(logging.ERROR, msg, *args, **kwargs)


# =============================================================================
# Logger Factory
# =============================================================================

APP_LOGGERS = ("api", "core", "connectors", "reconciliation", "scripts")
QUIET_LOGGERS = ("aiohttp", "httpx", "uvicorn.access")

_loggers: Dict[str, CorrelatedLogger] = {}
_handler: Optional[logging.Handler] = None


def configure_logging(level: int = logging.INFO, json_format: bool = False) -> None:
    """
    Install the console handler on the root logger.

    Safe to call more than once: later calls swap the level and formatter of
    the already-installed handler instead of adding another one.
    """
    global _handler

    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        logging.getLogger().addHandler(_handler)

    _handler.setLevel(level)
    _handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())
    logging.getLogger().setLevel(level)

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> CorrelatedLogger:
    """Correlated logger for a module (typically __name__)."""
    if name not in _loggers:
        if _handler is None:
            configure_logging()
        _loggers[name] = CorrelatedLogger(logging.getLogger(name))
    return _loggers[name]
