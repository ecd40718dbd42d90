# logging_config.py
"""
Structured logging for the invoice desk backend.

Each record is emitted as one JSON line (or plain text when LOG_FORMAT=text)
with the request-scoped context (request_id, actor_id) merged in.

Usage:
     from logging_config import get_logger
     logger = get_logger("ledger")
     logger.info("payment_recorded", extra={"invoice_id": 1, "amount": "10.00"})
"""
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

_LOGGER_PREFIX = "invoicedesk"

_request_id: ContextVar[Optional[str]] = ContextVar("log_request_id", default=None)
_actor_id: ContextVar[Optional[str]] = ContextVar("log_actor_id", default=None)


class LogContext:
     """Async-safe holder for request-scoped log fields."""

     _FIELDS = {"request_id": _request_id, "actor_id": _actor_id}

     @classmethod
     def set(cls, **fields: Any) -> None:
          for name, value in fields.items():
               var = cls._FIELDS.get(name)
               if var is not None and value is not None:
                    var.set(str(value))

     @classmethod
     def get_all(cls) -> dict[str, str]:
          return {name: var.get() for name, var in cls._FIELDS.items() if var.get() is not None}

     @classmethod
     def clear(cls) -> None:
          for var in cls._FIELDS.values():
               var.set(None)


_STDLIB_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {
     "message",
     "asctime",
     "taskName",
}


def _default(obj: Any) -> Any:
     if isinstance(obj, Decimal):
          return str(obj)
     if isinstance(obj, datetime):
          return obj.isoformat()
     return str(obj)


class StructuredFormatter(logging.Formatter):
     """Formats each log record as a single JSON line."""

     def format(self, record: logging.LogRecord) -> str:
          payload: dict[str, Any] = {
               "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
               "level": record.levelname,
               "logger": record.name,
               "message": record.getMessage(),
          }
          payload.update(LogContext.get_all())

          for key, value in vars(record).items():
               if key not in _STDLIB_KEYS and key not in payload:
                    payload[key] = value

          if record.exc_info and record.exc_info[1] is not None:
               exc = record.exc_info[1]
               payload["exc_type"] = type(exc).__name__
               payload["exc_message"] = str(exc)
               if hasattr(exc, "code"):
                    payload["exc_code"] = exc.code
               payload["traceback"] = self.formatException(record.exc_info)

          return json.dumps(payload, default=_default)


class TextFormatter(logging.Formatter):
     def __init__(self):
          super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")

     def format(self, record: logging.LogRecord) -> str:
          line = super().format(record)
          context = LogContext.get_all()
          extras = {k: v for k, v in vars(record).items() if k not in _STDLIB_KEYS}
          context.update(extras)
          if context:
               line += " " + " ".join(f"{k}={v}" for k, v in context.items())
          return line


def get_logger(name: str) -> logging.Logger:
     """Get a logger under the invoicedesk namespace."""
     return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False


def configure_logging(level: str | int = "INFO", fmt: str = "json", stream=None) -> None:
     """Attach a single handler to the invoicedesk logger. Safe to call repeatedly."""
     global _configured
     root = logging.getLogger(_LOGGER_PREFIX)
     if _configured:
          root.setLevel(level)
          return

     handler = logging.StreamHandler(stream or sys.stdout)
     handler.setFormatter(StructuredFormatter() if fmt == "json" else TextFormatter())
     root.addHandler(handler)
     root.setLevel(level)
     root.propagate = False
     _configured = True


def reset_logging() -> None:
     """Remove handlers installed by configure_logging (tests)."""
     global _configured
     root = logging.getLogger(_LOGGER_PREFIX)
     for handler in list(root.handlers):
          root.removeHandler(handler)
     root.propagate = True
     _configured = False
