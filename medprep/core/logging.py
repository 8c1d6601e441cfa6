"""Structured JSON logging configuration."""

import logging
import sys
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any

from pythonjsonlogger import jsonlogger

from medprep.common.metadata import coerce_metadata
from medprep.core.config import settings

# Attributes present on every LogRecord; anything else came in through `extra=`
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

# Loggers whose records must never be written back to the document store
_DOCUMENT_SINK_EXCLUDED = ("pymongo", "medprep.core.document_store")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with consistent fields."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        # Standard fields
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["msg"] = record.getMessage()

        log_record.pop("message", None)
        log_record.pop("asctime", None)


class DocumentStoreHandler(logging.Handler):
    """Write log records to the `system_logs` collection of the document store.

    Writes are best-effort: a failed insert is reported to the fallback console sink
    (stderr) and the handler stays quiet for `cooldown_seconds` so an unreachable store
    does not add its connect timeout to every request.
    """

    def __init__(
        self,
        collection: Any,
        service: str,
        level: int = logging.INFO,
        cooldown_seconds: float = 30.0,
        fallback_stream: Any = None,
    ):
        super().__init__(level=level)
        self.collection = collection
        self.service = service
        self.cooldown_seconds = cooldown_seconds
        self.fallback_stream = fallback_stream
        self._suspended_until = 0.0

    def build_document(self, record: logging.LogRecord) -> dict[str, Any]:
        extra = {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}
        user_id = extra.pop("user_id", None)
        session_id = extra.pop("session_id", None)
        document: dict[str, Any] = {
            "level": _document_level(record.levelno),
            "message": record.getMessage(),
            "service": extra.pop("service", None) or self.service,
            "logger": record.name,
            "metadata": coerce_metadata(extra),
            "createdAt": datetime.fromtimestamp(record.created, tz=timezone.utc),
        }
        if user_id is not None:
            document["userId"] = str(user_id)
        if session_id is not None:
            document["sessionId"] = str(session_id)
        if record.exc_info:
            document["stack"] = logging.Formatter().formatException(record.exc_info)
        return document

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith(_DOCUMENT_SINK_EXCLUDED):
            return
        now = time.monotonic()
        if now < self._suspended_until:
            return
        try:
            self.collection.insert_one(self.build_document(record))
        except Exception as e:
            self._suspended_until = now + self.cooldown_seconds
            stream = self.fallback_stream or sys.stderr
            try:
                stream.write(
                    f"[logging] document store sink failed ({type(e).__name__}: {e}); "
                    f"original record: {record.levelname} {record.name}: {record.getMessage()}\n"
                )
                stream.flush()
            except Exception:
                # Nothing left to report to
                pass


def _document_level(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


def _json_formatter() -> CustomJsonFormatter:
    return CustomJsonFormatter(
        "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def setup_logging() -> None:
    """Configure application logging."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Remove existing handlers
    root_logger.handlers.clear()

    formatter = _json_formatter()

    # Console handler (always JSON for consistency)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        file_handler = RotatingFileHandler(settings.LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Set levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def attach_document_sink(collection: Any) -> DocumentStoreHandler:
    """Add (or replace) the document-store handler on the root logger."""
    detach_document_sink()
    handler = DocumentStoreHandler(collection, service=settings.LOG_SERVICE_NAME)
    logging.getLogger().addHandler(handler)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def detach_document_sink() -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, DocumentStoreHandler):
            root_logger.removeHandler(handler)
