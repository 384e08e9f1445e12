"""Structured JSON logging for the cashbook packages."""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from typing import Any, Iterator

# ---------------------------------------------------------------------------
# Document context
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("sequence_key", "document_key")

_context: ContextVar[tuple[tuple[str, str], ...]] = ContextVar(
    "cashbook_log_context", default=()
)


class LogContext:
    """
    Fields stamped on every log line emitted inside a ``bind()`` block.

    ``sequence_key`` is bound while a code is being allocated and
    ``document_key`` while a document carrying that code is written, so
    the allocation, the insert and any failure share one key.
    """

    FIELDS = _CONTEXT_FIELDS

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Layer ``fields`` over the current context until the block exits."""
        unknown = set(fields) - set(_CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
        merged = dict(_context.get())
        merged.update((k, str(v)) for k, v in fields.items() if v is not None)
        token = _context.set(tuple(merged.items()))
        try:
            yield
        finally:
            _context.reset(token)

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(())


# ---------------------------------------------------------------------------
# JSON lines
# ---------------------------------------------------------------------------

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _jsonable(value: Any) -> Any:
    """Money and ids are logged as strings so no precision is lost."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """
    Describe ``exc`` for a log line.

    CashbookError subclasses add their ``code`` and every public attribute
    (sequence_key, attempts, ...) prefixed with ``exc_``.
    """
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if name != "code" and not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, message, context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_jsonable)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

ROOT_LOGGER_NAME = "cashbook"

_setup_lock = threading.Lock()
_configured = False


def get_logger(name: str) -> logging.Logger:
    """``get_logger("services.sequence")`` -> logger ``cashbook.services.sequence``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``cashbook`` logger.

    Only the first call has an effect; later calls (engine setup calls this
    too) leave the existing handler and level alone.
    """
    global _configured
    with _setup_lock:
        if _configured:
            return
        _configured = True

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``.  Tests only."""
    global _configured
    with _setup_lock:
        _configured = False
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
