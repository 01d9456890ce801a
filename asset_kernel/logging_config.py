"""
Structured JSON logging for the asset kernel.

Every record under the ``asset_kernel`` logger is written as one JSON
object per line.  The payload carries the standard fields (ts, level,
logger, message), whatever ``LogContext`` currently holds, the record's
``extra`` keys, and for exceptions their type, message, traceback and, for
``AssetKernelError`` subclasses, the error code plus public attributes as
``exc_<name>``.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Mapping
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

_ROOT = "asset_kernel"

# Fields LogContext accepts; anything else is a programming error.
CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor_id",
    "asset_id",
    "assignment_id",
    "request_id",
)

_context: ContextVar[Mapping[str, str]] = ContextVar("asset_kernel_log_context", default={})


def _merged(fields: Mapping[str, Any]) -> dict[str, str]:
    unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
    if unknown:
        raise TypeError(f"Unknown log context fields: {unknown}")
    merged = dict(_context.get())
    merged.update({k: str(v) for k, v in fields.items() if v is not None})
    return merged


class LogContext:
    """
    Request-scoped log fields, safe across threads and asyncio tasks.

    The whole context lives in one ContextVar holding an immutable snapshot,
    so ``bind`` can restore the previous state with a single token.
    """

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Merge non-None fields into the current context."""
        _context.set(_merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set({})

    @classmethod
    def bind(cls, **fields: Any) -> "_Binding":
        """Set fields for the duration of a ``with`` block."""
        return _Binding(fields)


class _Binding:
    def __init__(self, fields: Mapping[str, Any]):
        self._fields = fields
        self._token: Token | None = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(_merged(self._fields))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None


# Attributes every LogRecord has; everything else on a record came from extra=.
_RECORD_ATTRS: frozenset[str] = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
}


def _to_json(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    return str(value)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))
        return json.dumps(payload, default=_to_json)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
            for name, value in vars(exc).items():
                if not name.startswith("_"):
                    fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger under the asset_kernel namespace, e.g. ``get_logger("services.ledger")``."""
    return logging.getLogger(f"{_ROOT}.{name}")


def _is_ours(handler: logging.Handler) -> bool:
    return getattr(handler, "_asset_kernel", False)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``asset_kernel`` logger.

    Idempotent: once a handler has been attached, later calls change nothing
    until ``reset_logging`` runs.  Records do not propagate to the root logger.
    """
    root = logging.getLogger(_ROOT)
    if any(_is_ours(h) for h in root.handlers):
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root.setLevel(level)
    root.propagate = False

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    target._asset_kernel = True
    root.addHandler(target)


def reset_logging() -> None:
    """Drop every handler and return to WARNING. For tests."""
    root = logging.getLogger(_ROOT)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
