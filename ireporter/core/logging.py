"""Logging setup for ireporter.

Provides:
- Correlation IDs shared by every log line of one client operation
- Human-readable or JSON output
- LogContext for timing and reporting a command
- An audit logger for document-changing commands (create, update)

Usage:
    from ireporter.core import setup_logging, get_logger, LogContext

    setup_logging(level="INFO")
    log = get_logger(__name__)

    with LogContext("UpdateReport", log, top_id="53") as ctx:
        ctx.add_detail("payload_type", "xmlZip")
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Generator, Optional, Union

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)

_operation_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "operation_context", default={}
)

# Keys masked by sanitize_for_log unless the caller passes its own set
SENSITIVE_KEYS = {"password", "cookie", "session", "token", "secret", "credential"}


# =============================================================================
# Correlation ID Management
# =============================================================================


def get_correlation_id() -> str:
    """Return the current correlation ID, creating one if unset."""
    cid = _correlation_id.get()
    if cid is None:
        cid = generate_correlation_id()
        _correlation_id.set(cid)
    return cid


def set_correlation_id(cid: str) -> None:
    _correlation_id.set(cid)


def generate_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


def clear_correlation_id() -> None:
    _correlation_id.set(None)


# =============================================================================
# Filters and Formatters
# =============================================================================


class ContextFilter(logging.Filter):
    """Attach correlation ID and operation context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()  # type: ignore[attr-defined]
        record.operation_context = _operation_context.get()  # type: ignore[attr-defined]
        return True


class StandardFormatter(logging.Formatter):
    """Plain-text formatter with the correlation ID in brackets."""

    def __init__(self) -> None:
        fmt = "%(asctime)s %(levelname)-8s [%(correlation_id)s] %(name)s: %(message)s"
        super().__init__(fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"  # type: ignore[attr-defined]
        return super().format(record)


_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {
    "message",
    "correlation_id",
    "operation_context",
    "taskName",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None),
        }

        op_ctx = getattr(record, "operation_context", {})
        if op_ctx:
            log_data["context"] = sanitize_for_log(op_ctx)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            log_data["extra"] = sanitize_for_log(extra)

        return json.dumps(log_data, default=str)


# =============================================================================
# Audit Logger
# =============================================================================


class AuditLogger:
    """Audit trail for commands that change documents on the server.

    Usage:
        audit = get_audit_logger()
        audit.log_operation(
            "UpdateReport",
            user="conmasadmin",
            top_id="53",
            details={"type": "xmlZip", "clusters": 2},
        )
    """

    def __init__(self, logger_name: str = "ireporter.audit") -> None:
        self.logger = logging.getLogger(logger_name)

    def log_operation(
        self,
        operation: str,
        *,
        user: Optional[str] = None,
        top_id: Optional[str] = None,
        def_top_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        success: bool = True,
        error: Optional[str] = None,
        duration_ms: Optional[float] = None,
    ) -> None:
        audit_record: dict[str, Any] = {
            "audit": True,
            "operation": operation,
            "success": success,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "correlation_id": get_correlation_id(),
        }

        if user:
            audit_record["user"] = user
        if top_id:
            audit_record["top_id"] = top_id
        if def_top_id:
            audit_record["def_top_id"] = def_top_id
        if details:
            audit_record["details"] = sanitize_for_log(details)
        if error:
            audit_record["error"] = error
        if duration_ms is not None:
            audit_record["duration_ms"] = round(duration_ms, 2)

        level = logging.INFO if success else logging.WARNING
        self.logger.log(level, json.dumps(audit_record, default=str))


_audit_logger: Optional[AuditLogger] = None


def get_audit_logger() -> AuditLogger:
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger


# =============================================================================
# Operation Context
# =============================================================================


class LogContext:
    """Context manager that times one command and logs its outcome.

    Sets the correlation ID and operation context for the duration of the
    block. Exceptions are logged and re-raised.
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        *,
        correlation_id: Optional[str] = None,
        log_entry_exit: bool = True,
        **context: Any,
    ) -> None:
        self.operation = operation
        self.logger = logger or logging.getLogger("ireporter")
        self.log_entry_exit = log_entry_exit
        self.context: dict[str, Any] = {"operation": operation, **context}
        self.start_time: Optional[float] = None
        self.correlation_id = correlation_id or get_correlation_id()
        self._token: Optional[contextvars.Token[dict[str, Any]]] = None
        self._cid_token: Optional[contextvars.Token[Optional[str]]] = None

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        return (time.perf_counter() - self.start_time) * 1000

    def __enter__(self) -> "LogContext":
        self.start_time = time.perf_counter()
        self._token = _operation_context.set(self.context)
        self._cid_token = _correlation_id.set(self.correlation_id)

        if self.log_entry_exit:
            self.logger.debug("Starting %s", self.operation)

        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> bool:
        duration_ms = self.elapsed_ms

        if exc_val is not None:
            self.logger.error(
                "%s failed after %.1fms: %s",
                self.operation,
                duration_ms,
                exc_val,
                extra={"duration_ms": duration_ms, "success": False},
            )
        elif self.log_entry_exit:
            self.logger.info(
                "Completed %s in %.1fms",
                self.operation,
                duration_ms,
                extra={"duration_ms": duration_ms, "success": True},
            )

        if self._token is not None:
            _operation_context.reset(self._token)
        if self._cid_token is not None:
            _correlation_id.reset(self._cid_token)

        return False

    def add_detail(self, key: str, value: Any) -> None:
        self.context[key] = value


@contextmanager
def log_operation(
    operation: str,
    logger: Optional[logging.Logger] = None,
    **context: Any,
) -> Generator[LogContext, None, None]:
    """Shorthand for ``with LogContext(...)``."""
    with LogContext(operation, logger, **context) as ctx:
        yield ctx


# =============================================================================
# Setup
# =============================================================================


def setup_logging(
    level: Union[int, str] = logging.INFO,
    *,
    json_output: bool = False,
    log_file: Optional[str] = None,
    audit_file: Optional[str] = None,
) -> None:
    """Configure the ``ireporter`` logger tree.

    Args:
        level: Logging level name or number.
        json_output: Emit JSON lines instead of plain text.
        log_file: Also write logs to this file.
        audit_file: Write audit records here instead of the console.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger("ireporter")
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    context_filter = ContextFilter()

    formatter: logging.Formatter
    if json_output:
        formatter = JSONFormatter()
    else:
        formatter = StandardFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        root_logger.addHandler(file_handler)

    audit_logger = logging.getLogger("ireporter.audit")
    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    if audit_file:
        audit_handler = logging.FileHandler(audit_file)
        audit_handler.setFormatter(JSONFormatter())
        audit_handler.addFilter(context_filter)
        audit_logger.addHandler(audit_handler)
    else:
        audit_logger.addHandler(console_handler)

    root_logger.propagate = False
    audit_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``ireporter`` namespace."""
    if not name.startswith("ireporter"):
        name = f"ireporter.{name}"
    return logging.getLogger(name)


# =============================================================================
# Masking
# =============================================================================


def mask_sensitive(value: str, visible_chars: int = 4) -> str:
    """Mask all but the last ``visible_chars`` characters, e.g. ``****1234``."""
    if not value or len(value) <= visible_chars:
        return "****"
    return "*" * (len(value) - visible_chars) + value[-visible_chars:]


def sanitize_for_log(
    data: dict[str, Any], sensitive_keys: Optional[set[str]] = None
) -> dict[str, Any]:
    """Return a copy of ``data`` with credential-like values masked."""
    if sensitive_keys is None:
        sensitive_keys = SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        if any(s in key.lower() for s in sensitive_keys):
            result[key] = mask_sensitive(str(value)) if value else None
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value, sensitive_keys)
        else:
            result[key] = value
    return result
