"""
RWA SDK - Structured Logging

One JSON object per log record, keyed by ``tx_hash`` so a submission can be
followed from signing through confirmation. Key material is never logged.
"""

import json
import logging
import time
from dataclasses import dataclass, fields as dataclass_fields
from enum import Enum
from typing import Any, Callable, Dict, Optional


class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


@dataclass
class LogEntry:
    """A single structured record."""
    timestamp: float
    level: str
    message: str
    component: str
    operation: Optional[str] = None
    tx_hash: Optional[str] = None
    duration_ms: Optional[float] = None
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        # Shallow: detail values may refuse to be copied.
        values = ((f.name, getattr(self, f.name)) for f in dataclass_fields(self))
        return {name: value for name, value in values if value is not None}

    def to_json(self) -> str:
        # repr() of credentials is redacted, so default=str is safe here
        return json.dumps(self.to_dict(), default=str, sort_keys=True)

    def to_text(self) -> str:
        parts = [f"[{self.level}]", self.message]
        if self.tx_hash:
            parts.append(f"tx_hash={self.tx_hash}")
        if self.duration_ms is not None:
            parts.append(f"took={self.duration_ms:.1f}ms")
        if self.error:
            parts.append(f"error={self.error}")
        return " ".join(parts)


class StructuredLogger:
    """
    Structured logger for the submission pipeline.

    Handlers are left to the application; records go to
    ``logging.getLogger(component)`` unless a logger is passed in.

    Example:
        log = StructuredLogger().bind(chain_id="rwa-1")

        with log.operation("transfer") as op:
            result = pipeline.broadcast(...)
            op.set_tx_hash(result.tx_hash)
    """

    def __init__(
        self,
        component: str = "rwa-sdk",
        logger: Optional[logging.Logger] = None,
        json_output: bool = True,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            component: Name stamped on every entry.
            logger: Destination logger.
            json_output: Emit JSON (True) or a short text line (False).
            context: Fields merged into the details of every entry.
        """
        self.component = component
        self.json_output = json_output
        self.context = dict(context or {})
        self._logger = logger or logging.getLogger(component)

    def bind(self, **context) -> "StructuredLogger":
        """Return a logger that adds ``context`` to every entry."""
        return StructuredLogger(
            component=self.component,
            logger=self._logger,
            json_output=self.json_output,
            context={**self.context, **context},
        )

    def log(
        self,
        level: LogLevel,
        message: str,
        operation: Optional[str] = None,
        tx_hash: Optional[str] = None,
        duration_ms: Optional[float] = None,
        error: Optional[BaseException] = None,
        **details,
    ) -> LogEntry:
        merged = {**self.context, **details}
        entry = LogEntry(
            timestamp=time.time(),
            level=level.name,
            message=message,
            component=self.component,
            operation=operation,
            tx_hash=tx_hash,
            duration_ms=duration_ms,
            details=merged or None,
            error=str(error) if error is not None else None,
        )
        if self._logger.isEnabledFor(level.value):
            self._logger.log(level.value, entry.to_json() if self.json_output else entry.to_text())
        return entry

    def debug(self, message: str, **fields) -> LogEntry:
        return self.log(LogLevel.DEBUG, message, **fields)

    def info(self, message: str, **fields) -> LogEntry:
        return self.log(LogLevel.INFO, message, **fields)

    def warning(self, message: str, **fields) -> LogEntry:
        return self.log(LogLevel.WARNING, message, **fields)

    def error(self, message: str, **fields) -> LogEntry:
        return self.log(LogLevel.ERROR, message, **fields)

    def operation(self, name: str) -> "TimedOperation":
        """Time ``name`` and log its outcome, with the tx hash once known."""
        return TimedOperation(self, name)


class TimedOperation:
    """Context manager returned by ``StructuredLogger.operation``."""

    def __init__(self, logger: StructuredLogger, name: str):
        self.logger = logger
        self.name = name
        self.tx_hash: Optional[str] = None
        self.details: Dict[str, Any] = {}
        self._started = 0.0

    def set_tx_hash(self, tx_hash: str) -> None:
        self.tx_hash = tx_hash

    def add_detail(self, key: str, value: Any) -> None:
        self.details[key] = value

    def __enter__(self) -> "TimedOperation":
        self._started = time.monotonic()
        self.logger.debug(f"Starting {self.name}", operation=self.name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        fields = dict(
            operation=self.name,
            tx_hash=self.tx_hash,
            duration_ms=(time.monotonic() - self._started) * 1000,
            **self.details,
        )
        if exc_val is None:
            self.logger.info(f"Completed {self.name}", **fields)
        else:
            self.logger.error(f"Failed {self.name}", error=exc_val,
                              error_type=type(exc_val).__name__, **fields)


class _CallbackHandler(logging.Handler):
    def __init__(self, callback: Callable[[dict], None]):
        super().__init__()
        self.callback = callback

    def emit(self, record: logging.LogRecord) -> None:
        text = record.getMessage()
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            payload = {"message": text}
        self.callback(payload)


def create_file_logger(
    filepath: str,
    component: str = "rwa-sdk",
    level: LogLevel = LogLevel.INFO,
) -> StructuredLogger:
    """Log JSON lines to ``filepath``."""
    logger = logging.getLogger(f"{component}-file")
    handler = logging.FileHandler(filepath)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level.value)
    return StructuredLogger(component=component, logger=logger)


def create_audit_logger(
    audit_callback: Callable[[dict], None],
    component: str = "rwa-audit",
) -> StructuredLogger:
    """
    Deliver each entry, decoded to a dict, to ``audit_callback``.

    Useful for shipping submission records to an external audit trail.
    """
    logger = logging.getLogger(f"{component}-audit")
    logger.addHandler(_CallbackHandler(audit_callback))
    logger.setLevel(logging.INFO)
    return StructuredLogger(component=component, logger=logger)
