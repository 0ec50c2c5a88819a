"""
RWA SDK - Event Hooks

Callbacks fired at each step of a submission: around signing, around
broadcast, and when the poller reaches a final state.
"""

import logging
import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, DefaultDict, Dict, List, Optional


class EventType(Enum):
    BEFORE_SIGN = "before_sign"
    AFTER_SIGN = "after_sign"
    BEFORE_BROADCAST = "before_broadcast"
    AFTER_BROADCAST = "after_broadcast"

    TX_CONFIRMED = "tx_confirmed"
    TX_FAILED = "tx_failed"
    TX_TIMED_OUT = "tx_timed_out"

    ON_ERROR = "on_error"


@dataclass
class Event:
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    @property
    def tx_hash(self) -> Optional[str]:
        """Hash of the transaction, once it has been signed."""
        return self.data.get("tx_hash")


EventHandler = Callable[[Event], Optional[Any]]


class EventEmitter:
    """
    Thread-safe registry of lifecycle handlers.

    Handlers run on the emitting thread, which for ``RwaClient.submit`` is a
    worker thread. An exception raised by a handler is turned into an
    ON_ERROR event and never reaches the submission.

    Example:
        emitter = EventEmitter()

        @emitter.on(EventType.TX_CONFIRMED)
        def confirmed(event):
            print(event.tx_hash, event.data["height"])
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._by_type: DefaultDict[EventType, List[EventHandler]] = defaultdict(list)
        self._catch_all: List[EventHandler] = []
        self._lock = threading.Lock()
        self.logger = logger

    def on(self, event_type: EventType) -> Callable[[EventHandler], EventHandler]:
        """Decorator form of ``add_handler``."""
        def register(handler: EventHandler) -> EventHandler:
            self.add_handler(event_type, handler)
            return handler
        return register

    def add_handler(self, event_type: EventType, handler: EventHandler) -> None:
        with self._lock:
            self._by_type[event_type].append(handler)

    def add_global_handler(self, handler: EventHandler) -> None:
        """Register ``handler`` for every event type."""
        with self._lock:
            self._catch_all.append(handler)

    def remove_handler(self, event_type: EventType, handler: EventHandler) -> bool:
        """Unregister ``handler``; False if it was not registered."""
        with self._lock:
            registered = self._by_type.get(event_type, [])
            if handler not in registered:
                return False
            registered.remove(handler)
            return True

    def _snapshot(self, event_type: EventType, include_global: bool = True) -> List[EventHandler]:
        with self._lock:
            handlers = list(self._catch_all) if include_global else []
            handlers.extend(self._by_type.get(event_type, ()))
        return handlers

    def emit(self, event_type: EventType, data: Optional[Dict[str, Any]] = None) -> List[Any]:
        """
        Deliver an event to global handlers, then to handlers for its type.

        Returns:
            The non-None values returned by handlers.
        """
        event = Event(type=event_type, data=dict(data or {}))
        results = []
        for handler in self._snapshot(event_type):
            try:
                value = handler(event)
            except Exception as e:
                if self.logger:
                    self.logger.error("%s handler raised %s: %s", event_type.value, type(e).__name__, e)
                if event_type is not EventType.ON_ERROR:
                    self._report(e, event)
                continue
            if value is not None:
                results.append(value)
        return results

    def _report(self, error: Exception, source: Event) -> None:
        report = Event(EventType.ON_ERROR, {
            "error": error,
            "error_type": type(error).__name__,
            "message": str(error),
            "source_event": source.type.value,
            "tx_hash": source.tx_hash,
        })
        for handler in self._snapshot(EventType.ON_ERROR, include_global=False):
            try:
                handler(report)
            except Exception as e:
                # Reported errors stop here.
                if self.logger:
                    self.logger.error("on_error handler raised %s: %s", type(e).__name__, e)

    def clear(self, event_type: Optional[EventType] = None) -> None:
        """Drop handlers for ``event_type``, or every handler when None."""
        with self._lock:
            if event_type is not None:
                self._by_type.pop(event_type, None)
                return
            self._by_type.clear()
            self._catch_all.clear()

    def handler_count(self, event_type: Optional[EventType] = None) -> int:
        with self._lock:
            if event_type is not None:
                return len(self._by_type.get(event_type, ()))
            return len(self._catch_all) + sum(map(len, self._by_type.values()))


def create_logging_hook(logger: logging.Logger, level: int = logging.INFO) -> EventHandler:
    """Hook that writes one log line per event."""
    def log_event(event: Event) -> None:
        logger.log(level, "rwa event %s tx_hash=%s", event.type.value, event.tx_hash or "-")
    return log_event


def create_audit_hook(audit_callback: Callable[[dict], None]) -> EventHandler:
    """
    Hook that forwards every event, as a dict, to ``audit_callback``.

    Pair it with ``add_global_handler`` to record a full submission trail.
    """
    def audit_event(event: Event) -> None:
        audit_callback({
            "event_type": event.type.value,
            "tx_hash": event.tx_hash,
            "timestamp": event.timestamp,
            "data": event.data,
        })
    return audit_event
