"""
RWA SDK - Cancellation and Background Submission

CancellationToken lets a caller stop waiting for confirmation. It never
touches a transaction that was already broadcast: cancelling only ends the
local wait.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from .constants import DEFAULT_MAX_WORKERS


class CancellationToken:
    """
    Cooperative cancellation flag with an optional deadline.

    Example:
        token = CancellationToken(timeout=30)
        future = client.submit(client.transfer, request, token=token)
        ...
        token.cancel()     # poller stops at its next check
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now after which the token counts as expired.
        """
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def stopped(self) -> bool:
        """True once cancelled or past the deadline."""
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to ``seconds``, waking early on cancel or deadline.

        Returns:
            True if the token stopped during (or before) the wait.
        """
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self._event.wait(max(0.0, seconds))
        return self.stopped

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled}, remaining={self.remaining()})"


class SubmissionExecutor:
    """
    Thread pool for running client operations in the background.

    Each submitted call runs the whole operation (build, sign, broadcast,
    confirm) and its Future resolves to the operation's result or raises
    its error.
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, fn: Callable[..., Any], *args, **kwargs) -> Future:
        with self._lock:
            if self._closed:
                raise RuntimeError("SubmissionExecutor is shut down")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="rwa-submit"
                )
            return self._executor.submit(fn, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
