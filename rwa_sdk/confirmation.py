"""
RWA SDK - Transaction Confirmation Tracking

Polls the node for a broadcast transaction until it is included, fails,
or the caller stops waiting.

    SUBMITTED -> PENDING -> CONFIRMED | FAILED | TIMED_OUT
"""

import base64
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import CODE_OK, DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLL_INTERVAL
from .errors import ConfigurationError, ConfirmationTimeout, ExecutionError
from .infra.rpc import TendermintRPC
from .models import TransactionResult, TxStatus
from .tasks import CancellationToken

# Why polling stopped without a final state
REASON_MAX_ATTEMPTS = "max_attempts"
REASON_TIMEOUT = "timeout"
REASON_CANCELLED = "cancelled"


@dataclass
class ConfirmationStatus:
    """Observed state of a transaction."""
    tx_hash: str
    status: TxStatus
    height: Optional[int] = None
    code: int = CODE_OK
    codespace: str = ""
    log: str = ""
    gas_wanted: int = 0
    gas_used: int = 0
    data: bytes = b""
    events: List[Dict[str, Any]] = field(default_factory=list)
    attempts: int = 0
    elapsed_seconds: float = 0.0
    reason: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return self.status.is_terminal

    @property
    def is_confirmed(self) -> bool:
        return self.status == TxStatus.CONFIRMED

    def to_result(self) -> TransactionResult:
        return TransactionResult(
            tx_hash=self.tx_hash,
            status=self.status,
            code=self.code,
            height=self.height,
            gas_wanted=self.gas_wanted,
            gas_used=self.gas_used,
            data=self.data,
            log=self.log,
            codespace=self.codespace,
            events=list(self.events),
        )


def _parse_included(tx_hash: str, tx: Dict[str, Any]) -> ConfirmationStatus:
    result = tx.get("tx_result") or {}
    code = int(result.get("code") or CODE_OK)
    return ConfirmationStatus(
        tx_hash=tx_hash,
        status=TxStatus.CONFIRMED if code == CODE_OK else TxStatus.FAILED,
        height=int(tx["height"]) if tx.get("height") is not None else None,
        code=code,
        codespace=result.get("codespace") or "",
        log=result.get("log") or "",
        gas_wanted=int(result.get("gas_wanted") or 0),
        gas_used=int(result.get("gas_used") or 0),
        data=base64.b64decode(result.get("data") or ""),
        events=list(result.get("events") or []),
    )


class ConfirmationPoller:
    """
    Tracks transaction inclusion.

    Polling is read-only: calling it any number of times for the same hash
    never changes chain state. Transport errors propagate to the caller.

    Example:
        poller = ConfirmationPoller(rpc, poll_interval=1.0, max_attempts=60)
        status = poller.poll_until_final(tx_hash)
        if status.status == TxStatus.CONFIRMED:
            print(f"Included at {status.height}")
    """

    def __init__(
        self,
        rpc: TendermintRPC,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
    ):
        """
        Initialize confirmation poller.

        Args:
            rpc: Transport used for ``tx`` lookups.
            poll_interval: Seconds between lookups.
            max_attempts: Lookups before giving up.
            timeout: Seconds before giving up, whichever limit comes first.
        """
        if poll_interval < 0:
            raise ConfigurationError("poll_interval cannot be negative")
        if max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        self.rpc = rpc
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout = timeout

    def get_status(self, tx_hash: str) -> ConfirmationStatus:
        """
        Single lookup of a transaction.

        Returns:
            CONFIRMED or FAILED once included, PENDING while not found.
        """
        tx = self.rpc.get_tx(tx_hash)
        if tx is None:
            return ConfirmationStatus(tx_hash=tx_hash, status=TxStatus.PENDING, attempts=1)
        status = _parse_included(tx_hash, tx)
        status.attempts = 1
        return status

    def poll_until_final(
        self,
        tx_hash: str,
        token: Optional[CancellationToken] = None,
    ) -> ConfirmationStatus:
        """
        Poll until the transaction reaches a terminal state.

        Args:
            tx_hash: Hash returned by the broadcast.
            token: Optional cancellation token; cancel or deadline ends polling.

        Returns:
            ConfirmationStatus with status CONFIRMED, FAILED or TIMED_OUT.
        """
        start = time.monotonic()
        attempts = 0
        reason = None

        while True:
            if token is not None and token.stopped:
                reason = REASON_CANCELLED
                break

            attempts += 1
            status = self.get_status(tx_hash)
            elapsed = time.monotonic() - start
            if status.is_final:
                status.attempts = attempts
                status.elapsed_seconds = elapsed
                return status

            if attempts >= self.max_attempts:
                reason = REASON_MAX_ATTEMPTS
                break
            if elapsed >= self.timeout:
                reason = REASON_TIMEOUT
                break

            delay = min(self.poll_interval, self.timeout - elapsed)
            if token is not None:
                if token.wait(delay):
                    reason = REASON_CANCELLED
                    break
            elif delay > 0:
                time.sleep(delay)

        return ConfirmationStatus(
            tx_hash=tx_hash,
            status=TxStatus.TIMED_OUT,
            attempts=attempts,
            elapsed_seconds=time.monotonic() - start,
            reason=reason,
        )

    def wait_for_confirmation(
        self,
        tx_hash: str,
        token: Optional[CancellationToken] = None,
    ) -> ConfirmationStatus:
        """
        Wait for successful inclusion.

        Returns:
            The CONFIRMED status.

        Raises:
            ExecutionError: Included with a non-zero code.
            ConfirmationTimeout: Gave up; the transaction may still land.
        """
        return raise_for_status(self.poll_until_final(tx_hash, token))


def raise_for_status(status: ConfirmationStatus) -> ConfirmationStatus:
    """Return a CONFIRMED status unchanged; raise for FAILED or TIMED_OUT."""
    if status.status == TxStatus.FAILED:
        raise ExecutionError(status.tx_hash, status.code, status.log, status.codespace, status.height)
    if status.status == TxStatus.TIMED_OUT:
        raise ConfirmationTimeout(status.tx_hash, status.attempts, status.elapsed_seconds,
                                  status.reason or REASON_TIMEOUT)
    return status
