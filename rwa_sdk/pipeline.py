"""
RWA SDK - Transaction Pipeline

Runs one logical operation end to end:

    build -> reserve account -> assemble/sign -> broadcast -> release -> confirm

The account lock covers account lookup, signing and broadcast only. It is
never held while polling for confirmation.
"""

from typing import Any, Optional, Sequence

from .config import ClientConfig
from .confirmation import ConfirmationPoller, raise_for_status
from .core.messages import ExecuteMessage, QueryMessage
from .core.transaction import TransactionAssembler, TransactionEnvelope
from .errors import AssemblyError, BroadcastRejectedError, InvalidRequest, RwaError, SigningError
from .events import EventEmitter, EventType
from .fees import FeeCalculator
from .infra.accounts import AccountSequencer
from .infra.keys import SigningCredential
from .infra.rpc import TendermintRPC
from .logging import StructuredLogger
from .models import TransactionResult, TxStatus
from .tasks import CancellationToken


class TransactionPipeline:
    """
    Submission and query path shared by all client operations.

    Holds no per-operation state; the config is passed in at construction
    and every call carries its own messages, credential and token.
    """

    def __init__(
        self,
        config: ClientConfig,
        rpc: Optional[TendermintRPC] = None,
        events: Optional[EventEmitter] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config
        self.rpc = rpc or TendermintRPC(config.rpc_url, timeout=config.request_timeout)
        self.events = events or EventEmitter()
        self.logger = (logger or StructuredLogger()).bind(chain_id=config.chain_id)
        self.assembler = TransactionAssembler(config.chain_id, FeeCalculator(config.gas_price, config.denom))
        self.sequencer = AccountSequencer(self.rpc)
        self.poller = ConfirmationPoller(
            self.rpc,
            poll_interval=config.poll_interval,
            max_attempts=config.max_poll_attempts,
            timeout=config.confirmation_timeout,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def query(self, query: QueryMessage) -> Any:
        """Run a smart query. Never signs or broadcasts."""
        return self.rpc.query_contract(query.contract, query.query_bytes)

    # =========================================================================
    # Submission
    # =========================================================================

    def _check_credential(self, messages: Sequence[ExecuteMessage], credential: Any) -> None:
        if not isinstance(credential, SigningCredential):
            raise SigningError(f"Expected SigningCredential, got {type(credential).__name__}")
        address = credential.address(self.config.address_prefix)
        for msg in messages:
            if msg.sender != address:
                raise InvalidRequest(
                    f"Credential does not belong to sender {msg.sender}",
                    field="credential",
                )

    def broadcast(
        self,
        messages: Sequence[ExecuteMessage],
        gas_limit: int,
        credential: SigningCredential,
        memo: Optional[str] = None,
        operation: str = "execute",
    ) -> TransactionResult:
        """
        Sign and broadcast under the sender's account lock.

        Returns:
            TransactionResult with status SUBMITTED.

        Raises:
            BroadcastRejectedError: CheckTx rejected the transaction.
        """
        messages = tuple(messages)
        if not messages:
            raise AssemblyError("Transaction must contain at least one message")
        self.assembler.fees.fee_for(gas_limit)
        self._check_credential(messages, credential)
        memo = self.config.memo if memo is None else memo
        sender = messages[0].sender

        with self.sequencer.reserve(sender) as reservation:
            account = reservation.account
            self.events.emit(EventType.BEFORE_SIGN, {
                "operation": operation,
                "sender": sender,
                "account_number": account.account_number,
                "sequence": account.sequence,
                "gas_limit": gas_limit,
            })
            envelope = self.assembler.assemble(messages, gas_limit, account, credential, memo)
            self.logger.debug("Signed transaction", operation=operation,
                              tx_hash=envelope.tx_hash, summary=envelope.summary())
            self.events.emit(EventType.AFTER_SIGN, {
                "operation": operation,
                "tx_hash": envelope.tx_hash,
                "fee": str(envelope.fee),
            })

            submitted_height = self.rpc.latest_height()
            self.events.emit(EventType.BEFORE_BROADCAST, {
                "operation": operation,
                "tx_hash": envelope.tx_hash,
                "sequence": envelope.sequence,
            })
            ack = self.rpc.broadcast_tx_sync(envelope.tx_bytes)
            reservation.record(ack)

        self.events.emit(EventType.AFTER_BROADCAST, {
            "operation": operation,
            "tx_hash": ack.tx_hash,
            "accepted": ack.accepted,
            "code": ack.code,
        })

        if not ack.accepted:
            raise BroadcastRejectedError(ack.tx_hash, ack.code, ack.log, ack.codespace)

        self._check_hash(envelope, ack.tx_hash)
        return TransactionResult(
            tx_hash=ack.tx_hash,
            status=TxStatus.SUBMITTED,
            code=ack.code,
            log=ack.log,
            codespace=ack.codespace,
            submitted_height=submitted_height,
        )

    def _check_hash(self, envelope: TransactionEnvelope, reported: str) -> None:
        if reported != envelope.tx_hash:
            self.logger.warning(
                "Node reported a different transaction hash",
                tx_hash=reported,
                local_hash=envelope.tx_hash,
            )

    def confirm(
        self,
        submitted: TransactionResult,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        """
        Poll a submitted transaction to a final state.

        Raises:
            ExecutionError: Included with a non-zero code.
            ConfirmationTimeout: Gave up waiting.
        """
        status = self.poller.poll_until_final(submitted.tx_hash, token)
        data = {
            "tx_hash": status.tx_hash,
            "height": status.height,
            "code": status.code,
            "attempts": status.attempts,
        }
        if status.status == TxStatus.CONFIRMED:
            self.events.emit(EventType.TX_CONFIRMED, data)
        elif status.status == TxStatus.FAILED:
            self.events.emit(EventType.TX_FAILED, dict(data, log=status.log))
        else:
            self.events.emit(EventType.TX_TIMED_OUT, dict(data, reason=status.reason))

        raise_for_status(status)

        result = status.to_result()
        result.submitted_height = submitted.submitted_height
        return result

    def execute(
        self,
        messages: Sequence[ExecuteMessage],
        gas_limit: int,
        credential: SigningCredential,
        memo: Optional[str] = None,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
        operation: str = "execute",
    ) -> TransactionResult:
        """
        Broadcast and, when ``wait`` is set, confirm.

        Args:
            messages: Built messages, all from the same sender.
            gas_limit: Gas limit for the transaction.
            credential: Sender's signing credential.
            memo: Transaction memo (default: config memo).
            wait: Poll for confirmation before returning.
            token: Cancellation token for the confirmation wait.
            operation: Name used in logs and events.

        Returns:
            TransactionResult: CONFIRMED when waited, SUBMITTED otherwise.
        """
        submitted = None
        with self.logger.operation(operation) as op:
            try:
                submitted = self.broadcast(messages, gas_limit, credential, memo, operation)
                op.set_tx_hash(submitted.tx_hash)
                if not wait:
                    return submitted
                result = self.confirm(submitted, token)
                op.add_detail("height", result.height)
                return result
            except RwaError as e:
                if submitted is not None:
                    # Already broadcast: the caller must reconcile by hash.
                    e.details.setdefault("tx_hash", submitted.tx_hash)
                self.events.emit(EventType.ON_ERROR, {
                    "operation": operation,
                    "error": e,
                    "error_type": type(e).__name__,
                    "message": e.message,
                })
                raise

    def close(self) -> None:
        self.rpc.close()
