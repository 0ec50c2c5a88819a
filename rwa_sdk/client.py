"""
RWA SDK - Main Client

High-level interface for the token, identity and compliance modules.
This is the primary entry point for SDK users.
"""

import logging
import string
from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Union

from .config import ClientConfig
from .confirmation import ConfirmationStatus
from .core.messages import ExecuteMessage, MessageBuilder, QueryMessage
from .errors import InvalidRequest, RpcResponseError
from .events import EventEmitter, EventType
from .infra.rpc import TendermintRPC
from .logging import StructuredLogger
from .models import (
    AddClaimRequest,
    BalanceResult,
    CheckComplianceRequest,
    Claim,
    ComplianceModuleRequest,
    ComplianceResult,
    GetValidatedClaimsRequest,
    RegisterIdentityRequest,
    RemoveClaimRequest,
    RemoveIdentityRequest,
    TokenInfo,
    TokenInfoRequest,
    TransactionResult,
    TransferFromRequest,
    TransferRequest,
    TxStatus,
    UpdateIdentityRequest,
)
from .pipeline import TransactionPipeline
from .tasks import CancellationToken, SubmissionExecutor


class RwaClient:
    """
    High-level client for RWA operations.

    Every mutating call is one logical unit: build, sign, broadcast and (by
    default) confirm. Read-only calls go straight to the node as queries.

    Example:
        client = RwaClient(ClientConfig.from_file("client_config.json"))
        credential = SigningCredential.from_hex(os.environ["RWA_SIGNER_KEY"])
        sender = credential.address(client.config.address_prefix)

        result = client.transfer(TransferRequest(sender, recipient, 100, 200_000, credential))
        print(result.tx_hash, result.height)

        @client.on(EventType.TX_CONFIRMED)
        def on_confirmed(event):
            print(f"Confirmed: {event.data['tx_hash']}")

        # Background submission
        future = client.submit(client.transfer, request, token=CancellationToken(timeout=30))
        result = future.result()
    """

    def __init__(
        self,
        config: ClientConfig,
        rpc: Optional[TendermintRPC] = None,
        logger: Optional[logging.Logger] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize RWA client.

        Args:
            config: Client configuration; validated here.
            rpc: Optional transport (default: TendermintRPC for config.rpc_url).
            logger: Optional Python logger for structured logging.
            max_workers: Thread count for ``submit()`` (default: 4).
        """
        self.config = config.validate()
        self.events = EventEmitter(logger)
        self.logger = StructuredLogger(logger=logger)
        self.messages = MessageBuilder.from_config(config)
        self.pipeline = TransactionPipeline(config, rpc=rpc, events=self.events, logger=self.logger)
        self._executor = SubmissionExecutor(max_workers) if max_workers else SubmissionExecutor()

    @classmethod
    def from_config(cls, config_path: str, **kwargs) -> "RwaClient":
        """Create client from a JSON config file."""
        return cls(ClientConfig.from_file(config_path), **kwargs)

    @classmethod
    def from_env(cls, prefix: str = "RWA_", **kwargs) -> "RwaClient":
        """Create client from RWA_* environment variables."""
        return cls(ClientConfig.from_env(prefix), **kwargs)

    @property
    def rpc(self) -> TendermintRPC:
        return self.pipeline.rpc

    def on(self, event_type: EventType) -> Callable:
        """Decorator registering an event handler, see EventEmitter.on."""
        return self.events.on(event_type)

    def _execute(
        self,
        operation: str,
        message: ExecuteMessage,
        gas_limit: int,
        credential,
        wait: bool,
        token: Optional[CancellationToken],
        memo: Optional[str] = None,
    ) -> TransactionResult:
        return self.pipeline.execute(
            [message], gas_limit, credential,
            memo=memo or None, wait=wait, token=token, operation=operation,
        )

    def _query(self, operation: str, query: QueryMessage) -> Any:
        with self.logger.operation(operation):
            return self.pipeline.query(query)

    # =========================================================================
    # Token Operations
    # =========================================================================

    def transfer(
        self,
        request: TransferRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        """
        Transfer tokens from the sender to a recipient.

        Args:
            request: Sender, recipient, amount, gas limit and credential.
            wait: Poll for confirmation before returning.
            token: Cancellation token for the confirmation wait.

        Returns:
            TransactionResult (CONFIRMED when waited, SUBMITTED otherwise).

        Raises:
            InvalidRequest: Malformed input; raised before any network call.
            BroadcastRejectedError: Node refused the transaction.
            ExecutionError: Transaction failed on chain.
            ConfirmationTimeout: Final state unknown.
        """
        message = self.messages.transfer(request)
        return self._execute("transfer", message, request.gas_limit, request.credential,
                             wait, token, request.memo)

    def transfer_from(
        self,
        request: TransferFromRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        """Spend an allowance granted by ``request.owner``."""
        message = self.messages.transfer_from(request)
        return self._execute("transfer_from", message, request.gas_limit, request.credential,
                             wait, token, request.memo)

    def balance(self, request: TokenInfoRequest) -> BalanceResult:
        """
        Query the token balance of an address. Never signs or broadcasts.

        Returns:
            BalanceResult; ``denom`` names the token as ``cw20:<contract>``.
        """
        query = self.messages.balance_query(request)
        answer = self._query("balance", query)
        try:
            balance = int(answer["balance"])
        except (KeyError, TypeError, ValueError):
            raise RpcResponseError(f"Unexpected balance response: {answer!r}",
                                   endpoint=self.config.rpc_url, method="abci_query") from None
        return BalanceResult(
            address=request.address,
            balance=balance,
            denom=f"cw20:{self.config.token_address}",
        )

    def token_info(self) -> TokenInfo:
        """Query token name, symbol, decimals and total supply."""
        answer = self._query("token_info", self.messages.token_info_query())
        try:
            return TokenInfo(
                name=answer["name"],
                symbol=answer["symbol"],
                decimals=int(answer["decimals"]),
                total_supply=int(answer["total_supply"]),
            )
        except (KeyError, TypeError, ValueError):
            raise RpcResponseError(f"Unexpected token_info response: {answer!r}",
                                   endpoint=self.config.rpc_url, method="abci_query") from None

    # =========================================================================
    # Identity Operations
    # =========================================================================

    def register_identity(
        self,
        request: RegisterIdentityRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        """
        Register an on-chain identity for the sender.

        Args:
            request: Sender, ISO 3166-1 alpha-2 country, gas limit and credential.
            wait: Poll for confirmation before returning.
            token: Cancellation token for the confirmation wait.
        """
        message = self.messages.register_identity(request)
        return self._execute("register_identity", message, request.gas_limit, request.credential,
                             wait, token)

    def update_identity(
        self,
        request: UpdateIdentityRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        message = self.messages.update_identity(request)
        return self._execute("update_identity", message, request.gas_limit, request.credential,
                             wait, token)

    def remove_identity(
        self,
        request: RemoveIdentityRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        message = self.messages.remove_identity(request)
        return self._execute("remove_identity", message, request.gas_limit, request.credential,
                             wait, token)

    def add_claim(
        self,
        request: AddClaimRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        message = self.messages.add_claim(request)
        return self._execute("add_claim", message, request.gas_limit, request.credential,
                             wait, token)

    def remove_claim(
        self,
        request: RemoveClaimRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        message = self.messages.remove_claim(request)
        return self._execute("remove_claim", message, request.gas_limit, request.credential,
                             wait, token)

    def get_validated_claims(self, request: GetValidatedClaimsRequest) -> List[Claim]:
        """Query the claims the identity contract currently accepts for a user."""
        answer = self._query("get_validated_claims", self.messages.validated_claims_query(request))
        if isinstance(answer, dict):
            answer = answer.get("claims")
        if not isinstance(answer, list):
            raise RpcResponseError(f"Unexpected claims response: {answer!r}",
                                   endpoint=self.config.rpc_url, method="abci_query")
        try:
            return [Claim.from_msg(item) for item in answer]
        except (KeyError, TypeError, ValueError) as e:
            raise RpcResponseError(f"Malformed claim in response: {e}",
                                   endpoint=self.config.rpc_url, method="abci_query") from e

    # =========================================================================
    # Compliance Operations
    # =========================================================================

    def check_compliance(self, request: CheckComplianceRequest) -> ComplianceResult:
        """
        Ask the compliance module whether an address may hold the token.

        Never signs or broadcasts.
        """
        query = self.messages.compliance_query(request)
        answer = self._query("check_compliance", query)
        if not isinstance(answer, bool):
            raise RpcResponseError(f"Unexpected compliance response: {answer!r}",
                                   endpoint=self.config.rpc_url, method="abci_query")
        return ComplianceResult(
            address=request.address,
            token_address=query.msg["check_token_compliance"]["token_address"],
            compliant=answer,
        )

    def add_compliance_module(
        self,
        request: ComplianceModuleRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        message = self.messages.add_compliance_module(request)
        return self._execute("add_compliance_module", message, request.gas_limit, request.credential,
                             wait, token)

    def remove_compliance_module(
        self,
        request: ComplianceModuleRequest,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        message = self.messages.remove_compliance_module(request)
        return self._execute("remove_compliance_module", message, request.gas_limit,
                             request.credential, wait, token)

    def update_compliance_module(
        self,
        request: ComplianceModuleRequest,
        active: bool,
        wait: bool = True,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        """Activate or deactivate a registered compliance module."""
        message = self.messages.update_compliance_module(request, active)
        return self._execute("update_compliance_module", message, request.gas_limit,
                             request.credential, wait, token)

    # =========================================================================
    # Confirmation
    # =========================================================================

    @staticmethod
    def _normalize_hash(tx_hash: str) -> str:
        if (
            not isinstance(tx_hash, str)
            or len(tx_hash) != 64
            or any(c not in string.hexdigits for c in tx_hash)
        ):
            raise InvalidRequest(f"Transaction hash must be 64 hex characters, got {tx_hash!r}",
                                 field="tx_hash")
        return tx_hash.upper()

    def get_transaction_status(self, tx_hash: str) -> ConfirmationStatus:
        """
        Single status lookup. Safe to call repeatedly.

        Returns:
            ConfirmationStatus (PENDING while not yet included).
        """
        return self.pipeline.poller.get_status(self._normalize_hash(tx_hash))

    def wait_for_confirmation(
        self,
        tx_hash: str,
        token: Optional[CancellationToken] = None,
    ) -> TransactionResult:
        """
        Wait for a previously submitted transaction.

        Use this to reconcile after ConfirmationTimeout instead of resubmitting.

        Raises:
            ExecutionError: Transaction failed on chain.
            ConfirmationTimeout: Still not final.
        """
        submitted = TransactionResult(tx_hash=self._normalize_hash(tx_hash), status=TxStatus.SUBMITTED)
        return self.pipeline.confirm(submitted, token)

    # =========================================================================
    # Background Execution
    # =========================================================================

    def submit(self, operation: Union[str, Callable[..., Any]], *args, **kwargs) -> Future:
        """
        Run an operation on the client's thread pool.

        Args:
            operation: Bound client method, or its name (e.g. "transfer").
            *args, **kwargs: Arguments for the operation.

        Returns:
            Future resolving to the operation's result or raising its error.

        Example:
            futures = [client.submit("transfer", r, token=token) for r in requests]
            results = [f.result() for f in futures]
        """
        if isinstance(operation, str):
            fn = getattr(self, operation, None)
            if not callable(fn) or operation.startswith("_") or operation in ("submit", "close"):
                raise InvalidRequest(f"Unknown operation: {operation}", field="operation")
        else:
            fn = operation
        return self._executor.submit(fn, *args, **kwargs)

    def close(self) -> None:
        """Wait for background work, then release the HTTP session."""
        self._executor.shutdown(wait=True)
        self.pipeline.close()

    def __enter__(self) -> "RwaClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
