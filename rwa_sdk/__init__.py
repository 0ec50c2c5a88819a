"""
RWA SDK - Real-World Asset Tokenization SDK

A Python SDK for the token, identity and compliance contracts of a
CosmWasm-based RWA chain.

Usage:
    from rwa_sdk import RwaClient, ClientConfig, SigningCredential, TransferRequest

    client = RwaClient(ClientConfig.from_file("client_config.json"))
    credential = SigningCredential.from_hex(os.environ["RWA_SIGNER_KEY"])
    sender = credential.address(client.config.address_prefix)

    result = client.transfer(TransferRequest(sender, recipient, 100, 200_000, credential))
    print(f"{result.tx_hash} included at {result.height}")

Read-only queries never sign or broadcast:
    client.balance(TokenInfoRequest(sender))
    client.check_compliance(CheckComplianceRequest(recipient))
"""

from .client import RwaClient
from .config import ClientConfig
from .models import (
    TxStatus,
    TransferRequest,
    TransferFromRequest,
    TokenInfoRequest,
    Claim,
    RegisterIdentityRequest,
    UpdateIdentityRequest,
    RemoveIdentityRequest,
    AddClaimRequest,
    RemoveClaimRequest,
    GetValidatedClaimsRequest,
    CheckComplianceRequest,
    ComplianceModuleRequest,
    AccountInfo,
    BroadcastAck,
    TransactionResult,
    BalanceResult,
    TokenInfo,
    ComplianceResult,
)

# Building blocks
from .core.messages import MessageBuilder, ExecuteMessage, QueryMessage
from .core.transaction import TransactionAssembler, TransactionEnvelope
from .infra.keys import SigningCredential, SignerAdapter
from .infra.rpc import TendermintRPC
from .pipeline import TransactionPipeline

# Error types
from .errors import (
    RwaError,
    ConfigurationError,
    InvalidRequest,
    InvalidAddressError,
    SigningError,
    AssemblyError,
    AccountNotFoundError,
    TransportError,
    TransportTimeoutError,
    RpcResponseError,
    BroadcastRejectedError,
    ExecutionError,
    ConfirmationTimeout,
)

# Confirmation tracking and cancellation
from .confirmation import ConfirmationPoller, ConfirmationStatus
from .tasks import CancellationToken

# Fees
from .fees import Fee, FeeCalculator

# Event hooks
from .events import EventEmitter, EventType, Event, create_audit_hook, create_logging_hook

# Logging
from .logging import StructuredLogger, LogLevel, create_file_logger, create_audit_logger

__version__ = "0.1.0"
__all__ = [
    # Core
    "RwaClient",
    "ClientConfig",
    "TxStatus",
    "TransferRequest",
    "TransferFromRequest",
    "TokenInfoRequest",
    "Claim",
    "RegisterIdentityRequest",
    "UpdateIdentityRequest",
    "RemoveIdentityRequest",
    "AddClaimRequest",
    "RemoveClaimRequest",
    "GetValidatedClaimsRequest",
    "CheckComplianceRequest",
    "ComplianceModuleRequest",
    "AccountInfo",
    "BroadcastAck",
    "TransactionResult",
    "BalanceResult",
    "TokenInfo",
    "ComplianceResult",

    # Building blocks
    "MessageBuilder",
    "ExecuteMessage",
    "QueryMessage",
    "TransactionAssembler",
    "TransactionEnvelope",
    "SigningCredential",
    "SignerAdapter",
    "TendermintRPC",
    "TransactionPipeline",

    # Errors
    "RwaError",
    "ConfigurationError",
    "InvalidRequest",
    "InvalidAddressError",
    "SigningError",
    "AssemblyError",
    "AccountNotFoundError",
    "TransportError",
    "TransportTimeoutError",
    "RpcResponseError",
    "BroadcastRejectedError",
    "ExecutionError",
    "ConfirmationTimeout",

    # Confirmation
    "ConfirmationPoller",
    "ConfirmationStatus",
    "CancellationToken",

    # Fees
    "Fee",
    "FeeCalculator",

    # Events
    "EventEmitter",
    "EventType",
    "Event",
    "create_audit_hook",
    "create_logging_hook",

    # Logging
    "StructuredLogger",
    "LogLevel",
    "create_file_logger",
    "create_audit_logger",
]
