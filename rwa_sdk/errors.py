"""
RWA SDK - Error Types

Typed exceptions for every stage of the transaction pipeline.
Each error says whether retrying the whole operation is safe.
"""

from typing import Optional


class RwaError(Exception):
    """Base exception for all RWA SDK errors."""

    retryable = False

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(RwaError):
    """Error in SDK configuration."""
    pass


# =============================================================================
# Request Errors
# =============================================================================

class InvalidRequest(RwaError):
    """Caller input is malformed. Surfaced before any network call."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class InvalidAddressError(InvalidRequest):
    """Address is not valid bech32 for the configured prefix."""

    def __init__(self, address: str, field: Optional[str] = None, reason: str = "invalid bech32"):
        super().__init__(f"Invalid address {address!r}: {reason}", field)
        self.address = address
        self.reason = reason


# =============================================================================
# Key and Signature Errors
# =============================================================================

class SigningError(RwaError):
    """Credential is malformed or the payload could not be signed."""
    pass


# =============================================================================
# Assembly Errors
# =============================================================================

class AssemblyError(RwaError):
    """Transaction invariant violated before submission."""
    pass


class AccountNotFoundError(AssemblyError):
    """Sender account does not exist on chain yet."""

    def __init__(self, address: str):
        super().__init__(f"Account not found on chain: {address}", {"address": address})
        self.address = address


# =============================================================================
# Transport Errors
# =============================================================================

class TransportError(RwaError):
    """
    Network-level failure talking to the RPC endpoint.

    Nothing was accepted on chain, so the whole operation may be retried.
    """

    retryable = True

    def __init__(self, message: str, endpoint: Optional[str] = None, method: Optional[str] = None):
        super().__init__(message, {"endpoint": endpoint, "method": method})
        self.endpoint = endpoint
        self.method = method


class TransportTimeoutError(TransportError):
    """Request to the RPC endpoint timed out."""
    pass


class RpcResponseError(TransportError):
    """Endpoint answered with an error or a malformed body."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
        rpc_error: Optional[dict] = None,
    ):
        super().__init__(message, endpoint, method)
        self.details.update({"status_code": status_code, "rpc_error": rpc_error})
        self.status_code = status_code
        self.rpc_error = rpc_error


# =============================================================================
# Chain Errors
# =============================================================================

class BroadcastRejectedError(RwaError):
    """The node refused the transaction at mempool admission (CheckTx)."""

    def __init__(self, tx_hash: str, code: int, log: str = "", codespace: str = ""):
        super().__init__(
            f"Transaction {tx_hash} rejected with code {code}: {log}",
            {"tx_hash": tx_hash, "code": code, "codespace": codespace},
        )
        self.tx_hash = tx_hash
        self.code = code
        self.log = log
        self.codespace = codespace


class ExecutionError(RwaError):
    """Transaction was included in a block but its execution failed."""

    def __init__(
        self,
        tx_hash: str,
        code: int,
        log: str = "",
        codespace: str = "",
        height: Optional[int] = None,
    ):
        super().__init__(
            f"Transaction {tx_hash} failed at height {height} with code {code}: {log}",
            {"tx_hash": tx_hash, "code": code, "codespace": codespace, "height": height},
        )
        self.tx_hash = tx_hash
        self.code = code
        self.log = log
        self.codespace = codespace
        self.height = height


class ConfirmationTimeout(RwaError):
    """
    Gave up waiting for inclusion. The transaction may still succeed.

    Reconcile by querying the hash again; never resubmit the same envelope.
    """

    def __init__(self, tx_hash: str, attempts: int, elapsed_seconds: float, reason: str = "timeout"):
        super().__init__(
            f"Confirmation {reason} for {tx_hash}: {attempts} polls in {elapsed_seconds:.1f}s",
            {"tx_hash": tx_hash, "attempts": attempts, "elapsed": elapsed_seconds, "reason": reason},
        )
        self.tx_hash = tx_hash
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        self.reason = reason
