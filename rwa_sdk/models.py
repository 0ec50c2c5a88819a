"""
RWA SDK - Data Models

Request and result structures used throughout the SDK.
Requests are built per call and validated by the message builder.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .infra.keys import SigningCredential


class TxStatus(Enum):
    """Transaction lifecycle state."""
    SUBMITTED = "submitted"      # Accepted into the mempool
    PENDING = "pending"          # Polled, not yet in a block
    CONFIRMED = "confirmed"      # Included with code 0
    FAILED = "failed"            # Included with a non-zero code
    TIMED_OUT = "timed_out"      # Gave up polling; final state unknown

    @property
    def is_terminal(self) -> bool:
        return self in (TxStatus.CONFIRMED, TxStatus.FAILED, TxStatus.TIMED_OUT)


# =============================================================================
# Token Requests
# =============================================================================

@dataclass
class TransferRequest:
    """Move ``amount`` tokens from ``sender`` to ``recipient``."""
    sender: str
    recipient: str
    amount: int
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)
    memo: str = ""


@dataclass
class TransferFromRequest:
    """Spend an allowance: ``sender`` moves ``owner``'s tokens to ``recipient``."""
    sender: str
    owner: str
    recipient: str
    amount: int
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)
    memo: str = ""


@dataclass
class TokenInfoRequest:
    """Balance lookup for ``address``."""
    address: str


# =============================================================================
# Identity Requests
# =============================================================================

@dataclass
class Claim:
    """A verifiable claim attached to an identity."""
    topic: int
    issuer: str
    data: bytes = b""
    uri: str = ""

    def to_msg(self) -> dict:
        return {
            "topic": str(self.topic),
            "issuer": self.issuer,
            "data": base64.b64encode(self.data).decode("ascii"),
            "uri": self.uri,
        }

    @classmethod
    def from_msg(cls, data: dict) -> "Claim":
        return cls(
            topic=int(data["topic"]),
            issuer=data["issuer"],
            data=base64.b64decode(data.get("data") or ""),
            uri=data.get("uri", ""),
        )


@dataclass
class RegisterIdentityRequest:
    """Register an identity for ``sender``."""
    sender: str
    country: str
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)


@dataclass
class UpdateIdentityRequest:
    sender: str
    identity_owner: str
    new_country: str
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)


@dataclass
class RemoveIdentityRequest:
    sender: str
    identity_owner: str
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)


@dataclass
class AddClaimRequest:
    sender: str
    identity_owner: str
    claim: Claim
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)


@dataclass
class RemoveClaimRequest:
    sender: str
    identity_owner: str
    claim_topic: int
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)


@dataclass
class GetValidatedClaimsRequest:
    identity_owner: str


# =============================================================================
# Compliance Requests
# =============================================================================

@dataclass
class CheckComplianceRequest:
    """Is ``address`` allowed to hold ``token_address``? Defaults to the configured token."""
    address: str
    token_address: Optional[str] = None


@dataclass
class ComplianceModuleRequest:
    """Add, remove or toggle a compliance module."""
    sender: str
    module_address: str
    gas_limit: int
    credential: "SigningCredential" = field(repr=False)
    module_name: str = ""


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class AccountInfo:
    """On-chain account numbers needed for signing."""
    address: str
    account_number: int
    sequence: int


@dataclass(frozen=True)
class BroadcastAck:
    """Mempool admission result for a broadcast transaction."""
    tx_hash: str
    accepted: bool
    code: int = 0
    codespace: str = ""
    log: str = ""
    submitted_height: Optional[int] = None


@dataclass
class TransactionResult:
    """Result of a mutating operation."""
    tx_hash: str
    status: TxStatus
    code: int = 0
    height: Optional[int] = None
    gas_wanted: int = 0
    gas_used: int = 0
    data: bytes = b""
    log: str = ""
    codespace: str = ""
    events: List[Dict[str, Any]] = field(default_factory=list)
    submitted_height: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.status in (TxStatus.SUBMITTED, TxStatus.PENDING, TxStatus.CONFIRMED) and self.code == 0

    @property
    def is_confirmed(self) -> bool:
        return self.status == TxStatus.CONFIRMED


@dataclass(frozen=True)
class BalanceResult:
    address: str
    balance: int
    denom: str


@dataclass(frozen=True)
class TokenInfo:
    name: str
    symbol: str
    decimals: int
    total_supply: int


@dataclass(frozen=True)
class ComplianceResult:
    address: str
    token_address: str
    compliant: bool
