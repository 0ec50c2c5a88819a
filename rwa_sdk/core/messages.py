"""
RWA SDK - Message Builder

Turns validated requests into CosmWasm execute and query messages for the
token, identity and compliance contracts. Pure functions of their input:
no network access, no side effects.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..constants import MAX_UINT128, MSG_EXECUTE_CONTRACT_TYPE_URL
from ..errors import InvalidRequest
from ..models import (
    AddClaimRequest,
    CheckComplianceRequest,
    ComplianceModuleRequest,
    GetValidatedClaimsRequest,
    RegisterIdentityRequest,
    RemoveClaimRequest,
    RemoveIdentityRequest,
    TokenInfoRequest,
    TransferFromRequest,
    TransferRequest,
    UpdateIdentityRequest,
)
from . import proto
from .address import validate_address


def canonical_json(msg: Dict[str, Any]) -> bytes:
    """Sorted keys, no whitespace. Identical messages give identical bytes."""
    return json.dumps(msg, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


@dataclass(frozen=True)
class ExecuteMessage:
    """A ``MsgExecuteContract`` ready to be packed into a transaction body."""
    sender: str
    contract: str
    msg: Dict[str, Any]
    funds: Tuple[Tuple[str, int], ...] = ()
    type_url: str = MSG_EXECUTE_CONTRACT_TYPE_URL

    @property
    def action(self) -> str:
        """Name of the contract entry point, e.g. "transfer"."""
        return next(iter(self.msg))

    @property
    def msg_bytes(self) -> bytes:
        return canonical_json(self.msg)

    def to_proto(self):
        return proto.MsgExecuteContract(
            sender=self.sender,
            contract=self.contract,
            msg=self.msg_bytes,
            funds=[proto.Coin(denom=d, amount=str(a)) for d, a in self.funds],
        )

    def to_any(self):
        """Protobuf ``Any`` wrapping the encoded message."""
        return proto.pack_any(self.type_url, self.to_proto())


@dataclass(frozen=True)
class QueryMessage:
    """A smart query against a contract."""
    contract: str
    msg: Dict[str, Any] = field(default_factory=dict)

    @property
    def query_bytes(self) -> bytes:
        return canonical_json(self.msg)


# =============================================================================
# Validation Helpers
# =============================================================================

def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{name} cannot be empty", field=name)
    return value


def _require_uint128(value: Any, name: str, allow_zero: bool = False) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequest(f"{name} must be an integer, got {type(value).__name__}", field=name)
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidRequest(f"{name} must be greater than zero, got {value}", field=name)
    if value > MAX_UINT128:
        raise InvalidRequest(f"{name} exceeds Uint128 range", field=name)
    return value


def _require_country(value: Any, name: str) -> str:
    country = _require_text(value, name)
    if len(country) != 2 or not country.isalpha() or not country.isascii():
        raise InvalidRequest(f"{name} must be an ISO 3166-1 alpha-2 code, got {country!r}", field=name)
    return country.upper()


class MessageBuilder:
    """
    Builds contract messages for the three RWA modules.

    Uint128 values are written as decimal strings, so a recorded amount is
    always exactly the requested amount.

    Example:
        builder = MessageBuilder(token_address, identity_address, compliance_address)
        msg = builder.transfer(TransferRequest(sender, recipient, 100, 200_000, credential))
        msg.msg   # {"transfer": {"recipient": "...", "amount": "100"}}
    """

    def __init__(
        self,
        token_address: str,
        identity_address: str,
        compliance_address: str,
        address_prefix: str = "cosmos",
    ):
        self.token_address = token_address
        self.identity_address = identity_address
        self.compliance_address = compliance_address
        self.address_prefix = address_prefix

    @classmethod
    def from_config(cls, config) -> "MessageBuilder":
        return cls(
            token_address=config.token_address,
            identity_address=config.identity_address,
            compliance_address=config.compliance_address,
            address_prefix=config.address_prefix,
        )

    def _address(self, value: Any, name: str) -> str:
        _require_text(value, name)
        return validate_address(value, self.address_prefix, field=name)

    # =========================================================================
    # Token
    # =========================================================================

    def transfer(self, request: TransferRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        recipient = self._address(request.recipient, "recipient")
        amount = _require_uint128(request.amount, "amount")

        return ExecuteMessage(
            sender=sender,
            contract=self.token_address,
            msg={"transfer": {"recipient": recipient, "amount": str(amount)}},
        )

    def transfer_from(self, request: TransferFromRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        owner = self._address(request.owner, "owner")
        recipient = self._address(request.recipient, "recipient")
        amount = _require_uint128(request.amount, "amount")

        return ExecuteMessage(
            sender=sender,
            contract=self.token_address,
            msg={"transfer_from": {"owner": owner, "recipient": recipient, "amount": str(amount)}},
        )

    def balance_query(self, request: TokenInfoRequest) -> QueryMessage:
        address = self._address(request.address, "address")
        return QueryMessage(self.token_address, {"balance": {"address": address}})

    def token_info_query(self) -> QueryMessage:
        return QueryMessage(self.token_address, {"token_info": {}})

    # =========================================================================
    # Identity
    # =========================================================================

    def register_identity(self, request: RegisterIdentityRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        country = _require_country(request.country, "country")
        return ExecuteMessage(
            sender=sender,
            contract=self.identity_address,
            msg={"add_identity": {"country": country}},
        )

    def update_identity(self, request: UpdateIdentityRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        owner = self._address(request.identity_owner, "identity_owner")
        country = _require_country(request.new_country, "new_country")
        return ExecuteMessage(
            sender=sender,
            contract=self.identity_address,
            msg={"update_identity": {"identity_owner": owner, "new_country": country}},
        )

    def remove_identity(self, request: RemoveIdentityRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        owner = self._address(request.identity_owner, "identity_owner")
        return ExecuteMessage(
            sender=sender,
            contract=self.identity_address,
            msg={"remove_identity": {"identity_owner": owner}},
        )

    def add_claim(self, request: AddClaimRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        owner = self._address(request.identity_owner, "identity_owner")
        claim = request.claim
        if claim is None:
            raise InvalidRequest("claim cannot be empty", field="claim")
        _require_uint128(claim.topic, "claim.topic", allow_zero=True)
        self._address(claim.issuer, "claim.issuer")
        if not isinstance(claim.data, (bytes, bytearray)):
            raise InvalidRequest("claim.data must be bytes", field="claim.data")

        return ExecuteMessage(
            sender=sender,
            contract=self.identity_address,
            msg={"add_claim": {"identity_owner": owner, "claim": claim.to_msg()}},
        )

    def remove_claim(self, request: RemoveClaimRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        owner = self._address(request.identity_owner, "identity_owner")
        topic = _require_uint128(request.claim_topic, "claim_topic", allow_zero=True)
        return ExecuteMessage(
            sender=sender,
            contract=self.identity_address,
            msg={"remove_claim": {"identity_owner": owner, "claim_topic": str(topic)}},
        )

    def validated_claims_query(self, request: GetValidatedClaimsRequest) -> QueryMessage:
        owner = self._address(request.identity_owner, "identity_owner")
        return QueryMessage(
            self.identity_address,
            {"get_validated_claims_for_user": {"identity_owner": owner}},
        )

    # =========================================================================
    # Compliance
    # =========================================================================

    def add_compliance_module(self, request: ComplianceModuleRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        module = self._address(request.module_address, "module_address")
        name = _require_text(request.module_name, "module_name")
        return ExecuteMessage(
            sender=sender,
            contract=self.compliance_address,
            msg={"add_compliance_module": {"module_addr": module, "module_name": name}},
        )

    def remove_compliance_module(self, request: ComplianceModuleRequest) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        module = self._address(request.module_address, "module_address")
        return ExecuteMessage(
            sender=sender,
            contract=self.compliance_address,
            msg={"remove_compliance_module": {"module_addr": module}},
        )

    def update_compliance_module(self, request: ComplianceModuleRequest, active: bool) -> ExecuteMessage:
        sender = self._address(request.sender, "sender")
        module = self._address(request.module_address, "module_address")
        if not isinstance(active, bool):
            raise InvalidRequest("active must be a boolean", field="active")
        return ExecuteMessage(
            sender=sender,
            contract=self.compliance_address,
            msg={"update_compliance_module": {"module_addr": module, "active": active}},
        )

    def compliance_query(self, request: CheckComplianceRequest) -> QueryMessage:
        address = self._address(request.address, "address")
        token = self.token_address
        if request.token_address is not None:
            token = self._address(request.token_address, "token_address")
        return QueryMessage(
            self.compliance_address,
            {"check_token_compliance": {"token_address": token, "from": address}},
        )
