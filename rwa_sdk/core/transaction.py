"""
RWA SDK - Transaction Assembler

Packs built messages, fee and account numbers into a signed, immutable
transaction envelope. The workflow per transaction:

1. Encode messages into a TxBody
2. Compute the fee from the gas limit
3. Encode AuthInfo with the signer's public key and sequence
4. Build the SignDoc (body + auth info + chain id + account number)
5. Sign the SignDoc bytes
6. Freeze everything into a TransactionEnvelope
"""

import hashlib
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..constants import SECP256K1_PUBKEY_TYPE_URL, SIGN_MODE_DIRECT
from ..errors import AssemblyError
from ..fees import Fee, FeeCalculator
from ..infra.keys import SignerAdapter, SigningCredential
from ..models import AccountInfo
from . import proto
from .messages import ExecuteMessage


def _sign_doc_bytes(body_bytes: bytes, auth_info_bytes: bytes, chain_id: str, account_number: int) -> bytes:
    return proto.serialize(proto.SignDoc(
        body_bytes=body_bytes,
        auth_info_bytes=auth_info_bytes,
        chain_id=chain_id,
        account_number=account_number,
    ))


@dataclass(frozen=True)
class TransactionEnvelope:
    """
    A fully assembled, signed transaction ready for broadcast.

    Frozen: the signature covers exactly ``sign_bytes`` and nothing here can
    change after signing.
    """
    messages: Tuple[ExecuteMessage, ...]
    fee: Fee
    chain_id: str
    account_number: int
    sequence: int
    memo: str
    public_key: bytes
    body_bytes: bytes
    auth_info_bytes: bytes
    signature: bytes

    @property
    def gas_limit(self) -> int:
        return self.fee.gas_limit

    @property
    def sign_bytes(self) -> bytes:
        """Serialized SignDoc that the signature covers."""
        return _sign_doc_bytes(self.body_bytes, self.auth_info_bytes, self.chain_id, self.account_number)

    @property
    def tx_bytes(self) -> bytes:
        """Serialized TxRaw for broadcast."""
        return proto.serialize(proto.TxRaw(
            body_bytes=self.body_bytes,
            auth_info_bytes=self.auth_info_bytes,
            signatures=[self.signature],
        ))

    @property
    def tx_hash(self) -> str:
        """Upper-case hex SHA-256 of the broadcast bytes, as CometBFT reports it."""
        return hashlib.sha256(self.tx_bytes).hexdigest().upper()

    def verify(self, signer: Optional[SignerAdapter] = None) -> bool:
        """Check the signature against the envelope's own sign bytes."""
        signer = signer or SignerAdapter()
        return signer.verify(self.sign_bytes, self.signature, self.public_key)

    def summary(self) -> str:
        """Human-readable summary for logs and approval prompts."""
        actions = ", ".join(f"{m.action}@{m.contract[:16]}..." for m in self.messages)
        return (
            f"tx {self.tx_hash[:16]}... chain={self.chain_id} seq={self.sequence} "
            f"fee={self.fee} msgs=[{actions}]"
        )


class TransactionAssembler:
    """
    Builds and signs transaction envelopes.

    Example:
        assembler = TransactionAssembler(chain_id, FeeCalculator("0.025", "usei"))
        envelope = assembler.assemble([msg], gas_limit=200_000,
                                      account=account_info, credential=credential)
        envelope.verify()   # True
    """

    def __init__(
        self,
        chain_id: str,
        fees: FeeCalculator,
        signer: Optional[SignerAdapter] = None,
    ):
        """
        Initialize assembler.

        Args:
            chain_id: Chain identifier embedded in every SignDoc.
            fees: Fee calculator built from denom and gas price.
            signer: Signer adapter (default: SignerAdapter()).
        """
        self.chain_id = chain_id
        self.fees = fees
        self.signer = signer or SignerAdapter()

    def assemble(
        self,
        messages: Sequence[ExecuteMessage],
        gas_limit: int,
        account: AccountInfo,
        credential: SigningCredential,
        memo: str = "",
    ) -> TransactionEnvelope:
        """
        Assemble and sign a transaction.

        Args:
            messages: One or more built messages, in execution order.
            gas_limit: Gas limit for the whole transaction.
            account: Signer's account number and sequence to sign with.
            credential: Signing credential for the sender.
            memo: Optional transaction memo.

        Returns:
            Signed, immutable TransactionEnvelope.

        Raises:
            AssemblyError: Empty message list, bad gas limit or mismatched sender.
            SigningError: Credential is malformed.
        """
        messages = tuple(messages)
        if not messages:
            raise AssemblyError("Transaction must contain at least one message")

        fee = self.fees.fee_for(gas_limit)

        senders = {m.sender for m in messages}
        if senders != {account.address}:
            raise AssemblyError(
                "All messages must be sent by the signing account",
                {"account": account.address, "senders": sorted(senders)},
            )

        body = proto.TxBody(messages=[m.to_any() for m in messages], memo=memo)
        auth_info = proto.AuthInfo(signer_infos=[self._signer_info(credential, account.sequence)])
        auth_info.fee.gas_limit = fee.gas_limit
        if fee.amount:
            auth_info.fee.amount.add(denom=fee.denom, amount=str(fee.amount))

        body_bytes = proto.serialize(body)
        auth_info_bytes = proto.serialize(auth_info)
        signature = self.signer.sign(
            _sign_doc_bytes(body_bytes, auth_info_bytes, self.chain_id, account.account_number),
            credential,
        )

        return TransactionEnvelope(
            messages=messages,
            fee=fee,
            chain_id=self.chain_id,
            account_number=account.account_number,
            sequence=account.sequence,
            memo=memo,
            public_key=credential.public_key,
            body_bytes=body_bytes,
            auth_info_bytes=auth_info_bytes,
            signature=signature,
        )

    @staticmethod
    def _signer_info(credential: SigningCredential, sequence: int):
        info = proto.SignerInfo(
            public_key=proto.pack_any(SECP256K1_PUBKEY_TYPE_URL, proto.PubKey(key=credential.public_key)),
            sequence=sequence,
        )
        info.mode_info.single.mode = SIGN_MODE_DIRECT
        return info
