"""
Unit tests for TransactionAssembler and TransactionEnvelope.
"""

import dataclasses
import hashlib

import pytest

from rwa_sdk.core import proto
from rwa_sdk.core.messages import MessageBuilder
from rwa_sdk.core.transaction import TransactionAssembler
from rwa_sdk.errors import AssemblyError
from rwa_sdk.fees import FeeCalculator
from rwa_sdk.models import AccountInfo, TransferRequest


@pytest.fixture
def assembler():
    return TransactionAssembler("rwa-test-1", FeeCalculator("0.025", "urwa"))


@pytest.fixture
def account(sender):
    return AccountInfo(address=sender, account_number=7, sequence=3)


@pytest.fixture
def transfer_msg(client_config, sender, recipient, sender_credential):
    builder = MessageBuilder.from_config(client_config)
    return builder.transfer(TransferRequest(sender, recipient, 100, 200000, sender_credential))


class TestAssemble:
    """Tests for envelope assembly."""

    @pytest.mark.unit
    def test_envelope_fields(self, assembler, transfer_msg, account, sender_credential):
        """Test numbers and fee are carried into the envelope."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential, memo="hi")
        assert envelope.chain_id == "rwa-test-1"
        assert envelope.account_number == 7
        assert envelope.sequence == 3
        assert envelope.gas_limit == 200000
        assert envelope.fee.amount == 5000
        assert envelope.memo == "hi"
        assert envelope.public_key == sender_credential.public_key

    @pytest.mark.unit
    def test_signature_verifies(self, assembler, transfer_msg, account, sender_credential):
        """Test the signature matches the envelope's own sign bytes."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        assert envelope.verify()

    @pytest.mark.unit
    def test_deterministic(self, assembler, transfer_msg, account, sender_credential):
        """Test same payload and sequence yield byte-identical signatures."""
        first = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        second = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        assert first.signature == second.signature
        assert first.tx_bytes == second.tx_bytes

    @pytest.mark.unit
    def test_sequence_changes_signature(self, assembler, transfer_msg, account, sender_credential):
        """Test the signature is bound to the sequence number."""
        first = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        bumped = dataclasses.replace(account, sequence=4)
        second = assembler.assemble([transfer_msg], 200000, bumped, sender_credential)
        assert first.signature != second.signature

    @pytest.mark.unit
    def test_tx_hash(self, assembler, transfer_msg, account, sender_credential):
        """Test the hash is upper-case SHA-256 of the broadcast bytes."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        assert envelope.tx_hash == hashlib.sha256(envelope.tx_bytes).hexdigest().upper()

    @pytest.mark.unit
    def test_tx_raw_layout(self, assembler, transfer_msg, account, sender_credential):
        """Test TxRaw carries body, auth info and one signature."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        raw = proto.TxRaw()
        raw.ParseFromString(envelope.tx_bytes)
        assert raw.body_bytes == envelope.body_bytes
        assert raw.auth_info_bytes == envelope.auth_info_bytes
        assert list(raw.signatures) == [envelope.signature]

        auth_info = proto.AuthInfo()
        auth_info.ParseFromString(raw.auth_info_bytes)
        assert auth_info.signer_infos[0].sequence == 3
        assert auth_info.signer_infos[0].mode_info.single.mode == 1
        assert auth_info.fee.gas_limit == 200000
        assert auth_info.fee.amount[0].amount == "5000"

    @pytest.mark.unit
    def test_envelope_is_frozen(self, assembler, transfer_msg, account, sender_credential):
        """Test envelopes cannot be modified after signing."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        with pytest.raises(dataclasses.FrozenInstanceError):
            envelope.sequence = 99


class TestAssembleErrors:
    """Tests for pre-submission invariants."""

    @pytest.mark.unit
    @pytest.mark.parametrize("gas_limit", [0, -1, 1.5, True, 2 ** 64])
    def test_bad_gas_limit(self, assembler, transfer_msg, account, sender_credential, gas_limit):
        """Test gas limits that are not positive integers."""
        with pytest.raises(AssemblyError):
            assembler.assemble([transfer_msg], gas_limit, account, sender_credential)

    @pytest.mark.unit
    def test_empty_messages(self, assembler, account, sender_credential):
        """Test an envelope needs at least one message."""
        with pytest.raises(AssemblyError):
            assembler.assemble([], 200000, account, sender_credential)

    @pytest.mark.unit
    def test_sender_must_match_account(self, assembler, transfer_msg, recipient, sender_credential):
        """Test messages from another sender are refused."""
        other = AccountInfo(address=recipient, account_number=1, sequence=0)
        with pytest.raises(AssemblyError):
            assembler.assemble([transfer_msg], 200000, other, sender_credential)


class TestTamperDetection:
    """Tests that altered envelopes no longer verify."""

    @pytest.mark.security
    def test_altered_body_fails(self, assembler, transfer_msg, account, sender_credential):
        """Test flipping a body byte breaks verification."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        body = bytearray(envelope.body_bytes)
        body[-1] ^= 0x01
        tampered = dataclasses.replace(envelope, body_bytes=bytes(body))
        assert not tampered.verify()

    @pytest.mark.security
    def test_altered_auth_info_fails(self, assembler, transfer_msg, account, sender_credential):
        """Test flipping an auth info byte breaks verification."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        auth = bytearray(envelope.auth_info_bytes)
        auth[-1] ^= 0x01
        tampered = dataclasses.replace(envelope, auth_info_bytes=bytes(auth))
        assert not tampered.verify()

    @pytest.mark.security
    def test_other_chain_fails(self, assembler, transfer_msg, account, sender_credential):
        """Test a signature for one chain does not verify for another."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        assert not dataclasses.replace(envelope, chain_id="rwa-main-1").verify()

    @pytest.mark.security
    def test_altered_signature_fails(self, assembler, transfer_msg, account, sender_credential):
        """Test flipping a signature byte breaks verification."""
        envelope = assembler.assemble([transfer_msg], 200000, account, sender_credential)
        signature = bytearray(envelope.signature)
        signature[10] ^= 0x01
        assert not dataclasses.replace(envelope, signature=bytes(signature)).verify()
