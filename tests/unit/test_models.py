"""
Unit tests for data models.
"""

import pytest

from rwa_sdk.models import Claim, TransactionResult, TransferRequest, TxStatus


class TestTxStatus:

    @pytest.mark.unit
    @pytest.mark.parametrize("status,terminal", [
        (TxStatus.SUBMITTED, False),
        (TxStatus.PENDING, False),
        (TxStatus.CONFIRMED, True),
        (TxStatus.FAILED, True),
        (TxStatus.TIMED_OUT, True),
    ])
    def test_terminal(self, status, terminal):
        assert status.is_terminal is terminal


class TestTransactionResult:

    @pytest.mark.unit
    def test_confirmed(self):
        result = TransactionResult(tx_hash="AB", status=TxStatus.CONFIRMED, height=10)
        assert result.success
        assert result.is_confirmed

    @pytest.mark.unit
    def test_failed(self):
        result = TransactionResult(tx_hash="AB", status=TxStatus.FAILED, code=5, height=10)
        assert not result.success
        assert not result.is_confirmed

    @pytest.mark.unit
    def test_submitted_has_no_height(self):
        result = TransactionResult(tx_hash="AB", status=TxStatus.SUBMITTED)
        assert result.height is None
        assert result.success


class TestClaim:

    @pytest.mark.unit
    def test_to_msg_and_back(self, sender):
        claim = Claim(topic=42, issuer=sender, data=b"\x00\x01", uri="ipfs://claim")
        msg = claim.to_msg()
        assert msg["topic"] == "42"
        assert msg["data"] == "AAE="
        assert Claim.from_msg(msg) == claim

    @pytest.mark.unit
    def test_from_msg_defaults(self, sender):
        claim = Claim.from_msg({"topic": "3", "issuer": sender})
        assert claim.data == b""
        assert claim.uri == ""


class TestRequests:

    @pytest.mark.security
    def test_credential_not_in_repr(self, sender, recipient, sender_credential, test_private_key):
        """Test printing a request never shows the credential."""
        request = TransferRequest(sender, recipient, 1, 200000, sender_credential)
        assert "credential" not in repr(request)
        assert test_private_key not in repr(request)
