"""
Integration tests for RwaClient against an in-memory chain.
"""

import json
import logging
import threading
from unittest.mock import Mock

import pytest

from rwa_sdk import (
    AccountNotFoundError,
    AddClaimRequest,
    AssemblyError,
    BroadcastRejectedError,
    CancellationToken,
    CheckComplianceRequest,
    Claim,
    ComplianceModuleRequest,
    ConfirmationTimeout,
    EventType,
    ExecutionError,
    GetValidatedClaimsRequest,
    InvalidRequest,
    RegisterIdentityRequest,
    RpcResponseError,
    TokenInfoRequest,
    TransferRequest,
    TransportTimeoutError,
    TxStatus,
)
from rwa_sdk.core import proto


def _sequence(tx_bytes):
    """Signer sequence embedded in a broadcast transaction."""
    raw = proto.TxRaw()
    raw.ParseFromString(tx_bytes)
    auth_info = proto.AuthInfo()
    auth_info.ParseFromString(raw.auth_info_bytes)
    return auth_info.signer_infos[0].sequence


@pytest.fixture
def transfer_request(sender, recipient, sender_credential):
    return TransferRequest(sender, recipient, 100, 200000, sender_credential)


class TestTransfer:
    """End-to-end transfer scenarios."""

    @pytest.mark.integration
    def test_transfer_confirmed(self, client, fake_chain, transfer_request):
        """Test a transfer of 100 confirms at or above the submission height."""
        result = client.transfer(transfer_request)

        assert result.status == TxStatus.CONFIRMED
        assert result.success
        assert len(result.tx_hash) == 64
        assert result.height >= result.submitted_height
        assert result.gas_used == 123456
        assert len(fake_chain.broadcasts) == 1

    @pytest.mark.integration
    def test_transfer_without_wait(self, client, fake_chain, transfer_request):
        """Test wait=False returns right after the mempool acknowledgment."""
        result = client.transfer(transfer_request, wait=False)

        assert result.status == TxStatus.SUBMITTED
        assert result.height is None
        assert "get_tx" not in fake_chain.calls

    @pytest.mark.integration
    def test_zero_amount_makes_no_network_call(self, client, fake_chain, sender, recipient, sender_credential):
        """Test amount 0 is rejected before touching the node."""
        with pytest.raises(InvalidRequest):
            client.transfer(TransferRequest(sender, recipient, 0, 200000, sender_credential))
        assert fake_chain.calls == []

    @pytest.mark.integration
    def test_bad_gas_makes_no_network_call(self, client, fake_chain, sender, recipient, sender_credential):
        with pytest.raises(AssemblyError):
            client.transfer(TransferRequest(sender, recipient, 5, 0, sender_credential))
        assert fake_chain.calls == []

    @pytest.mark.integration
    def test_gas_beyond_uint64_is_never_broadcast(self, client, fake_chain, sender, recipient, sender_credential):
        """Test a gas limit the chain cannot decode is refused before signing."""
        with pytest.raises(AssemblyError):
            client.transfer(TransferRequest(sender, recipient, 1, 2 ** 64, sender_credential), wait=False)
        assert fake_chain.broadcasts == []

    @pytest.mark.security
    def test_credential_must_match_sender(self, client, fake_chain, sender, recipient, recipient_credential):
        """Test signing for someone else's address is refused."""
        with pytest.raises(InvalidRequest) as exc_info:
            client.transfer(TransferRequest(sender, recipient, 5, 200000, recipient_credential))
        assert exc_info.value.field == "credential"
        assert fake_chain.calls == []

    @pytest.mark.integration
    def test_unknown_sender_account(self, client, fake_chain, sender, recipient, recipient_credential):
        with pytest.raises(AccountNotFoundError):
            client.transfer(TransferRequest(recipient, sender, 5, 200000, recipient_credential))
        assert fake_chain.broadcasts == []

    @pytest.mark.integration
    def test_check_tx_rejection(self, client, fake_chain, transfer_request):
        fake_chain.check_code = 5
        fake_chain.check_log = "insufficient fee"
        with pytest.raises(BroadcastRejectedError) as exc_info:
            client.transfer(transfer_request)
        assert exc_info.value.code == 5
        assert "get_tx" not in fake_chain.calls

    @pytest.mark.integration
    def test_execution_failure(self, client, fake_chain, transfer_request):
        fake_chain.execution_code = 5
        fake_chain.execution_log = "insufficient funds"
        with pytest.raises(ExecutionError) as exc_info:
            client.transfer(transfer_request)
        assert exc_info.value.height == 101
        assert exc_info.value.log == "insufficient funds"

    @pytest.mark.integration
    def test_timeout_then_reconcile(self, client, fake_chain, transfer_request):
        """Test a timed-out transfer is reconciled by hash, not resubmitted."""
        fake_chain.inclusion_polls = 100
        with pytest.raises(ConfirmationTimeout) as exc_info:
            client.transfer(transfer_request)
        tx_hash = exc_info.value.tx_hash

        fake_chain.inclusion_polls = 0
        result = client.wait_for_confirmation(tx_hash)
        assert result.is_confirmed
        assert len(fake_chain.broadcasts) == 1

    @pytest.mark.integration
    def test_transport_timeout_has_no_hash(self, client, fake_chain, transfer_request):
        fake_chain.broadcast_tx_sync = Mock(side_effect=TransportTimeoutError("timed out"))
        with pytest.raises(TransportTimeoutError) as exc_info:
            client.transfer(transfer_request)
        assert "tx_hash" not in exc_info.value.details

    @pytest.mark.integration
    def test_cancelled_wait(self, client, fake_chain, transfer_request):
        fake_chain.inclusion_polls = 100
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ConfirmationTimeout) as exc_info:
            client.transfer(transfer_request, token=token)
        assert exc_info.value.reason == "cancelled"
        assert len(fake_chain.broadcasts) == 1


class TestSequencing:
    """Tests for sequence numbers across submissions."""

    @pytest.mark.integration
    def test_back_to_back_submissions(self, client, fake_chain, transfer_request):
        client.transfer(transfer_request, wait=False)
        client.transfer(transfer_request, wait=False)
        assert [_sequence(tx) for tx in fake_chain.broadcasts] == [0, 1]

    @pytest.mark.integration
    def test_concurrent_submissions(self, client, fake_chain, transfer_request):
        """Test concurrent submissions from one account use consecutive sequences."""
        futures = [client.submit(client.transfer, transfer_request, wait=False) for _ in range(5)]
        results = [f.result(timeout=10) for f in futures]

        assert all(r.status == TxStatus.SUBMITTED for r in results)
        assert sorted(_sequence(tx) for tx in fake_chain.broadcasts) == [0, 1, 2, 3, 4]

    @pytest.mark.integration
    def test_wrong_sequence_resets(self, client, fake_chain, transfer_request):
        client.transfer(transfer_request, wait=False)
        fake_chain.check_code = 32
        with pytest.raises(BroadcastRejectedError):
            client.transfer(transfer_request, wait=False)

        fake_chain.check_code = 0
        client.transfer(transfer_request, wait=False)
        assert [_sequence(tx) for tx in fake_chain.broadcasts] == [0, 1, 0]

    @pytest.mark.integration
    def test_waiting_does_not_hold_the_account(self, client, fake_chain, transfer_request):
        """Test a second transfer broadcasts while the first still waits for inclusion."""
        fake_chain.inclusion_polls = 100
        polling = threading.Event()
        release = threading.Event()
        get_tx = fake_chain.get_tx

        def held_get_tx(tx_hash):
            polling.set()
            release.wait(timeout=5)
            return get_tx(tx_hash)

        fake_chain.get_tx = held_get_tx
        first = client.submit(client.transfer, transfer_request)
        assert polling.wait(timeout=5)

        second = client.transfer(transfer_request, wait=False)
        assert second.status == TxStatus.SUBMITTED
        assert [_sequence(tx) for tx in fake_chain.broadcasts] == [0, 1]

        release.set()
        with pytest.raises(ConfirmationTimeout):
            first.result(timeout=10)


class TestQueries:
    """Read-only operations never sign or broadcast."""

    @pytest.mark.integration
    def test_balance(self, client, fake_chain, client_config, sender):
        fake_chain.query_responses["balance"] = {"balance": "250"}
        result = client.balance(TokenInfoRequest(sender))

        assert result.balance == 250
        assert result.denom == f"cw20:{client_config.token_address}"
        assert fake_chain.queries == [(client_config.token_address, {"balance": {"address": sender}})]
        assert fake_chain.broadcasts == []

    @pytest.mark.integration
    def test_token_info(self, client, fake_chain):
        fake_chain.query_responses["token_info"] = {
            "name": "Real Estate Fund", "symbol": "REF", "decimals": 6, "total_supply": "1000000",
        }
        info = client.token_info()
        assert info.symbol == "REF"
        assert info.total_supply == 1000000

    @pytest.mark.integration
    def test_check_compliance(self, client, fake_chain, client_config, recipient):
        fake_chain.query_responses["check_token_compliance"] = True
        result = client.check_compliance(CheckComplianceRequest(recipient))

        assert result.compliant
        assert result.token_address == client_config.token_address
        assert fake_chain.broadcasts == []

    @pytest.mark.integration
    def test_check_compliance_bad_answer(self, client, fake_chain, recipient):
        fake_chain.query_responses["check_token_compliance"] = {"unexpected": 1}
        with pytest.raises(RpcResponseError):
            client.check_compliance(CheckComplianceRequest(recipient))

    @pytest.mark.integration
    def test_validated_claims(self, client, fake_chain, sender, recipient):
        fake_chain.query_responses["get_validated_claims_for_user"] = [
            {"topic": "1", "issuer": sender, "data": "a3lj", "uri": ""},
        ]
        claims = client.get_validated_claims(GetValidatedClaimsRequest(recipient))
        assert claims == [Claim(topic=1, issuer=sender, data=b"kyc", uri="")]

    @pytest.mark.integration
    def test_invalid_balance_address(self, client, fake_chain):
        with pytest.raises(InvalidRequest):
            client.balance(TokenInfoRequest("nope"))
        assert fake_chain.calls == []


class TestIdentityAndCompliance:
    """Mutating identity and compliance operations."""

    @pytest.mark.integration
    def test_register_identity(self, client, fake_chain, client_config, sender, sender_credential):
        result = client.register_identity(RegisterIdentityRequest(sender, "us", 200000, sender_credential))
        assert result.is_confirmed
        assert len(fake_chain.broadcasts) == 1

    @pytest.mark.integration
    def test_add_claim(self, client, sender, recipient, sender_credential):
        claim = Claim(topic=1, issuer=sender, data=b"kyc")
        result = client.add_claim(AddClaimRequest(sender, recipient, claim, 200000, sender_credential))
        assert result.is_confirmed

    @pytest.mark.integration
    def test_update_compliance_module(self, client, sender, recipient, sender_credential):
        request = ComplianceModuleRequest(sender, recipient, 200000, sender_credential)
        assert client.update_compliance_module(request, active=False).is_confirmed


class TestEventsAndStatus:

    @pytest.mark.integration
    def test_lifecycle_events(self, client, transfer_request):
        seen = []
        client.events.add_global_handler(lambda event: seen.append(event.type))
        client.transfer(transfer_request)
        assert seen == [
            EventType.BEFORE_SIGN,
            EventType.AFTER_SIGN,
            EventType.BEFORE_BROADCAST,
            EventType.AFTER_BROADCAST,
            EventType.TX_CONFIRMED,
        ]

    @pytest.mark.integration
    def test_failed_event(self, client, fake_chain, transfer_request):
        failed = []
        client.on(EventType.TX_FAILED)(failed.append)
        fake_chain.execution_code = 5
        with pytest.raises(ExecutionError):
            client.transfer(transfer_request)
        assert failed[0].data["code"] == 5

    @pytest.mark.integration
    def test_signed_summary_logged(self, client, transfer_request, caplog):
        with caplog.at_level(logging.DEBUG, logger="rwa-sdk"):
            result = client.transfer(transfer_request, wait=False)

        signed = [json.loads(r.getMessage()) for r in caplog.records if "Signed transaction" in r.getMessage()]
        assert signed[0]["tx_hash"] == result.tx_hash
        assert signed[0]["details"]["summary"].startswith(f"tx {result.tx_hash[:16]}... chain=rwa-test-1 seq=0")

    @pytest.mark.integration
    def test_status_is_idempotent(self, client, transfer_request):
        result = client.transfer(transfer_request)
        first = client.get_transaction_status(result.tx_hash)
        second = client.get_transaction_status(result.tx_hash.lower())
        assert first.status == second.status == TxStatus.CONFIRMED
        assert (first.height, first.code) == (second.height, second.code) == (result.height, 0)

    @pytest.mark.integration
    def test_unknown_hash_is_pending(self, client):
        assert client.get_transaction_status("00" * 32).status == TxStatus.PENDING

    @pytest.mark.integration
    def test_bad_hash(self, client, fake_chain):
        with pytest.raises(InvalidRequest):
            client.get_transaction_status("xyz")
        assert fake_chain.calls == []


class TestLifecycle:

    @pytest.mark.integration
    def test_submit_by_name(self, client, fake_chain, sender):
        fake_chain.query_responses["balance"] = {"balance": "7"}
        assert client.submit("balance", TokenInfoRequest(sender)).result(timeout=10).balance == 7

    @pytest.mark.integration
    def test_submit_unknown_operation(self, client):
        with pytest.raises(InvalidRequest):
            client.submit("drain_everything")

    @pytest.mark.integration
    def test_context_manager_closes(self, client_config, fake_chain):
        from rwa_sdk import RwaClient

        with RwaClient(client_config, rpc=fake_chain):
            pass
        assert fake_chain.closed
