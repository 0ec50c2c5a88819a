"""
RWA SDK Test Configuration

Shared fixtures and test utilities.
"""

import hashlib
import json
import sys
import threading
from pathlib import Path
from unittest.mock import Mock

import pytest

# Ensure rwa_sdk is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from rwa_sdk.config import ClientConfig
from rwa_sdk.core.address import encode_address
from rwa_sdk.errors import AccountNotFoundError
from rwa_sdk.infra.keys import SigningCredential
from rwa_sdk.models import AccountInfo, BroadcastAck


# =============================================================================
# Test Keys (DO NOT USE IN PRODUCTION)
# =============================================================================

@pytest.fixture
def test_private_key():
    """Test private key - DO NOT USE IN PRODUCTION."""
    return "0000000000000000000000000000000000000000000000000000000000000001"


@pytest.fixture
def test_public_key():
    """Compressed public key for test_private_key (the secp256k1 generator)."""
    return "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


@pytest.fixture
def sender_credential(test_private_key):
    return SigningCredential.from_hex(test_private_key)


@pytest.fixture
def recipient_credential():
    return SigningCredential((2).to_bytes(32, "big"))


@pytest.fixture
def sender(sender_credential):
    return sender_credential.address("cosmos")


@pytest.fixture
def recipient(recipient_credential):
    return recipient_credential.address("cosmos")


# =============================================================================
# Configuration
# =============================================================================

TOKEN_ADDRESS = encode_address(b"\x01" * 32, "cosmos")
IDENTITY_ADDRESS = encode_address(b"\x02" * 32, "cosmos")
COMPLIANCE_ADDRESS = encode_address(b"\x03" * 32, "cosmos")


@pytest.fixture
def config_data():
    return {
        "rpc_url": "http://localhost:26657",
        "chain_id": "rwa-test-1",
        "token_address": TOKEN_ADDRESS,
        "identity_address": IDENTITY_ADDRESS,
        "compliance_address": COMPLIANCE_ADDRESS,
        "denom": "urwa",
        "gas_price": "0.025",
        "poll_interval": 0.001,
        "max_poll_attempts": 5,
        "confirmation_timeout": 5.0,
    }


@pytest.fixture
def client_config(config_data):
    return ClientConfig.from_dict(config_data).validate()


# =============================================================================
# Fake Chain
# =============================================================================

class FakeChain:
    """
    In-memory stand-in for TendermintRPC.

    Accepted transactions are included after ``inclusion_polls`` lookups, one
    block per inclusion. Every call is recorded in ``calls``.
    """

    def __init__(self, height: int = 100):
        self.height = height
        self.accounts = {}
        self.pending = {}
        self.included = {}
        self.broadcasts = []
        self.queries = []
        self.query_responses = {}
        self.calls = []
        self.check_code = 0
        self.check_log = ""
        self.execution_code = 0
        self.execution_log = ""
        self.inclusion_polls = 1
        self.closed = False
        self._lock = threading.Lock()

    def add_account(self, address, account_number=7, sequence=0):
        self.accounts[address] = [account_number, sequence]

    def latest_height(self):
        self.calls.append("latest_height")
        return self.height

    def query_account(self, address):
        self.calls.append("query_account")
        if address not in self.accounts:
            raise AccountNotFoundError(address)
        number, sequence = self.accounts[address]
        return AccountInfo(address=address, account_number=number, sequence=sequence)

    def broadcast_tx_sync(self, tx_bytes):
        self.calls.append("broadcast_tx_sync")
        tx_hash = hashlib.sha256(tx_bytes).hexdigest().upper()
        with self._lock:
            self.broadcasts.append(tx_bytes)
            if self.check_code:
                return BroadcastAck(tx_hash=tx_hash, accepted=False, code=self.check_code,
                                    codespace="sdk", log=self.check_log)
            self.pending[tx_hash] = 0
        return BroadcastAck(tx_hash=tx_hash, accepted=True)

    def get_tx(self, tx_hash):
        self.calls.append("get_tx")
        with self._lock:
            if tx_hash in self.included:
                return self.included[tx_hash]
            if tx_hash not in self.pending:
                return None
            self.pending[tx_hash] += 1
            if self.pending[tx_hash] < self.inclusion_polls:
                return None
            del self.pending[tx_hash]
            self.height += 1
            self.included[tx_hash] = {
                "hash": tx_hash,
                "height": str(self.height),
                "tx_result": {
                    "code": self.execution_code,
                    "log": self.execution_log,
                    "codespace": "wasm" if self.execution_code else "",
                    "gas_wanted": "200000",
                    "gas_used": "123456",
                    "data": "",
                    "events": [{"type": "wasm", "attributes": []}],
                },
            }
            return self.included[tx_hash]

    def query_contract(self, contract, query_data):
        self.calls.append("query_contract")
        msg = json.loads(query_data)
        self.queries.append((contract, msg))
        return self.query_responses[next(iter(msg))]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_chain(sender):
    chain = FakeChain()
    chain.add_account(sender)
    return chain


@pytest.fixture
def client(client_config, fake_chain):
    from rwa_sdk.client import RwaClient

    rwa = RwaClient(client_config, rpc=fake_chain)
    yield rwa
    rwa.close()


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_session():
    """Mock requests.Session for TendermintRPC tests."""
    return Mock()


@pytest.fixture
def rpc_response():
    """Factory for mock HTTP responses carrying a JSON-RPC body."""
    def build(result=None, error=None, status_code=200):
        response = Mock()
        response.status_code = status_code
        body = {"jsonrpc": "2.0", "id": 1}
        if error is not None:
            body["error"] = error
        else:
            body["result"] = result
        response.json.return_value = body
        return response
    return build


# =============================================================================
# Marker Helpers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (fake chain)")
    config.addinivalue_line("markers", "security: Security-focused tests")
