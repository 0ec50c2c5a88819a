"""
RWA SDK - Tendermint RPC Client

Handles all blockchain interactions via the CometBFT/Tendermint JSON-RPC
endpoint: broadcast, transaction lookup, ABCI queries and chain status.
"""

import base64
import itertools
import json
from typing import Any, Dict, Optional

import requests

from ..constants import ACCOUNT_QUERY_PATH, CODE_OK, DEFAULT_REQUEST_TIMEOUT, SMART_QUERY_PATH
from ..core import proto
from ..errors import AccountNotFoundError, RpcResponseError, TransportError, TransportTimeoutError
from ..models import AccountInfo, BroadcastAck


class TendermintRPC:
    """
    Client for a CometBFT/Tendermint RPC endpoint.

    One ``requests.Session`` is shared by all calls and is safe to use from
    several threads. No retries happen here: a failed call raises
    TransportError and the caller decides whether to run the whole
    operation again.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize RPC client.

        Args:
            base_url: RPC endpoint, e.g. "http://localhost:26657".
            timeout: Seconds allowed per request (connect and read).
            session: Optional pre-configured requests.Session.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._ids = itertools.count(1)

    def close(self) -> None:
        self.session.close()

    def _call(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Make a JSON-RPC call and return its ``result`` object."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = self.session.post(self.base_url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise TransportTimeoutError(
                f"RPC {method} timed out after {self.timeout}s: {e}",
                endpoint=self.base_url, method=method,
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"RPC {method} failed: {e}", endpoint=self.base_url, method=method) from e

        try:
            body = response.json()
        except ValueError:
            raise RpcResponseError(
                f"RPC {method} returned non-JSON body (HTTP {response.status_code})",
                endpoint=self.base_url, method=method, status_code=response.status_code,
            ) from None

        if not isinstance(body, dict):
            raise RpcResponseError(f"RPC {method} returned malformed body",
                                   endpoint=self.base_url, method=method,
                                   status_code=response.status_code)
        if body.get("error"):
            raise RpcResponseError(
                f"RPC {method} error: {body['error']}",
                endpoint=self.base_url, method=method,
                status_code=response.status_code, rpc_error=body["error"],
            )
        if response.status_code >= 400 or not isinstance(body.get("result"), dict):
            raise RpcResponseError(
                f"RPC {method} returned HTTP {response.status_code} without a result",
                endpoint=self.base_url, method=method, status_code=response.status_code,
            )
        return body["result"]

    # =========================================================================
    # Chain Status
    # =========================================================================

    def latest_height(self) -> int:
        """Height of the latest block known to the node."""
        result = self._call("status", {})
        try:
            return int(result["sync_info"]["latest_block_height"])
        except (KeyError, TypeError, ValueError):
            raise RpcResponseError("status response missing latest_block_height",
                                   endpoint=self.base_url, method="status") from None

    # =========================================================================
    # Transaction Operations
    # =========================================================================

    def broadcast_tx_sync(self, tx_bytes: bytes) -> BroadcastAck:
        """
        Submit a signed transaction and wait for mempool admission only.

        Args:
            tx_bytes: Serialized TxRaw.

        Returns:
            BroadcastAck. ``accepted`` is False when CheckTx rejected it.
        """
        result = self._call("broadcast_tx_sync", {"tx": base64.b64encode(tx_bytes).decode("ascii")})
        try:
            code = int(result.get("code", CODE_OK))
            tx_hash = str(result["hash"]).upper()
        except (KeyError, TypeError, ValueError):
            raise RpcResponseError("broadcast_tx_sync response missing hash or code",
                                   endpoint=self.base_url, method="broadcast_tx_sync") from None

        return BroadcastAck(
            tx_hash=tx_hash,
            accepted=code == CODE_OK,
            code=code,
            codespace=result.get("codespace") or "",
            log=result.get("log") or "",
        )

    def get_tx(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """
        Look up an included transaction.

        Args:
            tx_hash: Hex transaction hash.

        Returns:
            The ``tx`` result (height, tx_result, ...) or None if not found.
        """
        try:
            params = {"hash": base64.b64encode(bytes.fromhex(tx_hash)).decode("ascii"), "prove": False}
        except ValueError:
            raise TransportError(f"Transaction hash is not hex: {tx_hash!r}",
                                 endpoint=self.base_url, method="tx") from None
        try:
            return self._call("tx", params)
        except RpcResponseError as e:
            if _is_not_found(e.rpc_error):
                return None
            raise

    # =========================================================================
    # Queries
    # =========================================================================

    def abci_query(self, path: str, data: bytes = b"", height: int = 0) -> bytes:
        """
        Run an ABCI query and return the raw response value.

        Raises:
            RpcResponseError: If the application returned a non-zero code.
        """
        result = self._call("abci_query", {
            "path": path,
            "data": data.hex(),
            "height": str(height),
            "prove": False,
        })
        response = result.get("response") or {}
        code = int(response.get("code") or CODE_OK)
        if code != CODE_OK:
            raise RpcResponseError(
                f"abci_query {path} failed with code {code}: {response.get('log', '')}",
                endpoint=self.base_url, method="abci_query",
                rpc_error={"code": code, "log": response.get("log", ""),
                           "codespace": response.get("codespace", "")},
            )
        return base64.b64decode(response.get("value") or "")

    def query_account(self, address: str) -> AccountInfo:
        """
        Fetch account number and committed sequence.

        Raises:
            AccountNotFoundError: If the account has never received funds.
        """
        try:
            value = self.abci_query(ACCOUNT_QUERY_PATH, proto.serialize(proto.QueryAccountRequest(address=address)))
        except RpcResponseError as e:
            if _is_not_found(e.rpc_error):
                raise AccountNotFoundError(address) from e
            raise
        if not value:
            raise AccountNotFoundError(address)

        try:
            response = proto.QueryAccountResponse()
            response.ParseFromString(value)
            account = proto.unpack_account(response.account)
        except proto.DecodeError as e:
            raise RpcResponseError(f"Malformed account response for {address}: {e}",
                                   endpoint=self.base_url, method="abci_query") from e
        return AccountInfo(address=address, account_number=account.account_number, sequence=account.sequence)

    def query_contract(self, contract: str, query_data: bytes) -> Any:
        """
        Run a CosmWasm smart query.

        Args:
            contract: Contract address.
            query_data: JSON query bytes.

        Returns:
            The decoded JSON answer.
        """
        request = proto.QuerySmartContractStateRequest(address=contract, query_data=query_data)
        value = self.abci_query(SMART_QUERY_PATH, proto.serialize(request))
        try:
            response = proto.QuerySmartContractStateResponse()
            response.ParseFromString(value)
            return json.loads(response.data)
        except (proto.DecodeError, ValueError) as e:
            raise RpcResponseError(f"Malformed smart query response from {contract}: {e}",
                                   endpoint=self.base_url, method="abci_query") from e


def _is_not_found(rpc_error: Optional[dict]) -> bool:
    if not rpc_error:
        return False
    text = " ".join(str(rpc_error.get(k, "")) for k in ("message", "data", "log")).lower()
    return "not found" in text
