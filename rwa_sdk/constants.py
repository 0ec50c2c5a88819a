"""
RWA SDK - Constants

Centralized configuration constants for the SDK.
"""

# =============================================================================
# Protobuf Type URLs
# =============================================================================

MSG_EXECUTE_CONTRACT_TYPE_URL = "/cosmwasm.wasm.v1.MsgExecuteContract"
SECP256K1_PUBKEY_TYPE_URL = "/cosmos.crypto.secp256k1.PubKey"
BASE_ACCOUNT_TYPE_URL = "/cosmos.auth.v1beta1.BaseAccount"

# gRPC query paths served through abci_query
ACCOUNT_QUERY_PATH = "/cosmos.auth.v1beta1.Query/Account"
SMART_QUERY_PATH = "/cosmwasm.wasm.v1.Query/SmartContractState"

# SignMode enum value for SIGN_MODE_DIRECT
SIGN_MODE_DIRECT = 1


# =============================================================================
# Chain Result Codes
# =============================================================================

CODE_OK = 0

# sdkerrors.ErrWrongSequence in the "sdk" codespace
CODE_WRONG_SEQUENCE = 32


# =============================================================================
# Limits
# =============================================================================

MAX_UINT128 = 2 ** 128 - 1
MAX_UINT64 = 2 ** 64 - 1

PRIVATE_KEY_SIZE = 32
COMPRESSED_PUBKEY_SIZE = 33
SIGNATURE_SIZE = 64


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_ADDRESS_PREFIX = "cosmos"

# Seconds allowed for a single RPC round trip
DEFAULT_REQUEST_TIMEOUT = 10.0

# Seconds between status polls (roughly one block time on most chains)
DEFAULT_POLL_INTERVAL = 1.0

# Poll attempts before giving up
DEFAULT_MAX_POLL_ATTEMPTS = 60

# Seconds before giving up on confirmation
DEFAULT_CONFIRMATION_TIMEOUT = 60.0

# Worker threads for background submissions
DEFAULT_MAX_WORKERS = 4
