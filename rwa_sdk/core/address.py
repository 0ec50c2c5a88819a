"""
RWA SDK - Bech32 Addresses

Syntax checks and derivation for Cosmos account and contract addresses.
Only the encoding is checked; existence on chain is not.
"""

from typing import Optional

from embit import bech32
from embit.hashes import hash160

from ..errors import InvalidAddressError


# 20-byte accounts, 32-byte contracts and module accounts
VALID_PAYLOAD_SIZES = (20, 32)


def decode_address(address: str, prefix: Optional[str] = None) -> bytes:
    """
    Decode a bech32 address into its raw payload.

    Args:
        address: Bech32 address, e.g. "cosmos1...".
        prefix: Required human-readable part. Any prefix if None.

    Returns:
        Raw address bytes (20 or 32 bytes).

    Raises:
        InvalidAddressError: If the address is malformed.
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddressError(str(address), reason="address cannot be empty")

    encoding, hrp, data = bech32.bech32_decode(address)
    if encoding is None:
        raise InvalidAddressError(address, reason="bad bech32 checksum or characters")
    if encoding != bech32.Encoding.BECH32:
        raise InvalidAddressError(address, reason="bech32m is not used for accounts")
    if prefix is not None and hrp != prefix:
        raise InvalidAddressError(address, reason=f"expected prefix {prefix!r}, got {hrp!r}")

    payload = bech32.convertbits(data, 5, 8, False)
    if payload is None or len(payload) not in VALID_PAYLOAD_SIZES:
        raise InvalidAddressError(address, reason="unexpected payload length")
    return bytes(payload)


def is_valid_address(address: str, prefix: Optional[str] = None) -> bool:
    try:
        decode_address(address, prefix)
    except InvalidAddressError:
        return False
    return True


def validate_address(address: str, prefix: Optional[str] = None, field: Optional[str] = None) -> str:
    """Return ``address`` unchanged if valid, else raise InvalidAddressError."""
    try:
        decode_address(address, prefix)
    except InvalidAddressError as e:
        raise InvalidAddressError(str(address), field=field, reason=e.reason) from None
    return address


def encode_address(payload: bytes, prefix: str) -> str:
    """Encode raw address bytes with the given prefix."""
    data = bech32.convertbits(payload, 8, 5)
    return bech32.bech32_encode(bech32.Encoding.BECH32, prefix, data)


def address_from_public_key(public_key: bytes, prefix: str) -> str:
    """Account address for a compressed secp256k1 public key."""
    return encode_address(hash160(public_key), prefix)
