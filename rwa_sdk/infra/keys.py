"""
RWA SDK - Key Management

Signing credentials and the signer adapter used by the transaction assembler.

SECURITY NOTE: SigningCredential intentionally does NOT expose private key
material through properties, serialization or string representation. The
embit key object only exists inside ``acquire()``.
"""

import hashlib
from contextlib import contextmanager
from typing import Iterator

from embit import ec
from embit.util import secp256k1

from ..constants import COMPRESSED_PUBKEY_SIZE, PRIVATE_KEY_SIZE, SIGNATURE_SIZE
from ..core.address import address_from_public_key
from ..errors import SigningError


class SigningCredential:
    """
    Opaque secp256k1 secret owned by the caller.

    SECURITY: The secret is never exposed through properties, pickling or
    string representation. Signing borrows it through ``acquire()``.
    """

    __slots__ = ('_secret', '_public_key')  # Prevent __dict__ access

    def __init__(self, secret: bytes):
        """
        Initialize credential.

        Args:
            secret: 32-byte private key.

        Raises:
            SigningError: If the secret is not a valid secp256k1 key.
        """
        if not isinstance(secret, (bytes, bytearray)) or len(secret) != PRIVATE_KEY_SIZE:
            raise SigningError(f"Private key must be {PRIVATE_KEY_SIZE} bytes")
        try:
            private_key = ec.PrivateKey(bytes(secret))
        except ec.ECError as e:
            raise SigningError(f"Invalid private key: {e}") from None

        self._secret = bytes(secret)
        self._public_key = private_key.get_public_key().sec()

    @classmethod
    def from_hex(cls, private_key_hex: str) -> "SigningCredential":
        """Create credential from a 64-character hex private key."""
        if not isinstance(private_key_hex, str) or len(private_key_hex) != PRIVATE_KEY_SIZE * 2:
            raise SigningError("Private key must be 64 hex characters (32 bytes)")
        try:
            secret = bytes.fromhex(private_key_hex)
        except ValueError:
            raise SigningError("Private key must be hexadecimal") from None
        return cls(secret)

    @property
    def public_key(self) -> bytes:
        """Compressed 33-byte public key."""
        return self._public_key

    def address(self, prefix: str) -> str:
        """Account address for this credential."""
        return address_from_public_key(self._public_key, prefix)

    @contextmanager
    def acquire(self) -> Iterator[ec.PrivateKey]:
        """
        Borrow the private key for the duration of a signing call.

        The key object is dropped when the block exits, even on error.
        """
        private_key = ec.PrivateKey(self._secret)
        try:
            yield private_key
        finally:
            del private_key

    def __repr__(self) -> str:
        """Safe representation that doesn't leak private key."""
        return f"SigningCredential(public_key={self._public_key.hex()[:16]}...)"

    def __str__(self) -> str:
        return self.__repr__()

    def __getstate__(self):
        """Prevent pickling to avoid accidental key serialization."""
        raise TypeError("SigningCredential cannot be pickled (contains secret material)")

    def __reduce__(self):
        """Prevent pickling via reduce protocol."""
        raise TypeError("SigningCredential cannot be pickled (contains secret material)")


# =============================================================================
# Signer Adapter
# =============================================================================

class SignerAdapter:
    """
    Produces Cosmos SIGN_MODE_DIRECT signatures.

    The message is ``sha256(sign_bytes)`` and the signature is the 64-byte
    compact (r || s) secp256k1 ECDSA signature. Nonces are RFC 6979, so the
    same sign bytes always produce the same signature.
    """

    @staticmethod
    def digest(sign_bytes: bytes) -> bytes:
        return hashlib.sha256(sign_bytes).digest()

    def sign(self, sign_bytes: bytes, credential: SigningCredential) -> bytes:
        """
        Sign canonical sign bytes.

        Args:
            sign_bytes: Serialized SignDoc (embeds chain id, account number and sequence).
            credential: Caller-owned signing credential.

        Returns:
            64-byte compact signature.

        Raises:
            SigningError: If the credential is malformed or signing fails.
        """
        if not isinstance(credential, SigningCredential):
            raise SigningError(f"Expected SigningCredential, got {type(credential).__name__}")
        if not sign_bytes:
            raise SigningError("Refusing to sign an empty payload")

        digest = self.digest(sign_bytes)
        try:
            with credential.acquire() as private_key:
                sig = secp256k1.ecdsa_signature_normalize(private_key.sign(digest)._sig)
        except (ec.ECError, ValueError) as e:
            raise SigningError(f"Signing failed: {e}") from None

        return secp256k1.ecdsa_signature_serialize_compact(sig)

    def verify(self, sign_bytes: bytes, signature: bytes, public_key: bytes) -> bool:
        """
        Verify a compact signature against sign bytes.

        Returns:
            True if valid, False otherwise.
        """
        if len(signature) != SIGNATURE_SIZE or len(public_key) != COMPRESSED_PUBKEY_SIZE:
            return False
        try:
            pubkey = ec.PublicKey.parse(public_key)
            sig = ec.Signature(secp256k1.ecdsa_signature_parse_compact(signature))
            return bool(pubkey.verify(sig, self.digest(sign_bytes)))
        except (ValueError, ec.ECError):
            return False
