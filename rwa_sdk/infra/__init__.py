"""Infrastructure layer package."""

from .keys import SignerAdapter, SigningCredential
from .rpc import TendermintRPC
from .accounts import AccountSequencer

__all__ = ["SignerAdapter", "SigningCredential", "TendermintRPC", "AccountSequencer"]
