"""
RWA SDK - Account Sequencing

Serializes submissions per signing account so concurrent operations from
one account get distinct, consecutive sequence numbers.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from ..constants import CODE_WRONG_SEQUENCE
from ..models import AccountInfo, BroadcastAck
from .rpc import TendermintRPC


class AccountSequencer:
    """
    Per-account lock plus a local view of the next sequence.

    The chain only advances an account's sequence once a transaction is
    committed. Between broadcast and commit a fresh account query still
    returns the old value, so the sequencer remembers ``sequence + 1`` for
    every accepted broadcast and signs with the larger of the two.

    Example:
        with sequencer.reserve(address) as reservation:
            envelope = assembler.assemble(msgs, gas, reservation.account, cred)
            ack = rpc.broadcast_tx_sync(envelope.tx_bytes)
            reservation.record(ack)
    """

    def __init__(self, rpc: TendermintRPC):
        self.rpc = rpc
        self._locks: Dict[str, threading.Lock] = {}
        self._next_sequence: Dict[str, int] = {}
        self._guard = threading.Lock()

    def _lock_for(self, address: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(address)
            if lock is None:
                lock = self._locks[address] = threading.Lock()
            return lock

    def next_sequence(self, address: str) -> int:
        """Locally tracked next sequence, or 0 if none is tracked."""
        with self._guard:
            return self._next_sequence.get(address, 0)

    @contextmanager
    def reserve(self, address: str) -> Iterator["Reservation"]:
        """
        Hold the account's lock and yield its signing numbers.

        The lock is released when the block exits, whether or not the
        broadcast succeeded.

        Raises:
            AccountNotFoundError: The account does not exist on chain.
            TransportError: The account query failed.
        """
        with self._lock_for(address):
            chain = self.rpc.query_account(address)
            local = self.next_sequence(address)
            account = AccountInfo(
                address=chain.address,
                account_number=chain.account_number,
                sequence=max(chain.sequence, local),
            )
            yield Reservation(self, account)

    def _advance(self, address: str, used_sequence: int) -> None:
        with self._guard:
            self._next_sequence[address] = max(self._next_sequence.get(address, 0), used_sequence + 1)

    def reset(self, address: str) -> None:
        """Forget the local sequence so the next reservation trusts the chain."""
        with self._guard:
            self._next_sequence.pop(address, None)


class Reservation:
    """Signing numbers for one submission, valid inside ``reserve()``."""

    __slots__ = ("_sequencer", "account")

    def __init__(self, sequencer: AccountSequencer, account: AccountInfo):
        self._sequencer = sequencer
        self.account = account

    def record(self, ack: BroadcastAck) -> None:
        """Update the local sequence from a broadcast acknowledgment."""
        if ack.accepted:
            self._sequencer._advance(self.account.address, self.account.sequence)
        elif ack.code == CODE_WRONG_SEQUENCE:
            self._sequencer.reset(self.account.address)
