"""Core layer package."""

from .address import decode_address, encode_address, validate_address
from .messages import ExecuteMessage, MessageBuilder, QueryMessage
from .transaction import TransactionAssembler, TransactionEnvelope

__all__ = [
    "decode_address",
    "encode_address",
    "validate_address",
    "ExecuteMessage",
    "MessageBuilder",
    "QueryMessage",
    "TransactionAssembler",
    "TransactionEnvelope",
]
