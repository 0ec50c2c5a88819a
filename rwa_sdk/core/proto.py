"""
RWA SDK - Protobuf Messages

``google.protobuf`` message classes for the Cosmos SDK and CosmWasm types the
pipeline signs, broadcasts and queries. The descriptors mirror the upstream
.proto files, trimmed to the fields the SDK reads or writes. Unknown fields
in node responses are preserved by the parser and otherwise ignored.

Classes live in a private descriptor pool, so they never clash with other
Cosmos bindings loaded into the same process.
"""

from typing import Dict, Sequence, Type

from google.protobuf import any_pb2, descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError, Message

from ..constants import BASE_ACCOUNT_TYPE_URL

_F = descriptor_pb2.FieldDescriptorProto

_SCALARS = {
    "string": _F.TYPE_STRING,
    "bytes": _F.TYPE_BYTES,
    "uint64": _F.TYPE_UINT64,
}

_ENUMS = {".cosmos.tx.signing.v1beta1.SignMode"}


def _field(name: str, number: int, kind: str, repeated: bool = False) -> descriptor_pb2.FieldDescriptorProto:
    field = _F(
        name=name,
        number=number,
        label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
    )
    if kind in _SCALARS:
        field.type = _SCALARS[kind]
    else:
        field.type = _F.TYPE_ENUM if kind in _ENUMS else _F.TYPE_MESSAGE
        field.type_name = kind
    return field


def _message(name: str, *fields, nested: Sequence[descriptor_pb2.DescriptorProto] = ()):
    return descriptor_pb2.DescriptorProto(name=name, field=list(fields), nested_type=list(nested))


def _file(name: str, package: str, messages=(), enums=(), deps=()) -> descriptor_pb2.FileDescriptorProto:
    return descriptor_pb2.FileDescriptorProto(
        name=name,
        package=package,
        syntax="proto3",
        dependency=list(deps),
        message_type=list(messages),
        enum_type=list(enums),
    )


_ANY = ".google.protobuf.Any"
_COIN = ".cosmos.base.v1beta1.Coin"

_FILES = [
    _file("cosmos/base/v1beta1/coin.proto", "cosmos.base.v1beta1", [
        _message("Coin", _field("denom", 1, "string"), _field("amount", 2, "string")),
    ]),
    _file("cosmos/crypto/secp256k1/keys.proto", "cosmos.crypto.secp256k1", [
        _message("PubKey", _field("key", 1, "bytes")),
    ]),
    _file("cosmos/tx/signing/v1beta1/signing.proto", "cosmos.tx.signing.v1beta1", enums=[
        descriptor_pb2.EnumDescriptorProto(name="SignMode", value=[
            descriptor_pb2.EnumValueDescriptorProto(name="SIGN_MODE_UNSPECIFIED", number=0),
            descriptor_pb2.EnumValueDescriptorProto(name="SIGN_MODE_DIRECT", number=1),
        ]),
    ]),
    _file("cosmos/tx/v1beta1/tx.proto", "cosmos.tx.v1beta1", [
        _message("TxRaw",
                 _field("body_bytes", 1, "bytes"),
                 _field("auth_info_bytes", 2, "bytes"),
                 _field("signatures", 3, "bytes", repeated=True)),
        _message("SignDoc",
                 _field("body_bytes", 1, "bytes"),
                 _field("auth_info_bytes", 2, "bytes"),
                 _field("chain_id", 3, "string"),
                 _field("account_number", 4, "uint64")),
        _message("TxBody",
                 _field("messages", 1, _ANY, repeated=True),
                 _field("memo", 2, "string"),
                 _field("timeout_height", 3, "uint64")),
        _message("AuthInfo",
                 _field("signer_infos", 1, ".cosmos.tx.v1beta1.SignerInfo", repeated=True),
                 _field("fee", 2, ".cosmos.tx.v1beta1.Fee")),
        _message("SignerInfo",
                 _field("public_key", 1, _ANY),
                 _field("mode_info", 2, ".cosmos.tx.v1beta1.ModeInfo"),
                 _field("sequence", 3, "uint64")),
        _message("ModeInfo",
                 _field("single", 1, ".cosmos.tx.v1beta1.ModeInfo.Single"),
                 nested=[_message("Single", _field("mode", 1, ".cosmos.tx.signing.v1beta1.SignMode"))]),
        _message("Fee",
                 _field("amount", 1, _COIN, repeated=True),
                 _field("gas_limit", 2, "uint64"),
                 _field("payer", 3, "string"),
                 _field("granter", 4, "string")),
    ], deps=[
        "google/protobuf/any.proto",
        "cosmos/base/v1beta1/coin.proto",
        "cosmos/tx/signing/v1beta1/signing.proto",
    ]),
    _file("cosmwasm/wasm/v1/tx.proto", "cosmwasm.wasm.v1", [
        _message("MsgExecuteContract",
                 _field("sender", 1, "string"),
                 _field("contract", 2, "string"),
                 _field("msg", 3, "bytes"),
                 _field("funds", 5, _COIN, repeated=True)),
    ], deps=["cosmos/base/v1beta1/coin.proto"]),
    _file("cosmwasm/wasm/v1/query.proto", "cosmwasm.wasm.v1", [
        _message("QuerySmartContractStateRequest",
                 _field("address", 1, "string"),
                 _field("query_data", 2, "bytes")),
        _message("QuerySmartContractStateResponse", _field("data", 1, "bytes")),
    ]),
    _file("cosmos/auth/v1beta1/auth.proto", "cosmos.auth.v1beta1", [
        _message("BaseAccount",
                 _field("address", 1, "string"),
                 _field("pub_key", 2, _ANY),
                 _field("account_number", 3, "uint64"),
                 _field("sequence", 4, "uint64")),
        _message("ModuleAccount",
                 _field("base_account", 1, ".cosmos.auth.v1beta1.BaseAccount"),
                 _field("name", 2, "string")),
    ], deps=["google/protobuf/any.proto"]),
    _file("cosmos/auth/v1beta1/query.proto", "cosmos.auth.v1beta1", [
        _message("QueryAccountRequest", _field("address", 1, "string")),
        _message("QueryAccountResponse", _field("account", 1, _ANY)),
    ], deps=["google/protobuf/any.proto"]),
    _file("cosmos/vesting/v1beta1/vesting.proto", "cosmos.vesting.v1beta1", [
        _message("BaseVestingAccount", _field("base_account", 1, ".cosmos.auth.v1beta1.BaseAccount")),
    ] + [
        _message(name, _field("base_vesting_account", 1, ".cosmos.vesting.v1beta1.BaseVestingAccount"))
        for name in ("ContinuousVestingAccount", "DelayedVestingAccount",
                     "PeriodicVestingAccount", "PermanentLockedAccount")
    ], deps=["cosmos/auth/v1beta1/auth.proto"]),
]


def _build_pool() -> descriptor_pool.DescriptorPool:
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(any_pb2.DESCRIPTOR.serialized_pb)
    for file_proto in _FILES:
        pool.AddSerializedFile(file_proto.SerializeToString())
    return pool


_POOL = _build_pool()


def _cls(full_name: str) -> Type[Message]:
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(full_name))


Any = _cls("google.protobuf.Any")
Coin = _cls("cosmos.base.v1beta1.Coin")
PubKey = _cls("cosmos.crypto.secp256k1.PubKey")
TxRaw = _cls("cosmos.tx.v1beta1.TxRaw")
SignDoc = _cls("cosmos.tx.v1beta1.SignDoc")
TxBody = _cls("cosmos.tx.v1beta1.TxBody")
AuthInfo = _cls("cosmos.tx.v1beta1.AuthInfo")
SignerInfo = _cls("cosmos.tx.v1beta1.SignerInfo")
ModeInfo = _cls("cosmos.tx.v1beta1.ModeInfo")
Fee = _cls("cosmos.tx.v1beta1.Fee")
MsgExecuteContract = _cls("cosmwasm.wasm.v1.MsgExecuteContract")
QuerySmartContractStateRequest = _cls("cosmwasm.wasm.v1.QuerySmartContractStateRequest")
QuerySmartContractStateResponse = _cls("cosmwasm.wasm.v1.QuerySmartContractStateResponse")
BaseAccount = _cls("cosmos.auth.v1beta1.BaseAccount")
QueryAccountRequest = _cls("cosmos.auth.v1beta1.QueryAccountRequest")
QueryAccountResponse = _cls("cosmos.auth.v1beta1.QueryAccountResponse")

# Account types that wrap a BaseAccount, and the field path down to it.
_ACCOUNT_WRAPPERS: Dict[str, Sequence[str]] = {
    "/cosmos.auth.v1beta1.ModuleAccount": ("base_account",),
    "/cosmos.vesting.v1beta1.BaseVestingAccount": ("base_account",),
    "/cosmos.vesting.v1beta1.ContinuousVestingAccount": ("base_vesting_account", "base_account"),
    "/cosmos.vesting.v1beta1.DelayedVestingAccount": ("base_vesting_account", "base_account"),
    "/cosmos.vesting.v1beta1.PeriodicVestingAccount": ("base_vesting_account", "base_account"),
    "/cosmos.vesting.v1beta1.PermanentLockedAccount": ("base_vesting_account", "base_account"),
}


def serialize(message: Message) -> bytes:
    """Deterministic encoding: the bytes that get signed and hashed."""
    return message.SerializeToString(deterministic=True)


def pack_any(type_url: str, message: Message) -> Message:
    return Any(type_url=type_url, value=serialize(message))


def unpack_account(packed: Message) -> Message:
    """
    Return the BaseAccount inside an account ``Any``.

    Raises:
        DecodeError: If the account type is not a known BaseAccount wrapper.
    """
    if packed.type_url == BASE_ACCOUNT_TYPE_URL:
        account = BaseAccount()
        account.ParseFromString(packed.value)
        return account

    path = _ACCOUNT_WRAPPERS.get(packed.type_url)
    if path is None:
        raise DecodeError(f"unsupported account type {packed.type_url!r}")
    wrapper = _cls(packed.type_url.lstrip("/"))()
    wrapper.ParseFromString(packed.value)
    for name in path:
        wrapper = getattr(wrapper, name)
    return wrapper


__all__ = [
    "Any", "Coin", "PubKey", "TxRaw", "SignDoc", "TxBody", "AuthInfo", "SignerInfo",
    "ModeInfo", "Fee", "MsgExecuteContract", "QuerySmartContractStateRequest",
    "QuerySmartContractStateResponse", "BaseAccount", "QueryAccountRequest",
    "QueryAccountResponse", "DecodeError", "serialize",
    "pack_any", "unpack_account",
]
