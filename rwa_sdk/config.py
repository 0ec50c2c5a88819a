"""
RWA SDK - Configuration Management

Handles loading and validating client configuration.
Configuration holds only PUBLIC values; key material is supplied per call.
"""

import json
import os
import urllib.parse
from dataclasses import MISSING, asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from .constants import (
    DEFAULT_ADDRESS_PREFIX,
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
)
from .core.address import is_valid_address
from .errors import ConfigurationError
from .fees import parse_gas_price


@dataclass(frozen=True)
class ClientConfig:
    """
    Endpoint, module and timing configuration (PUBLIC).

    Contains no private keys and is safe to commit to version control.
    It is passed explicitly into every pipeline call rather than kept as
    process-wide state.
    """
    rpc_url: str
    chain_id: str
    token_address: str
    identity_address: str
    compliance_address: str
    denom: str
    gas_price: str
    address_prefix: str = DEFAULT_ADDRESS_PREFIX
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    memo: str = ""

    def validate(self) -> "ClientConfig":
        """
        Check every field.

        Returns:
            self, for chaining.

        Raises:
            ConfigurationError: On the first invalid field.
        """
        parsed = urllib.parse.urlparse(self.rpc_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"rpc_url must be an http(s) URL, got {self.rpc_url!r}",
                                     {"field": "rpc_url"})
        if not self.chain_id:
            raise ConfigurationError("chain_id cannot be empty", {"field": "chain_id"})
        if not self.address_prefix:
            raise ConfigurationError("address_prefix cannot be empty", {"field": "address_prefix"})

        for name in ("token_address", "identity_address", "compliance_address"):
            value = getattr(self, name)
            if not is_valid_address(value, self.address_prefix):
                raise ConfigurationError(
                    f"{name} is not a valid {self.address_prefix} address: {value!r}",
                    {"field": name},
                )

        if not self.denom:
            raise ConfigurationError("denom cannot be empty", {"field": "denom"})
        parse_gas_price(self.gas_price)

        for name in ("request_timeout", "poll_interval", "confirmation_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive", {"field": name})
        if self.max_poll_attempts < 1:
            raise ConfigurationError("max_poll_attempts must be at least 1", {"field": "max_poll_attempts"})

        return self

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, path: str) -> None:
        """Save config to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: dict) -> "ClientConfig":
        known = {f.name for f in fields(cls)}
        missing = [f.name for f in fields(cls) if f.default is MISSING and f.name not in data]
        if missing:
            raise ConfigurationError(f"Missing config fields: {', '.join(missing)}", {"missing": missing})
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, path: str) -> "ClientConfig":
        """
        Load configuration from a JSON file.

        Example client_config.json:
        {
            "rpc_url": "http://localhost:26657",
            "chain_id": "rwa-test",
            "token_address": "cosmos1...",
            "identity_address": "cosmos1...",
            "compliance_address": "cosmos1...",
            "denom": "urwa",
            "gas_price": "0.025"
        }
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(config_path) as f:
            data = json.load(f)

        return cls.from_dict(data).validate()

    @classmethod
    def from_env(cls, prefix: str = "RWA_", environ: Optional[dict] = None) -> "ClientConfig":
        """
        Load configuration from environment variables.

        Each field maps to ``<PREFIX><FIELD_NAME>`` in upper case, e.g.
        RWA_RPC_URL, RWA_CHAIN_ID, RWA_POLL_INTERVAL.
        """
        env = os.environ if environ is None else environ
        data = {}
        for f in fields(cls):
            raw = env.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            try:
                if f.type in (float, "float"):
                    data[f.name] = float(raw)
                elif f.type in (int, "int"):
                    data[f.name] = int(raw)
                else:
                    data[f.name] = raw
            except ValueError:
                raise ConfigurationError(f"{prefix}{f.name.upper()} has invalid value {raw!r}",
                                         {"field": f.name}) from None

        return cls.from_dict(data).validate()
