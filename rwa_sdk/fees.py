"""
RWA SDK - Fee Calculation

Turns a gas limit and the configured gas price into the fee coin attached to
a transaction. The fee is ``ceil(gas_limit * gas_price)`` in ``denom``.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_CEILING
from typing import Union

from .constants import MAX_UINT64
from .errors import AssemblyError, ConfigurationError


@dataclass(frozen=True)
class Fee:
    """Fee attached to a transaction."""
    amount: int
    denom: str
    gas_limit: int

    def __str__(self) -> str:
        return f"{self.amount}{self.denom} (gas {self.gas_limit})"


def parse_gas_price(gas_price: Union[str, int, Decimal]) -> Decimal:
    """
    Parse a gas price such as "0.025" or 10.

    Raises:
        ConfigurationError: If the price is not a non-negative number.
    """
    if isinstance(gas_price, bool):
        raise ConfigurationError(f"Invalid gas price: {gas_price!r}")
    try:
        price = Decimal(str(gas_price).strip())
    except InvalidOperation:
        raise ConfigurationError(f"Invalid gas price: {gas_price!r}") from None
    if not price.is_finite() or price < 0:
        raise ConfigurationError(f"Gas price must be a non-negative number, got {gas_price!r}")
    return price


class FeeCalculator:
    """
    Computes transaction fees from a fixed gas price.

    The denom and gas price come straight from configuration and are not
    rewritten.

    Example:
        fees = FeeCalculator(gas_price="0.025", denom="usei")
        fee = fees.fee_for(200_000)   # Fee(amount=5000, denom="usei", gas_limit=200000)
    """

    def __init__(self, gas_price: Union[str, int, Decimal], denom: str):
        if not denom:
            raise ConfigurationError("Fee denom cannot be empty")
        self.gas_price = parse_gas_price(gas_price)
        self.denom = denom

    def fee_for(self, gas_limit: int) -> Fee:
        """
        Fee for a given gas limit.

        Raises:
            AssemblyError: If gas_limit is not a positive uint64.
        """
        if isinstance(gas_limit, bool) or not isinstance(gas_limit, int) or not 0 < gas_limit <= MAX_UINT64:
            raise AssemblyError(f"Gas limit must be a positive uint64, got {gas_limit!r}",
                                {"gas_limit": gas_limit})
        amount = int((self.gas_price * gas_limit).to_integral_value(rounding=ROUND_CEILING))
        return Fee(amount=amount, denom=self.denom, gas_limit=gas_limit)
