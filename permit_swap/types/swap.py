"""
Swap request definition
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Dict, Union


def to_base_units(amount: Union[Decimal, str, int], decimals: int) -> int:
    """
    Convert a human-readable amount to the token's smallest unit.

    The conversion is exact: no float arithmetic and no rounding.

    Args:
        amount: Amount in token units (e.g. Decimal("0.1") WETH)
        decimals: Token decimals read from the contract

    Returns:
        Integer amount in smallest units

    Raises:
        ValueError: If the amount is not positive, or carries more
            fractional digits than the token supports
    """
    if isinstance(amount, float):
        amount = str(amount)
    try:
        value = Decimal(amount)
    except InvalidOperation as e:
        raise ValueError(f"amount is not a number: {amount!r}") from e
    if not value.is_finite() or value <= 0:
        raise ValueError(f"amount must be a positive number, got {amount!r}")
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + decimals + 2)
        raw = value.scaleb(decimals)

    if raw != raw.to_integral_value():
        raise ValueError(f"amount {amount} has more than {decimals} decimal places")
    return int(raw)


@dataclass(frozen=True)
class SwapRequest:
    """
    Parameters shared by the price and quote calls

    Attributes:
        chain_id: EVM chain ID
        sell_token: Address of the token being sold
        buy_token: Address of the token being bought
        sell_amount: Amount to sell in smallest units
        taker_address: Address that signs and sends the swap
        affiliate_fee_bps: Integrator fee in basis points of the buy amount
        surplus_collection_enabled: Let the integrator collect positive slippage
    """
    chain_id: int
    sell_token: str
    buy_token: str
    sell_amount: int
    taker_address: str
    affiliate_fee_bps: int = 0
    surplus_collection_enabled: bool = False

    def __post_init__(self):
        if isinstance(self.sell_amount, bool) or not isinstance(self.sell_amount, int):
            raise ValueError(f"sell_amount must be an int in smallest units, got {self.sell_amount!r}")
        if self.sell_amount <= 0:
            raise ValueError(f"sell_amount must be positive, got {self.sell_amount}")
        if not 0 <= self.affiliate_fee_bps <= 10_000:
            raise ValueError(f"affiliate_fee_bps must be within 0..10000, got {self.affiliate_fee_bps}")

    def to_params(self) -> Dict[str, str]:
        """Canonical query parameters, identical for price and quote"""
        return {
            "chainId": str(self.chain_id),
            "sellToken": self.sell_token,
            "buyToken": self.buy_token,
            "sellAmount": str(self.sell_amount),
            "taker": self.taker_address,
            "affiliateFee": str(self.affiliate_fee_bps),
            "surplusCollection": "true" if self.surplus_collection_enabled else "false",
        }
