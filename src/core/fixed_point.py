"""Integer fixed-point helpers for USD sizing.

USD amounts (prices, position sizes, thresholds) use a scale of 10**30.
Base-asset quantities use the asset's own decimals. Everything here is exact
integer arithmetic; floats never enter the sizing path.
"""

from decimal import Decimal, localcontext
from typing import Union

USD_DECIMALS = 30
USD_SCALE = 10 ** USD_DECIMALS


def saturating_sub(value: int, amount: int) -> int:
    """Subtract ``amount`` from ``value``, flooring the result at zero."""
    if amount >= value:
        return 0
    return value - amount


def usd_value(quantity: int, price: int, base_decimals: int) -> int:
    """USD value of ``quantity`` base units at ``price``.

    Multiplies first, then floor-divides by ``10**base_decimals``. The order
    matters: dividing first would throw away precision for sub-unit
    quantities.
    """
    if quantity < 0 or price < 0:
        raise ValueError("quantity and price must be non-negative")
    if base_decimals < 0:
        raise ValueError(f"base_decimals must be non-negative, got {base_decimals}")
    return quantity * price // 10 ** base_decimals


def collateral_for_size(size_delta_usd: int) -> int:
    """Collateral to attach to a size increase.

    Floor of the USD amount in whole units, plus one, so even a dust-sized
    increase carries a non-zero collateral allocation.
    """
    if size_delta_usd <= 0:
        raise ValueError(f"size_delta_usd must be positive, got {size_delta_usd}")
    return size_delta_usd // USD_SCALE + 1


def to_decimal(value: int, decimals: int = USD_DECIMALS) -> Decimal:
    """Render a fixed-point integer as a Decimal for display."""
    with localcontext() as ctx:
        ctx.prec = len(str(abs(value))) + 2
        return Decimal(value).scaleb(-decimals)


def parse_fixed(text: Union[str, int]) -> int:
    """Parse ``"1800e30"``, ``"-50e18"`` or ``"42"`` into an exact integer.

    Raises:
        ValueError: if the text has a fractional part after scaling
    """
    if isinstance(text, int):
        return text
    value = Decimal(str(text).strip().replace("_", ""))
    if value != value.to_integral_value():
        raise ValueError(f"{text!r} is not an integer amount")
    return int(value)
