"""Contracts for the collaborators the hedger talks to.

The hedger never owns position or custody state; it reads and writes it
through these protocols. Concrete adapters live next to this module
(``simulated`` for offline runs and tests, ``src.core.price_oracle`` for the
HTTP price feed).
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class HedgePosition:
    """An open position as reported by the venue."""

    market: str
    size_in_usd: int  # USD fixed point (1e30)
    collateral_amount: int  # collateral native precision
    is_long: bool
    collateral_asset: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "market": self.market,
            "size_in_usd": str(self.size_in_usd),
            "collateral_amount": str(self.collateral_amount),
            "is_long": self.is_long,
            "collateral_asset": self.collateral_asset,
        }


class OrderKind(Enum):
    """Order types the hedger submits."""

    MARKET_INCREASE = "MARKET_INCREASE"
    MARKET_DECREASE = "MARKET_DECREASE"


@dataclass
class OrderParams:
    """Everything the venue needs to execute one corrective order."""

    account: str
    market: str
    collateral_asset: str
    kind: OrderKind
    size_delta_usd: int
    collateral_delta: int
    execution_fee: int
    is_long: bool = False
    unwrap_native: bool = False
    client_id: Optional[str] = None

    def __post_init__(self):
        """Generate client ID if not provided."""
        if not self.client_id:
            self.client_id = f"hedge-{uuid.uuid4().hex[:8]}"


@runtime_checkable
class PriceFeed(Protocol):
    """Source of USD fixed-point prices."""

    async def get_price(self, asset: str) -> int:
        ...


@runtime_checkable
class PositionVenue(Protocol):
    """Venue holding and executing the offsetting position."""

    @property
    def spender(self) -> str:
        """Address allowed to pull approved collateral."""
        ...

    async def list_positions(self, account: str) -> List[HedgePosition]:
        ...

    async def submit_order(self, params: OrderParams) -> str:
        ...


@runtime_checkable
class CollateralCustody(Protocol):
    """Token balances and transfer primitives."""

    async def balance_of(self, asset: str, account: str) -> int:
        ...

    async def allowance(self, asset: str, owner: str, spender: str) -> int:
        ...

    async def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        ...

    async def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        ...

