"""In-memory venue, custody and price feed.

Used by ``hedger simulate`` and by the test suite. Behaviour mirrors what the
hedger expects from a real venue: collateral is pulled through an allowance,
the execution fee is charged on every order, and decreases release collateral
pro rata.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from src.venue.interfaces import HedgePosition, OrderKind, OrderParams

logger = logging.getLogger(__name__)


@dataclass
class InMemoryCustody:
    """Token ledger with ERC20-style balances and allowances."""

    _balances: Dict[Tuple[str, str], int] = field(default_factory=dict)
    _allowances: Dict[Tuple[str, str, str], int] = field(default_factory=dict)

    def __post_init__(self):
        """Initialize after dataclass creation."""
        self._balances = {}
        self._allowances = {}

    def mint(self, asset: str, account: str, amount: int) -> None:
        """Credit tokens out of thin air (test and simulation funding)."""
        key = (asset, account)
        self._balances[key] = self._balances.get(key, 0) + amount

    async def balance_of(self, asset: str, account: str) -> int:
        return self._balances.get((asset, account), 0)

    async def allowance(self, asset: str, owner: str, spender: str) -> int:
        return self._allowances.get((asset, owner, spender), 0)

    async def approve(self, asset: str, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Allowance cannot be negative")
        self._allowances[(asset, owner, spender)] = amount

    async def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Transfer amount cannot be negative")
        available = self._balances.get((asset, sender), 0)
        if available < amount:
            raise ValueError(
                f"{sender} holds {available} {asset}, cannot transfer {amount}"
            )
        self._balances[(asset, sender)] = available - amount
        self._balances[(asset, recipient)] = self._balances.get((asset, recipient), 0) + amount

    async def spend_allowance(self, asset: str, owner: str, spender: str, amount: int) -> None:
        """Move ``amount`` from owner to spender against an approval."""
        approved = self._allowances.get((asset, owner, spender), 0)
        if approved < amount:
            raise ValueError(f"Allowance {approved} below requested {amount}")
        await self.transfer(asset, owner, spender, amount)
        self._allowances[(asset, owner, spender)] = approved - amount


@dataclass
class StaticPriceFeed:
    """Price feed answering from a dict."""

    prices: Dict[str, int] = field(default_factory=dict)

    def set_price(self, asset: str, price: int) -> None:
        """Update a price."""
        self.prices[asset] = price

    async def get_price(self, asset: str) -> int:
        return self.prices.get(asset, 0)


@dataclass
class SimulatedVenue:
    """Perpetuals venue holding positions in memory.

    Positions are keyed by (account, market, is_long). ``extra_positions``
    lets tests inject duplicate reports to exercise the single-position
    invariant.
    """

    custody: InMemoryCustody
    fee_asset: str = "ETH"
    router: str = "venue-router"
    reject_orders: bool = False

    _positions: Dict[Tuple[str, str, bool], HedgePosition] = field(default_factory=dict)
    _orders: List[OrderParams] = field(default_factory=list)
    extra_positions: List[HedgePosition] = field(default_factory=list)

    def __post_init__(self):
        """Initialize after dataclass creation."""
        self._positions = {}
        self._orders = []
        self.extra_positions = list(self.extra_positions)

    @property
    def spender(self) -> str:
        return self.router

    @property
    def orders(self) -> List[OrderParams]:
        """Orders accepted so far, oldest first."""
        return list(self._orders)

    def open_position(self, account: str, position: HedgePosition) -> None:
        """Seed a position directly, backing its collateral at the router."""
        if position.collateral_asset:
            self.custody.mint(position.collateral_asset, self.router, position.collateral_amount)
        self._positions[(account, position.market, position.is_long)] = position

    async def list_positions(self, account: str) -> List[HedgePosition]:
        positions = [
            pos for (owner, _, _), pos in self._positions.items() if owner == account
        ]
        return positions + self.extra_positions

    async def submit_order(self, params: OrderParams) -> str:
        if self.reject_orders:
            raise RuntimeError("Venue rejected order")

        key = (params.account, params.market, params.is_long)
        current = self._positions.get(key)

        # Validate before moving any tokens so a rejected order leaves custody untouched
        if params.kind == OrderKind.MARKET_DECREASE and current is None:
            raise ValueError(f"No open position to decrease for {params.market}")
        if params.kind == OrderKind.MARKET_INCREASE:
            approved = await self.custody.allowance(
                params.collateral_asset, params.account, self.router
            )
            if approved < params.collateral_delta:
                raise ValueError(
                    f"Allowance {approved} below collateral delta {params.collateral_delta}"
                )

        await self.custody.transfer(
            self.fee_asset, params.account, self.router, params.execution_fee
        )

        if params.kind == OrderKind.MARKET_INCREASE:
            await self.custody.spend_allowance(
                params.collateral_asset, params.account, self.router, params.collateral_delta
            )
            self._positions[key] = HedgePosition(
                market=params.market,
                size_in_usd=(current.size_in_usd if current else 0) + params.size_delta_usd,
                collateral_amount=(current.collateral_amount if current else 0)
                + params.collateral_delta,
                is_long=params.is_long,
                collateral_asset=params.collateral_asset,
            )
        else:
            await self._decrease(key, current, params)

        self._orders.append(params)
        logger.info(
            f"Simulated {params.kind.value} {params.market} "
            f"size_delta={params.size_delta_usd} collateral_delta={params.collateral_delta}"
        )
        return params.client_id

    async def _decrease(
        self,
        key: Tuple[str, str, bool],
        current: HedgePosition,
        params: OrderParams,
    ) -> None:
        size_delta = min(params.size_delta_usd, current.size_in_usd)
        remaining = current.size_in_usd - size_delta
        if remaining == 0:
            released = current.collateral_amount
            del self._positions[key]
        else:
            released = current.collateral_amount * size_delta // current.size_in_usd
            self._positions[key] = HedgePosition(
                market=current.market,
                size_in_usd=remaining,
                collateral_amount=current.collateral_amount - released,
                is_long=current.is_long,
                collateral_asset=current.collateral_asset,
            )
        # unwrap_native has no meaning for in-memory tokens
        await self.custody.transfer(
            current.collateral_asset, self.router, params.account, released
        )
