"""Corrective order construction and submission."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from src.core.config_store import ConfigStore
from src.core.errors import InsufficientCollateral, InsufficientFee
from src.core.events import EventType
from src.core.fixed_point import collateral_for_size
from src.core.unit_of_work import UnitOfWork
from src.venue.interfaces import CollateralCustody, OrderKind, OrderParams, PositionVenue

logger = logging.getLogger(__name__)


class OrderDirection(Enum):
    """Which way the hedge is adjusted."""

    INCREASE = "increase"
    DECREASE = "decrease"


@dataclass
class CorrectiveOrder:
    """One submitted adjustment to the short hedge."""

    direction: OrderDirection
    size_delta_usd: int
    collateral_delta: int = 0
    execution_fee: int = 0
    order_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "direction": self.direction.value,
            "size_delta_usd": str(self.size_delta_usd),
            "collateral_delta": str(self.collateral_delta),
            "execution_fee": str(self.execution_fee),
            "order_id": self.order_id,
        }


@dataclass
class OrderSubmitter:
    """Sizes collateral, checks balances and sends orders to the venue.

    Every call is a single attempt. Preconditions are checked before any
    token moves; the collateral approval registers its own undo with the
    unit of work so a failed submission leaves the allowance as it was.
    """

    venue: PositionVenue
    custody: CollateralCustody
    config: ConfigStore
    account: str
    market: str
    collateral_asset: str
    fee_asset: str

    async def increase(self, size_delta_usd: int, uow: UnitOfWork) -> CorrectiveOrder:
        """Grow the short by ``size_delta_usd``.

        Raises:
            InsufficientCollateral: custody balance below the collateral delta
            InsufficientFee: fee balance below the configured execution fee
        """
        self._check_size(size_delta_usd)
        collateral_delta = collateral_for_size(size_delta_usd)
        fee = self.config.execution_fee

        available = await self.custody.balance_of(self.collateral_asset, self.account)
        if available < collateral_delta:
            raise InsufficientCollateral(collateral_delta, available)

        await self._check_fee(fee)

        spender = self.venue.spender
        previous_allowance = await self.custody.allowance(
            self.collateral_asset, self.account, spender
        )
        await self.custody.approve(self.collateral_asset, self.account, spender, collateral_delta)
        uow.on_rollback(
            "restore collateral allowance",
            lambda: self.custody.approve(
                self.collateral_asset, self.account, spender, previous_allowance
            ),
        )

        params = OrderParams(
            account=self.account,
            market=self.market,
            collateral_asset=self.collateral_asset,
            kind=OrderKind.MARKET_INCREASE,
            size_delta_usd=size_delta_usd,
            collateral_delta=collateral_delta,
            execution_fee=fee,
            is_long=False,
        )
        order_id = await self.venue.submit_order(params)

        order = CorrectiveOrder(
            direction=OrderDirection.INCREASE,
            size_delta_usd=size_delta_usd,
            collateral_delta=collateral_delta,
            execution_fee=fee,
            order_id=order_id,
        )
        uow.record(
            EventType.POSITION_INCREASED,
            {
                "market": self.market,
                "size_delta": size_delta_usd,
                "collateral_delta": collateral_delta,
                "order_id": order_id,
            },
        )
        logger.info(
            f"Increase submitted for {self.market}: size_delta={size_delta_usd} "
            f"collateral_delta={collateral_delta} order={order_id}"
        )
        return order

    async def decrease(self, size_delta_usd: int, uow: UnitOfWork) -> CorrectiveOrder:
        """Shrink the short by ``size_delta_usd``.

        No collateral check: the venue releases collateral from the
        existing position.

        Raises:
            InsufficientFee: fee balance below the configured execution fee
        """
        self._check_size(size_delta_usd)
        fee = self.config.execution_fee
        await self._check_fee(fee)

        params = OrderParams(
            account=self.account,
            market=self.market,
            collateral_asset=self.collateral_asset,
            kind=OrderKind.MARKET_DECREASE,
            size_delta_usd=size_delta_usd,
            collateral_delta=0,
            execution_fee=fee,
            is_long=False,
            unwrap_native=True,
        )
        order_id = await self.venue.submit_order(params)

        order = CorrectiveOrder(
            direction=OrderDirection.DECREASE,
            size_delta_usd=size_delta_usd,
            execution_fee=fee,
            order_id=order_id,
        )
        uow.record(
            EventType.POSITION_DECREASED,
            {"market": self.market, "size_delta": size_delta_usd, "order_id": order_id},
        )
        logger.info(
            f"Decrease submitted for {self.market}: size_delta={size_delta_usd} order={order_id}"
        )
        return order

    async def _check_fee(self, fee: int) -> None:
        available = await self.custody.balance_of(self.fee_asset, self.account)
        if available < fee:
            raise InsufficientFee(fee, available)

    @staticmethod
    def _check_size(size_delta_usd: int) -> None:
        if size_delta_usd <= 0:
            raise ValueError(f"size_delta_usd must be positive, got {size_delta_usd}")
