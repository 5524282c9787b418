"""Rebalancing decision engine for the short hedge."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from src.core.config_store import ConfigStore
from src.core.events import EventType
from src.core.exposure_ledger import ExposureLedger
from src.core.fixed_point import usd_value
from src.core.order_submitter import CorrectiveOrder, OrderSubmitter
from src.core.position_reader import PositionReader
from src.core.price_oracle import PriceOracleClient, PriceQuote
from src.core.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class RebalanceTrigger(Enum):
    """Why a rebalance ran."""

    EXPOSURE_CHANGE = "exposure"
    MANUAL = "manual"


class RebalanceAction(Enum):
    """Outcome of the hysteresis rule."""

    INCREASE = "increase"
    DECREASE = "decrease"
    SKIP = "skip"


@dataclass
class RebalanceDecision:
    """Everything one evaluation looked at and concluded."""

    pool_id: str
    market: str
    exposure: int
    quote: PriceQuote
    desired_usd: int
    current_usd: int
    delta_usd: int
    threshold: int
    action: RebalanceAction
    size_delta_usd: int

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "pool_id": self.pool_id,
            "market": self.market,
            "exposure": str(self.exposure),
            "price": str(self.quote.price),
            "base_decimals": self.quote.base_decimals,
            "desired_usd": str(self.desired_usd),
            "current_usd": str(self.current_usd),
            "delta_usd": str(self.delta_usd),
            "threshold": str(self.threshold),
            "action": self.action.value,
            "size_delta_usd": str(self.size_delta_usd),
        }


@dataclass
class RebalanceOutcome:
    """Result of one committed invocation."""

    pool_id: str
    trigger: RebalanceTrigger
    exposure: int
    decision: Optional[RebalanceDecision] = None
    order: Optional[CorrectiveOrder] = None
    skipped_by_config: bool = False
    timestamp: float = field(default_factory=time.time)

    @property
    def action(self) -> RebalanceAction:
        """Action taken; SKIP when paused or inside the band."""
        if self.decision is None:
            return RebalanceAction.SKIP
        return self.decision.action

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "pool_id": self.pool_id,
            "trigger": self.trigger.value,
            "exposure": str(self.exposure),
            "action": self.action.value,
            "skipped_by_config": self.skipped_by_config,
            "decision": self.decision.to_dict() if self.decision else None,
            "order": self.order.to_dict() if self.order else None,
        }


def decide(delta_usd: int, threshold: int) -> Tuple[RebalanceAction, int]:
    """Apply the ``±threshold`` hysteresis band to a signed delta.

    Returns:
        (action, magnitude); magnitude is 0 for SKIP
    """
    if delta_usd > threshold:
        return RebalanceAction.INCREASE, delta_usd
    if delta_usd < -threshold:
        return RebalanceAction.DECREASE, -delta_usd
    return RebalanceAction.SKIP, 0


@dataclass
class RebalanceDecisionEngine:
    """Converts exposure, price and the open short into a corrective order.

    Reconciliation only: no memory of earlier orders, no rate limiting
    beyond the threshold band, one price read per evaluation.
    """

    ledger: ExposureLedger
    oracle: PriceOracleClient
    position_reader: PositionReader
    order_submitter: OrderSubmitter
    config: ConfigStore
    market: str
    base_asset: str

    async def evaluate(self, pool_id: str) -> RebalanceDecision:
        """Compute the decision for a pool without side effects.

        Raises:
            InvalidPrice: oracle returned a non-positive price
            AmbiguousPosition: venue reported several shorts for the market
        """
        exposure = self.ledger.current_exposure(pool_id)
        quote = await self.oracle.price(self.base_asset)
        desired_usd = usd_value(exposure, quote.price, quote.base_decimals)
        current_usd = await self.position_reader.current_short_size_usd(self.market)
        delta_usd = desired_usd - current_usd
        threshold = self.config.threshold
        action, size_delta = decide(delta_usd, threshold)

        logger.debug(
            f"Evaluated {pool_id}: exposure={exposure} desired={desired_usd} "
            f"current={current_usd} delta={delta_usd} threshold={threshold} -> {action.value}"
        )

        return RebalanceDecision(
            pool_id=pool_id,
            market=self.market,
            exposure=exposure,
            quote=quote,
            desired_usd=desired_usd,
            current_usd=current_usd,
            delta_usd=delta_usd,
            threshold=threshold,
            action=action,
            size_delta_usd=size_delta,
        )

    async def rebalance(
        self,
        pool_id: str,
        uow: UnitOfWork,
        trigger: RebalanceTrigger = RebalanceTrigger.EXPOSURE_CHANGE,
    ) -> RebalanceOutcome:
        """Evaluate a pool and submit the corrective order, if any."""
        decision = await self.evaluate(pool_id)
        outcome = RebalanceOutcome(
            pool_id=pool_id,
            trigger=trigger,
            exposure=decision.exposure,
            decision=decision,
        )

        if decision.action == RebalanceAction.INCREASE:
            outcome.order = await self.order_submitter.increase(decision.size_delta_usd, uow)
        elif decision.action == RebalanceAction.DECREASE:
            outcome.order = await self.order_submitter.decrease(decision.size_delta_usd, uow)
        else:
            uow.record(
                EventType.REBALANCE_SKIPPED,
                {
                    "pool_id": pool_id,
                    "market": self.market,
                    "delta_usd": decision.delta_usd,
                    "threshold": decision.threshold,
                },
            )
            logger.info(
                f"Rebalance skipped for {pool_id}: delta {decision.delta_usd} "
                f"within ±{decision.threshold}"
            )

        return outcome
