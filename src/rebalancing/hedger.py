"""Operator-facing entry points for the delta hedger."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core.config_store import ConfigStore
from src.core.errors import UnknownPool
from src.core.events import EventBus, EventType
from src.core.exposure_ledger import ExposureLedger
from src.core.unit_of_work import UnitOfWork
from src.rebalancing.engine import (
    RebalanceDecision,
    RebalanceDecisionEngine,
    RebalanceOutcome,
    RebalanceTrigger,
)
from src.venue.interfaces import CollateralCustody

logger = logging.getLogger(__name__)


@dataclass
class DeltaHedger:
    """Keeps a short hedge sized to the tracked pool exposure.

    Every public mutation holds one lock for its whole duration, so two
    invocations never interleave. Exposure changes and manual rebalances run
    inside a UnitOfWork: if pricing, position lookup or order submission
    fails, the exposure change made by the same call is undone too.

    One hedger tracks exactly one pool: the venue short is shared, so a
    second pool would be netted against the first pool's hedge.
    """

    engine: RebalanceDecisionEngine
    ledger: ExposureLedger
    config: ConfigStore
    custody: CollateralCustody
    event_bus: EventBus
    account: str
    collateral_asset: str
    pool_id: str
    max_history: int = 100

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _history: List[RebalanceOutcome] = field(default_factory=list)

    def __post_init__(self):
        """Initialize after dataclass creation."""
        self._lock = asyncio.Lock()
        self._history = []

    async def on_exposure_change(self, pool_id: str, signed_quantity: int) -> RebalanceOutcome:
        """Handle a liquidity change reported by the host pool.

        Args:
            pool_id: Pool whose holdings changed
            signed_quantity: Base units added (>0) or removed (<0)

        Returns:
            RebalanceOutcome of the committed invocation
        """
        async with self._lock:
            return await self._run(pool_id, RebalanceTrigger.EXPOSURE_CHANGE, signed_quantity)

    async def manual_rebalance(self, pool_id: str) -> RebalanceOutcome:
        """Re-run reconciliation for a pool without an exposure change.

        Open to any caller.
        """
        async with self._lock:
            return await self._run(pool_id, RebalanceTrigger.MANUAL, None)

    async def preview(self, pool_id: str) -> RebalanceDecision:
        """What a rebalance would do right now, without doing it."""
        self._check_pool(pool_id)
        async with self._lock:
            return await self.engine.evaluate(pool_id)

    async def _run(
        self,
        pool_id: str,
        trigger: RebalanceTrigger,
        signed_quantity: Optional[int],
    ) -> RebalanceOutcome:
        self._check_pool(pool_id)
        try:
            async with UnitOfWork(self.ledger, self.event_bus) as uow:
                if signed_quantity is not None:
                    self.ledger.apply_delta(pool_id, signed_quantity, uow)

                if self.config.skip_rebalancing:
                    logger.info(f"Rebalancing paused, exposure for {pool_id} tracked only")
                    outcome = RebalanceOutcome(
                        pool_id=pool_id,
                        trigger=trigger,
                        exposure=self.ledger.current_exposure(pool_id),
                        skipped_by_config=True,
                    )
                else:
                    outcome = await self.engine.rebalance(pool_id, uow, trigger)
        except Exception as e:
            logger.error(f"{trigger.value} rebalance for {pool_id} aborted: {type(e).__name__}: {e}")
            await self.event_bus.emit(
                EventType.REBALANCE_FAILED,
                {
                    "pool_id": pool_id,
                    "trigger": trigger.value,
                    "error": type(e).__name__,
                    "message": str(e),
                },
            )
            raise

        self._history.append(outcome)
        if len(self._history) > self.max_history:
            self._history = self._history[-self.max_history:]
        return outcome

    def _check_pool(self, pool_id: str) -> None:
        if pool_id != self.pool_id:
            logger.warning(f"Rejected call for unbound pool {pool_id!r}")
            raise UnknownPool(pool_id, self.pool_id)

    async def add_collateral(self, caller: str, amount: int) -> None:
        """Move collateral from ``caller`` into the hedging account. Open to anyone."""
        if amount <= 0:
            raise ValueError(f"amount must be positive, got {amount}")
        async with self._lock:
            await self.custody.transfer(self.collateral_asset, caller, self.account, amount)
            logger.info(f"Collateral added by {caller}: {amount}")
            await self.event_bus.emit(
                EventType.COLLATERAL_ADDED, {"from": caller, "amount": amount}
            )

    async def withdraw_collateral(self, caller: str, amount: int) -> None:
        """Send collateral from the hedging account to the owner."""
        async with self._lock:
            self.config.require_owner(caller, "withdraw_collateral")
            if amount <= 0:
                raise ValueError(f"amount must be positive, got {amount}")
            await self.custody.transfer(self.collateral_asset, self.account, caller, amount)
            logger.info(f"Collateral withdrawn to {caller}: {amount}")
            await self.event_bus.emit(
                EventType.COLLATERAL_WITHDRAWN, {"to": caller, "amount": amount}
            )

    async def set_rebalance_threshold(self, caller: str, value: int) -> None:
        """Owner-only threshold update."""
        async with self._lock:
            await self.config.set_threshold(caller, value)

    async def set_execution_fee(self, caller: str, value: int) -> None:
        """Owner-only execution fee update."""
        async with self._lock:
            await self.config.set_execution_fee(caller, value)

    async def set_skip_rebalancing(self, caller: str, flag: bool) -> None:
        """Owner-only pause/resume of the decision step."""
        async with self._lock:
            await self.config.set_skip_rebalancing(caller, flag)

    def current_exposure(self, pool_id: str) -> int:
        """Tracked exposure for a pool."""
        return self.ledger.current_exposure(pool_id)

    @property
    def threshold(self) -> int:
        """Current threshold (USD fixed point)."""
        return self.config.threshold

    @property
    def execution_fee(self) -> int:
        """Current execution fee."""
        return self.config.execution_fee

    @property
    def skip_rebalancing(self) -> bool:
        """Whether the decision step is paused."""
        return self.config.skip_rebalancing

    def get_rebalance_history(self, limit: int = 10) -> List[RebalanceOutcome]:
        """Most recent committed outcomes, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._history[-limit:]))

    def status(self) -> Dict[str, Any]:
        """Snapshot for dashboards and the CLI."""
        return {
            "account": self.account,
            "pool_id": self.pool_id,
            "market": self.engine.market,
            "base_asset": self.engine.base_asset,
            "config": self.config.to_dict(),
            "exposure": self.ledger.summary(),
            "rebalances": len(self._history),
        }
