"""Per-pool running total of base-asset exposure."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from src.core.events import EventType
from src.core.fixed_point import saturating_sub

if TYPE_CHECKING:
    from src.core.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class ExposureLedger:
    """Tracks how much of the base asset each pool holds that needs a hedge.

    Quantities are integers in the base asset's native precision. A pool is
    created at zero on first touch and is never removed. Withdrawals larger
    than the tracked total clamp to zero instead of going negative.
    """

    # {pool_id: quantity}
    _exposure: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        """Initialize after dataclass creation."""
        self._exposure = {}

    def apply_delta(
        self,
        pool_id: str,
        signed_quantity: int,
        uow: Optional["UnitOfWork"] = None,
    ) -> int:
        """Apply a deposit (positive) or withdrawal (negative).

        Args:
            pool_id: Pool identity
            signed_quantity: Base units added (>0) or removed (<0)
            uow: Unit of work that publishes EXPOSURE_UPDATED on commit

        Returns:
            New exposure total for the pool
        """
        if not isinstance(signed_quantity, int) or isinstance(signed_quantity, bool):
            raise TypeError(f"signed_quantity must be an int, got {type(signed_quantity).__name__}")

        previous = self._exposure.get(pool_id, 0)
        if signed_quantity >= 0:
            total = previous + signed_quantity
        else:
            total = saturating_sub(previous, -signed_quantity)
            if -signed_quantity > previous:
                logger.warning(
                    f"Exposure removal for {pool_id} exceeds tracked total "
                    f"({-signed_quantity} > {previous}), clamping to 0"
                )

        self._exposure[pool_id] = total
        logger.debug(f"Exposure {pool_id}: {previous} -> {total}")

        if uow is not None:
            uow.record(
                EventType.EXPOSURE_UPDATED,
                {"pool_id": pool_id, "delta": signed_quantity, "exposure": total},
            )
        return total

    def current_exposure(self, pool_id: str) -> int:
        """Current total for a pool (0 if never seen)."""
        return self._exposure.get(pool_id, 0)

    def pools(self) -> List[str]:
        """Pools that have received at least one delta."""
        return list(self._exposure.keys())

    def snapshot(self) -> Dict[str, int]:
        """Copy of the current totals."""
        return dict(self._exposure)

    def restore(self, snapshot: Dict[str, int]) -> None:
        """Replace the totals with a previous snapshot."""
        self._exposure = dict(snapshot)

    def summary(self) -> dict:
        """Exposure per pool, stringified for display."""
        return {pool_id: str(qty) for pool_id, qty in self._exposure.items()}
