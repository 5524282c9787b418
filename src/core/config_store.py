"""Owner-gated rebalancing settings."""

import logging
from dataclasses import dataclass, field

from src.core.errors import Unauthorized
from src.core.events import EventBus, EventType

logger = logging.getLogger(__name__)


@dataclass
class ConfigStore:
    """Threshold, execution fee and skip flag read on every decision.

    Mutators take the caller identity and check it against ``owner`` before
    touching anything. Each accepted change publishes a notification.
    """

    owner: str
    threshold: int = 0  # USD fixed point
    execution_fee: int = 0  # fee-currency native units
    skip_rebalancing: bool = False
    event_bus: EventBus = field(default_factory=EventBus)

    def __post_init__(self):
        """Validate initial values."""
        self._check_non_negative("threshold", self.threshold)
        self._check_non_negative("execution_fee", self.execution_fee)

    def require_owner(self, caller: str, action: str = "") -> None:
        """Raise Unauthorized unless ``caller`` is the owner."""
        if caller != self.owner:
            logger.warning(f"Rejected {action or 'privileged call'} from {caller!r}")
            raise Unauthorized(caller, action or None)

    def is_owner(self, caller: str) -> bool:
        """Check whether caller holds the owner capability."""
        return caller == self.owner

    async def set_threshold(self, caller: str, value: int) -> None:
        """Update the hysteresis half-width (USD fixed point)."""
        self.require_owner(caller, "set_threshold")
        self._check_non_negative("threshold", value)
        previous, self.threshold = self.threshold, value
        logger.info(f"Rebalance threshold set to {value} (was {previous})")
        await self.event_bus.emit(
            EventType.THRESHOLD_UPDATED,
            {"threshold": value, "previous": previous},
            source="config",
        )

    async def set_execution_fee(self, caller: str, value: int) -> None:
        """Update the fee attached to every order."""
        self.require_owner(caller, "set_execution_fee")
        self._check_non_negative("execution_fee", value)
        previous, self.execution_fee = self.execution_fee, value
        logger.info(f"Execution fee set to {value} (was {previous})")
        await self.event_bus.emit(
            EventType.EXECUTION_FEE_UPDATED,
            {"execution_fee": value, "previous": previous},
            source="config",
        )

    async def set_skip_rebalancing(self, caller: str, flag: bool) -> None:
        """Turn the decision/order step off (True) or back on (False)."""
        self.require_owner(caller, "set_skip_rebalancing")
        self.skip_rebalancing = bool(flag)
        logger.info(f"Rebalancing {'paused' if flag else 'resumed'}")
        await self.event_bus.emit(
            EventType.SKIP_REBALANCING_UPDATED,
            {"skip_rebalancing": self.skip_rebalancing},
            source="config",
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "owner": self.owner,
            "threshold": str(self.threshold),
            "execution_fee": str(self.execution_fee),
            "skip_rebalancing": self.skip_rebalancing,
        }

    @staticmethod
    def _check_non_negative(name: str, value: int) -> None:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{name} must be an int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")
