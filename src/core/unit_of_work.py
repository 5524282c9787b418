"""Transactional boundary for one hedger invocation."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from src.core.events import Event, EventBus, EventType

if TYPE_CHECKING:
    from src.core.exposure_ledger import ExposureLedger

logger = logging.getLogger(__name__)

Compensation = Callable[[], Union[None, Awaitable[None]]]


@dataclass
class UnitOfWork:
    """All-or-nothing scope for an exposure change or manual rebalance.

    Usage::

        async with UnitOfWork(ledger, bus) as uow:
            ledger.apply_delta(pool_id, qty, uow)
            await submitter.increase(size, uow)

    On clean exit the recorded events are published in order. On any
    exception the registered compensations run newest-first, the ledger is
    restored to its entry snapshot, pending events are dropped and the
    exception propagates.
    """

    ledger: "ExposureLedger"
    event_bus: EventBus
    source: str = "hedger"

    _snapshot: Optional[Dict[str, int]] = None
    _pending: List[Event] = field(default_factory=list)
    _compensations: List[Tuple[str, Compensation]] = field(default_factory=list)
    _state: str = "new"

    def __post_init__(self):
        """Initialize after dataclass creation."""
        self._snapshot = None
        self._pending = []
        self._compensations = []
        self._state = "new"

    async def __aenter__(self) -> "UnitOfWork":
        if self._state != "new":
            raise RuntimeError(f"UnitOfWork cannot be reused (state={self._state})")
        self._snapshot = self.ledger.snapshot()
        self._state = "active"
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()
        return False

    def record(self, event_type: EventType, data: Dict[str, Any]) -> None:
        """Queue an event for publication on commit."""
        self._require_active()
        self._pending.append(Event(type=event_type, data=data, source=self.source))

    def on_rollback(self, description: str, compensation: Compensation) -> None:
        """Register an undo step for an external side effect."""
        self._require_active()
        self._compensations.append((description, compensation))

    async def commit(self) -> None:
        """Publish pending events and close the unit of work."""
        self._require_active()
        self._state = "committed"
        pending, self._pending = self._pending, []
        self._compensations.clear()
        for event in pending:
            await self.event_bus.publish(event)

    async def rollback(self) -> None:
        """Undo external side effects and restore the ledger."""
        self._require_active()
        self._state = "rolled_back"

        # Compensations that fail are logged; the ledger restore must still happen.
        for description, compensation in reversed(self._compensations):
            try:
                result = compensation()
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Rollback step '{description}' failed: {e}")

        self.ledger.restore(self._snapshot)
        dropped = len(self._pending)
        self._pending = []
        self._compensations.clear()
        logger.debug(f"Unit of work rolled back, {dropped} pending events dropped")

    @property
    def pending_events(self) -> List[Event]:
        """Events that will publish on commit."""
        return list(self._pending)

    @property
    def state(self) -> str:
        """One of new, active, committed, rolled_back."""
        return self._state

    def _require_active(self) -> None:
        if self._state != "active":
            raise RuntimeError(f"UnitOfWork is not active (state={self._state})")
