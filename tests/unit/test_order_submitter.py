"""Unit tests for OrderSubmitter."""

import pytest

from src.core.errors import InsufficientCollateral, InsufficientFee
from src.core.events import EventType
from src.core.exposure_ledger import ExposureLedger
from src.core.order_submitter import CorrectiveOrder, OrderDirection, OrderSubmitter
from src.core.unit_of_work import UnitOfWork
from src.venue.interfaces import HedgePosition, OrderKind

USD = 10**30
ETH = 10**18


@pytest.fixture
def submitter(venue, custody, config_store):
    """Submitter for the ETH-USD short."""
    return OrderSubmitter(
        venue=venue,
        custody=custody,
        config=config_store,
        account="hedger",
        market="ETH-USD",
        collateral_asset="USDC",
        fee_asset="ETH",
    )


@pytest.fixture
def uow(event_bus):
    """Unit of work over an empty ledger (not yet entered)."""
    return UnitOfWork(ExposureLedger(), event_bus)


class TestCorrectiveOrder:
    """Tests for CorrectiveOrder dataclass."""

    def test_to_dict(self):
        """Should stringify amounts."""
        order = CorrectiveOrder(
            direction=OrderDirection.INCREASE,
            size_delta_usd=5 * USD,
            collateral_delta=6,
            order_id="hedge-1",
        )

        d = order.to_dict()

        assert d["direction"] == "increase"
        assert d["size_delta_usd"] == str(5 * USD)
        assert d["collateral_delta"] == "6"
        assert d["order_id"] == "hedge-1"


class TestIncrease:
    """Tests for OrderSubmitter.increase."""

    @pytest.mark.asyncio
    async def test_submits_market_increase(self, submitter, venue, custody, uow):
        """Should approve collateral and submit a short increase."""
        async with uow:
            order = await submitter.increase(180000 * USD, uow)
            pending = [e.type for e in uow.pending_events]

        assert order.direction == OrderDirection.INCREASE
        assert order.collateral_delta == 180001
        assert pending == [EventType.POSITION_INCREASED]

        params = venue.orders[0]
        assert params.kind == OrderKind.MARKET_INCREASE
        assert params.is_long is False
        assert params.size_delta_usd == 180000 * USD
        assert params.collateral_delta == 180001
        assert params.collateral_asset == "USDC"
        assert order.order_id == params.client_id

        assert await custody.balance_of("USDC", "hedger") == 1_000_000 - 180001
        assert await custody.allowance("USDC", "hedger", venue.spender) == 0
        positions = await venue.list_positions("hedger")
        assert positions[0].size_in_usd == 180000 * USD

    @pytest.mark.asyncio
    async def test_charges_execution_fee(self, submitter, custody, config_store, uow):
        """Should attach the configured fee."""
        await config_store.set_execution_fee("owner", 10**15)

        async with uow:
            order = await submitter.increase(1000 * USD, uow)

        assert order.execution_fee == 10**15
        assert await custody.balance_of("ETH", "hedger") == ETH - 10**15

    @pytest.mark.asyncio
    async def test_insufficient_collateral(self, submitter, venue, uow):
        """Should refuse when custody cannot cover the collateral."""
        with pytest.raises(InsufficientCollateral) as exc_info:
            async with uow:
                await submitter.increase(2_000_000 * USD, uow)

        assert exc_info.value.required == 2_000_001
        assert exc_info.value.available == 1_000_000
        assert venue.orders == []

    @pytest.mark.asyncio
    async def test_insufficient_fee(self, submitter, venue, custody, config_store, uow):
        """Should refuse when the fee balance is short."""
        await config_store.set_execution_fee("owner", 2 * ETH)

        with pytest.raises(InsufficientFee):
            async with uow:
                await submitter.increase(1000 * USD, uow)

        assert venue.orders == []
        assert await custody.allowance("USDC", "hedger", venue.spender) == 0

    @pytest.mark.asyncio
    async def test_rollback_restores_allowance(self, submitter, venue, custody, uow):
        """Should put the previous allowance back when the venue rejects."""
        await custody.approve("USDC", "hedger", venue.spender, 5)
        venue.reject_orders = True

        with pytest.raises(RuntimeError):
            async with uow:
                await submitter.increase(1000 * USD, uow)

        assert await custody.allowance("USDC", "hedger", venue.spender) == 5
        assert await custody.balance_of("USDC", "hedger") == 1_000_000

    @pytest.mark.asyncio
    async def test_rejects_non_positive(self, submitter, uow):
        """Should reject zero size."""
        with pytest.raises(ValueError):
            async with uow:
                await submitter.increase(0, uow)


class TestDecrease:
    """Tests for OrderSubmitter.decrease."""

    @pytest.mark.asyncio
    async def test_submits_market_decrease(self, submitter, venue, custody, uow):
        """Should submit a decrease without collateral and unwrap native."""
        venue.open_position(
            "hedger",
            HedgePosition(
                market="ETH-USD",
                size_in_usd=1000 * USD,
                collateral_amount=1001,
                is_long=False,
                collateral_asset="USDC",
            ),
        )

        async with uow:
            order = await submitter.decrease(400 * USD, uow)
            event = uow.pending_events[0]

        assert order.direction == OrderDirection.DECREASE
        assert order.collateral_delta == 0
        assert event.type == EventType.POSITION_DECREASED
        assert event.data["size_delta"] == 400 * USD

        params = venue.orders[0]
        assert params.kind == OrderKind.MARKET_DECREASE
        assert params.collateral_delta == 0
        assert params.unwrap_native is True
        assert params.is_long is False

        positions = await venue.list_positions("hedger")
        assert positions[0].size_in_usd == 600 * USD
        assert await custody.balance_of("USDC", "hedger") == 1_000_000 + 1001 * 400 // 1000

    @pytest.mark.asyncio
    async def test_insufficient_fee(self, submitter, venue, config_store, uow):
        """Should refuse when the fee balance is short."""
        await config_store.set_execution_fee("owner", 2 * ETH)

        with pytest.raises(InsufficientFee):
            async with uow:
                await submitter.decrease(400 * USD, uow)

        assert venue.orders == []
