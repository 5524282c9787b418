"""Unit tests for the in-memory venue and custody."""

import pytest

from src.venue.interfaces import (
    CollateralCustody,
    HedgePosition,
    OrderKind,
    OrderParams,
    PositionVenue,
    PriceFeed,
)
from src.venue.simulated import InMemoryCustody, SimulatedVenue, StaticPriceFeed

USD = 10**30


def _increase(size, collateral, fee=0):
    return OrderParams(
        account="hedger",
        market="ETH-USD",
        collateral_asset="USDC",
        kind=OrderKind.MARKET_INCREASE,
        size_delta_usd=size,
        collateral_delta=collateral,
        execution_fee=fee,
    )


def _decrease(size, fee=0):
    return OrderParams(
        account="hedger",
        market="ETH-USD",
        collateral_asset="USDC",
        kind=OrderKind.MARKET_DECREASE,
        size_delta_usd=size,
        collateral_delta=0,
        execution_fee=fee,
        unwrap_native=True,
    )


class TestProtocols:
    """Simulated classes satisfy the venue protocols."""

    def test_runtime_checks(self, custody, venue):
        """Should be recognised as protocol implementations."""
        assert isinstance(custody, CollateralCustody)
        assert isinstance(venue, PositionVenue)
        assert isinstance(StaticPriceFeed(), PriceFeed)


class TestOrderParams:
    """Tests for OrderParams."""

    def test_generates_client_id(self):
        """Should generate a client id when not given."""
        params = _increase(1, 1)
        assert params.client_id.startswith("hedge-")

    def test_keeps_client_id(self):
        """Should keep an explicit client id."""
        params = OrderParams(
            account="a",
            market="m",
            collateral_asset="c",
            kind=OrderKind.MARKET_DECREASE,
            size_delta_usd=1,
            collateral_delta=0,
            execution_fee=0,
            client_id="mine",
        )
        assert params.client_id == "mine"


class TestInMemoryCustody:
    """Tests for InMemoryCustody."""

    @pytest.mark.asyncio
    async def test_transfer(self):
        """Should move balances."""
        custody = InMemoryCustody()
        custody.mint("USDC", "a", 10)

        await custody.transfer("USDC", "a", "b", 4)

        assert await custody.balance_of("USDC", "a") == 6
        assert await custody.balance_of("USDC", "b") == 4

    @pytest.mark.asyncio
    async def test_transfer_insufficient(self):
        """Should refuse overdrafts."""
        custody = InMemoryCustody()

        with pytest.raises(ValueError):
            await custody.transfer("USDC", "a", "b", 1)

    @pytest.mark.asyncio
    async def test_allowance(self):
        """Should spend against approvals."""
        custody = InMemoryCustody()
        custody.mint("USDC", "a", 10)
        await custody.approve("USDC", "a", "router", 6)

        await custody.spend_allowance("USDC", "a", "router", 4)

        assert await custody.allowance("USDC", "a", "router") == 2
        with pytest.raises(ValueError):
            await custody.spend_allowance("USDC", "a", "router", 3)


class TestSimulatedVenue:
    """Tests for SimulatedVenue."""

    @pytest.mark.asyncio
    async def test_increase_requires_allowance(self, venue):
        """Should reject an increase without approval and charge nothing."""
        with pytest.raises(ValueError):
            await venue.submit_order(_increase(100 * USD, 101, fee=10))

        assert venue.orders == []

    @pytest.mark.asyncio
    async def test_increase_and_close(self, venue, custody):
        """Should open, then fully close returning all collateral."""
        await custody.approve("USDC", "hedger", venue.spender, 101)
        await venue.submit_order(_increase(100 * USD, 101, fee=5))

        assert await custody.balance_of("ETH", venue.spender) == 5
        assert (await venue.list_positions("hedger"))[0].collateral_amount == 101

        await venue.submit_order(_decrease(100 * USD))

        assert await venue.list_positions("hedger") == []
        assert await custody.balance_of("USDC", "hedger") == 1_000_000

    @pytest.mark.asyncio
    async def test_decrease_without_position(self, venue):
        """Should reject a decrease with nothing open."""
        with pytest.raises(ValueError):
            await venue.submit_order(_decrease(USD))

    @pytest.mark.asyncio
    async def test_reject_orders(self, venue):
        """Should fail every order when rejecting."""
        venue.reject_orders = True

        with pytest.raises(RuntimeError):
            await venue.submit_order(_decrease(USD))

    @pytest.mark.asyncio
    async def test_extra_positions_reported(self, venue):
        """Should append injected positions to the report."""
        extra = HedgePosition(market="ETH-USD", size_in_usd=1, collateral_amount=0, is_long=False)
        venue.extra_positions.append(extra)

        assert await venue.list_positions("hedger") == [extra]

    def test_position_to_dict(self):
        """Should stringify amounts."""
        pos = HedgePosition(market="ETH-USD", size_in_usd=USD, collateral_amount=2, is_long=False)

        assert pos.to_dict()["size_in_usd"] == str(USD)
