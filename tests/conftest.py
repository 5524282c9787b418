"""Shared fixtures: an in-memory venue funded for the hedging account."""

import pytest

from src.core.config_store import ConfigStore
from src.core.events import EventBus
from src.venue.simulated import InMemoryCustody, SimulatedVenue, StaticPriceFeed

USD = 10**30
ETH = 10**18

OWNER = "owner"
ACCOUNT = "hedger"


@pytest.fixture
def event_bus():
    """Create a fresh event bus."""
    return EventBus()


@pytest.fixture
def custody():
    """Custody with 1M collateral units and 1 ETH for fees."""
    custody = InMemoryCustody()
    custody.mint("USDC", ACCOUNT, 1_000_000)
    custody.mint("ETH", ACCOUNT, ETH)
    return custody


@pytest.fixture
def venue(custody):
    """Simulated venue charging fees in ETH."""
    return SimulatedVenue(custody=custody, fee_asset="ETH")


@pytest.fixture
def price_feed():
    """Feed quoting ETH at 1800 USD."""
    return StaticPriceFeed({"ETH": 1800 * USD})


@pytest.fixture
def config_store(event_bus):
    """Config with a 100 USD threshold and no fee."""
    return ConfigStore(owner=OWNER, threshold=100 * USD, event_bus=event_bus)
