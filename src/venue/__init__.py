"""Venue, custody and price feed contracts plus in-memory implementations."""

from src.venue.interfaces import (
    CollateralCustody,
    HedgePosition,
    OrderKind,
    OrderParams,
    PositionVenue,
    PriceFeed,
)
from src.venue.simulated import InMemoryCustody, SimulatedVenue, StaticPriceFeed

__all__ = [
    "CollateralCustody",
    "HedgePosition",
    "OrderKind",
    "OrderParams",
    "PositionVenue",
    "PriceFeed",
    "InMemoryCustody",
    "SimulatedVenue",
    "StaticPriceFeed",
]
