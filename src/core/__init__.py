"""Core hedging module."""

from src.core.config_store import ConfigStore
from src.core.errors import (
    AmbiguousPosition,
    HedgerError,
    InsufficientCollateral,
    InsufficientFee,
    InvalidPrice,
    PriceFeedUnavailable,
    Unauthorized,
    UnknownPool,
)
from src.core.events import Event, EventBus, EventHandler, EventType
from src.core.exposure_ledger import ExposureLedger
from src.core.order_submitter import CorrectiveOrder, OrderDirection, OrderSubmitter
from src.core.position_reader import PositionReader
from src.core.price_oracle import HttpPriceFeed, PriceOracleClient, PriceQuote
from src.core.unit_of_work import UnitOfWork

__all__ = [
    "AmbiguousPosition",
    "ConfigStore",
    "CorrectiveOrder",
    "Event",
    "EventBus",
    "EventHandler",
    "EventType",
    "ExposureLedger",
    "HedgerError",
    "HttpPriceFeed",
    "InsufficientCollateral",
    "InsufficientFee",
    "InvalidPrice",
    "OrderDirection",
    "OrderSubmitter",
    "PositionReader",
    "PriceFeedUnavailable",
    "PriceOracleClient",
    "PriceQuote",
    "Unauthorized",
    "UnknownPool",
    "UnitOfWork",
]
