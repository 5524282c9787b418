"""Main entry point for the delta hedger."""

import logging
from typing import Optional

from config.settings import HedgerConfig, get_config
from src.core.config_store import ConfigStore
from src.core.events import EventBus
from src.core.exposure_ledger import ExposureLedger
from src.core.order_submitter import OrderSubmitter
from src.core.position_reader import PositionReader
from src.core.price_oracle import HttpPriceFeed, PriceOracleClient
from src.rebalancing.engine import RebalanceDecisionEngine
from src.rebalancing.hedger import DeltaHedger
from src.venue.interfaces import CollateralCustody, PositionVenue, PriceFeed

logger = logging.getLogger(__name__)


def build_price_feed(config: HedgerConfig) -> HttpPriceFeed:
    """HTTP price feed from the oracle settings.

    Raises:
        ValueError: no oracle base URL configured
    """
    if not config.oracle.base_url:
        raise ValueError("HEDGER_ORACLE__BASE_URL is not set")
    return HttpPriceFeed(
        base_url=config.oracle.base_url,
        timeout_seconds=config.oracle.timeout_seconds,
    )


def build_hedger(
    venue: PositionVenue,
    custody: CollateralCustody,
    price_feed: Optional[PriceFeed] = None,
    config: Optional[HedgerConfig] = None,
    event_bus: Optional[EventBus] = None,
) -> DeltaHedger:
    """Wire every component from configuration.

    Args:
        venue: Venue holding the short hedge
        custody: Token custody for collateral and fees
        price_feed: Price source (defaults to the configured HTTP feed)
        config: Hedger configuration (uses default if None)
        event_bus: Bus for notifications (a fresh one if None)

    Returns:
        Ready-to-use DeltaHedger
    """
    config = config or get_config()
    event_bus = event_bus or EventBus()
    market = config.market
    rebalancing = config.rebalancing

    store = ConfigStore(
        owner=config.owner,
        threshold=rebalancing.threshold,
        execution_fee=rebalancing.execution_fee,
        skip_rebalancing=rebalancing.skip_rebalancing,
        event_bus=event_bus,
    )
    ledger = ExposureLedger()
    oracle = PriceOracleClient(
        feed=price_feed or build_price_feed(config),
        base_decimals={market.base_asset: market.base_decimals},
        default_base_decimals=market.base_decimals,
    )
    reader = PositionReader(
        venue=venue,
        account=config.account,
        strict_single_position=rebalancing.strict_single_position,
    )
    submitter = OrderSubmitter(
        venue=venue,
        custody=custody,
        config=store,
        account=config.account,
        market=market.market,
        collateral_asset=market.collateral_asset,
        fee_asset=market.fee_asset,
    )
    engine = RebalanceDecisionEngine(
        ledger=ledger,
        oracle=oracle,
        position_reader=reader,
        order_submitter=submitter,
        config=store,
        market=market.market,
        base_asset=market.base_asset,
    )

    logger.info(
        f"Hedger ready: account={config.account} pool={market.pool_id} market={market.market} "
        f"base={market.base_asset}/{market.base_decimals}"
    )
    return DeltaHedger(
        engine=engine,
        ledger=ledger,
        config=store,
        custody=custody,
        event_bus=event_bus,
        account=config.account,
        collateral_asset=market.collateral_asset,
        pool_id=market.pool_id,
        max_history=rebalancing.history_size,
    )


def main():
    """CLI entry point."""
    from src.cli.app import app
    app()


if __name__ == "__main__":
    main()
