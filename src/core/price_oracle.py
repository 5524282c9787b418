"""Base-asset USD pricing."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import aiohttp

from src.core.errors import InvalidPrice, PriceFeedUnavailable
from src.venue.interfaces import PriceFeed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """USD fixed-point price (1e30) for one whole unit of ``asset``."""

    asset: str
    price: int
    base_decimals: int

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "asset": self.asset,
            "price": str(self.price),
            "base_decimals": self.base_decimals,
        }


@dataclass
class PriceOracleClient:
    """Fetches a fresh quote from the feed on every call.

    Nothing is cached: each rebalance evaluation asks the feed again.
    """

    feed: PriceFeed
    base_decimals: Dict[str, int] = field(default_factory=dict)
    default_base_decimals: int = 18

    async def price(self, asset: str) -> PriceQuote:
        """Current price for ``asset``.

        Raises:
            InvalidPrice: feed returned zero, a negative value or a non-integer
        """
        value = await self.feed.get_price(asset)

        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            logger.error(f"Rejecting price {value!r} for {asset}")
            raise InvalidPrice(asset, value)

        decimals = self.base_decimals.get(asset, self.default_base_decimals)
        return PriceQuote(asset=asset, price=value, base_decimals=decimals)


@dataclass
class HttpPriceFeed:
    """Price feed backed by a JSON HTTP endpoint.

    ``GET {base_url}/prices/{asset}`` must answer ``{"price": "<int>"}`` with
    the price already in USD fixed point. A string is expected because the
    values overflow JSON numbers.
    """

    base_url: str
    timeout_seconds: float = 5.0
    _session: Optional[aiohttp.ClientSession] = None

    def __post_init__(self):
        """Initialize after dataclass creation."""
        self.base_url = self.base_url.rstrip("/")
        self._session = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_price(self, asset: str) -> int:
        session = await self._get_session()
        url = f"{self.base_url}/prices/{asset}"

        try:
            async with session.get(url) as response:
                if response.status != 200:
                    body = await response.text()
                    raise PriceFeedUnavailable(asset, f"HTTP {response.status}: {body}")
                payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            # ValueError covers bodies that are not valid JSON
            raise PriceFeedUnavailable(asset, f"{type(e).__name__}: {e}") from e

        raw = payload.get("price") if isinstance(payload, dict) else None
        if raw is None:
            raise PriceFeedUnavailable(asset, "response has no 'price' field")

        try:
            return int(str(raw))
        except ValueError as e:
            raise PriceFeedUnavailable(asset, f"unparseable price {raw!r}") from e
