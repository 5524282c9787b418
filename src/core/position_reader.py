"""Reads the open offsetting position from the venue."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from src.core.errors import AmbiguousPosition
from src.venue.interfaces import HedgePosition, PositionVenue

logger = logging.getLogger(__name__)


@dataclass
class PositionReader:
    """Looks up the short hedge for a market on every call.

    No copy of the position is kept between calls. With
    ``strict_single_position`` (the default) a venue report containing more
    than one short for the market is an error; otherwise the first one in
    the venue's order is used.
    """

    venue: PositionVenue
    account: str
    strict_single_position: bool = True

    async def find_short_position(self, market: str) -> Optional[HedgePosition]:
        """The account's short position for ``market``, or None."""
        positions = await self.venue.list_positions(self.account)
        matches: List[HedgePosition] = [
            pos for pos in positions
            if pos.market == market and not pos.is_long
        ]

        if not matches:
            return None

        if len(matches) > 1:
            if self.strict_single_position:
                raise AmbiguousPosition(market, len(matches))
            logger.warning(
                f"Venue reported {len(matches)} short positions for {market}, using the first"
            )

        return matches[0]

    async def current_short_size_usd(self, market: str) -> int:
        """USD size of the open short for ``market``; 0 when none is open."""
        position = await self.find_short_position(market)
        return position.size_in_usd if position else 0
