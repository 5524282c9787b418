"""Exception hierarchy for the delta hedger."""

from typing import Optional


class HedgerError(Exception):
    """Base class for every failure that aborts a hedger invocation."""


class InvalidPrice(HedgerError):
    """Raised when the price feed returns a non-positive value."""

    def __init__(self, asset: str, price: object):
        self.asset = asset
        self.price = price
        super().__init__(f"Invalid price for {asset}: {price!r}")


class PriceFeedUnavailable(HedgerError):
    """Raised when the price feed cannot be reached or answers garbage."""

    def __init__(self, asset: str, reason: str):
        self.asset = asset
        self.reason = reason
        super().__init__(f"Price feed unavailable for {asset}: {reason}")


class InsufficientCollateral(HedgerError):
    """Raised when custody holds less collateral than an increase needs."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient collateral: required {required}, available {available}"
        )


class InsufficientFee(HedgerError):
    """Raised when the fee-currency balance cannot cover the execution fee."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient execution fee balance: required {required}, available {available}"
        )


class Unauthorized(HedgerError):
    """Raised when a privileged operation is called by someone other than the owner."""

    def __init__(self, caller: str, action: Optional[str] = None):
        self.caller = caller
        self.action = action
        what = f" for {action}" if action else ""
        super().__init__(f"Caller {caller!r} is not authorized{what}")


class AmbiguousPosition(HedgerError):
    """Raised when the venue reports more than one short position for a market."""

    def __init__(self, market: str, count: int):
        self.market = market
        self.count = count
        super().__init__(
            f"Expected at most one short position for {market}, venue reported {count}"
        )


class UnknownPool(HedgerError):
    """Raised when a hedger is asked to track a pool it is not bound to."""

    def __init__(self, pool_id: str, expected: str):
        self.pool_id = pool_id
        self.expected = expected
        super().__init__(f"Hedger is bound to pool {expected!r}, got {pool_id!r}")
