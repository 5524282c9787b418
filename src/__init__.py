"""Delta-neutral short hedge for liquidity pool exposure."""

__version__ = "0.1.0"
