"""Configuration module for the delta hedger."""

from config.settings import HedgerConfig, get_config

__all__ = ["HedgerConfig", "get_config"]
