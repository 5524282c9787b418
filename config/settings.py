"""Hedger configuration using Pydantic Settings."""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

USD_SCALE = 10 ** 30


class LogFormatName(str, Enum):
    """Log output formats."""

    DETAILED = "detailed"
    SIMPLE = "simple"
    JSON = "json"


class MarketConfig(BaseModel):
    """The hedged market and the assets involved."""

    market: str = Field(default="ETH-USD", description="Venue market of the short hedge")
    pool_id: str = Field(default="pool-1", min_length=1, description="Pool whose exposure is hedged")
    base_asset: str = Field(default="ETH", description="Asset whose pool exposure is hedged")
    base_decimals: int = Field(default=18, ge=0, le=36, description="Base asset precision")
    collateral_asset: str = Field(default="USDC", description="Collateral posted on increases")
    fee_asset: str = Field(default="ETH", description="Currency the execution fee is paid in")


class RebalancingConfig(BaseModel):
    """Initial decision settings (the owner can change them at runtime)."""

    threshold: int = Field(
        default=100 * USD_SCALE,
        ge=0,
        description="Hysteresis half-width, USD fixed point (1e30)",
    )
    execution_fee: int = Field(default=0, ge=0, description="Fee attached to each order")
    skip_rebalancing: bool = False
    strict_single_position: bool = Field(
        default=True,
        description="Fail when the venue reports several shorts for the market",
    )
    history_size: int = Field(default=100, ge=1, description="Outcomes kept for operators")


class OracleConfig(BaseModel):
    """HTTP price feed settings."""

    base_url: Optional[str] = None
    timeout_seconds: float = Field(default=5.0, gt=0)


class HedgerConfig(BaseSettings):
    """Main hedger configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Identities
    owner: str = Field(default="owner", min_length=1, description="Holder of config rights")
    account: str = Field(default="hedger", min_length=1, description="Account holding the hedge")

    # Sub-configs
    market: MarketConfig = Field(default_factory=MarketConfig)
    rebalancing: RebalancingConfig = Field(default_factory=RebalancingConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: LogFormatName = LogFormatName.DETAILED
    log_file: Optional[Path] = None

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case, reject unknown levels."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def get_config() -> HedgerConfig:
    """Get cached hedger configuration."""
    return HedgerConfig()
