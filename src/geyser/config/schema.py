"""Pydantic schema for configuration validation."""

import hashlib
import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class BonusConfig(BaseModel):
    """Early-unstake bonus curve."""
    start_bonus_pct: int = Field(ge=0, le=100, default=50, description="Bonus percentage at stake age zero")
    bonus_period_sec: int = Field(gt=0, default=86400, description="Stake age at which the bonus saturates at 100%")


class PoolConfig(BaseModel):
    """Share pool parameters."""
    initial_shares_per_token: int = Field(
        ge=1, default=1,
        description="Shares minted per token when a pool is empty"
    )
    stake_burn_order: Literal["newest_first", "oldest_first"] = Field(
        default="newest_first",
        description="Order in which an account's stakes are consumed by unstake"
    )
    max_unlock_schedules: Optional[int] = Field(
        default=None, gt=0,
        description="Upper bound on the number of unlock schedules (None = unbounded)"
    )


class FeeConfig(BaseModel):
    """Exit fee withheld from unstaked principal."""
    exit_fee_bps: int = Field(ge=0, le=10_000, default=0, description="Fee on unstaked principal in basis points")
    fee_recipient: Optional[str] = Field(default=None, description="Account receiving withheld fees")

    @model_validator(mode='after')
    def validate_recipient(self):
        """A non-zero fee needs somewhere to go."""
        if self.exit_fee_bps > 0 and not self.fee_recipient:
            raise ValueError(
                f"fee_recipient is required when exit_fee_bps > 0 (got {self.exit_fee_bps} bps)"
            )
        return self


class LoggingConfig(BaseModel):
    """Logging output settings."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")
    json_format: bool = Field(default=False, description="Emit structured JSON log lines")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v


class AccountFunding(BaseModel):
    """Initial token balance for a simulated account."""
    account: str = Field(min_length=1, description="Account identifier")
    staking_balance: int = Field(ge=0, default=0, description="Staking token units minted to the account")
    distribution_balance: int = Field(ge=0, default=0, description="Distribution token units minted to the account")


class SimulationConfig(BaseModel):
    """Simulation parameters."""
    staking_symbol: str = Field(default="GSK", min_length=1, description="Staking token symbol")
    distribution_symbol: str = Field(
        default="GSK", min_length=1,
        description="Distribution token symbol (equal to staking_symbol = single-token geyser)"
    )
    decimals: int = Field(ge=0, le=36, default=18, description="Token decimals")
    owner: str = Field(default="owner", min_length=1, description="Geyser owner account")
    start_timestamp_sec: int = Field(ge=0, default=1_600_000_000, description="Clock value at t=0")
    accounts: List[AccountFunding] = Field(default_factory=list, description="Funded accounts")
    random_seed: int = Field(default=42, description="Random seed for generated scenarios")
    random_steps: int = Field(gt=0, default=50, description="Actions in a generated scenario")
    max_advance_sec: int = Field(gt=0, default=30 * 86400, description="Largest single clock advance in generated scenarios")

    @model_validator(mode='after')
    def validate_unique_accounts(self):
        """Account identifiers must be unique."""
        names = [a.account for a in self.accounts]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate simulation accounts: {', '.join(duplicates)}")
        return self

    @property
    def single_token(self) -> bool:
        """True when staking and distribution use the same token."""
        return self.staking_symbol == self.distribution_symbol


class GeyserConfig(BaseModel):
    """Complete configuration for a geyser engine."""
    bonus: BonusConfig = Field(default_factory=BonusConfig)
    pool: PoolConfig = Field(default_factory=PoolConfig)
    fees: FeeConfig = Field(default_factory=FeeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump()
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeyserConfig':
        """Create config from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
