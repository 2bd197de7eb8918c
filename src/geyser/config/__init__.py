"""Configuration schema and loaders."""

from .loader import config_from_dict, load_config
from .schema import (
    AccountFunding,
    BonusConfig,
    FeeConfig,
    GeyserConfig,
    LoggingConfig,
    PoolConfig,
    SimulationConfig,
)

__all__ = [
    "AccountFunding",
    "BonusConfig",
    "FeeConfig",
    "GeyserConfig",
    "LoggingConfig",
    "PoolConfig",
    "SimulationConfig",
    "config_from_dict",
    "load_config",
]
