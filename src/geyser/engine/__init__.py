"""Accounting core: fixed-point math, the two ledgers, rewards and the engine façade."""

from .accounting import AccountingSnapshot, GeyserState
from .events import (
    Event,
    EventLog,
    Staked,
    TokensClaimed,
    TokensLocked,
    TokensUnlocked,
    Unstaked,
)
from .geyser import TokenGeyser, UnstakeResult
from .rewards import RewardAccountant, RewardQuote
from .schedules import DistributionPool, UnlockSchedule, VestingResult
from .staking import AccountState, BurnSlice, Stake, StakingLedger

__all__ = [
    "AccountState",
    "AccountingSnapshot",
    "BurnSlice",
    "DistributionPool",
    "Event",
    "EventLog",
    "GeyserState",
    "RewardAccountant",
    "RewardQuote",
    "Stake",
    "Staked",
    "StakingLedger",
    "TokenGeyser",
    "TokensClaimed",
    "TokensLocked",
    "TokensUnlocked",
    "UnlockSchedule",
    "Unstaked",
    "UnstakeResult",
    "VestingResult",
]
