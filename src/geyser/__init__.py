"""
geyser - Time-weighted token distribution and staking reward engine

Usage:
    from geyser import TokenGeyser, Token, ManualClock

    token = Token("Geyser Token", "GSK")
    clock = ManualClock(start=1_600_000_000)
    geyser = TokenGeyser(token, token, owner="owner", clock=clock)

    token.mint("owner", token.units(1000))
    token.approve("owner", geyser.address, token.units(1000))
    geyser.lock_tokens("owner", token.units(100), 365 * 86400)
"""

from .config import GeyserConfig, config_from_dict, load_config
from .custody import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    ManualClock,
    Ownable,
    SystemClock,
    Token,
    TokenPool,
    TransferError,
)
from .engine import (
    AccountingSnapshot,
    GeyserState,
    Staked,
    TokenGeyser,
    TokensClaimed,
    TokensLocked,
    TokensUnlocked,
    UnlockSchedule,
    Unstaked,
    UnstakeResult,
)
from .errors import (
    ArithmeticOverflowError,
    AuthorizationError,
    ClockError,
    GeyserError,
    InvalidArgumentError,
    InvariantViolationError,
    ReentrancyError,
)

__version__ = "1.0.0"

__all__ = [
    "AccountingSnapshot",
    "ArithmeticOverflowError",
    "AuthorizationError",
    "ClockError",
    "GeyserConfig",
    "GeyserError",
    "GeyserState",
    "InsufficientAllowanceError",
    "InsufficientBalanceError",
    "InvalidArgumentError",
    "InvariantViolationError",
    "ManualClock",
    "Ownable",
    "ReentrancyError",
    "Staked",
    "SystemClock",
    "Token",
    "TokenGeyser",
    "TokenPool",
    "TokensClaimed",
    "TokensLocked",
    "TokensUnlocked",
    "TransferError",
    "UnlockSchedule",
    "Unstaked",
    "UnstakeResult",
    "config_from_dict",
    "load_config",
]
