"""Collaborators consumed by the engine: tokens, custody pools, ownership, clocks."""

from .access import Ownable
from .clock import ManualClock, SystemClock
from .pool import TokenPool
from .token import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    Token,
    TransferError,
    TransferRecord,
)

__all__ = [
    "InsufficientAllowanceError",
    "InsufficientBalanceError",
    "ManualClock",
    "Ownable",
    "SystemClock",
    "Token",
    "TokenPool",
    "TransferError",
    "TransferRecord",
]
