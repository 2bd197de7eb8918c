"""Error taxonomy for the geyser engine.

Every error carries a stable, human-readable reason string. Errors raised by
the token ledger (insufficient balance or allowance) are not part of this
hierarchy; they propagate from ``geyser.custody.token`` unchanged.
"""


class GeyserError(Exception):
    """Base class for all engine errors."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AuthorizationError(GeyserError):
    """Privileged call from an account that is not the owner."""


class InvalidArgumentError(GeyserError, ValueError):
    """Zero amounts, zero durations, over-sized unstakes and the like."""


class InvariantViolationError(GeyserError):
    """An operation would break an engine invariant."""


class ClockError(InvariantViolationError):
    """The clock moved backwards relative to the last accounting pass."""


class ReentrancyError(InvariantViolationError):
    """A mutating call was made while another one was still in progress."""


class ArithmeticOverflowError(GeyserError, ArithmeticError):
    """An integer left the unsigned 256-bit range."""
