"""Module B: Unlock schedules - Linear vesting of the distribution pool.

Key Concepts:
- Locked tokens are represented by locked-pool shares; the token value of a
  share is locked_tokens / total_locked_shares
- Each schedule releases its shares linearly between its start and end_at_sec
- At or after end_at_sec a schedule releases every remaining share, sweeping
  up whatever per-pass flooring left behind (no dust)
- add_tokens raises locked_tokens without minting shares, so the share price
  only ever goes up
- Tokens sent straight to custody are absorbed like an add_tokens top-up
  on the next accounting pass
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import InvalidArgumentError
from .fixed_point import check_uint, mul_div, saturating_sub, shares_for_tokens

logger = logging.getLogger(__name__)


@dataclass
class UnlockSchedule:
    """A single vesting schedule, denominated in locked-pool shares."""
    initial_locked_shares: int
    unlocked_shares: int
    last_unlock_timestamp_sec: int
    end_at_sec: int
    duration_sec: int

    @property
    def fully_vested(self) -> bool:
        return self.unlocked_shares >= self.initial_locked_shares

    @property
    def remaining_shares(self) -> int:
        return saturating_sub(self.initial_locked_shares, self.unlocked_shares)

    def unlock(self, now: int) -> int:
        """
        Release the shares vested since the last pass.

        Formula (before end): floor(initial * (now - last) / duration)

        Args:
            now: Current timestamp in seconds

        Returns:
            Shares newly unlocked by this pass
        """
        if self.fully_vested:
            return 0

        if now >= self.end_at_sec:
            shares = self.remaining_shares
            self.last_unlock_timestamp_sec = self.end_at_sec
        else:
            elapsed = saturating_sub(now, self.last_unlock_timestamp_sec)
            shares = min(
                mul_div(self.initial_locked_shares, elapsed, self.duration_sec),
                self.remaining_shares,
            )
            self.last_unlock_timestamp_sec = max(self.last_unlock_timestamp_sec, now)

        self.unlocked_shares += shares
        return shares

    def as_tuple(self) -> tuple:
        """(initial, unlocked, last_unlock, end_at, duration)."""
        return (
            self.initial_locked_shares,
            self.unlocked_shares,
            self.last_unlock_timestamp_sec,
            self.end_at_sec,
            self.duration_sec,
        )


@dataclass
class VestingResult:
    """Outcome of one vesting pass."""
    unlocked_tokens: int = 0
    unlocked_shares: int = 0


@dataclass
class DistributionPool:
    """Locked and unlocked halves of the distribution pool plus its schedules."""
    initial_shares_per_token: int = 1
    max_unlock_schedules: Optional[int] = None
    schedules: List[UnlockSchedule] = field(default_factory=list)
    total_locked_shares: int = 0
    total_unlocked_shares: int = 0  # cumulative shares vested
    locked_tokens: int = 0
    unlocked_tokens: int = 0

    def total_locked(self) -> int:
        return self.locked_tokens

    def total_unlocked(self) -> int:
        return self.unlocked_tokens

    def locked_token_per_share(self) -> float:
        """Current exchange rate of the locked pool (informational)."""
        if self.total_locked_shares == 0:
            return 1.0 / self.initial_shares_per_token
        return self.locked_tokens / self.total_locked_shares

    def vest(self, now: int) -> VestingResult:
        """
        Bring every schedule up to now and move vested tokens to the unlocked side.

        Args:
            now: Current timestamp in seconds

        Returns:
            Newly unlocked tokens and shares
        """
        if self.total_locked_shares == 0:
            # Bare top-ups with no schedule behind them are released immediately.
            tokens = self.locked_tokens
            self.locked_tokens = 0
            self.unlocked_tokens += tokens
            return VestingResult(unlocked_tokens=tokens)

        shares = sum(schedule.unlock(now) for schedule in self.schedules)
        if shares == 0:
            return VestingResult()

        shares = min(shares, self.total_locked_shares)
        tokens = mul_div(shares, self.locked_tokens, self.total_locked_shares)

        self.total_locked_shares -= shares
        self.total_unlocked_shares += shares
        self.locked_tokens = saturating_sub(self.locked_tokens, tokens)
        self.unlocked_tokens += tokens

        logger.debug(
            "Vesting pass",
            extra={
                "event": "geyser.vest",
                "now": now,
                "unlocked_shares": shares,
                "unlocked_tokens": tokens,
                "total_locked": self.locked_tokens,
            },
        )
        return VestingResult(unlocked_tokens=tokens, unlocked_shares=shares)

    def lock(self, amount: int, duration_sec: int, now: int) -> UnlockSchedule:
        """
        Create a schedule for amount tokens at the current locked-pool rate.

        Callers must run vest(now) first so existing schedules are current
        before the new shares dilute the price.

        Raises:
            InvalidArgumentError: On zero amount/duration, too many schedules,
                or an amount too small to mint a share
        """
        check_uint(amount, "amount")
        check_uint(duration_sec, "duration_sec")
        if amount == 0:
            raise InvalidArgumentError("TokenGeyser: lock amount is zero")
        if duration_sec == 0:
            raise InvalidArgumentError("TokenGeyser: lock duration is zero")
        if (
            self.max_unlock_schedules is not None
            and len(self.schedules) >= self.max_unlock_schedules
        ):
            raise InvalidArgumentError("TokenGeyser: reached maximum unlock schedules")

        minted = shares_for_tokens(
            amount, self.total_locked_shares, self.locked_tokens, self.initial_shares_per_token
        )
        if minted == 0:
            raise InvalidArgumentError("TokenGeyser: lock amount is too small")

        schedule = UnlockSchedule(
            initial_locked_shares=minted,
            unlocked_shares=0,
            last_unlock_timestamp_sec=now,
            end_at_sec=check_uint(now + duration_sec, "end_at_sec"),
            duration_sec=duration_sec,
        )
        self.schedules.append(schedule)
        self.total_locked_shares += minted
        self.locked_tokens += amount
        return schedule

    def add_tokens(self, amount: int) -> None:
        """Top up the locked side without minting shares."""
        check_uint(amount, "amount")
        if amount == 0:
            raise InvalidArgumentError("TokenGeyser: add amount is zero")
        self.locked_tokens += amount

    def absorb_surplus(self, held: int) -> int:
        """
        Count tokens sent straight to custody as a top-up of the locked side.

        Args:
            held: Distribution custody balance

        Returns:
            Tokens absorbed (0 when custody holds no more than the ledger)
        """
        surplus = saturating_sub(held, self.locked_tokens + self.unlocked_tokens)
        self.locked_tokens += surplus
        return surplus

    def pay_out(self, amount: int) -> None:
        """Remove claimed rewards from the unlocked side."""
        self.unlocked_tokens = saturating_sub(self.unlocked_tokens, amount)
