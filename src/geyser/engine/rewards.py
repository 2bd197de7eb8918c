"""Module D: Reward accountant - Turn vested tokens into bonus-adjusted claims.

Key Concepts:
- A stake slice earns unlocked * slice_share_seconds / total_share_seconds
- Bonus curve: bonus(age) = start + (100 - start) * min(age, period) / period
- The bonus saturates at exactly 100% once age >= bonus_period_sec
- Every slice of one computation is priced against the same unlocked total and
  accumulator; the sum never exceeds the unlocked total
"""

from dataclasses import dataclass, field
from typing import List

from ..errors import InvalidArgumentError
from .fixed_point import mul_div
from .staking import BurnSlice, StakingLedger

BONUS_DECIMALS = 2
ONE_HUNDRED_PCT = 10**BONUS_DECIMALS


@dataclass
class RewardQuote:
    """Reward owed for burning a set of stake slices."""
    shares_to_burn: int
    slices: List[BurnSlice] = field(default_factory=list)
    share_seconds_to_burn: int = 0
    reward: int = 0


class RewardAccountant:
    """Reward mechanics shared by unstake, unstake_query and update_accounting."""

    def __init__(self, start_bonus_pct: int = 50, bonus_period_sec: int = 86400):
        """
        Initialize reward accountant.

        Args:
            start_bonus_pct: Bonus percentage at stake age zero (0-100)
            bonus_period_sec: Stake age at which the bonus reaches 100%
        """
        if not 0 <= start_bonus_pct <= ONE_HUNDRED_PCT:
            raise InvalidArgumentError("TokenGeyser: start bonus too high")
        if bonus_period_sec <= 0:
            raise InvalidArgumentError("TokenGeyser: bonus period is zero")
        self.start_bonus_pct = start_bonus_pct
        self.bonus_period_sec = bonus_period_sec

    def bonus_pct(self, stake_age_sec: int) -> int:
        """
        Bonus percentage for a stake of the given age.

        Formula: start + (100 - start) * min(age, period) // period
        """
        age = min(max(stake_age_sec, 0), self.bonus_period_sec)
        return self.start_bonus_pct + (
            (ONE_HUNDRED_PCT - self.start_bonus_pct) * age // self.bonus_period_sec
        )

    def slice_reward(
        self,
        total_unlocked: int,
        share_seconds: int,
        total_share_seconds: int,
        stake_age_sec: int,
    ) -> int:
        """
        Reward for one slice of share-seconds, after the age bonus.

        Args:
            total_unlocked: Unlocked distribution tokens
            share_seconds: Share-seconds of the slice
            total_share_seconds: Global share-seconds accumulator
            stake_age_sec: Age of the stake the slice belongs to

        Returns:
            Reward tokens
        """
        if total_share_seconds == 0 or share_seconds == 0:
            return 0
        raw = mul_div(total_unlocked, share_seconds, total_share_seconds)
        if stake_age_sec >= self.bonus_period_sec:
            return raw
        return mul_div(raw, self.bonus_pct(stake_age_sec), ONE_HUNDRED_PCT)

    def account_reward(
        self,
        staking: StakingLedger,
        account: str,
        total_unlocked: int,
        now: int,
    ) -> int:
        """
        What the account would claim by unstaking everything now.

        Each stake is weighted by its own share-seconds and its own bonus.
        """
        total_share_seconds = staking.total_staking_share_seconds
        reward = sum(
            self.slice_reward(
                total_unlocked, stake.share_seconds(now), total_share_seconds, stake.age(now)
            )
            for stake in staking.account(account).stakes
        )
        return min(reward, total_unlocked)

    def quote_unstake(
        self,
        staking: StakingLedger,
        account: str,
        amount: int,
        total_unlocked: int,
        now: int,
    ) -> RewardQuote:
        """
        Price an unstake of amount tokens without touching the ledger.

        Raises:
            InvalidArgumentError: On a zero, over-sized or too-small amount
        """
        if amount == 0:
            raise InvalidArgumentError("TokenGeyser: unstake amount is zero")
        if amount > staking.total_staked_for(account):
            raise InvalidArgumentError("TokenGeyser: unstake amount is greater than total user stakes")

        shares_to_burn = staking.shares_for_amount(amount)
        if shares_to_burn == 0:
            raise InvalidArgumentError("TokenGeyser: Unable to unstake amount this small")

        slices = staking.plan_burn(account, shares_to_burn, now)
        total_share_seconds = staking.total_staking_share_seconds
        reward = 0
        share_seconds = 0
        for burn in slices:
            reward += self.slice_reward(
                total_unlocked, burn.share_seconds, total_share_seconds, burn.age_sec
            )
            share_seconds += burn.share_seconds

        return RewardQuote(
            shares_to_burn=shares_to_burn,
            slices=slices,
            share_seconds_to_burn=share_seconds,
            reward=min(reward, total_unlocked),
        )
