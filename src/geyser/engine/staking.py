"""Module C: Staking ledger - Per-account stake history and the global share-seconds accumulator.

Key Concepts:
- Staked tokens are represented by staking shares; a share is worth
  total_staked / total_staking_shares tokens
- Every stake() call appends a Stake(shares, timestamp) entry to the account
- total_staking_share_seconds += total_staking_shares * elapsed on every pass
- Unstaking burns shares across the account's entries in a fixed order
  (newest_first or oldest_first), partially consuming the boundary entry
- Staking tokens sent straight to custody raise total_staked, and with it
  the token value of every share
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal

from ..errors import InvalidArgumentError, InvariantViolationError
from .fixed_point import check_uint, mul_div, saturating_sub, shares_for_tokens, tokens_for_shares

logger = logging.getLogger(__name__)

BurnOrder = Literal["newest_first", "oldest_first"]


@dataclass
class Stake:
    """One stake() call; staking_shares is what is left of it."""
    staking_shares: int
    timestamp_sec: int

    def age(self, now: int) -> int:
        return saturating_sub(now, self.timestamp_sec)

    def share_seconds(self, now: int) -> int:
        return self.staking_shares * self.age(now)


@dataclass
class AccountState:
    """Staking state of one account; kept after the stake list empties."""
    staking_shares: int = 0
    stakes: List[Stake] = field(default_factory=list)

    @property
    def has_stakes(self) -> bool:
        return bool(self.stakes)

    def share_seconds(self, now: int) -> int:
        return sum(s.share_seconds(now) for s in self.stakes)


@dataclass
class BurnSlice:
    """Part of a stake entry consumed by an unstake."""
    stake_index: int
    shares: int
    age_sec: int

    @property
    def share_seconds(self) -> int:
        return self.shares * self.age_sec


@dataclass
class StakingLedger:
    """Global staking totals and per-account stake sequences."""
    initial_shares_per_token: int = 1
    burn_order: BurnOrder = "newest_first"
    accounts: Dict[str, AccountState] = field(default_factory=dict)
    total_staking_shares: int = 0
    total_staked: int = 0
    total_staking_share_seconds: int = 0
    last_accounting_timestamp_sec: int = 0

    # ==================== Views ====================

    def account(self, account: str) -> AccountState:
        """Account state, or an empty one for accounts that never staked."""
        return self.accounts.get(account) or AccountState()

    def total_staked_for(self, account: str) -> int:
        """Token value of an account's staking shares."""
        return tokens_for_shares(
            self.account(account).staking_shares, self.total_staked, self.total_staking_shares
        )

    def shares_for_amount(self, amount: int) -> int:
        """Staking shares equivalent to amount tokens at the current rate."""
        if self.total_staking_shares == 0:
            return 0
        return mul_div(self.total_staking_shares, amount, self.total_staked)

    # ==================== Accounting ====================

    def accrue(self, now: int) -> int:
        """
        Credit share-seconds for the time elapsed since the last pass.

        Args:
            now: Current timestamp in seconds

        Returns:
            Share-seconds added by this pass
        """
        elapsed = saturating_sub(now, self.last_accounting_timestamp_sec)
        added = check_uint(self.total_staking_shares * elapsed, "share_seconds")
        self.total_staking_share_seconds += added
        self.last_accounting_timestamp_sec = max(self.last_accounting_timestamp_sec, now)
        return added

    def absorb_surplus(self, held: int) -> int:
        """Add staking tokens sent straight to custody to total_staked; returns the surplus."""
        surplus = saturating_sub(held, self.total_staked)
        self.total_staked += surplus
        return surplus

    # ==================== Mutations ====================

    def add_stake(self, account: str, amount: int, now: int) -> Stake:
        """
        Mint shares for amount tokens and record a new stake entry.

        Callers must run accrue(now) first.

        Raises:
            InvalidArgumentError: If amount is zero or too small to mint a share
            InvariantViolationError: If shares exist with no tokens backing them
        """
        check_uint(amount, "amount")
        if amount == 0:
            raise InvalidArgumentError("TokenGeyser: stake amount is zero")
        if self.total_staking_shares > 0 and self.total_staked == 0:
            raise InvariantViolationError(
                "TokenGeyser: Invalid state. Staking shares exist, but no staking tokens do"
            )

        minted = shares_for_tokens(
            amount, self.total_staking_shares, self.total_staked, self.initial_shares_per_token
        )
        if minted == 0:
            raise InvalidArgumentError("TokenGeyser: Stake amount is too small")

        state = self.accounts.setdefault(account, AccountState())
        stake = Stake(staking_shares=minted, timestamp_sec=now)
        state.stakes.append(stake)
        state.staking_shares += minted
        self.total_staking_shares += minted
        self.total_staked += amount
        return stake

    def plan_burn(self, account: str, shares: int, now: int) -> List[BurnSlice]:
        """
        Work out which stake entries a burn of shares would consume.

        Pure: the ledger is not modified.

        Args:
            account: Account burning shares
            shares: Shares to burn
            now: Current timestamp (for stake ages)

        Returns:
            Slices in consumption order
        """
        state = self.account(account)
        if shares > state.staking_shares:
            raise InvalidArgumentError("TokenGeyser: unstake amount is greater than total user stakes")

        indices = range(len(state.stakes))
        if self.burn_order == "newest_first":
            indices = reversed(indices)

        slices = []
        left = shares
        for index in indices:
            if left == 0:
                break
            stake = state.stakes[index]
            taken = min(stake.staking_shares, left)
            slices.append(BurnSlice(stake_index=index, shares=taken, age_sec=stake.age(now)))
            left -= taken
        return slices

    def apply_burn(self, account: str, slices: List[BurnSlice]) -> int:
        """
        Burn the planned slices and remove their share-seconds from the accumulator.

        Args:
            account: Account burning shares
            slices: Output of plan_burn for the same ledger state

        Returns:
            Share-seconds removed from the global accumulator
        """
        state = self.accounts[account]
        burned_shares = 0
        burned_share_seconds = 0
        for burn in slices:
            state.stakes[burn.stake_index].staking_shares -= burn.shares
            burned_shares += burn.shares
            burned_share_seconds += burn.share_seconds

        state.stakes = [s for s in state.stakes if s.staking_shares > 0]
        state.staking_shares -= burned_shares
        self.total_staking_shares -= burned_shares
        self.total_staking_share_seconds = saturating_sub(
            self.total_staking_share_seconds, burned_share_seconds
        )
        return burned_share_seconds

    def remove_tokens(self, amount: int) -> None:
        """Take unstaked principal out of the staked total."""
        self.total_staked = saturating_sub(self.total_staked, amount)
        if self.total_staking_shares > 0 and self.total_staked == 0:
            raise InvariantViolationError(
                "TokenGeyser: Error unstaking. Staking shares exist, but no staking tokens do"
            )
