"""Module F: Token geyser - The engine façade orchestrating both ledgers and custody.

Key Concepts:
- Every mutating call runs the accounting pass (absorb custody surplus, vest,
  accrue) before its own change
- Custody transfers are the last side effects of an operation
- Operations are atomic: ledger state is restored if anything raises, and
  events are only published once the operation has committed
- Mutating calls are not re-entrant
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Tuple

from ..config.schema import GeyserConfig
from ..custody.access import Ownable
from ..custody.clock import SystemClock
from ..custody.pool import TokenPool
from ..custody.token import Token
from ..errors import ClockError, InvalidArgumentError, InvariantViolationError, ReentrancyError
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
from .fixed_point import mul_div
from .rewards import RewardAccountant
from .schedules import DistributionPool, UnlockSchedule
from .staking import StakingLedger

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000


@dataclass
class UnstakeResult:
    """What an unstake paid out."""
    amount: int  # principal burned from the stake
    principal: int  # principal returned after the exit fee
    fee: int
    reward: int
    events: List[Event] = field(default_factory=list)


class TokenGeyser:
    """Time-weighted distribution of a locked token pool to stakers.

    Owner locks distribution tokens on linear schedules; stakers deposit the
    staking token and, on unstake, receive their principal plus a
    bonus-adjusted share of everything vested so far, weighted by
    share-seconds.
    """

    def __init__(
        self,
        staking_token: Token,
        distribution_token: Token,
        owner: str,
        config: Optional[GeyserConfig] = None,
        clock=None,
        address: str = "geyser",
    ):
        """
        Initialize the geyser.

        Args:
            staking_token: Token users stake
            distribution_token: Token distributed as rewards (may be the same token)
            owner: Account allowed to lock/add tokens and rescue funds
            config: Engine configuration (defaults if None)
            clock: Object with a now() -> int method (wall clock if None)
            address: Account identifier users approve as spender
        """
        self.config = config or GeyserConfig()
        self.address = address
        self.access = Ownable(owner)
        self.clock = clock or SystemClock()

        self.rewards = RewardAccountant(
            start_bonus_pct=self.config.bonus.start_bonus_pct,
            bonus_period_sec=self.config.bonus.bonus_period_sec,
        )
        self.staking_custody = TokenPool(staking_token, f"{address}:staking_pool")
        self.distribution_custody = TokenPool(distribution_token, f"{address}:distribution_pool")

        self.distribution = DistributionPool(
            initial_shares_per_token=self.config.pool.initial_shares_per_token,
            max_unlock_schedules=self.config.pool.max_unlock_schedules,
        )
        self.staking = StakingLedger(
            initial_shares_per_token=self.config.pool.initial_shares_per_token,
            burn_order=self.config.pool.stake_burn_order,
            last_accounting_timestamp_sec=self.clock.now(),
        )

        self.events = EventLog()
        self._locked = False
        self._emitted: Optional[List[Event]] = None

    # ==================== Views ====================

    @property
    def owner(self) -> str:
        return self.access.owner

    def get_staking_token(self) -> Token:
        return self.staking_custody.token

    def get_distribution_token(self) -> Token:
        return self.distribution_custody.token

    token = get_staking_token

    def total_staked(self) -> int:
        """Staking tokens held on behalf of all stakers, as of the last accounting pass."""
        return self.staking.total_staked

    def total_staking_tokens(self) -> int:
        """Staking tokens currently held by the staking custody account."""
        return self.staking_custody.balance()

    def total_staked_for(self, account: str) -> int:
        """Token value of one account's stake."""
        return self.staking.total_staked_for(account)

    def total_locked(self) -> int:
        """Distribution tokens still locked, as of the last accounting pass."""
        return self.distribution.total_locked()

    def total_unlocked(self) -> int:
        """Distribution tokens vested and available as rewards, as of the last pass."""
        return self.distribution.total_unlocked()

    def unlock_schedule_count(self) -> int:
        return len(self.distribution.schedules)

    def unlock_schedules(self, index: int) -> UnlockSchedule:
        """A copy of the schedule at index."""
        if not 0 <= index < len(self.distribution.schedules):
            raise InvalidArgumentError(f"TokenGeyser: no unlock schedule at index {index}")
        return replace(self.distribution.schedules[index])

    def state(self) -> GeyserState:
        """Current ledger totals alongside the custody balances backing them."""
        return GeyserState(
            t=self.staking.last_accounting_timestamp_sec,
            total_locked=self.distribution.total_locked(),
            total_unlocked=self.distribution.total_unlocked(),
            total_staked=self.staking.total_staked,
            total_staking_shares=self.staking.total_staking_shares,
            total_locked_shares=self.distribution.total_locked_shares,
            total_staking_share_seconds=self.staking.total_staking_share_seconds,
            staking_custody=self.staking_custody.balance(),
            distribution_custody=self.distribution_custody.balance(),
            unlock_schedule_count=self.unlock_schedule_count(),
        )

    # ==================== Accounting ====================

    def update_accounting(self, account: Optional[str] = None) -> AccountingSnapshot:
        """
        Bring both ledgers to now and report the system state.

        Args:
            account: Account whose share-seconds and claimable reward to report

        Returns:
            (total_locked, total_unlocked, account_share_seconds,
             total_share_seconds, account_reward, timestamp)
        """
        with self._operation():
            now = self._now()
            self._accounting_pass(now)
            snapshot = self._snapshot(self.distribution, self.staking, account, now)
        return snapshot

    def preview_accounting(self, account: Optional[str] = None) -> AccountingSnapshot:
        """Same report as update_accounting, without changing any state."""
        now = self._now()
        distribution, staking = self._simulate(now)
        return self._snapshot(distribution, staking, account, now)

    def unstake_query(self, account: str, amount: int) -> int:
        """
        Reward that unstake(account, amount) would pay right now.

        Raises:
            InvalidArgumentError: If the unstake itself would be rejected
        """
        now = self._now()
        distribution, staking = self._simulate(now)
        quote = self.rewards.quote_unstake(
            staking, account, amount, distribution.total_unlocked(), now
        )
        return quote.reward

    # ==================== Staking ====================

    def stake(self, account: str, amount: int, data: bytes = b"") -> List[Event]:
        """
        Deposit staking tokens for account.

        The account must have approved this geyser's address for amount.

        Returns:
            Events emitted by the call
        """
        with self._operation() as emitted:
            now = self._now()
            self._accounting_pass(now)
            stake = self.staking.add_stake(account, amount, now)
            self.staking_custody.transfer_in(account, amount, spender=self.address)

            total = self.staking.total_staked_for(account)
            self._emit(Staked(now, account, amount, total, data))

            logger.info(
                "Staked",
                extra={
                    "event": "geyser.stake",
                    "user": account,
                    "amount": amount,
                    "shares": stake.staking_shares,
                    "total_staked": self.staking.total_staked,
                },
            )
        return emitted

    def unstake(self, account: str, amount: int, data: bytes = b"") -> UnstakeResult:
        """
        Withdraw amount staking tokens and claim the reward they earned.

        Returns:
            UnstakeResult with principal, fee, reward and emitted events
        """
        with self._operation() as emitted:
            now = self._now()
            self._accounting_pass(now)
            quote = self.rewards.quote_unstake(
                self.staking, account, amount, self.distribution.total_unlocked(), now
            )

            self.staking.apply_burn(account, quote.slices)
            self.staking.remove_tokens(amount)
            self.distribution.pay_out(quote.reward)

            fee = mul_div(amount, self.config.fees.exit_fee_bps, BPS_DENOMINATOR)
            principal = amount - fee

            self._require_custody(self.staking_custody, amount)
            self._require_custody(self.distribution_custody, quote.reward)
            if principal:
                self.staking_custody.transfer_out(account, principal)
            if fee:
                self.staking_custody.transfer_out(self.config.fees.fee_recipient, fee)
            if quote.reward:
                self.distribution_custody.transfer_out(account, quote.reward)

            total = self.staking.total_staked_for(account)
            self._emit(Unstaked(now, account, principal, total, data))
            self._emit(TokensClaimed(now, account, quote.reward))

            logger.info(
                "Unstaked",
                extra={
                    "event": "geyser.unstake",
                    "user": account,
                    "amount": amount,
                    "fee": fee,
                    "reward": quote.reward,
                    "shares_burned": quote.shares_to_burn,
                    "share_seconds_burned": quote.share_seconds_to_burn,
                },
            )
        return UnstakeResult(
            amount=amount, principal=principal, fee=fee, reward=quote.reward, events=emitted
        )

    # ==================== Owner operations ====================

    def lock_tokens(self, caller: str, amount: int, duration_sec: int) -> List[Event]:
        """
        Lock distribution tokens on a new linear unlock schedule.

        The owner must have approved this geyser's address for amount.

        Returns:
            Events emitted by the call
        """
        with self._operation() as emitted:
            self.access.require_owner(caller)
            now = self._now()
            self._accounting_pass(now)
            schedule = self.distribution.lock(amount, duration_sec, now)
            self.distribution_custody.transfer_in(caller, amount, spender=self.address)

            self._emit(TokensLocked(now, amount, duration_sec, self.distribution.total_locked()))

            logger.info(
                "Tokens locked",
                extra={
                    "event": "geyser.lock",
                    "amount": amount,
                    "duration_sec": duration_sec,
                    "shares": schedule.initial_locked_shares,
                    "total_locked": self.distribution.total_locked(),
                },
            )
        return emitted

    def add_tokens(self, caller: str, amount: int) -> List[Event]:
        """
        Top up the locked pool without minting shares.

        Existing schedules release the extra tokens pro rata as they vest.
        """
        with self._operation() as emitted:
            self.access.require_owner(caller)
            now = self._now()
            self._accounting_pass(now)
            self.distribution.add_tokens(amount)
            self.distribution_custody.transfer_in(caller, amount, spender=self.address)

            logger.info(
                "Tokens added",
                extra={
                    "event": "geyser.add_tokens",
                    "amount": amount,
                    "total_locked": self.distribution.total_locked(),
                },
            )
        return emitted

    def rescue_funds_from_staking_pool(self, caller: str, token: Token, to: str, amount: int) -> None:
        """Send foreign tokens airdropped to the staking custody account to `to`."""
        with self._operation():
            self.access.require_owner(caller)
            self.staking_custody.rescue_funds(token, to, amount)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.access.transfer_ownership(caller, new_owner)

    # ==================== Internal ====================

    @contextmanager
    def _operation(self) -> Iterator[List[Event]]:
        if self._locked:
            raise ReentrancyError("TokenGeyser: reentrant call")

        saved = copy.deepcopy((self.distribution, self.staking))
        emitted: List[Event] = []
        self._locked = True
        self._emitted = emitted
        try:
            yield emitted
        except Exception:
            self.distribution, self.staking = saved
            raise
        finally:
            self._locked = False
            self._emitted = None
        self.events.publish(emitted)

    def _emit(self, event: Event) -> None:
        self._emitted.append(event)

    def _now(self) -> int:
        now = self.clock.now()
        if now < self.staking.last_accounting_timestamp_sec:
            raise ClockError(
                f"TokenGeyser: clock moved backwards "
                f"({now} < {self.staking.last_accounting_timestamp_sec})"
            )
        return now

    def _accounting_pass(self, now: int) -> None:
        self._absorb_custody_surplus(self.distribution, self.staking)
        vested = self.distribution.vest(now)
        if vested.unlocked_tokens > 0:
            self._emit(TokensUnlocked(now, vested.unlocked_tokens, self.distribution.total_locked()))
        self.staking.accrue(now)

    def _simulate(self, now: int) -> Tuple[DistributionPool, StakingLedger]:
        distribution, staking = copy.deepcopy((self.distribution, self.staking))
        self._absorb_custody_surplus(distribution, staking)
        distribution.vest(now)
        staking.accrue(now)
        return distribution, staking

    def _absorb_custody_surplus(self, distribution: DistributionPool, staking: StakingLedger) -> None:
        """Fold tokens transferred straight into custody into the ledgers."""
        locked = distribution.absorb_surplus(self.distribution_custody.balance())
        staked = staking.absorb_surplus(self.staking_custody.balance())
        if locked or staked:
            logger.info(
                "Custody surplus absorbed",
                extra={
                    "event": "geyser.absorb_surplus",
                    "locked_added": locked,
                    "staked_added": staked,
                },
            )

    def _snapshot(
        self,
        distribution: DistributionPool,
        staking: StakingLedger,
        account: Optional[str],
        now: int,
    ) -> AccountingSnapshot:
        account_share_seconds = 0
        account_reward = 0
        if account is not None and staking.account(account).has_stakes:
            account_share_seconds = staking.account(account).share_seconds(now)
            account_reward = self.rewards.account_reward(
                staking, account, distribution.total_unlocked(), now
            )
        return AccountingSnapshot(
            total_locked=distribution.total_locked(),
            total_unlocked=distribution.total_unlocked(),
            account_staking_share_seconds=account_share_seconds,
            total_staking_share_seconds=staking.total_staking_share_seconds,
            account_reward=account_reward,
            timestamp_sec=now,
        )

    @staticmethod
    def _require_custody(pool: TokenPool, amount: int) -> None:
        held = pool.balance()
        if held < amount:
            raise InvariantViolationError(
                f"TokenGeyser: custody {pool.address} holds {held}, needs {amount}"
            )
