"""Module E: Accounting reports - Snapshots of engine state and custody reconciliation."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, NamedTuple, Optional


class AccountingSnapshot(NamedTuple):
    """Result of update_accounting(): the system-state report for one account."""
    total_locked: int
    total_unlocked: int
    account_staking_share_seconds: int
    total_staking_share_seconds: int
    account_reward: int
    timestamp_sec: int


@dataclass
class GeyserState:
    """Engine state at a point in time.

    Ledger Semantics:
    - total_locked / total_unlocked: the two halves of the distribution pool
    - total_staked: staking tokens backing all staking shares
    - staking_custody / distribution_custody: balances actually held by the
      two custody accounts in the token ledger

    Reconciliation Identity:
    staking_custody >= total_staked
    distribution_custody >= total_locked + total_unlocked
    (equal unless tokens were sent straight to a custody address)
    """
    t: int  # Timestamp in seconds
    total_locked: int
    total_unlocked: int
    total_staked: int
    total_staking_shares: int
    total_locked_shares: int
    total_staking_share_seconds: int
    staking_custody: int
    distribution_custody: int
    unlock_schedule_count: int = 0

    @property
    def distribution_total(self) -> int:
        """Locked plus unlocked distribution tokens."""
        return self.total_locked + self.total_unlocked

    def validate_conservation(self, strict: bool = False) -> tuple[bool, Optional[str]]:
        """
        Validate that custody balances cover the engine's accounting numbers.

        Args:
            strict: Require exact equality instead of coverage

        Returns:
            (is_valid, error_message)
        """
        checks = [
            ("staking", self.staking_custody, self.total_staked),
            ("distribution", self.distribution_custody, self.distribution_total),
        ]
        for name, held, owed in checks:
            if held < owed or (strict and held != owed):
                return False, (
                    f"Custody mismatch at t={self.t}: "
                    f"{name} custody holds {held}, ledger accounts for {owed} "
                    f"(diff={held - owed}, locked={self.total_locked}, "
                    f"unlocked={self.total_unlocked}, staked={self.total_staked})"
                )
        return True, None

    def validate_non_negative(self) -> tuple[bool, Optional[str]]:
        """Validate all buckets are non-negative."""
        buckets = [
            ('total_locked', self.total_locked),
            ('total_unlocked', self.total_unlocked),
            ('total_staked', self.total_staked),
            ('total_staking_shares', self.total_staking_shares),
            ('total_locked_shares', self.total_locked_shares),
            ('total_staking_share_seconds', self.total_staking_share_seconds),
        ]
        for name, value in buckets:
            if value < 0:
                return False, f"Negative bucket at t={self.t}: {name}={value}"
        return True, None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
