"""Shared builders for engine tests."""

import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from geyser.config.schema import BonusConfig, FeeConfig, GeyserConfig, PoolConfig
from geyser.custody.clock import ManualClock
from geyser.custody.token import Token
from geyser.engine.geyser import TokenGeyser

START = 1_600_000_000
ONE_DAY = 86400
ONE_HOUR = 3600
ONE_YEAR = 365 * ONE_DAY
MAX_ALLOWANCE = 2**256 - 1
ACCOUNTS = ("owner", "alice", "bob")


def units(amount) -> int:
    """Whole tokens to 18-decimal base units."""
    return int(Decimal(str(amount)) * 10**18)


def make_geyser(
    start_bonus_pct: int = 50,
    bonus_period_sec: int = ONE_DAY,
    exit_fee_bps: int = 0,
    fee_recipient=None,
    burn_order: str = "newest_first",
    max_unlock_schedules=None,
    single_token: bool = True,
    token_cls=Token,
):
    """
    Build a geyser on a manual clock with three funded accounts.

    owner, alice and bob each hold 10,000 staking tokens and have approved the
    geyser for an unlimited amount. In a two-token geyser the owner also holds
    10,000 reward tokens.

    Returns:
        (geyser, clock)
    """
    config = GeyserConfig(
        bonus=BonusConfig(start_bonus_pct=start_bonus_pct, bonus_period_sec=bonus_period_sec),
        pool=PoolConfig(stake_burn_order=burn_order, max_unlock_schedules=max_unlock_schedules),
        fees=FeeConfig(exit_fee_bps=exit_fee_bps, fee_recipient=fee_recipient),
    )
    clock = ManualClock(start=START)
    staking_token = token_cls("Geyser Token", "GSK")
    distribution_token = staking_token if single_token else token_cls("Reward Token", "RWD")
    geyser = TokenGeyser(staking_token, distribution_token, owner="owner", config=config, clock=clock)

    for account in ACCOUNTS:
        staking_token.mint(account, units(10_000))
        staking_token.approve(account, geyser.address, MAX_ALLOWANCE)
    if not single_token:
        distribution_token.mint("owner", units(10_000))
        distribution_token.approve("owner", geyser.address, MAX_ALLOWANCE)

    return geyser, clock


def close(actual: int, expected: int, tolerance: int = 10**12) -> bool:
    """True when two base-unit amounts differ by at most tolerance."""
    return abs(actual - expected) <= tolerance
