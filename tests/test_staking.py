"""Tests for stake(), the staking ledger, ownership and fund rescue."""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from helpers import ONE_DAY, START, make_geyser, units

from geyser.custody.token import InsufficientAllowanceError, InsufficientBalanceError, Token
from geyser.engine.events import Staked
from geyser.engine.staking import BurnSlice, Stake, StakingLedger
from geyser.errors import (
    ArithmeticOverflowError,
    AuthorizationError,
    InvalidArgumentError,
    InvariantViolationError,
)


class TestStakingLedger:
    """Ledger-level share minting and burning."""

    def _ledger(self, burn_order="newest_first"):
        ledger = StakingLedger(burn_order=burn_order)
        ledger.add_stake("a", 10, 0)
        ledger.accrue(100)
        ledger.add_stake("a", 20, 100)
        ledger.accrue(200)
        return ledger

    def test_accumulator(self):
        ledger = self._ledger()
        # 10 shares for 100s, then 30 shares for 100s
        assert ledger.total_staking_share_seconds == 4000
        assert ledger.account("a").share_seconds(200) == 4000
        assert ledger.total_staking_shares == 30
        assert ledger.total_staked == 30

    def test_plan_newest_first(self):
        ledger = self._ledger()
        slices = ledger.plan_burn("a", 25, 200)
        assert slices == [BurnSlice(1, 20, 100), BurnSlice(0, 5, 200)]
        # Planning does not touch the ledger
        assert ledger.account("a").staking_shares == 30

    def test_plan_oldest_first(self):
        ledger = self._ledger(burn_order="oldest_first")
        slices = ledger.plan_burn("a", 25, 200)
        assert slices == [BurnSlice(0, 10, 200), BurnSlice(1, 15, 100)]

    def test_apply_burn(self):
        ledger = self._ledger()
        burned = ledger.apply_burn("a", ledger.plan_burn("a", 25, 200))

        assert burned == 3000
        assert ledger.account("a").stakes == [Stake(5, 0)]
        assert ledger.account("a").staking_shares == 5
        assert ledger.total_staking_shares == 5
        assert ledger.total_staking_share_seconds == 1000

    def test_burn_more_than_owned(self):
        ledger = self._ledger()
        with pytest.raises(InvalidArgumentError, match="greater than total user stakes"):
            ledger.plan_burn("a", 31, 200)

    def test_unknown_account_is_empty(self):
        ledger = self._ledger()
        assert ledger.account("nobody").staking_shares == 0
        assert not ledger.account("nobody").has_stakes
        assert "nobody" not in ledger.accounts

    def test_shares_without_tokens_blocks_staking(self):
        ledger = StakingLedger(total_staking_shares=5, total_staked=0)
        with pytest.raises(InvariantViolationError, match="Invalid state"):
            ledger.add_stake("a", 10, 0)

    def test_absorb_surplus(self):
        ledger = StakingLedger(total_staking_shares=5, total_staked=10)
        assert ledger.absorb_surplus(15) == 5
        assert ledger.total_staked == 15
        assert ledger.absorb_surplus(12) == 0
        assert ledger.total_staked == 15

    def test_remove_tokens_guards_backing(self):
        ledger = StakingLedger(total_staking_shares=5, total_staked=10)
        with pytest.raises(InvariantViolationError, match="Error unstaking"):
            ledger.remove_tokens(10)


class TestStake:
    """stake() through the engine."""

    def test_stake_transfers_and_records(self):
        geyser, clock = make_geyser()
        token = geyser.get_staking_token()
        events = geyser.stake("alice", units(100))

        assert events == [Staked(START, "alice", units(100), units(100), b"")]
        assert geyser.total_staked() == units(100)
        assert geyser.total_staked_for("alice") == units(100)
        assert token.balance_of("alice") == units(9_900)
        assert token.balance_of(geyser.staking_custody.address) == units(100)
        assert geyser.events.of_type(Staked) == events

    def test_staking_token_views(self):
        geyser, clock = make_geyser(single_token=False)
        geyser.stake("alice", units(50))
        geyser.stake("bob", units(150))

        assert geyser.token() is geyser.get_staking_token()
        assert geyser.token() is not geyser.get_distribution_token()
        assert geyser.total_staking_tokens() == units(200)

    def test_direct_transfer_raises_share_value(self):
        geyser, clock = make_geyser()
        token = geyser.get_staking_token()
        geyser.stake("alice", units(50))
        geyser.stake("bob", units(50))
        token.transfer("bob", geyser.staking_custody.address, units(100))
        assert geyser.total_staking_tokens() == units(200)

        geyser.update_accounting()
        assert geyser.total_staked() == units(200)
        assert geyser.total_staked_for("alice") == units(100)
        assert geyser.staking.total_staking_shares == units(100)

        result = geyser.unstake("alice", units(100))
        assert result.principal == units(100)
        assert token.balance_of("alice") == units(10_050)
        assert geyser.total_staked_for("bob") == units(100)
        assert geyser.state().validate_conservation(strict=True) == (True, None)

    def test_first_stake_mints_one_share_per_token(self):
        geyser, clock = make_geyser()
        geyser.stake("alice", units(100))
        assert geyser.staking.account("alice").staking_shares == units(100)

    def test_stake_data_is_passed_through(self):
        geyser, clock = make_geyser()
        events = geyser.stake("alice", units(1), data=b"\x01\x02")
        assert events[0].data == b"\x01\x02"

    def test_several_stakers(self):
        geyser, clock = make_geyser()
        geyser.stake("alice", units(50))
        clock.advance(ONE_DAY)
        geyser.stake("bob", units(150))

        assert geyser.total_staked() == units(200)
        assert geyser.total_staked_for("alice") == units(50)
        assert geyser.total_staked_for("bob") == units(150)
        assert geyser.total_staked_for("owner") == 0

    def test_repeated_stakes_keep_separate_entries(self):
        geyser, clock = make_geyser()
        geyser.stake("alice", units(10))
        clock.advance(ONE_DAY)
        geyser.stake("alice", units(10))

        stakes = geyser.staking.account("alice").stakes
        assert [s.timestamp_sec for s in stakes] == [START, START + ONE_DAY]
        assert geyser.total_staked_for("alice") == units(20)

    def test_zero_stake_rejected(self):
        geyser, clock = make_geyser()
        with pytest.raises(InvalidArgumentError, match="stake amount is zero"):
            geyser.stake("alice", 0)

    def test_out_of_range_stake_rejected(self):
        geyser, clock = make_geyser()
        with pytest.raises(ArithmeticOverflowError):
            geyser.stake("alice", 2**256)
        with pytest.raises(ArithmeticOverflowError):
            geyser.stake("alice", -1)

    def test_missing_allowance_rolls_back(self):
        geyser, clock = make_geyser()
        geyser.get_staking_token().approve("alice", geyser.address, units(1))
        clock.advance(ONE_DAY)

        with pytest.raises(InsufficientAllowanceError, match="ERC20: transfer amount exceeds allowance"):
            geyser.stake("alice", units(100))

        assert geyser.total_staked() == 0
        assert not geyser.staking.account("alice").has_stakes
        assert geyser.staking.last_accounting_timestamp_sec == START
        assert len(geyser.events) == 0

    def test_insufficient_balance(self):
        geyser, clock = make_geyser()
        with pytest.raises(InsufficientBalanceError, match="ERC20: transfer amount exceeds balance"):
            geyser.stake("alice", units(10_001))
        assert geyser.total_staked() == 0


class TestOwnership:
    """Owner-only controls."""

    def test_transfer_ownership(self):
        geyser, clock = make_geyser()
        geyser.transfer_ownership("owner", "alice")
        assert geyser.owner == "alice"

        geyser.lock_tokens("alice", units(10), ONE_DAY)
        with pytest.raises(AuthorizationError):
            geyser.lock_tokens("owner", units(10), ONE_DAY)

    def test_only_owner_can_transfer(self):
        geyser, clock = make_geyser()
        with pytest.raises(AuthorizationError):
            geyser.transfer_ownership("bob", "bob")

    def test_empty_new_owner_rejected(self):
        geyser, clock = make_geyser()
        with pytest.raises(InvalidArgumentError):
            geyser.transfer_ownership("owner", "")


class TestRescueFunds:
    """Recovery of tokens sent straight to the staking custody account."""

    def test_rescue_airdropped_token(self):
        geyser, clock = make_geyser()
        airdrop = Token("Airdrop", "AIR")
        airdrop.mint(geyser.staking_custody.address, units(1000))

        geyser.rescue_funds_from_staking_pool("owner", airdrop, "alice", units(1000))
        assert airdrop.balance_of("alice") == units(1000)
        assert airdrop.balance_of(geyser.staking_custody.address) == 0

    def test_rescue_token_with_same_symbol(self):
        geyser, clock = make_geyser()
        lookalike = Token("Geyser Token", "GSK")
        lookalike.mint(geyser.staking_custody.address, units(5))

        geyser.rescue_funds_from_staking_pool("owner", lookalike, "owner", units(5))
        assert lookalike.balance_of("owner") == units(5)

    def test_rescue_requires_owner(self):
        geyser, clock = make_geyser()
        airdrop = Token("Airdrop", "AIR")
        airdrop.mint(geyser.staking_custody.address, units(1000))
        with pytest.raises(AuthorizationError):
            geyser.rescue_funds_from_staking_pool("alice", airdrop, "alice", units(1000))

    def test_staking_token_cannot_be_rescued(self):
        geyser, clock = make_geyser()
        geyser.stake("alice", units(100))
        with pytest.raises(InvariantViolationError, match="Cannot claim token held by the contract"):
            geyser.rescue_funds_from_staking_pool(
                "owner", geyser.get_staking_token(), "owner", units(100)
            )
        assert geyser.get_staking_token().balance_of(geyser.staking_custody.address) == units(100)
