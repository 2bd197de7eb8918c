"""Tests for sanity checks on configuration, state and schedules."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from helpers import ONE_YEAR, make_geyser, units

from geyser.config.loader import config_from_dict, load_config
from geyser.engine.accounting import GeyserState
from geyser.simulation.runner import SimulationRunner, generate_random_scenario
from geyser.validation.sanity_checks import SanityChecker, validate_simulation_results


def _state(**overrides):
    values = dict(
        t=0, total_locked=100, total_unlocked=50, total_staked=70,
        total_staking_shares=70, total_locked_shares=100, total_staking_share_seconds=0,
        staking_custody=70, distribution_custody=150,
    )
    values.update(overrides)
    return GeyserState(**values)


class TestConfigChecks:
    """Plausibility warnings for configuration."""

    def test_defaults_are_clean(self):
        assert SanityChecker(load_config()).check_config_inputs() == []

    def test_long_bonus_period_warns(self):
        config = config_from_dict({"bonus": {"bonus_period_sec": 2 * ONE_YEAR}})
        warnings = SanityChecker(config).check_config_inputs()
        assert any("Bonus period" in w.message for w in warnings)

    def test_unfunded_owner_warns(self):
        config = config_from_dict({"simulation": {"accounts": [{"account": "alice", "staking_balance": 1}]}})
        warnings = SanityChecker(config).check_config_inputs()
        assert any(w.category == "input" and "owner" in w.message for w in warnings)


class TestStateChecks:
    """Ledger/custody reconciliation."""

    def test_balanced_state(self):
        checker = SanityChecker(load_config())
        assert checker.check_state(_state(), strict=True) == []

    def test_surplus_allowed_unless_strict(self):
        checker = SanityChecker(load_config())
        state = _state(staking_custody=71)
        assert checker.check_state(state) == []
        errors = checker.check_state(state, strict=True)
        assert [w.category for w in errors] == ["conservation"]

    def test_shortfall_is_an_error(self):
        checker = SanityChecker(load_config())
        errors = checker.check_state(_state(distribution_custody=149))
        assert errors[0].severity == "error"
        assert "distribution custody holds 149" in errors[0].details

    def test_shares_without_tokens(self):
        checker = SanityChecker(load_config())
        errors = checker.check_state(_state(total_staked=0, staking_custody=0))
        assert any("Staking shares exist" in w.message for w in errors)

    def test_history_must_move_forward(self):
        checker = SanityChecker(load_config())
        warnings = checker.check_history([_state(t=10), _state(t=5)])
        assert len(warnings) == 1


class TestScheduleChecks:
    """Per-schedule invariants on a live engine."""

    def test_live_schedules_pass(self):
        geyser, clock = make_geyser()
        geyser.lock_tokens("owner", units(100), ONE_YEAR)
        clock.advance(ONE_YEAR // 3)
        geyser.lock_tokens("owner", units(10), ONE_YEAR)
        clock.advance(ONE_YEAR)
        geyser.update_accounting()

        checker = SanityChecker(geyser.config)
        assert checker.check_schedules(geyser) == []

    def test_corrupted_schedule_detected(self):
        geyser, clock = make_geyser()
        geyser.lock_tokens("owner", units(100), ONE_YEAR)
        geyser.distribution.schedules[0].unlocked_shares = units(200)

        errors = SanityChecker(geyser.config).check_schedules(geyser)
        assert any("unlocked more shares" in w.message for w in errors)


class TestSimulationValidation:
    """Whole-run validation."""

    def test_random_run_has_no_errors(self):
        config = load_config()
        result = SimulationRunner(config).run(generate_random_scenario(config, seed=3, steps=80))
        errors = [w for w in validate_simulation_results(result) if w.severity == "error"]
        assert errors == []
