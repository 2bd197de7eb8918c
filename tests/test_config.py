"""Tests for configuration loading and validation."""

import pytest
import sys
import os

from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from geyser.config.loader import config_from_dict, load_config
from geyser.config.schema import FeeConfig, GeyserConfig, LoggingConfig, PoolConfig, SimulationConfig


class TestConfigLoading:
    """Loading the packaged defaults and custom files."""

    def test_load_default_config(self):
        config = load_config()
        assert isinstance(config, GeyserConfig)
        assert config.bonus.start_bonus_pct == 50
        assert config.bonus.bonus_period_sec == 86400
        assert config.pool.stake_burn_order == "newest_first"
        assert config.fees.exit_fee_bps == 0

    def test_default_accounts_funded(self):
        config = load_config()
        accounts = {a.account: a for a in config.simulation.accounts}
        assert set(accounts) == {"owner", "alice", "bob"}
        assert accounts["owner"].staking_balance == 100_000 * 10**18
        assert config.simulation.single_token

    def test_config_hash_is_deterministic(self):
        assert load_config().compute_hash() == load_config().compute_hash()

    def test_config_hash_changes_with_values(self):
        base = load_config()
        changed = config_from_dict({**base.to_dict(), "bonus": {"start_bonus_pct": 10}})
        assert base.compute_hash() != changed.compute_hash()

    def test_load_custom_yaml(self, tmp_path):
        path = tmp_path / "geyser.yaml"
        path.write_text(
            "bonus:\n"
            "  start_bonus_pct: 20\n"
            "  bonus_period_sec: 5184000\n"
            "fees:\n"
            "  exit_fee_bps: 100\n"
            "  fee_recipient: treasury\n"
        )
        config = load_config(str(path))
        assert config.bonus.start_bonus_pct == 20
        assert config.bonus.bonus_period_sec == 60 * 86400
        assert config.fees.fee_recipient == "treasury"
        # Unspecified sections fall back to model defaults
        assert config.pool.initial_shares_per_token == 1

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == GeyserConfig()

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("bonus:\n  start_bonus_pct: 30\n")
        monkeypatch.setenv("GEYSER_CONFIG", str(path))
        assert load_config().bonus.start_bonus_pct == 30

    def test_explicit_path_beats_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GEYSER_CONFIG", str(tmp_path / "missing.yaml"))
        path = tmp_path / "explicit.yaml"
        path.write_text("bonus:\n  start_bonus_pct: 70\n")
        assert load_config(str(path)).bonus.start_bonus_pct == 70

    def test_unknown_section_rejected(self, tmp_path):
        path = tmp_path / "typo.yaml"
        path.write_text("bonuss:\n  start_bonus_pct: 30\n")
        with pytest.raises(ValueError, match="Unknown configuration sections: bonuss"):
            load_config(str(path))

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- bonus\n- pool\n")
        with pytest.raises(ValueError, match="top level must be a mapping"):
            load_config(str(path))

    def test_round_trip(self):
        config = load_config()
        assert config_from_dict(config.to_dict()) == config


class TestConfigValidation:
    """Rejected configurations."""

    def test_start_bonus_out_of_range(self):
        with pytest.raises(ValidationError):
            config_from_dict({"bonus": {"start_bonus_pct": 101}})

    def test_zero_bonus_period(self):
        with pytest.raises(ValidationError):
            config_from_dict({"bonus": {"bonus_period_sec": 0}})

    def test_fee_requires_recipient(self):
        with pytest.raises(ValidationError, match="fee_recipient is required"):
            FeeConfig(exit_fee_bps=50)
        assert FeeConfig(exit_fee_bps=50, fee_recipient="treasury").exit_fee_bps == 50

    def test_unknown_burn_order(self):
        with pytest.raises(ValidationError):
            PoolConfig(stake_burn_order="random")

    def test_schedule_limit_positive(self):
        with pytest.raises(ValidationError):
            PoolConfig(max_unlock_schedules=0)

    def test_log_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingConfig(level="verbose")

    def test_duplicate_accounts(self):
        with pytest.raises(ValidationError, match="Duplicate simulation accounts: alice"):
            SimulationConfig(accounts=[{"account": "alice"}, {"account": "alice"}])

    def test_two_token_simulation(self):
        sim = SimulationConfig(distribution_symbol="RWD")
        assert not sim.single_token
