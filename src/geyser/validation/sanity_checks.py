"""Sanity checks and validation for engine configuration and state."""

from dataclasses import dataclass
from typing import List, Optional

from ..config.schema import GeyserConfig
from ..engine.accounting import GeyserState
from ..engine.geyser import TokenGeyser
from ..simulation.runner import SimulationResult

ONE_YEAR_SEC = 365 * 86400


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "conservation", "bounds", "schedule"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on configuration and engine state."""

    def __init__(self, config: GeyserConfig):
        """Initialize with configuration."""
        self.config = config

    def check_config_inputs(self) -> List[ValidationWarning]:
        """
        Check configuration inputs for implausible values.

        Returns:
            List of validation warnings
        """
        warnings = []

        if self.config.bonus.bonus_period_sec > ONE_YEAR_SEC:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Bonus period longer than a year",
                details=f"Current value: {self.config.bonus.bonus_period_sec / 86400:.0f} days"
            ))

        if self.config.bonus.start_bonus_pct == 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Start bonus of 0% forfeits all rewards of freshly made stakes",
            ))

        if self.config.fees.exit_fee_bps > 1_000:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Exit fee above 10% of unstaked principal",
                details=f"Current value: {self.config.fees.exit_fee_bps / 100:.2f}%"
            ))

        sim = self.config.simulation
        funded = {a.account: a for a in sim.accounts}
        if sim.owner not in funded:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Simulation owner has no funding; lock and add_tokens actions will fail",
                details=f"Owner: {sim.owner}"
            ))
        else:
            owner = funded[sim.owner]
            owner_distribution = owner.staking_balance if sim.single_token else owner.distribution_balance
            if owner_distribution == 0:
                warnings.append(ValidationWarning(
                    severity="warning",
                    category="input",
                    message="Simulation owner holds no distribution tokens to lock",
                    details=f"Owner: {sim.owner}"
                ))

        stakers = [a for a in sim.accounts if a.account != sim.owner and a.staking_balance > 0]
        if not stakers:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="No funded staking accounts besides the owner",
            ))

        return warnings

    def check_state(self, state: GeyserState, strict: bool = False) -> List[ValidationWarning]:
        """
        Check engine state for issues.

        Args:
            state: Current engine state
            strict: Require custody balances to equal the ledger exactly

        Returns:
            List of validation warnings
        """
        warnings = []

        is_valid, error_msg = state.validate_non_negative()
        if not is_valid:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message="Negative ledger bucket",
                details=error_msg
            ))

        is_valid, error_msg = state.validate_conservation(strict=strict)
        if not is_valid:
            warnings.append(ValidationWarning(
                severity="error",
                category="conservation",
                message="Custody does not reconcile with the ledger",
                details=error_msg
            ))

        if state.total_staking_shares > 0 and state.total_staked == 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message=f"Staking shares exist without staked tokens at t={state.t}",
                details=f"Shares: {state.total_staking_shares}"
            ))

        if state.total_locked_shares == 0 and state.total_locked > 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message=f"Locked tokens with no schedule behind them at t={state.t}",
                details="They are released to the unlocked pool on the next accounting pass"
            ))

        return warnings

    def check_schedules(self, geyser: TokenGeyser) -> List[ValidationWarning]:
        """
        Check every unlock schedule's invariants.

        Args:
            geyser: Engine to inspect

        Returns:
            List of validation warnings
        """
        warnings = []
        outstanding = 0
        for index in range(geyser.unlock_schedule_count()):
            schedule = geyser.unlock_schedules(index)
            outstanding += schedule.remaining_shares

            if schedule.unlocked_shares > schedule.initial_locked_shares:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="schedule",
                    message=f"Schedule {index} unlocked more shares than it locked",
                    details=f"{schedule.unlocked_shares} > {schedule.initial_locked_shares}"
                ))
            if schedule.last_unlock_timestamp_sec > schedule.end_at_sec:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="schedule",
                    message=f"Schedule {index} was unlocked past its end",
                    details=f"{schedule.last_unlock_timestamp_sec} > {schedule.end_at_sec}"
                ))
            if schedule.end_at_sec - schedule.duration_sec > schedule.last_unlock_timestamp_sec:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="schedule",
                    message=f"Schedule {index} last unlock precedes its start",
                ))

        if outstanding != geyser.distribution.total_locked_shares:
            warnings.append(ValidationWarning(
                severity="error",
                category="schedule",
                message="Schedule shares do not add up to the locked share total",
                details=f"Schedules: {outstanding}, pool: {geyser.distribution.total_locked_shares}"
            ))

        return warnings

    def check_history(self, states: List[GeyserState]) -> List[ValidationWarning]:
        """Check that time never runs backwards across recorded states."""
        warnings = []
        for prev, curr in zip(states, states[1:]):
            if curr.t < prev.t:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="bounds",
                    message=f"Accounting time moved backwards: {prev.t} -> {curr.t}",
                ))
        return warnings


def validate_simulation_results(result: SimulationResult) -> List[ValidationWarning]:
    """
    Validate a complete simulation run.

    Args:
        result: Simulation result

    Returns:
        List of validation warnings
    """
    checker = SanityChecker(result.config)
    warnings = checker.check_config_inputs()
    for state in result.states:
        warnings.extend(checker.check_state(state, strict=True))
    warnings.extend(checker.check_history(result.states))

    for error_msg in result.conservation_errors:
        warnings.append(ValidationWarning(
            severity="error",
            category="conservation",
            message="Conservation violation recorded during run",
            details=error_msg
        ))
    return warnings
