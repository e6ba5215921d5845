"""Unit tests for funding program compliance evaluation."""
import pytest
from datetime import date

from proptrack.compliance import (
    PROGRAM_PRESETS,
    ComplianceFigures,
    classify_status,
    create_compliance_evaluator,
    evaluate_compliance,
    get_program_rules,
)
from proptrack.core.models import AccountMetrics, AccountStatus, initialize_metrics


# =============================================================================
# Program Presets
# =============================================================================

class TestProgramPresets:
    """Test program preset lookup."""

    @pytest.mark.parametrize("name,target,daily,drawdown", [
        ("50K", 3000.0, -1000.0, -2000.0),
        ("100K", 6000.0, -2000.0, -3000.0),
        ("150K", 9000.0, -3000.0, -4500.0),
    ])
    def test_preset_values(self, name, target, daily, drawdown):
        """Test each tier's target and limits."""
        rules = PROGRAM_PRESETS[name]

        assert rules.profit_target == target
        assert rules.daily_loss_limit == daily
        assert rules.max_drawdown_limit == drawdown
        assert rules.minimum_trading_days == 5
        assert rules.max_trading_days == 30

    def test_lookup_is_case_insensitive(self):
        """Test preset names match regardless of case."""
        assert get_program_rules(" 100k ") is PROGRAM_PRESETS["100K"]

    def test_unknown_program(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown funding program"):
            get_program_rules("75K")


# =============================================================================
# Status State Machine
# =============================================================================

class TestClassifyStatus:
    """Test status classification from plain figures."""

    def test_daily_loss_beats_target(self, strict_rules):
        """Test a breached daily limit fails even with the target met."""
        status = classify_status(3000.0, 100.0, -2500.0, 10, 10, strict_rules)
        assert status == AccountStatus.FAILED

    def test_target_met_passes(self, strict_rules):
        """Test target reached with enough trading days passes."""
        status = classify_status(3000.0, 100.0, 0.0, 10, 10, strict_rules)
        assert status == AccountStatus.PASSED

    def test_target_without_minimum_days(self, strict_rules):
        """Test the target alone is not enough."""
        status = classify_status(3500.0, 100.0, 0.0, 10, 9, strict_rules)
        assert status == AccountStatus.IN_PROGRESS

    def test_daily_limit_is_inclusive(self, strict_rules):
        """Test reaching the daily limit exactly fails."""
        assert classify_status(0.0, 0.0, -2000.0, 10, 1, strict_rules) == AccountStatus.FAILED
        assert (
            classify_status(0.0, 0.0, -1999.99, 10, 1, strict_rules)
            == AccountStatus.IN_PROGRESS
        )

    def test_drawdown_limit_is_inclusive(self, strict_rules):
        """Test reaching the drawdown limit exactly fails."""
        assert classify_status(0.0, 2000.0, 0.0, 10, 1, strict_rules) == AccountStatus.FAILED
        assert (
            classify_status(0.0, 1999.0, 0.0, 10, 1, strict_rules)
            == AccountStatus.IN_PROGRESS
        )

    def test_time_limit(self, strict_rules):
        """Test running out of days short of the target fails."""
        assert classify_status(2999.0, 0.0, 0.0, 0, 12, strict_rules) == AccountStatus.FAILED

    def test_time_limit_with_target_met(self, strict_rules):
        """Test the last day still passes when the target is met."""
        assert classify_status(3000.0, 0.0, 0.0, 0, 12, strict_rules) == AccountStatus.PASSED

    @pytest.mark.parametrize("terminal", [AccountStatus.PASSED, AccountStatus.FAILED])
    def test_terminal_states_are_absorbing(self, strict_rules, terminal):
        """Test decided accounts keep their status whatever the figures."""
        failing = classify_status(
            0.0, 5000.0, -5000.0, 0, 0, strict_rules, current_status=terminal
        )
        passing = classify_status(
            5000.0, 0.0, 0.0, 10, 20, strict_rules, current_status=terminal
        )
        assert failing == terminal
        assert passing == terminal


class TestComplianceEvaluator:
    """Test the rule-based evaluator."""

    def test_rule_order(self):
        """Test failure rules are checked in priority order."""
        evaluator = create_compliance_evaluator()
        assert evaluator.rule_names == ["daily_loss_limit", "max_drawdown_limit", "time_limit"]

    def test_all_breaches_reported(self, program_50k):
        """Test every fired rule is listed."""
        evaluator = create_compliance_evaluator()
        figures = ComplianceFigures(
            total_profit=-2500.0,
            drawdown=2500.0,
            daily_pnl=-1500.0,
            days_remaining=0,
            completed_trading_days=3,
        )
        status, breaches = evaluator.classify(figures, program_50k)

        assert status == AccountStatus.FAILED
        assert breaches == ["daily_loss_limit", "max_drawdown_limit", "time_limit"]


# =============================================================================
# Derived Figures
# =============================================================================

class TestEvaluateCompliance:
    """Test derived compliance figures."""

    def test_figures(self, program_50k):
        """Test balance, distances, days and progress."""
        metrics = initialize_metrics(program_50k).model_copy(update={
            "total_profit": 1500.0,
            "drawdown": 500.0,
            "trading_days": 4,
        })
        state = evaluate_compliance(
            metrics,
            program_50k,
            -200.0,
            date_started=date(2024, 1, 1),
            as_of=date(2024, 1, 11),
        )

        assert state.current_balance == 51500.0
        assert state.high_water_mark == 51500.0
        assert state.daily_pnl == -200.0
        assert state.days_remaining == 20
        assert state.distance_from_target == 1500.0
        assert state.distance_from_daily_limit == 800.0
        assert state.distance_from_drawdown == 1500.0
        assert state.current_progress == 50.0
        assert state.completed_trading_days == 4
        assert state.status == AccountStatus.IN_PROGRESS
        assert state.breaches == []

    def test_high_water_mark_is_kept(self, program_50k):
        """Test the mark never falls below its previous value."""
        metrics = initialize_metrics(program_50k).model_copy(update={
            "total_profit": 1000.0,
            "high_water_mark": 53000.0,
        })
        state = evaluate_compliance(metrics, program_50k, 0.0, as_of=date(2024, 1, 1))

        assert state.current_balance == 51000.0
        assert state.high_water_mark == 53000.0

    def test_progress_is_clamped(self, program_50k):
        """Test progress stays within 0..100."""
        over = AccountMetrics(total_profit=4500.0)
        under = AccountMetrics(total_profit=-500.0)

        assert evaluate_compliance(over, program_50k, 0.0).current_progress == 100.0
        assert evaluate_compliance(under, program_50k, 0.0).current_progress == 0.0

    def test_days_remaining_bounds(self, program_50k):
        """Test elapsed days never push the count below zero or above the window."""
        metrics = AccountMetrics()
        expired = evaluate_compliance(
            metrics, program_50k, 0.0,
            date_started=date(2024, 1, 1), as_of=date(2024, 3, 1),
        )
        future_start = evaluate_compliance(
            metrics, program_50k, 0.0,
            date_started=date(2024, 3, 1), as_of=date(2024, 1, 1),
        )
        unstarted = evaluate_compliance(metrics, program_50k, 0.0)

        assert expired.days_remaining == 0
        assert expired.status == AccountStatus.FAILED
        assert expired.breaches == ["time_limit"]
        assert future_start.days_remaining == 30
        assert unstarted.days_remaining == 30

    def test_completed_days_capped(self, program_50k):
        """Test completed trading days are capped at the window."""
        state = evaluate_compliance(AccountMetrics(trading_days=40), program_50k, 0.0)
        assert state.completed_trading_days == 30

    def test_passed_account_stays_passed(self, program_50k):
        """Test a later breach does not change a decided status."""
        metrics = AccountMetrics(total_profit=3000.0, drawdown=2500.0, trading_days=6)
        state = evaluate_compliance(
            metrics, program_50k, -1500.0, current_status=AccountStatus.PASSED
        )

        assert state.status == AccountStatus.PASSED
        assert state.breaches == ["daily_loss_limit", "max_drawdown_limit"]
        assert state.distance_from_drawdown == -500.0
