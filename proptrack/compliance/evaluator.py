"""Program compliance evaluation.

Computes the risk and progress figures of a program-bound account and runs
the evaluation state machine:

    In Progress -> Failed   any failure rule fires
    In Progress -> Passed   profit target met with enough trading days
    Passed / Failed         terminal, never left

Failure rules are checked before the pass condition, so an account that
breaches a limit while reaching its target is Failed.
"""
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Tuple

import structlog

from proptrack.core.models import (
    AccountComplianceState,
    AccountMetrics,
    AccountStatus,
    ProgramRules,
    calculate_progress,
    utc_today,
)

logger = structlog.get_logger(__name__)


@dataclass
class ComplianceFigures:
    """Figures the status rules are evaluated against."""
    total_profit: float
    drawdown: float
    daily_pnl: float
    days_remaining: int
    completed_trading_days: int


@dataclass
class ComplianceRule:
    """Individual failure rule.

    Attributes:
        name: Unique identifier for the rule
        check_fn: Returns True when the rule is breached
        priority: Lower numbers are checked first
    """
    name: str
    check_fn: Callable[[ComplianceFigures, ProgramRules], bool]
    priority: int = 100


def _daily_loss_breached(figures: ComplianceFigures, rules: ProgramRules) -> bool:
    return figures.daily_pnl <= rules.daily_loss_limit


def _max_drawdown_breached(figures: ComplianceFigures, rules: ProgramRules) -> bool:
    return figures.drawdown >= abs(rules.max_drawdown_limit)


def _time_limit_breached(figures: ComplianceFigures, rules: ProgramRules) -> bool:
    return figures.days_remaining <= 0 and figures.total_profit < rules.profit_target


class ComplianceEvaluator:
    """Evaluates accounts against funding program rules."""

    def __init__(self):
        self._rules: List[ComplianceRule] = []
        self._register_default_rules()

    def _register_default_rules(self):
        """Register the failure rules in priority order."""
        self._rules = [
            ComplianceRule(
                name="daily_loss_limit",
                check_fn=_daily_loss_breached,
                priority=1,
            ),
            ComplianceRule(
                name="max_drawdown_limit",
                check_fn=_max_drawdown_breached,
                priority=2,
            ),
            ComplianceRule(
                name="time_limit",
                check_fn=_time_limit_breached,
                priority=3,
            ),
        ]
        self._rules.sort(key=lambda r: r.priority)

    @property
    def rule_names(self) -> List[str]:
        return [rule.name for rule in self._rules]

    def find_breaches(self, figures: ComplianceFigures, rules: ProgramRules) -> List[str]:
        """Names of every failure rule the figures breach, in priority order."""
        return [rule.name for rule in self._rules if rule.check_fn(figures, rules)]

    def classify(
        self,
        figures: ComplianceFigures,
        rules: ProgramRules,
        current_status: AccountStatus = AccountStatus.IN_PROGRESS,
    ) -> Tuple[AccountStatus, List[str]]:
        """
        Run the status state machine.

        Args:
            figures: Current account figures
            rules: Program rule set
            current_status: Status before this evaluation

        Returns:
            New status and the failure rules that fired
        """
        breaches = self.find_breaches(figures, rules)

        if current_status.is_terminal:
            return current_status, breaches

        if breaches:
            return AccountStatus.FAILED, breaches

        if (
            figures.total_profit >= rules.profit_target
            and figures.completed_trading_days >= rules.minimum_trading_days
        ):
            return AccountStatus.PASSED, breaches

        return AccountStatus.IN_PROGRESS, breaches

    def evaluate(
        self,
        metrics: AccountMetrics,
        rules: ProgramRules,
        daily_pnl: float,
        date_started: Optional[date] = None,
        as_of: Optional[date] = None,
        current_status: AccountStatus = AccountStatus.IN_PROGRESS,
    ) -> AccountComplianceState:
        """
        Compute compliance figures and status for an account.

        Args:
            metrics: Cumulative account metrics
            rules: Program rule set
            daily_pnl: Profit or loss of the current trading day
            date_started: Evaluation start date (no elapsed days when None)
            as_of: Date to count elapsed days to (today, UTC, when None)
            current_status: Status before this evaluation

        Returns:
            AccountComplianceState
        """
        if as_of is None:
            as_of = utc_today()
        days_passed = max(0, (as_of - date_started).days) if date_started else 0

        current_balance = metrics.starting_balance + metrics.total_profit
        high_water_mark = max(metrics.high_water_mark, current_balance)
        days_remaining = max(0, rules.max_trading_days - days_passed)
        completed_trading_days = min(metrics.trading_days, rules.max_trading_days)

        figures = ComplianceFigures(
            total_profit=metrics.total_profit,
            drawdown=metrics.drawdown,
            daily_pnl=daily_pnl,
            days_remaining=days_remaining,
            completed_trading_days=completed_trading_days,
        )
        status, breaches = self.classify(figures, rules, current_status)

        state = AccountComplianceState(
            current_balance=current_balance,
            high_water_mark=high_water_mark,
            daily_pnl=daily_pnl,
            days_remaining=days_remaining,
            distance_from_target=rules.profit_target - metrics.total_profit,
            distance_from_daily_limit=abs(rules.daily_loss_limit) + daily_pnl,
            distance_from_drawdown=abs(rules.max_drawdown_limit) - metrics.drawdown,
            current_progress=calculate_progress(metrics.total_profit, rules.profit_target),
            completed_trading_days=completed_trading_days,
            status=status,
            breaches=breaches,
        )

        if status != current_status:
            logger.info(
                "compliance.status_changed",
                program=rules.name,
                previous=current_status.value,
                status=status.value,
                breaches=breaches or None,
            )
        return state


# === Convenience Functions ===

_default_evaluator = ComplianceEvaluator()


def create_compliance_evaluator() -> ComplianceEvaluator:
    """Factory function to create a ComplianceEvaluator instance."""
    return ComplianceEvaluator()


def classify_status(
    total_profit: float,
    drawdown: float,
    daily_pnl: float,
    days_remaining: int,
    completed_trading_days: int,
    rules: ProgramRules,
    current_status: AccountStatus = AccountStatus.IN_PROGRESS,
) -> AccountStatus:
    """Status of an account given its plain figures."""
    figures = ComplianceFigures(
        total_profit=total_profit,
        drawdown=drawdown,
        daily_pnl=daily_pnl,
        days_remaining=days_remaining,
        completed_trading_days=completed_trading_days,
    )
    status, _ = _default_evaluator.classify(figures, rules, current_status)
    return status


def evaluate_compliance(
    metrics: AccountMetrics,
    rules: ProgramRules,
    daily_pnl: float,
    *,
    date_started: Optional[date] = None,
    as_of: Optional[date] = None,
    current_status: AccountStatus = AccountStatus.IN_PROGRESS,
) -> AccountComplianceState:
    """Compute compliance figures and status with the default evaluator."""
    return _default_evaluator.evaluate(
        metrics,
        rules,
        daily_pnl,
        date_started=date_started,
        as_of=as_of,
        current_status=current_status,
    )
