"""
Account and Import Reports.

Produces console and markdown reports with:
- Portfolio totals and status breakdown
- Per prop firm statistics
- Trade history metrics and daily P&L
- Program compliance figures
"""

from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

import numpy as np

from proptrack.core.models import (
    AccountComplianceState,
    AccountMetricsSummary,
    AccountStatus,
    TradeRecord,
    TradingAccount,
)
from proptrack.metrics.aggregator import daily_pnl_series


class AccountsReport:
    """Report over every tracked account."""

    STATUS_KEYS = OrderedDict([
        (AccountStatus.IN_PROGRESS, "in_progress"),
        (AccountStatus.PASSED, "passed"),
        (AccountStatus.FAILED, "failed"),
    ])

    def __init__(self, accounts: Sequence[TradingAccount]):
        self.accounts = list(accounts)

    @property
    def total_profit(self) -> float:
        return sum(a.metrics.total_profit for a in self.accounts)

    @property
    def average_win_rate(self) -> float:
        if not self.accounts:
            return 0.0
        return float(np.mean([a.metrics.win_rate for a in self.accounts]))

    @property
    def average_drawdown(self) -> float:
        if not self.accounts:
            return 0.0
        return float(np.mean([a.metrics.drawdown for a in self.accounts]))

    def status_groups(self) -> Dict[str, List[TradingAccount]]:
        """Accounts grouped by evaluation status."""
        groups: Dict[str, List[TradingAccount]] = {key: [] for key in self.STATUS_KEYS.values()}
        for account in self.accounts:
            groups[self.STATUS_KEYS[account.status]].append(account)
        return groups

    def prop_firm_stats(self) -> Dict[str, Dict[str, float]]:
        """Account counts by status and total profit for each prop firm."""
        stats: Dict[str, Dict[str, float]] = {}
        for account in self.accounts:
            firm = stats.setdefault(account.prop_firm, {
                "total": 0,
                "passed": 0,
                "failed": 0,
                "in_progress": 0,
                "total_profit": 0.0,
            })
            firm["total"] += 1
            firm[self.STATUS_KEYS[account.status]] += 1
            firm["total_profit"] += account.metrics.total_profit
        return stats

    def generate_markdown_report(self) -> str:
        """Generate markdown formatted report."""
        lines = []

        lines.append("# Prop Firm Accounts Report")
        lines.append("")
        lines.append(f"**Accounts:** {len(self.accounts)}")
        lines.append(f"**Total Profit:** ${self.total_profit:,.2f}")
        lines.append(f"**Average Win Rate:** {self.average_win_rate:.1f}%")
        lines.append(f"**Average Drawdown:** ${self.average_drawdown:,.2f}")
        lines.append("")

        groups = self.status_groups()
        lines.append("## Status")
        lines.append("")
        lines.append("| Status | Accounts |")
        lines.append("|--------|----------|")
        for status, key in self.STATUS_KEYS.items():
            lines.append(f"| {status.value} | {len(groups[key])} |")
        lines.append("")

        lines.append("## Prop Firms")
        lines.append("")
        lines.append("| Prop Firm | Total | Passed | Failed | In Progress | Profit |")
        lines.append("|-----------|-------|--------|--------|-------------|--------|")
        for firm, data in self.prop_firm_stats().items():
            lines.append(
                f"| {firm or '-'} | {data['total']} | {data['passed']} | {data['failed']} "
                f"| {data['in_progress']} | ${data['total_profit']:,.2f} |"
            )
        lines.append("")

        return "\n".join(lines)

    def print_full_report(self):
        """Print complete accounts report to console."""
        print("\n" + "=" * 80)
        print("PROP FIRM ACCOUNTS REPORT")
        print("=" * 80)
        print(f"\n  Accounts:              {len(self.accounts)}")
        print(f"  Total Profit:          ${self.total_profit:,.2f}")
        print(f"  Average Win Rate:      {self.average_win_rate:.1f}%")
        print(f"  Average Drawdown:      ${self.average_drawdown:,.2f}")

        print("\n" + "-" * 80)
        print("ACCOUNTS")
        print("-" * 80)
        for account in self.accounts:
            metrics = account.metrics
            print(
                f"\n  {account.account_name:<24} {account.status.value:<12} "
                f"${metrics.total_profit:>10,.2f}  {metrics.current_progress:5.1f}% of "
                f"${metrics.profit_target:,.0f}"
            )


class TradeHistoryReport:
    """Report for a single imported trade history."""

    def __init__(
        self,
        summary: AccountMetricsSummary,
        trades: Sequence[TradeRecord],
        compliance: Optional[AccountComplianceState] = None,
    ):
        self.summary = summary
        self.trades = list(trades)
        self.compliance = compliance

    def generate_markdown_report(self) -> str:
        """Generate markdown formatted report."""
        s = self.summary
        lines = []

        lines.append("# Trade History Report")
        lines.append("")
        lines.append(f"**First Trade:** {s.first_trade_date.isoformat()}")
        if s.dialect:
            lines.append(f"**Export Format:** {s.dialect}")
        if s.strategy_tag:
            lines.append(f"**Strategy:** {s.strategy_tag}")
        lines.append("")

        lines.append("## Performance Summary")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| Total Profit | ${s.total_profit:,.2f} |")
        lines.append(f"| Win Rate | {s.win_rate:.2f}% |")
        lines.append(f"| Max Drawdown | ${s.max_drawdown:,.2f} |")
        lines.append(f"| Trades | {s.trade_count} |")
        lines.append(f"| Trading Days | {s.trading_days} |")
        lines.append("")

        lines.append("## Daily P&L")
        lines.append("")
        lines.append("| Date | P&L |")
        lines.append("|------|-----|")
        for day, pnl in daily_pnl_series(self.trades).items():
            lines.append(f"| {day.isoformat()} | ${pnl:+,.2f} |")
        lines.append("")

        if self.compliance is not None:
            c = self.compliance
            lines.append("## Program Compliance")
            lines.append("")
            lines.append("| Figure | Value |")
            lines.append("|--------|-------|")
            lines.append(f"| Status | {c.status.value} |")
            lines.append(f"| Progress | {c.current_progress:.1f}% |")
            lines.append(f"| Current Balance | ${c.current_balance:,.2f} |")
            lines.append(f"| Distance From Target | ${c.distance_from_target:,.2f} |")
            lines.append(f"| Distance From Daily Limit | ${c.distance_from_daily_limit:,.2f} |")
            lines.append(f"| Distance From Drawdown | ${c.distance_from_drawdown:,.2f} |")
            lines.append(f"| Days Remaining | {c.days_remaining} |")
            if c.breaches:
                lines.append(f"| Breaches | {', '.join(c.breaches)} |")
            lines.append("")

        return "\n".join(lines)

    def print_full_report(self):
        """Print complete import report to console."""
        s = self.summary
        print("\n" + "=" * 80)
        print("TRADE HISTORY REPORT")
        print("=" * 80)
        print(f"\n  Total Profit:          ${s.total_profit:,.2f}")
        print(f"  Win Rate:              {s.win_rate:.2f}%")
        print(f"  Max Drawdown:          ${s.max_drawdown:,.2f}")
        print(f"  Trades:                {s.trade_count}")
        print(f"  Trading Days:          {s.trading_days}")
        print(f"  First Trade:           {s.first_trade_date.isoformat()}")
        if s.strategy_tag:
            print(f"  Strategy:              {s.strategy_tag}")

        daily = daily_pnl_series(self.trades)
        print("\n" + "-" * 80)
        print("DAILY P&L")
        print("-" * 80)
        print(f"\n  Best Day:              ${daily.max():+,.2f}")
        print(f"  Worst Day:             ${daily.min():+,.2f}")
        print(f"  Green Days:            {int((daily > 0).sum())} of {len(daily)}")

        if self.compliance is not None:
            c = self.compliance
            print("\n" + "-" * 80)
            print("PROGRAM COMPLIANCE")
            print("-" * 80)
            print(f"\n  Status:                {c.status.value}")
            print(f"  Progress:              {c.current_progress:.1f}%")
            print(f"  Current Balance:       ${c.current_balance:,.2f}")
            print(f"  To Target:             ${c.distance_from_target:,.2f}")
            print(f"  To Daily Limit:        ${c.distance_from_daily_limit:,.2f}")
            print(f"  To Drawdown Limit:     ${c.distance_from_drawdown:,.2f}")
            print(f"  Days Remaining:        {c.days_remaining}")
            for breach in c.breaches:
                print(f"    ⚠️  Breached: {breach}")
