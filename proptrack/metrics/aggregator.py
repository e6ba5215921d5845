"""
Trade Metrics Aggregator.

Reduces a chronologically ordered trade list to summary statistics:
- Total profit and win rate
- Maximum peak-to-trough drawdown of the cumulative profit curve
- Distinct trading days and first trade date

The pandas helpers build the equity curve and daily P&L used for reporting.
"""

from typing import Iterable, Optional, Sequence

import pandas as pd
import structlog

from proptrack.core.models import AccountMetricsSummary, TradeRecord

logger = structlog.get_logger(__name__)


def calculate_max_drawdown(profits: Iterable[float]) -> float:
    """
    Worst decline of cumulative profit from its running peak.

    The curve starts at zero, so a losing first trade counts as drawdown.

    Args:
        profits: Trade profits in chronological order

    Returns:
        Non-negative drawdown in currency units
    """
    max_drawdown = 0.0
    peak = 0.0
    running_total = 0.0

    for profit in profits:
        running_total += profit
        peak = max(peak, running_total)
        max_drawdown = max(max_drawdown, peak - running_total)

    return max_drawdown


def first_strategy_tag(trades: Iterable[TradeRecord]) -> Optional[str]:
    """First non-empty strategy tag in file row order."""
    tagged = [t for t in trades if t.strategy_tag and t.strategy_tag.strip()]
    if not tagged:
        return None
    return min(tagged, key=lambda t: t.row_index).strategy_tag.strip()


def aggregate_trades(
    trades: Sequence[TradeRecord], dialect: Optional[str] = None
) -> AccountMetricsSummary:
    """
    Summarize a trade list.

    Args:
        trades: Trades sorted by entry date ascending
        dialect: Name of the export dialect the trades came from

    Returns:
        AccountMetricsSummary

    Raises:
        ValueError: If there are no trades
    """
    if not trades:
        raise ValueError("Cannot aggregate an empty trade list")

    total_profit = sum(t.profit for t in trades)
    winning_trades = sum(1 for t in trades if t.is_winner)
    win_rate = winning_trades / len(trades) * 100

    max_drawdown = calculate_max_drawdown(t.profit for t in trades)
    trading_days = len({t.entry_date for t in trades})
    first_trade_date = min(t.entry_date for t in trades)

    summary = AccountMetricsSummary(
        total_profit=total_profit,
        win_rate=win_rate,
        max_drawdown=max_drawdown,
        trading_days=trading_days,
        first_trade_date=first_trade_date,
        strategy_tag=first_strategy_tag(trades),
        trade_count=len(trades),
        dialect=dialect,
    )

    logger.debug(
        "metrics.aggregated",
        trades=len(trades),
        total_profit=round(total_profit, 2),
        win_rate=round(win_rate, 2),
        max_drawdown=round(max_drawdown, 2),
        trading_days=trading_days,
    )
    return summary


# =============================================================================
# Equity Curve Helpers
# =============================================================================

def build_equity_curve(trades: Sequence[TradeRecord]) -> pd.DataFrame:
    """Per-trade cumulative profit, running peak and drawdown."""
    records = [
        {"entry_date": t.entry_date, "profit": t.profit}
        for t in trades
    ]
    curve = pd.DataFrame(records, columns=["entry_date", "profit"])
    curve["cumulative"] = curve["profit"].cumsum()
    # Peak starts from the flat zero line before the first trade
    curve["peak"] = curve["cumulative"].cummax().clip(lower=0)
    curve["drawdown"] = curve["peak"] - curve["cumulative"]
    return curve


def daily_pnl_series(trades: Sequence[TradeRecord]) -> pd.Series:
    """Profit summed per trading day, indexed by date ascending."""
    curve = build_equity_curve(trades)
    daily = curve.groupby("entry_date")["profit"].sum()
    daily.name = "daily_pnl"
    return daily.sort_index()


def latest_daily_pnl(trades: Sequence[TradeRecord]) -> float:
    """P&L of the most recent trading day (0 when there are no trades)."""
    if not trades:
        return 0.0
    daily = daily_pnl_series(trades)
    return float(daily.iloc[-1])


__all__ = [
    "aggregate_trades",
    "calculate_max_drawdown",
    "first_strategy_tag",
    "build_equity_curve",
    "daily_pnl_series",
    "latest_daily_pnl",
]
