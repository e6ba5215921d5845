"""Metrics aggregation over normalized trade lists."""

from proptrack.metrics.aggregator import (
    aggregate_trades,
    build_equity_curve,
    calculate_max_drawdown,
    daily_pnl_series,
    first_strategy_tag,
    latest_daily_pnl,
)

__all__ = [
    "aggregate_trades",
    "build_equity_curve",
    "calculate_max_drawdown",
    "daily_pnl_series",
    "first_strategy_tag",
    "latest_daily_pnl",
]
