"""Trade history ingestion.

Turns broker CSV exports into normalized trade records:
- Header sniffing across the supported export dialects
- Quote-aware CSV reading and tolerant numeric/date parsing
- Position accounting for fill-level exports

Usage:
    from proptrack.ingest import parse_trade_history

    summary = parse_trade_history(raw_text)
    print(summary.total_profit, summary.win_rate)
"""

from proptrack.ingest.base import TradeHistoryDialect, TradeHistoryParseError
from proptrack.ingest.dialects import (
    DIALECTS,
    CompletedOrdersDialect,
    NinjaTraderDialect,
    detect_dialect,
    get_dialect,
)
from proptrack.ingest.normalizer import (
    normalize_trade_history,
    normalize_with_dialect,
    parse_trade_history,
    sort_trades,
)

__all__ = [
    "TradeHistoryDialect",
    "TradeHistoryParseError",
    "NinjaTraderDialect",
    "CompletedOrdersDialect",
    "DIALECTS",
    "detect_dialect",
    "get_dialect",
    "normalize_trade_history",
    "normalize_with_dialect",
    "parse_trade_history",
    "sort_trades",
]
