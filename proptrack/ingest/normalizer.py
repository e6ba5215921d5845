"""Trade history import pipeline: raw export text to normalized trades and metrics."""
from typing import List, Optional, Tuple

import structlog

from proptrack.core.models import AccountMetricsSummary, TradeRecord
from proptrack.ingest.base import TradeHistoryParseError
from proptrack.ingest.dialects import detect_dialect
from proptrack.metrics.aggregator import aggregate_trades

logger = structlog.get_logger(__name__)


def sort_trades(trades: List[TradeRecord]) -> List[TradeRecord]:
    """Order trades by entry date; same-day trades keep their file order."""
    return sorted(trades, key=lambda t: (t.entry_date, t.row_index))


def normalize_with_dialect(
    raw_text: str, dialect_hint: Optional[str] = None
) -> Tuple[str, List[TradeRecord]]:
    """
    Parse an export and return the dialect name with its sorted trades.

    Raises:
        TradeHistoryParseError: If the export cannot be parsed completely
    """
    dialect = detect_dialect(raw_text, dialect_hint)
    logger.debug("ingest.dialect_detected", dialect=dialect.name, hinted=bool(dialect_hint))

    trades = dialect.parse(raw_text)
    if not trades:
        raise TradeHistoryParseError("No valid trades found in CSV")

    return dialect.name, sort_trades(trades)


def normalize_trade_history(
    raw_text: str, dialect_hint: Optional[str] = None
) -> List[TradeRecord]:
    """
    Parse an export into trades sorted by entry date ascending.

    Args:
        raw_text: Complete CSV file contents
        dialect_hint: Dialect name to skip header sniffing

    Raises:
        TradeHistoryParseError: If the export cannot be parsed completely
    """
    _, trades = normalize_with_dialect(raw_text, dialect_hint)
    return trades


def parse_trade_history(
    raw_text: str, dialect_hint: Optional[str] = None
) -> AccountMetricsSummary:
    """
    Parse an export and summarize its trades.

    Args:
        raw_text: Complete CSV file contents
        dialect_hint: Dialect name to skip header sniffing

    Returns:
        AccountMetricsSummary over every trade in the file

    Raises:
        TradeHistoryParseError: If the export cannot be parsed completely
    """
    dialect_name, trades = normalize_with_dialect(raw_text, dialect_hint)
    summary = aggregate_trades(trades, dialect=dialect_name)

    logger.info(
        "ingest.trade_history_parsed",
        dialect=dialect_name,
        trades=summary.trade_count,
        trading_days=summary.trading_days,
        first_trade_date=summary.first_trade_date.isoformat(),
    )
    return summary
