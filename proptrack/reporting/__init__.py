"""Console and markdown reports."""

from proptrack.reporting.report import AccountsReport, TradeHistoryReport

__all__ = ["AccountsReport", "TradeHistoryReport"]
