"""
Broker export dialects.

Each dialect is a small strategy class recognized by its header signature:
- ninjatrader: one row per closed trade with a profit column
- completed_orders: multi-section account export whose "Completed Orders"
  block lists individual fills; profit is rebuilt from position accounting

New export layouts are supported by adding a dialect class to DIALECTS.
"""
import re
from typing import List, Optional, Tuple, Type

from proptrack.core.config import ingest_config
from proptrack.core.models import FillSide, TradeRecord
from proptrack.ingest.base import TradeHistoryDialect, TradeHistoryParseError
from proptrack.ingest.fields import (
    clean_lines,
    find_column,
    parse_optional_amount,
    parse_required_amount,
    parse_trade_date,
    read_csv_frame,
    read_header,
)

_SECTION_BREAK = re.compile(r"\r?\n[ \t]*\r?\n")


# =============================================================================
# Per-trade export
# =============================================================================

class NinjaTraderDialect(TradeHistoryDialect):
    """Per-trade performance export (NinjaTrader style)."""

    name = "ninjatrader"
    description = "One row per trade with Profit and Entry Time columns"

    PROFIT_COLUMNS = ("profit", "net profit")
    DATE_COLUMNS = ("entry time", "date")
    CUM_PROFIT_COLUMNS = ("cum. net profit", "cumulative net profit")
    MAE_COLUMNS = ("mae", "max adverse excursion")
    STRATEGY_COLUMNS = ("strategy",)

    def matches(self, raw_text: str) -> bool:
        lines = clean_lines(raw_text)
        if not lines:
            return False
        columns = read_header(lines[0])
        return (
            find_column(columns, self.PROFIT_COLUMNS) is not None
            and find_column(columns, self.DATE_COLUMNS) is not None
        )

    def parse(self, raw_text: str) -> List[TradeRecord]:
        lines = clean_lines(raw_text)
        if len(lines) < 2:
            raise TradeHistoryParseError(
                "CSV must contain at least a header row and one trade"
            )

        frame = read_csv_frame("\n".join(lines))
        columns = list(frame.columns)

        profit_col = find_column(columns, self.PROFIT_COLUMNS)
        date_col = find_column(columns, self.DATE_COLUMNS)
        if profit_col is None or date_col is None:
            raise TradeHistoryParseError("CSV must contain Profit and Entry Time columns")

        cum_profit_col = find_column(columns, self.CUM_PROFIT_COLUMNS)
        mae_col = find_column(columns, self.MAE_COLUMNS)
        strategy_col = find_column(columns, self.STRATEGY_COLUMNS)

        if frame.empty:
            raise TradeHistoryParseError("No valid trades found in CSV")

        trades = []
        for row_index, row in enumerate(frame.itertuples(index=False, name=None)):
            row_number = row_index + 1
            trades.append(
                TradeRecord(
                    entry_date=parse_trade_date(row[date_col]),
                    profit=parse_required_amount(row[profit_col], "profit", row_number),
                    strategy_tag=(
                        (row[strategy_col] or None) if strategy_col is not None else None
                    ),
                    row_index=row_index,
                    cumulative_profit=(
                        parse_optional_amount(row[cum_profit_col])
                        if cum_profit_col is not None else None
                    ),
                    mae=parse_optional_amount(row[mae_col]) if mae_col is not None else None,
                )
            )

        self.logger.debug("ingest.rows_parsed", rows=len(trades))
        return trades


# =============================================================================
# Completed-orders export
# =============================================================================

class _PositionBook:
    """Running single-instrument position used to realize profit from fills."""

    def __init__(self, point_value: float):
        self.point_value = point_value
        self.position = 0.0
        self.avg_entry_price = 0.0

    def fill(self, side: FillSide, quantity: float, price: float) -> Optional[float]:
        """
        Apply a fill.

        Returns:
            Realized profit if the fill reduced or closed the position, else None
        """
        signed_qty = quantity if side == FillSide.BUY else -quantity

        if self.position == 0 or (self.position > 0) == (signed_qty > 0):
            # Opening or adding: quantity-weighted average entry
            new_position = self.position + signed_qty
            self.avg_entry_price = (
                abs(self.position) * self.avg_entry_price + quantity * price
            ) / abs(new_position)
            self.position = new_position
            return None

        closing_qty = min(abs(self.position), quantity)
        if self.position > 0:
            realized = (price - self.avg_entry_price) * closing_qty * self.point_value
        else:
            realized = (self.avg_entry_price - price) * closing_qty * self.point_value

        self.position += signed_qty
        if abs(self.position) < 1e-9:
            self.position = 0.0
            self.avg_entry_price = 0.0
        elif quantity > closing_qty:
            # Flipped through flat; the remainder opens at this fill
            self.avg_entry_price = price

        return realized


class CompletedOrdersDialect(TradeHistoryDialect):
    """Account export with a Completed Orders section of individual fills.

    Only one instrument is modeled: every fill is valued with the same point
    value.
    """

    name = "completed_orders"
    description = "Multi-section export with a Completed Orders block of fills"

    SIGNATURE_COLUMNS = ("account", "status")
    STATUS_COLUMNS = ("status",)
    SIDE_COLUMNS = ("b/s", "buy/sell")
    PRICE_COLUMNS = ("avg fill price",)
    QUANTITY_COLUMNS = ("qty to fill",)
    TIME_COLUMNS = ("create time (edt)",)

    def __init__(
        self,
        point_value: Optional[float] = None,
        filled_status: Optional[str] = None,
    ):
        super().__init__()
        self.point_value = point_value if point_value is not None else ingest_config.point_value
        self.filled_status = filled_status or ingest_config.filled_status

    def matches(self, raw_text: str) -> bool:
        return self._find_orders_section(raw_text) is not None

    def parse(self, raw_text: str) -> List[TradeRecord]:
        section = self._find_orders_section(raw_text)
        if section is None:
            raise TradeHistoryParseError(
                "No section with Account and Status columns found"
            )

        frame = read_csv_frame(section)
        columns = list(frame.columns)

        status_col = find_column(columns, self.STATUS_COLUMNS)
        side_col = find_column(columns, self.SIDE_COLUMNS)
        price_col = find_column(columns, self.PRICE_COLUMNS)
        qty_col = find_column(columns, self.QUANTITY_COLUMNS)
        time_col = find_column(columns, self.TIME_COLUMNS)

        missing = [
            label for label, column in (
                ("Status", status_col),
                ("B/S", side_col),
                ("Avg Fill Price", price_col),
                ("Qty To Fill", qty_col),
                ("Create Time (EDT)", time_col),
            ) if column is None
        ]
        if missing:
            raise TradeHistoryParseError(
                f"Completed orders section is missing columns: {', '.join(missing)}"
            )

        filled = frame[frame.iloc[:, status_col] == self.filled_status]
        if filled.empty:
            raise TradeHistoryParseError("No valid filled trades found in CSV")

        book = _PositionBook(self.point_value)
        trades = []
        for row_index, row in zip(filled.index, filled.itertuples(index=False, name=None)):
            row_number = int(row_index) + 1
            side = self._parse_side(row[side_col], row_number)
            price = parse_required_amount(row[price_col], "avg fill price", row_number)
            quantity = parse_required_amount(row[qty_col], "qty to fill", row_number)
            if quantity <= 0:
                raise TradeHistoryParseError(
                    f"Invalid qty to fill value in row {row_number}: {row[qty_col]!r}"
                )
            entry_date = parse_trade_date(row[time_col])

            realized = book.fill(side, quantity, price)
            if realized is not None:
                trades.append(
                    TradeRecord(
                        entry_date=entry_date,
                        profit=realized,
                        row_index=int(row_index),
                    )
                )

        if not trades:
            raise TradeHistoryParseError("Filled orders never close a position")

        self.logger.debug(
            "ingest.fills_parsed",
            fills=len(filled),
            trades=len(trades),
            open_position=book.position,
        )
        return trades

    def _find_orders_section(self, raw_text: str) -> Optional[str]:
        """
        Return the CSV text of the section carrying the orders header.

        Sections with every order column win over earlier ones that only
        carry Account and Status, such as an account summary.
        """
        first_match = None
        for block in _SECTION_BREAK.split(raw_text or ""):
            lines = clean_lines(block)
            # A title line such as "Completed Orders" may precede the header
            for start in range(min(2, len(lines))):
                columns = read_header(lines[start])
                if all(name in columns for name in self.SIGNATURE_COLUMNS):
                    section = "\n".join(lines[start:])
                    if self._has_order_columns(columns):
                        return section
                    if first_match is None:
                        first_match = section
                    break
        return first_match

    def _has_order_columns(self, columns: List[str]) -> bool:
        return all(
            find_column(columns, candidates) is not None
            for candidates in (
                self.STATUS_COLUMNS,
                self.SIDE_COLUMNS,
                self.PRICE_COLUMNS,
                self.QUANTITY_COLUMNS,
                self.TIME_COLUMNS,
            )
        )

    @staticmethod
    def _parse_side(value: str, row_number: int) -> FillSide:
        text = (value or "").strip().upper()
        if text in ("B", "BUY"):
            return FillSide.BUY
        if text in ("S", "SELL"):
            return FillSide.SELL
        raise TradeHistoryParseError(f"Invalid B/S value in row {row_number}: {value!r}")


# =============================================================================
# Registry
# =============================================================================

DIALECTS: Tuple[Type[TradeHistoryDialect], ...] = (
    NinjaTraderDialect,
    CompletedOrdersDialect,
)


def get_dialect(name: str) -> TradeHistoryDialect:
    """Factory function to create a dialect by name."""
    for dialect_class in DIALECTS:
        if dialect_class.name == name.strip().lower():
            return dialect_class()
    known = ", ".join(d.name for d in DIALECTS)
    raise TradeHistoryParseError(f"Unknown CSV dialect {name!r} (known: {known})")


def detect_dialect(raw_text: str, hint: Optional[str] = None) -> TradeHistoryDialect:
    """
    Pick the dialect for an export.

    Args:
        raw_text: Complete file contents
        hint: Dialect name to use instead of header sniffing

    Raises:
        TradeHistoryParseError: If the text is empty or no dialect matches
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise TradeHistoryParseError("File appears to be empty or corrupted")

    hint = hint or ingest_config.default_dialect
    if hint:
        return get_dialect(hint)

    for dialect_class in DIALECTS:
        dialect = dialect_class()
        if dialect.matches(raw_text):
            return dialect

    raise TradeHistoryParseError(
        "CSV must contain Profit and Entry Time columns "
        "or a Completed Orders section with Account and Status columns"
    )


__all__ = [
    "NinjaTraderDialect",
    "CompletedOrdersDialect",
    "DIALECTS",
    "get_dialect",
    "detect_dialect",
]
