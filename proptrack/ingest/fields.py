"""Field-level parsing shared by the export dialects."""
import io
import math
import re
from datetime import date
from typing import Iterable, List, Optional

import pandas as pd

from proptrack.ingest.base import TradeHistoryParseError

_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_AMOUNT_NOISE = re.compile(r"[$,()]")


def clean_lines(raw_text: str) -> List[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def read_csv_frame(csv_text: str) -> pd.DataFrame:
    """
    Read CSV text into a frame of trimmed strings with lower-cased headers.

    Fields may be double-quoted and contain commas inside the quotes.
    Short rows are padded with empty strings.

    Raises:
        TradeHistoryParseError: If the text is empty or not valid CSV
    """
    try:
        frame = pd.read_csv(
            io.StringIO(csv_text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
        )
    except pd.errors.EmptyDataError:
        raise TradeHistoryParseError("CSV file is empty")
    except pd.errors.ParserError as e:
        raise TradeHistoryParseError(f"Malformed CSV: {e}")

    frame = frame.fillna("")
    if not frame.empty:
        frame = frame.apply(lambda column: column.str.strip())
    # Headers differing only in case collapse to one name; read such frames by position
    frame.columns = [str(column).strip().lower() for column in frame.columns]
    return frame


def read_header(csv_line: str) -> List[str]:
    """Return the lower-cased column names of a single header line."""
    try:
        frame = pd.read_csv(io.StringIO(csv_line), dtype=str, nrows=0, index_col=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError):
        return []
    return [str(column).strip().lower() for column in frame.columns]


def find_column(columns: Iterable[str], candidates: Iterable[str]) -> Optional[int]:
    """Return the position of the first header column named one of the candidates."""
    candidates = set(candidates)
    for position, column in enumerate(columns):
        if column in candidates:
            return position
    return None


def parse_trade_date(value: str) -> date:
    """
    Parse a trade date in MM/DD/YYYY or YYYY-MM-DD form.

    Anything after the first space (a time of day) is ignored.

    Raises:
        TradeHistoryParseError: If the format is unknown or the date invalid
    """
    text = (value or "").strip().split(" ")[0]

    match = _US_DATE.match(text)
    if match:
        month, day, year = (int(part) for part in match.groups())
    else:
        match = _ISO_DATE.match(text)
        if not match:
            raise TradeHistoryParseError(f"Invalid date format in CSV: {value!r}")
        year, month, day = (int(part) for part in match.groups())

    try:
        return date(year, month, day)
    except ValueError:
        raise TradeHistoryParseError(f"Invalid date format in CSV: {value!r}")


def parse_amount(value: str) -> float:
    """Parse a money or quantity field; NaN when unparseable."""
    text = _AMOUNT_NOISE.sub("", value or "").strip()
    try:
        return float(text)
    except ValueError:
        return math.nan


def parse_optional_amount(value: str) -> float:
    """Parse an optional numeric field, treating blanks and junk as zero."""
    amount = parse_amount(value)
    return 0.0 if math.isnan(amount) else amount


def parse_required_amount(value: str, field: str, row_number: int) -> float:
    """
    Parse a numeric field the trade cannot do without.

    Raises:
        TradeHistoryParseError: If the value does not parse to a number
    """
    amount = parse_amount(value)
    if math.isnan(amount) or math.isinf(amount):
        raise TradeHistoryParseError(
            f"Invalid {field} value in row {row_number}: {value!r}"
        )
    return amount
