"""Data models for the prop firm account tracker.

This module defines the data structures that flow through the import pipeline:
- TradeRecord: one normalized trade parsed from a broker export
- AccountMetricsSummary: aggregate statistics over a trade list
- ProgramRules: a funding program's profit target and risk limits
- AccountComplianceState: derived risk/progress figures and evaluation status
- TradingAccount: a registered evaluation account and its metrics

Monetary values are floats in account currency.
Trade dates are time-zone naive calendar dates (the UTC day of the trade).
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utc_today() -> date:
    """Current calendar day in UTC, the day elapsed evaluation days count to."""
    return datetime.now(timezone.utc).date()


# =============================================================================
# Enums
# =============================================================================

class AccountStatus(str, Enum):
    """Evaluation status of an account.

    IN_PROGRESS is the initial state; PASSED and FAILED are terminal.
    """
    IN_PROGRESS = "In Progress"
    PASSED = "Passed"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        """True once the evaluation is decided."""
        return self is not AccountStatus.IN_PROGRESS


class Platform(str, Enum):
    """Trading platforms an account can be registered on."""
    MT4 = "MT4"
    MT5 = "MT5"
    TRADOVATE = "Tradovate"
    RITHMIC = "Rithmic"
    NINJATRADER = "NinjaTrader"


class FillSide(str, Enum):
    """Side of an order fill in a completed-orders export."""
    BUY = "B"
    SELL = "S"


# =============================================================================
# Trade Models
# =============================================================================

class TradeRecord(BaseModel):
    """A single normalized trade.

    Attributes:
        entry_date: Calendar date the trade was entered
        profit: Signed realized profit in account currency
        strategy_tag: Strategy label carried by the export, if any
        row_index: Zero-based position of the source row in the file
        cumulative_profit: Running net profit reported by the export
        mae: Maximum adverse excursion reported by the export
    """
    model_config = ConfigDict(frozen=True)

    entry_date: date = Field(..., description="Trade entry date")
    profit: float = Field(..., description="Signed realized profit")
    strategy_tag: Optional[str] = Field(default=None, description="Strategy label")
    row_index: int = Field(default=0, ge=0, description="Source row position")
    cumulative_profit: Optional[float] = Field(default=None, description="Cum. net profit")
    mae: Optional[float] = Field(default=None, description="Max adverse excursion")

    @property
    def is_winner(self) -> bool:
        """True if the trade made money."""
        return self.profit > 0


class AccountMetricsSummary(BaseModel):
    """Summary statistics derived from a trade list."""

    total_profit: float = Field(..., description="Sum of all trade profits")
    win_rate: float = Field(..., ge=0, le=100, description="Winning trades, percent")
    max_drawdown: float = Field(..., ge=0, description="Worst peak-to-trough decline")
    trading_days: int = Field(..., ge=1, description="Distinct trade dates")
    first_trade_date: date = Field(..., description="Earliest trade date")
    strategy_tag: Optional[str] = Field(default=None, description="First strategy label")
    trade_count: int = Field(..., ge=1, description="Number of trades")
    dialect: Optional[str] = Field(default=None, description="Source export dialect")

    @model_validator(mode="after")
    def trading_days_within_trade_count(self) -> "AccountMetricsSummary":
        """Validate that trading days never exceed the number of trades."""
        if self.trading_days > self.trade_count:
            raise ValueError("trading_days cannot exceed trade_count")
        return self


# =============================================================================
# Program Models
# =============================================================================

class ProgramRules(BaseModel):
    """Rule set of a funding program (e.g. a 50K evaluation).

    Loss limits are expressed as negative amounts.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Program name")
    account_size: float = Field(default=50000.0, gt=0, description="Starting balance")
    profit_target: float = Field(..., gt=0, description="Profit needed to pass")
    daily_loss_limit: float = Field(..., lt=0, description="Worst allowed daily P&L")
    max_drawdown_limit: float = Field(..., lt=0, description="Worst allowed drawdown")
    minimum_trading_days: int = Field(default=0, ge=0, description="Days required to pass")
    max_trading_days: int = Field(..., ge=1, description="Evaluation length in days")

    @model_validator(mode="after")
    def max_days_cover_minimum(self) -> "ProgramRules":
        """Validate the evaluation window can fit the minimum trading days."""
        if self.max_trading_days < self.minimum_trading_days:
            raise ValueError("max_trading_days must be >= minimum_trading_days")
        return self


class AccountComplianceState(BaseModel):
    """Derived risk and progress figures for a program-bound account."""

    current_balance: float
    high_water_mark: float
    daily_pnl: float
    days_remaining: int = Field(..., ge=0)
    distance_from_target: float
    distance_from_daily_limit: float
    distance_from_drawdown: float
    current_progress: float = Field(..., ge=0, le=100)
    completed_trading_days: int = Field(..., ge=0)
    status: AccountStatus = AccountStatus.IN_PROGRESS
    breaches: List[str] = Field(default_factory=list, description="Failure rules fired")

    @property
    def is_failed(self) -> bool:
        return self.status == AccountStatus.FAILED

    @property
    def is_passed(self) -> bool:
        return self.status == AccountStatus.PASSED


# =============================================================================
# Account Models
# =============================================================================

class AccountMetrics(BaseModel):
    """Metrics owned by a trading account.

    Replaced wholesale on every import or manual edit.
    """

    total_profit: float = 0.0
    win_rate: float = Field(default=0.0, ge=0, le=100)
    drawdown: float = Field(default=0.0, ge=0)
    trading_days: int = Field(default=0, ge=0)
    profit_target: float = Field(default=3000.0, gt=0)
    current_progress: float = Field(default=0.0, ge=0, le=100)

    # Program tracking
    starting_balance: float = 50000.0
    current_balance: float = 50000.0
    high_water_mark: float = 50000.0
    daily_pnl: float = 0.0
    days_remaining: Optional[int] = None
    distance_from_target: Optional[float] = None
    distance_from_daily_limit: Optional[float] = None
    distance_from_drawdown: Optional[float] = None
    daily_loss_limit: Optional[float] = None
    max_drawdown_limit: Optional[float] = None
    minimum_trading_days: Optional[int] = None
    completed_trading_days: int = Field(default=0, ge=0)


class StrategyFile(BaseModel):
    """Strategy source attached to an account."""

    name: str = Field(..., min_length=1)
    content: str = ""


class TradingAccount(BaseModel):
    """A registered prop firm evaluation account.

    Attributes:
        id: Internal account ID (UUID)
        account_name: Display name
        prop_firm: Firm running the evaluation
        platform: Trading platform
        login: Platform login
        server: Platform server
        strategy: Strategy name
        strategy_file: Optional attached strategy source
        date_started: Evaluation start date
        status: Evaluation status
        program: Funding program name the account is bound to
        metrics: Current metrics
    """

    id: UUID = Field(default_factory=uuid4)
    account_name: str = Field(..., min_length=1)
    prop_firm: str = ""
    platform: Platform = Platform.NINJATRADER
    login: str = ""
    server: str = ""
    strategy: str = ""
    strategy_file: Optional[StrategyFile] = None
    date_started: date = Field(default_factory=utc_today)
    status: AccountStatus = AccountStatus.IN_PROGRESS
    program: Optional[str] = None
    metrics: AccountMetrics = Field(default_factory=AccountMetrics)

    @field_validator("account_name")
    @classmethod
    def strip_account_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        if not v.strip():
            raise ValueError("Account name must not be blank")
        return v.strip()


class AccountsSummary(BaseModel):
    """Portfolio-level summary over all tracked accounts."""

    total_profit: float = 0.0
    total_accounts: int = 0
    active_accounts: int = 0
    passed_accounts: int = 0
    failed_accounts: int = 0
    average_progress: float = 0.0


# =============================================================================
# Factory Functions
# =============================================================================

def initialize_metrics(rules: ProgramRules) -> AccountMetrics:
    """Build the metrics of a fresh account bound to a funding program.

    Args:
        rules: Program rule set

    Returns:
        Metrics with no trading activity and full headroom on every limit
    """
    return AccountMetrics(
        profit_target=rules.profit_target,
        starting_balance=rules.account_size,
        current_balance=rules.account_size,
        high_water_mark=rules.account_size,
        days_remaining=rules.max_trading_days,
        distance_from_target=rules.profit_target,
        distance_from_daily_limit=abs(rules.daily_loss_limit),
        distance_from_drawdown=abs(rules.max_drawdown_limit),
        daily_loss_limit=rules.daily_loss_limit,
        max_drawdown_limit=rules.max_drawdown_limit,
        minimum_trading_days=rules.minimum_trading_days,
    )


def calculate_progress(total_profit: float, profit_target: float) -> float:
    """Percentage of the profit target reached, clamped to [0, 100]."""
    progress = total_profit / profit_target * 100
    return min(100.0, max(0.0, progress))
