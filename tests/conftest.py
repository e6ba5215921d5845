"""Pytest fixtures and utilities for the prop firm tracker test suite."""
from datetime import date

import pytest

from proptrack.compliance.programs import get_program_rules
from proptrack.core.models import ProgramRules, TradeRecord
from proptrack.store.account_store import AccountStore


# =============================================================================
# Trade History Fixtures
# =============================================================================

@pytest.fixture
def simple_csv():
    """Minimal per-trade export: two trading days, one loser."""
    return (
        "profit,entry time\n"
        "100,2024-01-05\n"
        "-50,2024-01-05\n"
        "200,01/06/2024\n"
    )


@pytest.fixture
def ninjatrader_csv():
    """Per-trade export with quoting, currency symbols and a strategy column."""
    return (
        "Trade number,Instrument,Strategy,Profit,Cum. net profit,MAE,Entry time\n"
        '1,NQ 03-24,"Breakout, v2","$1,250.00","$1,250.00",($45.00),01/05/2024 9:31:00 AM\n'
        "2,NQ 03-24,,-$300.00,$950.00,,01/05/2024 11:02:00 AM\n"
        "3,NQ 03-24,Scalper,$500.00,\"$1,450.00\",$12.50,01/08/2024 10:15:00 AM\n"
    )


@pytest.fixture
def completed_orders_csv():
    """Multi-section export; one round trip per day, one canceled order."""
    return (
        "Account Summary\n"
        "Account,Balance,Realized P&L\n"
        "DEMO123,50000,0\n"
        "\n"
        "Completed Orders\n"
        "Account,Order ID,B/S,Contract,Product,Avg Fill Price,Qty To Fill,Status,Create Time (EDT)\n"
        "DEMO123,1,B,NQH4,NQ,17000.00,1,Filled,01/05/2024 09:30:00\n"
        "DEMO123,2,S,NQH4,NQ,17010.00,1,Filled,01/05/2024 09:45:00\n"
        "DEMO123,3,S,NQH4,NQ,17020.00,2,Filled,01/08/2024 10:00:00\n"
        "DEMO123,4,B,NQH4,NQ,17005.00,1,Canceled,01/08/2024 10:05:00\n"
        "DEMO123,5,B,NQH4,NQ,17025.00,2,Filled,01/08/2024 10:30:00\n"
    )


@pytest.fixture
def passing_csv():
    """Five trading days totalling 3,200 with no day below -1,000."""
    return (
        "profit,entry time\n"
        "800,2024-01-02\n"
        "-200,2024-01-03\n"
        "900,2024-01-04\n"
        "700,2024-01-05\n"
        "1000,2024-01-08\n"
    )


@pytest.fixture
def sample_trades():
    """Chronological trades: a winner, a loser, then a bigger winner."""
    return [
        TradeRecord(entry_date=date(2024, 1, 5), profit=100.0, row_index=0),
        TradeRecord(entry_date=date(2024, 1, 5), profit=-50.0, row_index=1),
        TradeRecord(entry_date=date(2024, 1, 6), profit=200.0, row_index=2),
    ]


# =============================================================================
# Program Fixtures
# =============================================================================

@pytest.fixture
def program_50k():
    """The 50K funding program preset."""
    return get_program_rules("50K")


@pytest.fixture
def strict_rules():
    """Program with a 10-day minimum and symmetric 2,000 limits."""
    return ProgramRules(
        name="TEST",
        account_size=50000.0,
        profit_target=3000.0,
        daily_loss_limit=-2000.0,
        max_drawdown_limit=-2000.0,
        minimum_trading_days=10,
        max_trading_days=30,
    )


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def store():
    """Empty account store not bound to a default program."""
    return AccountStore()


@pytest.fixture
def account(store):
    """Unbound account registered in the store."""
    return store.add_account(
        "Eval #1",
        prop_firm="Apex",
        platform="NinjaTrader",
        login="apex-001",
        server="Rithmic Paper",
        date_started=date(2024, 1, 2),
    )


@pytest.fixture
def program_account(store):
    """Account bound to the 50K program."""
    return store.add_account(
        "Topstep 50K",
        prop_firm="Topstep",
        platform="Tradovate",
        date_started=date(2024, 1, 2),
        program="50K",
    )
