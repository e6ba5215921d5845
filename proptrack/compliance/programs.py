"""Funding program presets.

Evaluation tiers as commonly offered for futures evaluations; every tier
allows 30 calendar days and requires 5 trading days.
"""
from typing import Dict

from proptrack.core.models import ProgramRules

PROGRAM_PRESETS: Dict[str, ProgramRules] = {
    "50K": ProgramRules(
        name="50K",
        account_size=50_000.0,
        profit_target=3_000.0,
        daily_loss_limit=-1_000.0,
        max_drawdown_limit=-2_000.0,
        minimum_trading_days=5,
        max_trading_days=30,
    ),
    "100K": ProgramRules(
        name="100K",
        account_size=100_000.0,
        profit_target=6_000.0,
        daily_loss_limit=-2_000.0,
        max_drawdown_limit=-3_000.0,
        minimum_trading_days=5,
        max_trading_days=30,
    ),
    "150K": ProgramRules(
        name="150K",
        account_size=150_000.0,
        profit_target=9_000.0,
        daily_loss_limit=-3_000.0,
        max_drawdown_limit=-4_500.0,
        minimum_trading_days=5,
        max_trading_days=30,
    ),
}


def get_program_rules(name: str) -> ProgramRules:
    """
    Look up a program preset by name (case-insensitive).

    Raises:
        ValueError: If no preset has that name
    """
    rules = PROGRAM_PRESETS.get(name.strip().upper())
    if rules is None:
        known = ", ".join(PROGRAM_PRESETS)
        raise ValueError(f"Unknown funding program '{name}' (known: {known})")
    return rules
