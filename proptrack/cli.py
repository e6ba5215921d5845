"""
Prop Firm Tracker - Command Line Interface

Usage:
    # Summarize a trade history export
    python main.py --import trades.csv

    # Evaluate it against a 50K program
    python main.py --import trades.csv --program 50K --start-date 2024-01-02

    # Force the dialect and print markdown
    python main.py --import orders.csv --dialect completed_orders --markdown

    # List program presets / check configuration
    python main.py --programs
    python main.py --check
"""

import argparse
import asyncio
from datetime import date
from pathlib import Path
from typing import List, Optional

import structlog

from proptrack.compliance.evaluator import evaluate_compliance
from proptrack.compliance.programs import PROGRAM_PRESETS, get_program_rules
from proptrack.core.config import tracker_config
from proptrack.core.models import initialize_metrics
from proptrack.ingest.base import TradeHistoryParseError
from proptrack.ingest.dialects import DIALECTS
from proptrack.ingest.normalizer import normalize_with_dialect
from proptrack.metrics.aggregator import aggregate_trades, latest_daily_pnl
from proptrack.reporting.report import TradeHistoryReport
from proptrack.utils.logging_config import setup_logging

logger = structlog.get_logger(__name__)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Prop firm evaluation account tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--import", dest="import_file", metavar="FILE",
        help="Trade history CSV export to analyze",
    )
    parser.add_argument(
        "--dialect",
        choices=[d.name for d in DIALECTS],
        help="Export dialect (sniffed from the header when omitted)",
    )
    parser.add_argument(
        "--program", help="Funding program preset to evaluate against (e.g. 50K)"
    )
    parser.add_argument(
        "--daily-pnl", type=float, default=None,
        help=(
            "Current day's P&L (defaults to the last trading day in the file; "
            "daily loss breaches on earlier days are not checked)"
        ),
    )
    parser.add_argument(
        "--start-date", type=_iso_date, default=None,
        help="Evaluation start date (defaults to the first trade date)",
    )
    parser.add_argument(
        "--as-of", type=_iso_date, default=None,
        help="Date to count elapsed evaluation days to (defaults to today)",
    )
    parser.add_argument("--markdown", action="store_true", help="Print markdown")
    parser.add_argument("--programs", action="store_true", help="List program presets")
    parser.add_argument("--check", action="store_true", help="Check configuration and exit")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def print_programs():
    """Print the program presets."""
    print("\n" + "=" * 60)
    print("           FUNDING PROGRAMS")
    print("=" * 60)
    for rules in PROGRAM_PRESETS.values():
        print(
            f"\n  {rules.name:<6} target ${rules.profit_target:,.0f}  "
            f"daily ${rules.daily_loss_limit:,.0f}  "
            f"drawdown ${rules.max_drawdown_limit:,.0f}  "
            f"days {rules.minimum_trading_days}-{rules.max_trading_days}"
        )
    print("\n" + "=" * 60)


def print_config_check() -> bool:
    """Print configuration issues; True if the configuration is valid."""
    result = tracker_config.validate_configuration()
    print("\n" + "=" * 60)
    print("           CONFIGURATION CHECK")
    print("=" * 60)
    if result["valid"]:
        print("\n✓ Configuration is valid")
    else:
        print("\n✗ Configuration errors:")
        for issue in result["issues"]:
            print(f"   - {issue}")
    print(f"\nEnvironment: {tracker_config.system.environment}")
    print(f"Point Value: {tracker_config.ingest.point_value}")
    print(f"Default Program: {tracker_config.program.default_program or '-'}")
    print("\n" + "=" * 60)
    return result["valid"]


async def run_import(args: argparse.Namespace) -> int:
    """Analyze one export and print its report."""
    path = Path(args.import_file)
    try:
        raw_text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except OSError as e:
        print(f"\n✗ Could not read {path}: {e}")
        return 1

    try:
        dialect_name, trades = normalize_with_dialect(raw_text, args.dialect)
    except TradeHistoryParseError as e:
        logger.warning("cli.import_failed", file=str(path), error=e.reason)
        print(f"\n✗ {e}")
        return 1

    summary = aggregate_trades(trades, dialect=dialect_name)

    compliance = None
    program = args.program or tracker_config.program.default_program
    if program:
        rules = get_program_rules(program)
        metrics = initialize_metrics(rules).model_copy(update={
            "total_profit": summary.total_profit,
            "win_rate": summary.win_rate,
            "drawdown": summary.max_drawdown,
            "trading_days": summary.trading_days,
        })
        daily_pnl = args.daily_pnl if args.daily_pnl is not None else latest_daily_pnl(trades)
        compliance = evaluate_compliance(
            metrics,
            rules,
            daily_pnl,
            date_started=args.start_date or summary.first_trade_date,
            as_of=args.as_of,
        )

    report = TradeHistoryReport(summary, trades, compliance)
    if args.markdown:
        print(report.generate_markdown_report())
    else:
        report.print_full_report()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level)

    if args.check:
        return 0 if print_config_check() else 1

    if args.programs:
        print_programs()
        return 0

    if not args.import_file:
        parser.print_help()
        return 2

    try:
        return asyncio.run(run_import(args))
    except ValueError as e:
        print(f"\n✗ {e}")
        return 1
