"""Integration tests for the import pipeline and command line interface."""
import pytest
from datetime import date

from proptrack.cli import build_parser, main
from proptrack.core.models import AccountStatus
from proptrack.reporting import AccountsReport
from proptrack.store import AccountStore


# =============================================================================
# Store Pipeline
# =============================================================================

class TestStorePipeline:
    """Test registering, importing and reporting end to end."""

    @pytest.mark.asyncio
    async def test_two_dialects_into_one_portfolio(
        self, tmp_path, ninjatrader_csv, completed_orders_csv
    ):
        """Test both export dialects feed the same portfolio."""
        store = AccountStore()
        ninja = store.add_account("Ninja Eval", prop_firm="Apex", program="50K")
        orders = store.add_account("Orders Eval", prop_firm="Topstep", program="50K")

        ninja_file = tmp_path / "ninja.csv"
        ninja_file.write_text(ninjatrader_csv, encoding="utf-8")

        async def read_ninja():
            return ninja_file.read_text(encoding="utf-8")

        await store.import_trade_history_file(
            ninja.id, read_ninja, daily_pnl=500.0, as_of=date(2024, 1, 10)
        )
        store.import_trade_history(
            orders.id, completed_orders_csv, daily_pnl=-200.0, as_of=date(2024, 1, 10)
        )

        ninja = store.get_account(ninja.id)
        orders = store.get_account(orders.id)

        assert ninja.metrics.total_profit == 1450.0
        assert ninja.strategy == "Breakout, v2"
        assert ninja.metrics.days_remaining == 25
        assert ninja.status == AccountStatus.IN_PROGRESS
        assert orders.metrics.total_profit == 0.0
        assert orders.metrics.distance_from_daily_limit == 800.0
        assert orders.status == AccountStatus.IN_PROGRESS

        summary = store.summary()
        assert summary.total_accounts == 2
        assert summary.total_profit == 1450.0

        markdown = AccountsReport(store.list_accounts()).generate_markdown_report()
        assert "| Apex | 1 | 0 | 0 | 1 | $1,450.00 |" in markdown


# =============================================================================
# Command Line Interface
# =============================================================================

class TestCommandLine:
    """Test the command line entry point."""

    @pytest.fixture
    def passing_file(self, tmp_path, passing_csv):
        path = tmp_path / "trades.csv"
        path.write_text(passing_csv, encoding="utf-8")
        return path

    def test_parser_dialect_choices(self):
        """Test the dialect flag only accepts known dialects."""
        parser = build_parser()
        args = parser.parse_args(["--import", "x.csv", "--dialect", "completed_orders"])
        assert args.import_file == "x.csv"
        with pytest.raises(SystemExit):
            parser.parse_args(["--dialect", "metatrader"])

    def test_daily_pnl_help_names_its_scope(self):
        """Test the help says only the current day's loss is checked."""
        help_text = " ".join(build_parser().format_help().split())
        assert "daily loss breaches on earlier days are not checked" in help_text

    def test_import_summary(self, passing_file, capsys):
        """Test a plain import prints the summary."""
        assert main(["--import", str(passing_file)]) == 0
        out = capsys.readouterr().out

        assert "TRADE HISTORY REPORT" in out
        assert "$3,200.00" in out
        assert "PROGRAM COMPLIANCE" not in out

    def test_import_with_program(self, passing_file, capsys):
        """Test evaluating an import against a program."""
        code = main([
            "--import", str(passing_file),
            "--program", "50k",
            "--daily-pnl", "0",
            "--as-of", "2024-01-10",
            "--markdown",
        ])
        out = capsys.readouterr().out

        assert code == 0
        assert "| Status | Passed |" in out
        assert "| Days Remaining | 22 |" in out

    def test_last_day_is_default_daily_pnl(self, tmp_path, capsys):
        """Test the last trading day's P&L is checked when none is given."""
        path = tmp_path / "blowup.csv"
        path.write_text("profit,entry time\n500,2024-01-02\n-1200,2024-01-03\n")

        code = main([
            "--import", str(path), "--program", "50K",
            "--as-of", "2024-01-04", "--markdown",
        ])
        out = capsys.readouterr().out

        assert code == 0
        assert "| Status | Failed |" in out
        assert "| Breaches | daily_loss_limit |" in out

    def test_unparseable_file(self, tmp_path, capsys):
        """Test a parse failure exits with status 1."""
        path = tmp_path / "bad.csv"
        path.write_text("profit,entry time\nabc,2024-01-02\n")

        assert main(["--import", str(path)]) == 1
        assert "Failed to parse CSV file" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        """Test an unreadable file exits with status 1."""
        assert main(["--import", str(tmp_path / "missing.csv")]) == 1
        assert "Could not read" in capsys.readouterr().out

    def test_unknown_program(self, passing_file, capsys):
        """Test an unknown program exits with status 1."""
        assert main(["--import", str(passing_file), "--program", "75K"]) == 1
        assert "Unknown funding program" in capsys.readouterr().out

    def test_programs_listing(self, capsys):
        """Test the preset listing."""
        assert main(["--programs"]) == 0
        out = capsys.readouterr().out
        assert "150K" in out
        assert "$9,000" in out

    def test_no_arguments(self, capsys):
        """Test help is printed without an import file."""
        assert main([]) == 2
        assert "--import" in capsys.readouterr().out
