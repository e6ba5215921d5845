"""In-memory account store.

Holds the registered evaluation accounts and replaces an account's metrics
wholesale whenever a trade history is imported or a metric is edited.
Nothing is persisted; state lives for the lifetime of the store.
"""
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union
from uuid import UUID

import structlog

from proptrack.compliance.evaluator import evaluate_compliance
from proptrack.compliance.programs import get_program_rules
from proptrack.core.config import program_config
from proptrack.core.models import (
    AccountMetrics,
    AccountsSummary,
    AccountStatus,
    Platform,
    StrategyFile,
    TradeRecord,
    TradingAccount,
    calculate_progress,
    initialize_metrics,
)
from proptrack.ingest.normalizer import normalize_with_dialect
from proptrack.metrics.aggregator import aggregate_trades

logger = structlog.get_logger(__name__)

AccountId = Union[UUID, str]


class AccountStore:
    """
    Collection of trading accounts keyed by ID, in registration order.

    Every update builds a complete new account object before it is stored,
    so a failing import or edit leaves the previous state in place.
    Concurrent updates of the same account are last-write-wins.
    """

    # Fields the edit form may change
    EDITABLE_FIELDS = frozenset({
        "account_name", "prop_firm", "platform", "login", "server",
        "strategy", "strategy_file", "date_started", "status",
    })

    def __init__(self, default_program: Optional[str] = None):
        self._accounts: Dict[UUID, TradingAccount] = {}
        self.default_program = default_program or program_config.default_program

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[TradingAccount]:
        return iter(list(self._accounts.values()))

    def __contains__(self, account_id: AccountId) -> bool:
        try:
            return self._key(account_id) in self._accounts
        except ValueError:
            return False

    # === Registration and lookup ===

    def add_account(
        self,
        account_name: str,
        prop_firm: str = "",
        platform: Union[Platform, str] = Platform.NINJATRADER,
        login: str = "",
        server: str = "",
        strategy: str = "",
        date_started: Optional[date] = None,
        strategy_file: Optional[StrategyFile] = None,
        program: Optional[str] = None,
    ) -> TradingAccount:
        """
        Register a new account in the In Progress state.

        Args:
            account_name: Display name
            prop_firm: Firm running the evaluation
            platform: Trading platform
            login: Platform login
            server: Platform server
            strategy: Strategy name
            date_started: Evaluation start (today when None)
            strategy_file: Attached strategy source
            program: Funding program preset to evaluate against

        Raises:
            ValueError: If the program is unknown or a field is invalid
        """
        program = program or self.default_program
        if program:
            rules = get_program_rules(program)
            program = rules.name
            metrics = initialize_metrics(rules)
        else:
            balance = program_config.starting_balance
            metrics = AccountMetrics(
                profit_target=program_config.default_profit_target,
                starting_balance=balance,
                current_balance=balance,
                high_water_mark=balance,
            )

        fields: Dict[str, Any] = dict(
            account_name=account_name,
            prop_firm=prop_firm,
            platform=platform,
            login=login,
            server=server,
            strategy=strategy,
            strategy_file=strategy_file,
            program=program,
            metrics=metrics,
        )
        if date_started is not None:
            fields["date_started"] = date_started

        account = TradingAccount(**fields)
        self._accounts[account.id] = account

        logger.info(
            "store.account_added",
            account_id=str(account.id),
            account_name=account.account_name,
            prop_firm=account.prop_firm,
            program=program,
        )
        return account

    def get_account(self, account_id: AccountId) -> TradingAccount:
        """
        Return an account by ID.

        Raises:
            KeyError: If no account has that ID
        """
        try:
            return self._accounts[self._key(account_id)]
        except (KeyError, ValueError):
            raise KeyError(f"Unknown account: {account_id}")

    def list_accounts(self) -> List[TradingAccount]:
        return list(self._accounts.values())

    # === Edits ===

    def update_account(self, account_id: AccountId, **changes: Any) -> TradingAccount:
        """
        Apply edit-form changes to an account.

        Raises:
            KeyError: If the account does not exist
            ValueError: If a field is not editable or a value is invalid
        """
        account = self.get_account(account_id)

        unknown = set(changes) - self.EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {', '.join(sorted(unknown))}")

        data = account.model_dump()
        data.update(changes)
        updated = TradingAccount.model_validate(data)
        self._accounts[account.id] = updated

        logger.info(
            "store.account_updated",
            account_id=str(account.id),
            fields=sorted(changes),
        )
        return updated

    def set_profit_target(self, account_id: AccountId, target: float) -> TradingAccount:
        """
        Change an account's profit target.

        Raises:
            ValueError: If the target is not a positive number
        """
        if target is None or not target > 0:
            raise ValueError(f"Profit target must be positive, got {target}")
        return self.update_metrics(account_id, {"profit_target": float(target)})

    def update_metrics(
        self,
        account_id: AccountId,
        changes: Dict[str, Any],
        first_trade_date: Optional[date] = None,
        daily_pnl: Optional[float] = None,
        as_of: Optional[date] = None,
    ) -> TradingAccount:
        """
        Merge metric changes and replace the account's metrics.

        Progress is recomputed from profit and target. Program-bound accounts
        are re-evaluated against their program rules.

        Args:
            account_id: Account to update
            changes: Metric fields to overwrite
            first_trade_date: Becomes the account's start date when given
            daily_pnl: Current trading day's P&L (previous value when None)
            as_of: Date compliance counts elapsed days to

        Raises:
            KeyError: If the account does not exist
            ValueError: If the merged metrics are invalid
        """
        account = self.get_account(account_id)

        merged = account.metrics.model_dump()
        merged.update(changes)
        merged["current_progress"] = calculate_progress(
            merged["total_profit"], merged["profit_target"]
        )
        if daily_pnl is not None:
            merged["daily_pnl"] = daily_pnl

        date_started = first_trade_date or account.date_started
        status = account.status

        if account.program:
            rules = get_program_rules(account.program).model_copy(
                update={"profit_target": merged["profit_target"]}
            )
            state = evaluate_compliance(
                AccountMetrics.model_validate(merged),
                rules,
                merged["daily_pnl"],
                date_started=date_started,
                as_of=as_of,
                current_status=account.status,
            )
            merged.update(state.model_dump(exclude={"status", "breaches"}))
            status = state.status

        metrics = AccountMetrics.model_validate(merged)
        updated = account.model_copy(
            update={"metrics": metrics, "date_started": date_started, "status": status}
        )
        self._accounts[account.id] = updated

        logger.info(
            "store.metrics_replaced",
            account_id=str(account.id),
            total_profit=round(metrics.total_profit, 2),
            progress=round(metrics.current_progress, 1),
            status=status.value,
        )
        return updated

    # === Trade history import ===

    def import_trades(
        self,
        account_id: AccountId,
        trades: Sequence[TradeRecord],
        dialect: Optional[str] = None,
        daily_pnl: Optional[float] = None,
        as_of: Optional[date] = None,
    ) -> TradingAccount:
        """Replace an account's metrics with those of a normalized trade list."""
        self.get_account(account_id)
        summary = aggregate_trades(trades, dialect=dialect)

        updated = self.update_metrics(
            account_id,
            {
                "total_profit": summary.total_profit,
                "win_rate": summary.win_rate,
                "drawdown": summary.max_drawdown,
                "trading_days": summary.trading_days,
            },
            first_trade_date=summary.first_trade_date,
            daily_pnl=daily_pnl,
            as_of=as_of,
        )

        if summary.strategy_tag and not updated.strategy:
            updated = updated.model_copy(update={"strategy": summary.strategy_tag})
            self._accounts[updated.id] = updated

        return updated

    def import_trade_history(
        self,
        account_id: AccountId,
        raw_text: str,
        dialect_hint: Optional[str] = None,
        daily_pnl: Optional[float] = None,
        as_of: Optional[date] = None,
    ) -> TradingAccount:
        """
        Parse a broker export and replace the account's metrics.

        Raises:
            KeyError: If the account does not exist
            TradeHistoryParseError: If the export cannot be parsed; the
                account is left untouched
        """
        self.get_account(account_id)
        dialect_name, trades = normalize_with_dialect(raw_text, dialect_hint)
        return self.import_trades(
            account_id, trades, dialect=dialect_name, daily_pnl=daily_pnl, as_of=as_of
        )

    async def import_trade_history_file(
        self,
        account_id: AccountId,
        read_text: Callable[[], Awaitable[str]],
        dialect_hint: Optional[str] = None,
        daily_pnl: Optional[float] = None,
        as_of: Optional[date] = None,
    ) -> TradingAccount:
        """
        Read an export through an async reader, then import it.

        The read is the only suspension point; parsing and the metrics
        replacement run synchronously after it completes.
        """
        try:
            raw_text = await read_text()
            return self.import_trade_history(
                account_id, raw_text, dialect_hint=dialect_hint,
                daily_pnl=daily_pnl, as_of=as_of,
            )
        except Exception as e:
            logger.warning(
                "store.import_failed",
                account_id=str(account_id),
                error=str(e),
            )
            raise

    # === Views ===

    def export_strategy_file(self, account_id: AccountId) -> Tuple[str, str]:
        """
        Return the attached strategy file as (name, content).

        Raises:
            ValueError: If the account has no strategy file
        """
        account = self.get_account(account_id)
        if account.strategy_file is None:
            raise ValueError(f"Account '{account.account_name}' has no strategy file")
        return account.strategy_file.name, account.strategy_file.content

    def form_options(self) -> Dict[str, List[str]]:
        """Distinct values already used, for pre-filling the account form."""
        def distinct(attr: str) -> List[str]:
            values = (getattr(a, attr) for a in self._accounts.values())
            return list(dict.fromkeys(v for v in values if v))

        return {
            "prop_firms": distinct("prop_firm"),
            "logins": distinct("login"),
            "servers": distinct("server"),
            "strategies": distinct("strategy"),
        }

    def summary(self) -> AccountsSummary:
        """Totals and status counts across all accounts."""
        accounts = list(self._accounts.values())
        if not accounts:
            return AccountsSummary()

        return AccountsSummary(
            total_profit=sum(a.metrics.total_profit for a in accounts),
            total_accounts=len(accounts),
            active_accounts=sum(1 for a in accounts if a.status == AccountStatus.IN_PROGRESS),
            passed_accounts=sum(1 for a in accounts if a.status == AccountStatus.PASSED),
            failed_accounts=sum(1 for a in accounts if a.status == AccountStatus.FAILED),
            average_progress=(
                sum(a.metrics.current_progress for a in accounts) / len(accounts)
            ),
        )

    @staticmethod
    def _key(account_id: AccountId) -> UUID:
        if isinstance(account_id, UUID):
            return account_id
        return UUID(str(account_id))
