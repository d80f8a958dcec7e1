"""Financial statement generator.

Statements are read-only views over the balance calculator. Only posted and
approved transactions are included.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from tallybook.database.base import Database
from tallybook.domain.balance import BalanceCalculator
from tallybook.domain.entities import (
    BALANCE_TOLERANCE,
    ZERO,
    AccountBalance,
    AccountType,
    BalanceSheet,
    DateRange,
    FinancialRatios,
    IncomeStatement,
    StatementLine,
    StatementSection,
    TrialBalance,
    TrialBalanceLine,
)
from tallybook.logging_config import get_logger

logger = get_logger("statements")

CURRENT_EARNINGS_NAME = "Current Period Earnings"
CURRENT_CATEGORY = "current"
UNCATEGORIZED = "uncategorized"


def safe_ratio(numerator: Decimal, denominator: Decimal) -> float:
    """Divide, returning 0 when the denominator is zero or negative."""
    if denominator <= 0:
        return 0.0
    return float(numerator / denominator)


def percentage_of(value: Decimal, total: Decimal) -> float:
    """Share of ``value`` in ``total`` in percent (0 when total is zero)."""
    if total == 0:
        return 0.0
    return round(float(value / total * 100), 2)


def _line(balance: AccountBalance, section_total: Decimal) -> StatementLine:
    return StatementLine(
        code=balance.account.code,
        name=balance.account.name,
        balance=balance.type_balance,
        percentage=percentage_of(balance.type_balance, section_total),
        category=balance.account.category,
        account_balance=balance.balance,
    )


def build_section(
    balances: Iterable[AccountBalance],
    extra_lines: Iterable[StatementLine] = (),
    sort_by_magnitude: bool = False,
) -> StatementSection:
    """Build a statement section with totals and a category breakdown.

    Args:
        balances: Account balances (zero balances are dropped). Lines carry
            the type-side balance, so contra accounts reduce the total
        extra_lines: Synthetic lines (without account) appended to the section
        sort_by_magnitude: Order lines by absolute balance, largest first,
            instead of by account code
    """
    nonzero = [b for b in balances if b.type_balance != 0]
    extra = [line for line in extra_lines if line.balance != 0]
    total = sum((b.type_balance for b in nonzero), ZERO) + sum((line.balance for line in extra), ZERO)

    if sort_by_magnitude:
        nonzero.sort(key=lambda b: (-abs(b.type_balance), b.account.code))
    else:
        nonzero.sort(key=lambda b: b.account.code)

    lines = [_line(b, total) for b in nonzero]
    lines.extend(
        StatementLine(
            code=line.code,
            name=line.name,
            balance=line.balance,
            percentage=percentage_of(line.balance, total),
            category=line.category,
            account_balance=line.account_balance,
        )
        for line in extra
    )

    grouped: dict[str, list[StatementLine]] = defaultdict(list)
    for line in lines:
        grouped[line.category or UNCATEGORIZED].append(line)
    categories = {
        name: StatementSection(
            total=sum((line.balance for line in group), ZERO),
            lines=tuple(group),
        )
        for name, group in sorted(grouped.items())
    }
    return StatementSection(total=total, lines=tuple(lines), categories=categories)


class StatementService:
    """Service for generating financial statements."""

    def __init__(self, db: Database):
        """Initialize statement service.

        Args:
            db: Database instance
        """
        self.db = db
        self.calculator = BalanceCalculator(db)

    def balance_sheet(self, as_of: date, range_start: Optional[date] = None) -> BalanceSheet:
        """Build the balance sheet over ``[range_start, as_of]``.

        Revenue minus expenses over the same range is shown as a synthetic
        equity line, so a balanced ledger always yields a balanced sheet.

        Args:
            as_of: Last date included
            range_start: Optional first date included (open if None)

        Returns:
            BalanceSheet with sections, validation and ratios
        """
        date_range = DateRange(start=range_start, end=as_of)
        balances = self.calculator.compute_balances(date_range)
        by_type = self._split_by_type(balances)

        revenue = sum((b.type_balance for b in by_type[AccountType.REVENUE]), ZERO)
        expenses = sum((b.type_balance for b in by_type[AccountType.EXPENSE]), ZERO)
        earnings = StatementLine(
            code=None,
            name=CURRENT_EARNINGS_NAME,
            balance=revenue - expenses,
            percentage=0.0,
        )

        assets = build_section(by_type[AccountType.ASSET])
        liabilities = build_section(by_type[AccountType.LIABILITY])
        equity = build_section(by_type[AccountType.EQUITY], extra_lines=[earnings])

        difference = assets.total - (liabilities.total + equity.total)
        current_assets = assets.categories.get(CURRENT_CATEGORY)
        current_liabilities = liabilities.categories.get(CURRENT_CATEGORY)
        ratios = FinancialRatios(
            debt_to_equity=safe_ratio(liabilities.total, equity.total),
            debt_to_asset=safe_ratio(liabilities.total, assets.total),
            current_ratio=safe_ratio(
                current_assets.total if current_assets else ZERO,
                current_liabilities.total if current_liabilities else ZERO,
            ),
        )

        logger.debug("Built balance sheet as of %s (difference %s)", as_of, difference)
        return BalanceSheet(
            as_of=as_of,
            range_start=range_start,
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            is_balanced=abs(difference) <= BALANCE_TOLERANCE,
            difference=difference,
            ratios=ratios,
        )

    def income_statement(self, date_range: DateRange) -> IncomeStatement:
        """Build the income statement over a date range.

        Detail lines are sorted by magnitude, largest first. The profit
        margin is a ratio (net income / revenue), 0 without revenue.
        """
        balances = self.calculator.compute_balances(
            date_range, account_types=(AccountType.REVENUE, AccountType.EXPENSE)
        )
        by_type = self._split_by_type(balances)

        revenues = build_section(by_type[AccountType.REVENUE], sort_by_magnitude=True)
        expenses = build_section(by_type[AccountType.EXPENSE], sort_by_magnitude=True)
        net_income = revenues.total - expenses.total

        logger.debug("Built income statement %s..%s (net %s)", date_range.start, date_range.end, net_income)
        return IncomeStatement(
            date_range=date_range,
            revenues=revenues,
            expenses=expenses,
            net_income=net_income,
            profit_margin=safe_ratio(net_income, revenues.total),
            expense_ratio=safe_ratio(expenses.total, revenues.total),
        )

    def trial_balance(self, date_range: Optional[DateRange] = None) -> TrialBalance:
        """List every account with a nonzero balance in debit/credit columns."""
        date_range = date_range or DateRange()
        balances = self.calculator.compute_balances(date_range, active_only=False)

        lines = []
        for b in balances:
            if b.balance == 0:
                continue
            net_debit = b.debit - b.credit
            lines.append(
                TrialBalanceLine(
                    code=b.account.code,
                    name=b.account.name,
                    type=b.account.type,
                    debit=net_debit if net_debit > 0 else ZERO,
                    credit=-net_debit if net_debit < 0 else ZERO,
                    balance=b.balance,
                )
            )

        total_debits = sum((line.debit for line in lines), ZERO)
        total_credits = sum((line.credit for line in lines), ZERO)
        difference = total_debits - total_credits
        logger.debug("Built trial balance with %d accounts", len(lines))
        return TrialBalance(
            date_range=date_range,
            lines=tuple(lines),
            total_debits=total_debits,
            total_credits=total_credits,
            is_balanced=abs(difference) <= BALANCE_TOLERANCE,
            difference=difference,
        )

    @staticmethod
    def _split_by_type(balances: Iterable[AccountBalance]) -> dict[AccountType, list[AccountBalance]]:
        by_type: dict[AccountType, list[AccountBalance]] = {t: [] for t in AccountType}
        for b in balances:
            by_type[b.account.type].append(b)
        return by_type
