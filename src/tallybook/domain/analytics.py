"""Period analytics: monthly trends, growth and period-over-period comparison."""

from datetime import date
from decimal import Decimal
from typing import Sequence

from tallybook.database.base import Database
from tallybook.domain.balance import BalanceCalculator
from tallybook.domain.entities import (
    ZERO,
    AccountBalance,
    AccountType,
    AnalyticsReport,
    BreakdownItem,
    DateRange,
    GrowthMetrics,
    GrowthRate,
    MonthlyTrend,
    PeriodComparison,
    PeriodTotals,
)
from tallybook.domain.errors import ValidationError
from tallybook.domain.statements import percentage_of, safe_ratio
from tallybook.logging_config import get_logger
from tallybook.utils.date_parser import iter_months, month_label

logger = get_logger("analytics")


def percent_change(current: Decimal, previous: Decimal) -> float:
    """Change from ``previous`` to ``current`` in percent.

    Returns 0 when the previous value is zero or negative.
    """
    if previous <= 0:
        return 0.0
    return float((current - previous) / previous * 100)


def growth_rate(series: Sequence[MonthlyTrend]) -> GrowthMetrics:
    """Month-over-month revenue growth.

    Months whose previous month has no positive revenue are skipped.
    """
    rates = []
    for previous, current in zip(series, series[1:]):
        if previous.revenue <= 0:
            continue
        rates.append(
            GrowthRate(
                label=current.label,
                revenue_growth=percent_change(current.revenue, previous.revenue),
            )
        )
    average = sum(r.revenue_growth for r in rates) / len(rates) if rates else 0.0
    return GrowthMetrics(
        monthly_growth_rates=tuple(rates),
        average_growth=average,
        total_months=len(series),
    )


def _breakdown(balances: Sequence[AccountBalance], total: Decimal) -> tuple[BreakdownItem, ...]:
    items = [b for b in balances if b.type_balance != 0]
    items.sort(key=lambda b: (-b.type_balance, b.account.code))
    return tuple(
        BreakdownItem(
            code=b.account.code,
            name=b.account.name,
            value=b.type_balance,
            percentage=percentage_of(b.type_balance, total) if total > 0 else 0.0,
        )
        for b in items
    )


class AnalyticsService:
    """Service for period analytics over revenue and expense accounts."""

    def __init__(self, db: Database):
        """Initialize analytics service.

        Args:
            db: Database instance
        """
        self.db = db
        self.calculator = BalanceCalculator(db)

    def _income_balances(self, date_range: DateRange) -> list[AccountBalance]:
        return self.calculator.compute_balances(
            date_range,
            account_types=(AccountType.REVENUE, AccountType.EXPENSE),
            active_only=False,
        )

    def period_totals(self, date_range: DateRange) -> PeriodTotals:
        """Revenue, expenses, profit and cash flow over a range."""
        balances = self._income_balances(date_range)
        revenue = sum((b.type_balance for b in balances if b.account.type == AccountType.REVENUE), ZERO)
        expenses = sum((b.type_balance for b in balances if b.account.type == AccountType.EXPENSE), ZERO)
        return PeriodTotals(
            date_range=date_range,
            revenue=revenue,
            expenses=expenses,
            profit=revenue - expenses,
            # Cash flow is approximated as revenue minus expenses
            cash_flow=revenue - expenses,
        )

    def monthly_series(self, start: date, end: date) -> tuple[MonthlyTrend, ...]:
        """One entry per calendar month touched by ``[start, end]``.

        Raises:
            ValidationError: If start is after end
        """
        if start > end:
            raise ValidationError(f"Start date {start} is after end date {end}")
        series = []
        for first, last in iter_months(start, end):
            totals = self.period_totals(DateRange(start=first, end=last))
            series.append(
                MonthlyTrend(
                    month_start=first.replace(day=1),
                    label=month_label(first),
                    revenue=totals.revenue,
                    expenses=totals.expenses,
                    profit=totals.profit,
                )
            )
        return tuple(series)

    def growth_rate(self, series: Sequence[MonthlyTrend]) -> GrowthMetrics:
        """Month-over-month revenue growth of a monthly series."""
        return growth_rate(series)

    def period_comparison(self, current_range: DateRange) -> PeriodComparison:
        """Compare a range with the previous period of equal length.

        Raises:
            ValidationError: If the range is open
        """
        if current_range.start is None or current_range.end is None:
            raise ValidationError("Period comparison needs a start and an end date")
        current = self.period_totals(current_range)
        previous = self.period_totals(current_range.previous_period())
        return PeriodComparison(
            current=current,
            previous=previous,
            revenue_change=percent_change(current.revenue, previous.revenue),
            expenses_change=percent_change(current.expenses, previous.expenses),
            profit_change=percent_change(current.profit, previous.profit),
            cash_flow_change=percent_change(current.cash_flow, previous.cash_flow),
        )

    def build_analytics(self, date_range: DateRange) -> AnalyticsReport:
        """Build the full analytics view for a closed date range."""
        if date_range.start is None or date_range.end is None:
            raise ValidationError("Analytics need a start and an end date")

        trends = self.monthly_series(date_range.start, date_range.end)
        comparison = self.period_comparison(date_range)
        current = comparison.current

        balances = self._income_balances(date_range)
        revenue_balances = [b for b in balances if b.account.type == AccountType.REVENUE]
        expense_balances = [b for b in balances if b.account.type == AccountType.EXPENSE]

        logger.debug("Built analytics %s..%s over %d months", date_range.start, date_range.end, len(trends))
        return AnalyticsReport(
            date_range=date_range,
            monthly_trends=trends,
            growth=growth_rate(trends),
            comparison=comparison,
            expense_breakdown=_breakdown(expense_balances, current.expenses),
            revenue_sources=_breakdown(revenue_balances, current.revenue),
            profit_margin=safe_ratio(current.profit, current.revenue),
            expense_ratio=safe_ratio(current.expenses, current.revenue),
        )
