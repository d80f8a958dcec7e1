"""Domain model entities for tallybook.

These are pure data classes representing business concepts, independent of
database schema. Services exchange these objects; the database layer maps
ORM rows onto them.
"""

from dataclasses import dataclass, field
from datetime import datetime, date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from tallybook.domain.errors import ValidationError

# Two amounts closer than this are considered equal.
BALANCE_TOLERANCE = Decimal("0.01")

ZERO = Decimal("0")


class AccountType(str, Enum):
    """Top-level classification of an account."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalBalance(str, Enum):
    """Side on which an account ordinarily grows."""

    DEBIT = "debit"
    CREDIT = "credit"


class TransactionStatus(str, Enum):
    """Transaction lifecycle state (draft -> posted -> approved)."""

    DRAFT = "draft"
    POSTED = "posted"
    APPROVED = "approved"


class Role(str, Enum):
    """Actor roles supplied by the identity provider."""

    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    BOOKKEEPER = "bookkeeper"
    VIEWER = "viewer"


ELEVATED_ROLES = frozenset({Role.ADMIN, Role.ACCOUNTANT})
WRITER_ROLES = ELEVATED_ROLES | {Role.BOOKKEEPER}

# Statuses included in balances and reports.
REPORTABLE_STATUSES = frozenset({TransactionStatus.POSTED, TransactionStatus.APPROVED})


def default_normal_balance(account_type: AccountType) -> NormalBalance:
    """Return the conventional normal balance for an account type."""
    if account_type in (AccountType.ASSET, AccountType.EXPENSE):
        return NormalBalance.DEBIT
    return NormalBalance.CREDIT


@dataclass(frozen=True)
class Actor:
    """Authenticated caller of a ledger operation."""

    actor_id: str
    role: Role

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    @property
    def can_write(self) -> bool:
        return self.role in WRITER_ROLES


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range. A missing bound is open."""

    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValidationError(f"Start date {self.start} is after end date {self.end}")

    @property
    def days(self) -> int:
        """Number of days covered by a closed range."""
        if self.start is None or self.end is None:
            raise ValidationError("Open date range has no length")
        return (self.end - self.start).days + 1

    def previous_period(self) -> "DateRange":
        """Return the range of equal length ending the day before this one starts."""
        length = self.days
        previous_end = self.start - timedelta(days=1)
        return DateRange(start=previous_end - timedelta(days=length - 1), end=previous_end)


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry."""

    id: int
    code: str
    name: str
    type: AccountType
    normal_balance: NormalBalance
    is_active: bool
    parent_id: Optional[int]
    description: Optional[str]
    category: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class TransactionLine:
    """One debit or credit posting within a transaction."""

    id: int
    transaction_id: int
    account_id: int
    description: Optional[str]
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class Transaction:
    """Journal transaction with its lines."""

    id: int
    date: date
    reference: str
    description: str
    status: TransactionStatus
    created_by: str
    approved_by: Optional[str]
    version: int
    created_at: datetime
    updated_at: datetime
    lines: tuple[TransactionLine, ...] = ()

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)

    @property
    def is_draft(self) -> bool:
        return self.status == TransactionStatus.DRAFT


@dataclass(frozen=True)
class LineInput:
    """Caller-supplied line for creating or replacing transaction lines."""

    account_id: int
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: Optional[str] = None


@dataclass(frozen=True)
class AccountBalance:
    """Signed balance of one account over a date range."""

    account: Account
    debit: Decimal
    credit: Decimal
    balance: Decimal
    line_count: int = 0

    @property
    def type_balance(self) -> Decimal:
        """Balance on the account type's usual side.

        Equal to ``balance`` except for contra accounts (normal balance
        overridden at creation), which come out negative and so reduce the
        statement section they belong to.
        """
        if self.account.normal_balance == default_normal_balance(self.account.type):
            return self.balance
        return -self.balance


@dataclass(frozen=True)
class StatementLine:
    """One account row on a financial statement.

    ``balance`` is on the side usual for the section, so a contra account
    shows a negative figure. ``account_balance`` is the account's own signed
    balance (positive on its normal side) and is None for synthetic lines.
    """

    code: Optional[str]
    name: str
    balance: Decimal
    percentage: float
    category: Optional[str] = None
    account_balance: Optional[Decimal] = None


@dataclass(frozen=True)
class StatementSection:
    """Group of statement lines with a total and a category breakdown."""

    total: Decimal
    lines: tuple[StatementLine, ...]
    categories: dict[str, "StatementSection"] = field(default_factory=dict)


@dataclass(frozen=True)
class FinancialRatios:
    """Balance sheet ratios. A zero or negative denominator yields 0."""

    debt_to_equity: float
    debt_to_asset: float
    current_ratio: float


@dataclass(frozen=True)
class BalanceSheet:
    """Point-in-time statement of assets, liabilities and equity."""

    as_of: date
    range_start: Optional[date]
    assets: StatementSection
    liabilities: StatementSection
    equity: StatementSection
    is_balanced: bool
    difference: Decimal
    ratios: FinancialRatios

    @property
    def total_assets(self) -> Decimal:
        return self.assets.total

    @property
    def total_liabilities(self) -> Decimal:
        return self.liabilities.total

    @property
    def total_equity(self) -> Decimal:
        return self.equity.total


@dataclass(frozen=True)
class IncomeStatement:
    """Range-bounded statement of revenue, expenses and net income."""

    date_range: DateRange
    revenues: StatementSection
    expenses: StatementSection
    net_income: Decimal
    profit_margin: float
    expense_ratio: float

    @property
    def total_revenue(self) -> Decimal:
        return self.revenues.total

    @property
    def total_expenses(self) -> Decimal:
        return self.expenses.total


@dataclass(frozen=True)
class TrialBalanceLine:
    """Account balance re-expressed as a debit or credit column."""

    code: str
    name: str
    type: AccountType
    debit: Decimal
    credit: Decimal
    balance: Decimal


@dataclass(frozen=True)
class TrialBalance:
    """Listing of nonzero balances with a debit/credit closure check."""

    date_range: DateRange
    lines: tuple[TrialBalanceLine, ...]
    total_debits: Decimal
    total_credits: Decimal
    is_balanced: bool
    difference: Decimal


@dataclass(frozen=True)
class MonthlyTrend:
    """Revenue, expenses and profit for one calendar month."""

    month_start: date
    label: str
    revenue: Decimal
    expenses: Decimal
    profit: Decimal


@dataclass(frozen=True)
class GrowthRate:
    """Month-over-month revenue growth in percent."""

    label: str
    revenue_growth: float


@dataclass(frozen=True)
class GrowthMetrics:
    """Growth series and its mean."""

    monthly_growth_rates: tuple[GrowthRate, ...]
    average_growth: float
    total_months: int


@dataclass(frozen=True)
class PeriodTotals:
    """Aggregate revenue/expense figures over a date range."""

    date_range: DateRange
    revenue: Decimal
    expenses: Decimal
    profit: Decimal
    cash_flow: Decimal


@dataclass(frozen=True)
class PeriodComparison:
    """Current period totals against the preceding period of equal length."""

    current: PeriodTotals
    previous: PeriodTotals
    revenue_change: float
    expenses_change: float
    profit_change: float
    cash_flow_change: float


@dataclass(frozen=True)
class BreakdownItem:
    """Share of one account in a revenue or expense total."""

    code: str
    name: str
    value: Decimal
    percentage: float


@dataclass(frozen=True)
class AnalyticsReport:
    """Combined analytics view over a date range."""

    date_range: DateRange
    monthly_trends: tuple[MonthlyTrend, ...]
    growth: GrowthMetrics
    comparison: PeriodComparison
    expense_breakdown: tuple[BreakdownItem, ...]
    revenue_sources: tuple[BreakdownItem, ...]
    profit_margin: float
    expense_ratio: float
