"""JSON-shaped payloads for accounts, transactions and reports.

Keys are camelCase. Money is rendered as a float rounded to cents and
percentages to two decimals. Payloads carry no generation timestamp, so
building the same report twice gives identical output.
"""

import json
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from tallybook.domain.entities import (
    Account,
    AnalyticsReport,
    BalanceSheet,
    BreakdownItem,
    DateRange,
    IncomeStatement,
    StatementSection,
    Transaction,
    TrialBalance,
)

CENT = Decimal("0.01")


def money(value: Decimal) -> float:
    """Render a Decimal amount as a float rounded to cents."""
    return float(Decimal(value).quantize(CENT))


def pct(value: float) -> float:
    return round(value, 2)


def _iso(day: Optional[date]) -> Optional[str]:
    return day.isoformat() if day is not None else None


def _period(date_range: DateRange) -> dict[str, Any]:
    return {"from": _iso(date_range.start), "to": _iso(date_range.end)}


def account_payload(account: Account) -> dict[str, Any]:
    return {
        "id": account.id,
        "code": account.code,
        "name": account.name,
        "type": account.type.value,
        "normalBalance": account.normal_balance.value,
        "isActive": account.is_active,
        "parentId": account.parent_id,
        "description": account.description,
        "category": account.category,
    }


def accounts_payload(accounts: Iterable[Account]) -> dict[str, Any]:
    items = [account_payload(acc) for acc in accounts]
    return {"accounts": items, "count": len(items)}


def transaction_payload(
    transaction: Transaction, accounts: Optional[Mapping[int, Account]] = None
) -> dict[str, Any]:
    """Transaction with its lines and computed totals.

    Args:
        transaction: Transaction entity
        accounts: Optional account lookup used to add codes and names to lines
    """
    accounts = accounts or {}
    lines = []
    for line in transaction.lines:
        entry: dict[str, Any] = {
            "id": line.id,
            "accountId": line.account_id,
            "description": line.description,
            "debit": money(line.debit),
            "credit": money(line.credit),
        }
        account = accounts.get(line.account_id)
        if account is not None:
            entry["accountCode"] = account.code
            entry["accountName"] = account.name
        lines.append(entry)

    return {
        "id": transaction.id,
        "reference": transaction.reference,
        "date": _iso(transaction.date),
        "description": transaction.description,
        "status": transaction.status.value,
        "createdBy": transaction.created_by,
        "approvedBy": transaction.approved_by,
        "version": transaction.version,
        "totalDebit": money(transaction.total_debit),
        "totalCredit": money(transaction.total_credit),
        "lines": lines,
    }


def transactions_payload(
    transactions: Iterable[Transaction],
    accounts: Optional[Mapping[int, Account]] = None,
    total: Optional[int] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> dict[str, Any]:
    items = [transaction_payload(txn, accounts) for txn in transactions]
    return {
        "transactions": items,
        "pagination": {
            "total": total if total is not None else len(items),
            "limit": limit,
            "offset": offset,
        },
    }


def _section_payload(section: StatementSection) -> dict[str, Any]:
    return {
        "total": money(section.total),
        "accounts": [
            {
                "code": line.code,
                "name": line.name,
                "balance": money(line.balance),
                "percentage": pct(line.percentage),
                "accountBalance": money(line.account_balance) if line.account_balance is not None else None,
            }
            for line in section.lines
        ],
        "categories": {
            name: {
                "total": money(group.total),
                "accounts": [line.code or line.name for line in group.lines],
            }
            for name, group in section.categories.items()
        },
    }


def balance_sheet_payload(sheet: BalanceSheet) -> dict[str, Any]:
    return {
        "asOf": _iso(sheet.as_of),
        "from": _iso(sheet.range_start),
        "assets": _section_payload(sheet.assets),
        "liabilities": _section_payload(sheet.liabilities),
        "equity": _section_payload(sheet.equity),
        "validation": {
            "isBalanced": sheet.is_balanced,
            "difference": money(sheet.difference),
            "totalLiabilitiesAndEquity": money(sheet.total_liabilities + sheet.total_equity),
        },
        "ratios": {
            "debtToEquity": pct(sheet.ratios.debt_to_equity),
            "debtToAsset": pct(sheet.ratios.debt_to_asset),
            "currentRatio": pct(sheet.ratios.current_ratio),
        },
    }


def income_statement_payload(statement: IncomeStatement) -> dict[str, Any]:
    return {
        "period": _period(statement.date_range),
        "revenues": _section_payload(statement.revenues),
        "expenses": _section_payload(statement.expenses),
        "profitability": {
            "totalRevenue": money(statement.total_revenue),
            "totalExpenses": money(statement.total_expenses),
            "netIncome": money(statement.net_income),
            "profitMargin": round(statement.profit_margin, 4),
            "expenseRatio": round(statement.expense_ratio, 4),
        },
    }


def trial_balance_payload(trial: TrialBalance) -> dict[str, Any]:
    return {
        "period": _period(trial.date_range),
        "accounts": [
            {
                "code": line.code,
                "name": line.name,
                "type": line.type.value,
                "debit": money(line.debit),
                "credit": money(line.credit),
                "balance": money(line.balance),
            }
            for line in trial.lines
        ],
        "totals": {
            "debits": money(trial.total_debits),
            "credits": money(trial.total_credits),
        },
        "validation": {
            "isBalanced": trial.is_balanced,
            "difference": money(trial.difference),
        },
    }


def _breakdown_payload(items: Iterable[BreakdownItem]) -> list[dict[str, Any]]:
    return [
        {
            "code": item.code,
            "name": item.name,
            "value": money(item.value),
            "percentage": pct(item.percentage),
        }
        for item in items
    ]


def _quick_stat(value: Decimal, change: float) -> dict[str, Any]:
    return {
        "value": money(value),
        "change": round(change, 1),
        "trend": "up" if change >= 0 else "down",
    }


def analytics_payload(report: AnalyticsReport) -> dict[str, Any]:
    comparison = report.comparison
    current = comparison.current
    previous = comparison.previous
    return {
        "period": _period(report.date_range),
        "kpis": {
            "totalRevenue": money(current.revenue),
            "totalExpenses": money(current.expenses),
            "totalProfit": money(current.profit),
            "profitMargin": round(report.profit_margin, 4),
            "expenseRatio": round(report.expense_ratio, 4),
            "averageMonthlyGrowth": pct(report.growth.average_growth),
            "netCashFlow": money(current.cash_flow),
        },
        "quickStats": {
            "revenue": _quick_stat(current.revenue, comparison.revenue_change),
            "expenses": _quick_stat(current.expenses, comparison.expenses_change),
            "profit": _quick_stat(current.profit, comparison.profit_change),
            "cashFlow": _quick_stat(current.cash_flow, comparison.cash_flow_change),
        },
        "monthlyTrends": [
            {
                "month": trend.label,
                "revenue": money(trend.revenue),
                "expenses": money(trend.expenses),
                "profit": money(trend.profit),
            }
            for trend in report.monthly_trends
        ],
        "expenseBreakdown": _breakdown_payload(report.expense_breakdown),
        "revenueSources": _breakdown_payload(report.revenue_sources),
        "growthMetrics": {
            "monthlyGrowthRates": [
                {"month": rate.label, "revenueGrowth": round(rate.revenue_growth, 1)}
                for rate in report.growth.monthly_growth_rates
            ],
            "averageGrowthRate": pct(report.growth.average_growth),
            "totalMonths": report.growth.total_months,
        },
        "previousPeriod": {
            **_period(previous.date_range),
            "revenue": money(previous.revenue),
            "expenses": money(previous.expenses),
            "profit": money(previous.profit),
            "cashFlow": money(previous.cash_flow),
        },
    }


def to_json(payload: Mapping[str, Any]) -> str:
    """Serialize a payload deterministically."""
    return json.dumps(payload, indent=2, default=str)
