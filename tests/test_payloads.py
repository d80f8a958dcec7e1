"""Tests for JSON payload builders."""

import json
from datetime import date
from decimal import Decimal

from tallybook.domain.entities import DateRange
from tallybook.domain.payloads import (
    analytics_payload,
    balance_sheet_payload,
    income_statement_payload,
    money,
    to_json,
    transaction_payload,
    transactions_payload,
    trial_balance_payload,
)


def test_money_rounds_to_cents():
    assert money(Decimal("10.005")) == 10.0
    assert money(Decimal("1234.5")) == 1234.5
    assert money(Decimal("0")) == 0.0


def test_transaction_payload(transaction_service, account_service, record, chart):
    txn_id = record("2024-01-20", "1020", "4010", "8000", description="Consulting invoice")
    txn = transaction_service.get_transaction(txn_id)

    payload = transaction_payload(txn, account_service.db.get_accounts([chart["1020"], chart["4010"]]))

    assert payload["reference"] == txn.reference
    assert payload["date"] == "2024-01-20"
    assert payload["status"] == "posted"
    assert payload["totalDebit"] == payload["totalCredit"] == 8000.0
    assert [line["accountCode"] for line in payload["lines"]] == ["1020", "4010"]
    assert payload["lines"][1]["accountName"] == "Consulting Services"


def test_transactions_payload_pagination(transaction_service, record):
    record("2024-01-20", "1020", "4010", "10")
    page = transaction_service.list_transactions(limit=1)

    payload = transactions_payload(page, total=3, limit=1, offset=0)

    assert payload["pagination"] == {"total": 3, "limit": 1, "offset": 0}
    assert "accountCode" not in payload["transactions"][0]["lines"][0]


def test_balance_sheet_payload(statement_service, record):
    record("2024-01-05", "1020", "3010", "5000")
    record("2024-01-20", "1020", "4010", "800")

    payload = balance_sheet_payload(statement_service.balance_sheet(date(2024, 1, 31)))

    assert payload["asOf"] == "2024-01-31"
    assert payload["from"] is None
    assert payload["assets"]["total"] == 5800.0
    assert payload["assets"]["accounts"] == [
        {"code": "1020", "name": "Business Checking", "balance": 5800.0, "percentage": 100.0, "accountBalance": 5800.0}
    ]
    assert payload["assets"]["categories"] == {"current": {"total": 5800.0, "accounts": ["1020"]}}
    assert payload["equity"]["categories"]["uncategorized"]["accounts"] == ["Current Period Earnings"]
    earnings = next(line for line in payload["equity"]["accounts"] if line["code"] is None)
    assert earnings["balance"] == 800.0
    assert earnings["accountBalance"] is None
    assert payload["validation"] == {
        "isBalanced": True,
        "difference": 0.0,
        "totalLiabilitiesAndEquity": 5800.0,
    }
    assert set(payload["ratios"]) == {"debtToEquity", "debtToAsset", "currentRatio"}


def test_income_statement_payload(statement_service, record):
    record("2024-01-20", "1020", "4010", "8000")
    record("2024-01-21", "5010", "1020", "2000")

    statement = statement_service.income_statement(DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31)))
    payload = income_statement_payload(statement)

    assert payload["period"] == {"from": "2024-01-01", "to": "2024-01-31"}
    assert payload["revenues"]["total"] == 8000.0
    assert payload["profitability"] == {
        "totalRevenue": 8000.0,
        "totalExpenses": 2000.0,
        "netIncome": 6000.0,
        "profitMargin": 0.75,
        "expenseRatio": 0.25,
    }


def test_trial_balance_payload(statement_service, record):
    record("2024-01-20", "1020", "4010", "8000")

    payload = trial_balance_payload(statement_service.trial_balance())

    assert payload["period"] == {"from": None, "to": None}
    assert payload["totals"] == {"debits": 8000.0, "credits": 8000.0}
    assert payload["validation"]["isBalanced"] is True
    assert payload["accounts"][1] == {
        "code": "4010",
        "name": "Consulting Services",
        "type": "revenue",
        "debit": 0.0,
        "credit": 8000.0,
        "balance": 8000.0,
    }


def test_analytics_payload(analytics_service, record):
    record("2024-01-15", "1020", "4010", "1000")
    record("2024-02-15", "1020", "4010", "1500")
    record("2024-02-20", "5010", "1020", "300")

    report = analytics_service.build_analytics(DateRange(start=date(2024, 1, 1), end=date(2024, 2, 29)))
    payload = analytics_payload(report)

    assert [m["month"] for m in payload["monthlyTrends"]] == ["Jan 2024", "Feb 2024"]
    assert payload["kpis"]["totalRevenue"] == 2500.0
    assert payload["kpis"]["netCashFlow"] == 2200.0
    assert payload["growthMetrics"]["monthlyGrowthRates"] == [{"month": "Feb 2024", "revenueGrowth": 50.0}]
    assert payload["growthMetrics"]["averageGrowthRate"] == 50.0
    assert payload["quickStats"]["revenue"] == {"value": 2500.0, "change": 0.0, "trend": "up"}
    assert payload["previousPeriod"]["to"] == "2023-12-31"
    assert payload["expenseBreakdown"][0]["percentage"] == 100.0


def test_reports_are_repeatable(statement_service, analytics_service, record):
    """Building the same report twice gives identical JSON."""
    record("2024-01-20", "1020", "4010", "8000")
    date_range = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))

    first = to_json(income_statement_payload(statement_service.income_statement(date_range)))
    second = to_json(income_statement_payload(statement_service.income_statement(date_range)))
    assert first == second

    first = to_json(analytics_payload(analytics_service.build_analytics(date_range)))
    second = to_json(analytics_payload(analytics_service.build_analytics(date_range)))
    assert first == second
    assert json.loads(first)["period"] == {"from": "2024-01-01", "to": "2024-01-31"}

    first = to_json(balance_sheet_payload(statement_service.balance_sheet(date(2024, 1, 31))))
    second = to_json(balance_sheet_payload(statement_service.balance_sheet(date(2024, 1, 31))))
    assert first == second
    assert json.loads(first)["validation"]["isBalanced"] is True

    first = to_json(trial_balance_payload(statement_service.trial_balance(date_range)))
    second = to_json(trial_balance_payload(statement_service.trial_balance(date_range)))
    assert first == second
    assert json.loads(first)["totals"] == {"debits": 8000.0, "credits": 8000.0}
