"""Shared pytest fixtures for tallybook tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from tallybook.database.factories import create_sqlite_database
from tallybook.domain.account import AccountService
from tallybook.domain.analytics import AnalyticsService
from tallybook.domain.balance import BalanceCalculator
from tallybook.domain.entities import Actor, LineInput, Role, TransactionStatus
from tallybook.domain.statements import StatementService
from tallybook.domain.transaction import TransactionService
from tallybook.logging_config import reset_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    """Give every test a fresh logging configuration."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def balance_calculator(temp_db):
    """Create a BalanceCalculator with a temporary database."""
    return BalanceCalculator(temp_db)


@pytest.fixture
def statement_service(temp_db):
    """Create a StatementService with a temporary database."""
    return StatementService(temp_db)


@pytest.fixture
def analytics_service(temp_db):
    """Create an AnalyticsService with a temporary database."""
    return AnalyticsService(temp_db)


@pytest.fixture
def admin():
    return Actor(actor_id="alice", role=Role.ADMIN)


@pytest.fixture
def bookkeeper():
    return Actor(actor_id="bob", role=Role.BOOKKEEPER)


@pytest.fixture
def viewer():
    return Actor(actor_id="vera", role=Role.VIEWER)


# (code, name, type, category)
SAMPLE_CHART = [
    ("1010", "Cash", "asset", "current"),
    ("1020", "Business Checking", "asset", "current"),
    ("1210", "Office Equipment", "asset", "non_current"),
    ("2010", "Trade Payables", "liability", "current"),
    ("2210", "Business Loan", "liability", "non_current"),
    ("3010", "Owner Capital", "equity", "capital"),
    ("4010", "Consulting Services", "revenue", "services"),
    ("4110", "Software Sales", "revenue", "products"),
    ("5010", "Rent Expense", "expense", "operating"),
    ("5410", "Software Subscriptions", "expense", "operating"),
]


@pytest.fixture
def chart(account_service):
    """Create a small chart of accounts and return a code -> ID mapping."""
    ids = {}
    for code, name, account_type, category in SAMPLE_CHART:
        ids[code] = account_service.create_account(
            code=code, name=name, account_type=account_type, category=category
        )
    return ids


@pytest.fixture
def record(transaction_service, admin, chart):
    """Return a helper that records a two-line posted transaction.

    Usage: record("2024-01-05", "1020", "3010", "50000")
    debits the first account and credits the second.
    """

    def _record(
        day: str,
        debit_code: str,
        credit_code: str,
        amount: str,
        description: str = "Test entry",
        status: TransactionStatus = TransactionStatus.POSTED,
    ) -> int:
        value = Decimal(amount)
        return transaction_service.create_transaction(
            admin,
            date.fromisoformat(day),
            description,
            [
                LineInput(account_id=chart[debit_code], debit=value),
                LineInput(account_id=chart[credit_code], credit=value),
            ],
            status=status,
        )

    return _record


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
