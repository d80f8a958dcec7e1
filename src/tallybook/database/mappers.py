"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so that the schema can change
without touching the domain services.
"""

from decimal import Decimal

from tallybook.domain import entities as domain
from tallybook.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
    TransactionLine as ORMTransactionLine,
)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Normalize a stored numeric value to a two-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        normal_balance=domain.NormalBalance(orm_account.normal_balance),
        is_active=bool(orm_account.is_active),
        parent_id=orm_account.parent_id,
        description=orm_account.description,
        category=orm_account.category,
        created_at=orm_account.created_at,
    )


def transaction_line_to_domain(orm_line: ORMTransactionLine) -> domain.TransactionLine:
    """Convert SQLAlchemy TransactionLine model to domain TransactionLine entity."""
    return domain.TransactionLine(
        id=orm_line.id,
        transaction_id=orm_line.transaction_id,
        account_id=orm_line.account_id,
        description=orm_line.description,
        debit=to_money(orm_line.debit),
        credit=to_money(orm_line.credit),
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model (with lines) to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        reference=orm_transaction.reference,
        description=orm_transaction.description,
        status=domain.TransactionStatus(orm_transaction.status),
        created_by=orm_transaction.created_by,
        approved_by=orm_transaction.approved_by,
        version=orm_transaction.version,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
        lines=tuple(transaction_line_to_domain(line) for line in orm_transaction.lines),
    )
