"""Balance calculator.

Balances are always derived from transaction lines on demand. A line counts
when its transaction date falls inside the (inclusive) range and its status
is in the status filter. An open start date means "from the beginning of
time"; there is no opening balance carried forward.
"""

from decimal import Decimal
from typing import Iterable, Optional

from tallybook.database.base import Database
from tallybook.domain.entities import (
    ZERO,
    AccountBalance,
    AccountType,
    DateRange,
    NormalBalance,
    REPORTABLE_STATUSES,
    TransactionStatus,
)
from tallybook.domain.errors import NotFoundError, account_not_found


def signed_balance(normal_balance: NormalBalance, debit: Decimal, credit: Decimal) -> Decimal:
    """Express debit and credit totals as a balance on the account's normal side."""
    if normal_balance == NormalBalance.DEBIT:
        return debit - credit
    return credit - debit


class BalanceCalculator:
    """Computes account balances from ledger lines."""

    def __init__(self, db: Database):
        """Initialize balance calculator.

        Args:
            db: Database instance
        """
        self.db = db

    def compute_balance(
        self,
        account_id: int,
        date_range: Optional[DateRange] = None,
        statuses: Iterable[TransactionStatus] = REPORTABLE_STATUSES,
    ) -> AccountBalance:
        """Compute the balance of one account.

        Args:
            account_id: Account ID
            date_range: Optional inclusive date range (open if None)
            statuses: Transaction statuses to include

        Returns:
            AccountBalance with debit, credit and signed balance

        Raises:
            NotFoundError: If the account does not exist
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id), {"account_id": account_id})

        date_range = date_range or DateRange()
        totals = self.db.sum_lines_by_account(
            start_date=date_range.start,
            end_date=date_range.end,
            statuses=statuses,
            account_ids=[account_id],
        )
        debit, credit, count = totals.get(account_id, (ZERO, ZERO, 0))
        return AccountBalance(
            account=account,
            debit=debit,
            credit=credit,
            balance=signed_balance(account.normal_balance, debit, credit),
            line_count=count,
        )

    def compute_balances(
        self,
        date_range: Optional[DateRange] = None,
        statuses: Iterable[TransactionStatus] = REPORTABLE_STATUSES,
        account_types: Optional[Iterable[AccountType]] = None,
        active_only: bool = True,
    ) -> list[AccountBalance]:
        """Compute balances of every account in one grouped query.

        Accounts without lines in the range are included with zero balance.

        Args:
            date_range: Optional inclusive date range (open if None)
            statuses: Transaction statuses to include
            account_types: Optional filter on account types
            active_only: Skip inactive accounts

        Returns:
            Account balances ordered by account code
        """
        date_range = date_range or DateRange()
        wanted_types = set(account_types) if account_types is not None else None

        accounts = self.db.list_accounts(is_active=True if active_only else None)
        if wanted_types is not None:
            accounts = [acc for acc in accounts if acc.type in wanted_types]

        totals = self.db.sum_lines_by_account(
            start_date=date_range.start,
            end_date=date_range.end,
            statuses=statuses,
        )

        balances = []
        for account in accounts:
            debit, credit, count = totals.get(account.id, (ZERO, ZERO, 0))
            balances.append(
                AccountBalance(
                    account=account,
                    debit=debit,
                    credit=credit,
                    balance=signed_balance(account.normal_balance, debit, credit),
                    line_count=count,
                )
            )
        return balances
