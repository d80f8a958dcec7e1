"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Iterable, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from tallybook.domain.entities import (
    Account,
    AccountType,
    LineInput,
    NormalBalance,
    Transaction,
    TransactionStatus,
)

# Sentinel for "leave this field unchanged" where None is a meaningful value.
UNSET: Any = object()


class Database(ABC):
    """Abstract database interface for tallybook."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        normal_balance: NormalBalance,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> int:
        """Create a new account. Returns account ID.

        Raises:
            ConflictError: If the code is already taken
        """
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by its unique code."""
        pass

    @abstractmethod
    def get_accounts(self, account_ids: Iterable[int]) -> dict[int, Account]:
        """Get several accounts by ID. Missing IDs are absent from the result."""
        pass

    @abstractmethod
    def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        parent_id: Optional[int] = UNSET,
        is_active: Optional[bool] = None,
    ) -> list[Account]:
        """List accounts ordered by code.

        Args:
            account_type: Optional type filter
            parent_id: Optional parent filter; None selects top-level accounts
            is_active: Optional activation filter
        """
        pass

    @abstractmethod
    def get_account_tree(self) -> list[dict[str, Any]]:
        """Get full account hierarchy.

        Returns a list of dictionaries with account data and nested 'children' lists.
        This structure is used for hierarchical display and is kept as dict for convenience.
        """
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        description: Optional[str] = UNSET,
        category: Optional[str] = UNSET,
        parent_id: Optional[int] = UNSET,
    ) -> None:
        """Update descriptive account fields."""
        pass

    @abstractmethod
    def set_account_active(self, account_id: int, is_active: bool) -> bool:
        """Activate or deactivate an account.

        Deactivation only succeeds when no transaction line references the
        account; the check and the update are a single statement.

        Returns:
            True if the account was updated
        """
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Raises:
            ConflictError: If transaction lines or child accounts reference it
        """
        pass

    @abstractmethod
    def get_account_line_count(self, account_id: int) -> int:
        """Get count of transaction lines referencing an account."""
        pass

    @abstractmethod
    def get_account_child_count(self, account_id: int) -> int:
        """Get count of accounts whose parent is the given account."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        date: date,
        description: str,
        status: TransactionStatus,
        created_by: str,
        lines: Sequence[LineInput],
    ) -> int:
        """Create a transaction and its lines atomically. Returns transaction ID.

        A unique reference is generated inside the same database transaction.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction (with lines) by ID."""
        pass

    @abstractmethod
    def get_transaction_by_reference(self, reference: str) -> Optional[Transaction]:
        """Get transaction (with lines) by reference."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        expected_version: int,
        expected_status: TransactionStatus,
        date: Optional[date] = None,
        description: Optional[str] = None,
        lines: Optional[Sequence[LineInput]] = None,
        status: Optional[TransactionStatus] = None,
        approved_by: Optional[str] = None,
    ) -> bool:
        """Compare-and-set update of a transaction.

        The write only happens if the stored version and status still match
        the expected ones. Replacement lines are written in the same database
        transaction. The version is incremented on success.

        Returns:
            True if the transaction was updated, False if it was stale
        """
        pass

    @abstractmethod
    def delete_transaction(
        self, transaction_id: int, expected_status: TransactionStatus
    ) -> bool:
        """Delete a transaction and its lines if it still has the expected status.

        Returns:
            True if a row was deleted
        """
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[TransactionStatus] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """List transactions (with lines), newest first.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            status: Optional status filter
            search: Optional case-insensitive substring of description or reference
            limit: Optional page size
            offset: Rows to skip
        """
        pass

    @abstractmethod
    def count_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[TransactionStatus] = None,
        search: Optional[str] = None,
    ) -> int:
        """Count transactions matching the list filters."""
        pass

    # Balance queries
    @abstractmethod
    def sum_lines_by_account(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        statuses: Iterable[TransactionStatus] = (),
        account_ids: Optional[Iterable[int]] = None,
    ) -> dict[int, tuple[Decimal, Decimal, int]]:
        """Sum debits and credits per account.

        Only lines whose transaction date is within the inclusive range and
        whose status is one of ``statuses`` are counted.

        Returns:
            Mapping of account ID to (total debit, total credit, line count)
        """
        pass
