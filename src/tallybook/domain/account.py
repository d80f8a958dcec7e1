"""Account domain service (chart of accounts registry)."""

from typing import Any, Optional, Union

from tallybook.database.base import Database, UNSET
from tallybook.domain.entities import (
    Account as AccountEntity,
    AccountType,
    NormalBalance,
    default_normal_balance,
)
from tallybook.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_code_not_found,
    account_not_found,
    duplicate_account_code,
)
from tallybook.logging_config import get_logger

logger = get_logger("account")


def parse_account_type(value: Union[str, AccountType]) -> AccountType:
    """Parse an account type name.

    Raises:
        ValidationError: If the value is not a known account type
    """
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{value}'. Expected one of: {choices}") from None


def parse_normal_balance(value: Union[str, NormalBalance]) -> NormalBalance:
    """Parse a normal balance side.

    Raises:
        ValidationError: If the value is neither debit nor credit
    """
    if isinstance(value, NormalBalance):
        return value
    try:
        return NormalBalance(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid normal balance '{value}'. Expected 'debit' or 'credit'"
        ) from None


def normalize_code(code: str) -> str:
    """Normalize an account code (trimmed, upper-cased)."""
    return (code or "").strip().upper()


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        code: str,
        name: str,
        account_type: Union[str, AccountType],
        normal_balance: Union[str, NormalBalance, None] = None,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> int:
        """Create a new account.

        Args:
            code: Unique account code, e.g. "1020"
            name: Account name
            account_type: asset, liability, equity, revenue or expense
            normal_balance: Optional override of the type's default side
            parent_id: Optional parent account for hierarchy display
            description: Optional description
            category: Optional grouping used by statements (e.g. "current")

        Returns:
            Account ID

        Raises:
            ValidationError: If a required field is missing or a value is invalid
            NotFoundError: If the parent account does not exist
            ConflictError: If the code already exists
        """
        code = normalize_code(code)
        name = (name or "").strip()
        if not code:
            raise ValidationError("Account code is required")
        if not name:
            raise ValidationError("Account name is required")

        account_type = parse_account_type(account_type)
        if normal_balance is None:
            side = default_normal_balance(account_type)
        else:
            side = parse_normal_balance(normal_balance)

        if parent_id is not None and self.db.get_account(parent_id) is None:
            raise NotFoundError(account_not_found(parent_id), {"account_id": parent_id})

        if self.db.get_account_by_code(code) is not None:
            logger.warning("Rejected duplicate account code %s", code)
            raise ConflictError(duplicate_account_code(code), {"code": code})

        account_id = self.db.create_account(
            code=code,
            name=name,
            account_type=account_type,
            normal_balance=side,
            parent_id=parent_id,
            description=description,
            category=category,
        )
        logger.info("Created account %s %s (%s)", code, name, account_type.value)
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_code(self, code: str) -> Optional[AccountEntity]:
        """Get account by code (case-insensitive)."""
        return self.db.get_account_by_code(normalize_code(code))

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id), {"account_id": account_id})
        return account

    def require_account_by_code(self, code: str) -> AccountEntity:
        """Get account by code or raise NotFoundError."""
        account = self.get_account_by_code(code)
        if account is None:
            raise NotFoundError(account_code_not_found(normalize_code(code)), {"code": code})
        return account

    def list_accounts(
        self,
        account_type: Union[str, AccountType, None] = None,
        parent_id: Optional[int] = UNSET,
        is_active: Optional[bool] = None,
    ) -> list[AccountEntity]:
        """List accounts ordered by code.

        Args:
            account_type: Optional type filter
            parent_id: Optional parent filter; None lists top-level accounts only
            is_active: Optional activation filter

        Returns:
            List of account entities
        """
        if account_type is not None:
            account_type = parse_account_type(account_type)
        return self.db.list_accounts(account_type=account_type, parent_id=parent_id, is_active=is_active)

    def get_account_tree(self) -> list[dict[str, Any]]:
        """Get the account hierarchy as nested dictionaries."""
        return self.db.get_account_tree()

    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        description: Optional[str] = UNSET,
        category: Optional[str] = UNSET,
        parent_id: Optional[int] = UNSET,
    ) -> None:
        """Update descriptive fields of an account.

        Code, type and normal balance are fixed once the account exists.

        Raises:
            NotFoundError: If the account or new parent does not exist
            ValidationError: If the name is blank or the parent would form a cycle
        """
        self.require_account(account_id)

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name is required")

        if parent_id is not UNSET and parent_id is not None:
            self.require_account(parent_id)
            if parent_id == account_id or parent_id in self._descendant_ids(account_id):
                raise ValidationError(
                    f"Account {parent_id} cannot be the parent of account {account_id}: "
                    f"it would create a cycle"
                )

        self.db.update_account(
            account_id,
            name=name,
            description=description,
            category=category,
            parent_id=parent_id,
        )
        logger.info("Updated account %s", account_id)

    def _descendant_ids(self, account_id: int) -> set[int]:
        """Collect IDs of all accounts below the given one."""
        result: set[int] = set()

        def collect_children(parent_id: int):
            for child in self.db.list_accounts(parent_id=parent_id):
                if child.id not in result:
                    result.add(child.id)
                    collect_children(child.id)

        collect_children(account_id)
        return result

    def deactivate_account(self, account_id: int) -> None:
        """Deactivate an account.

        Raises:
            NotFoundError: If account not found
            ConflictError: If any transaction line references the account
        """
        self.require_account(account_id)
        if not self.db.set_account_active(account_id, False):
            line_count = self.db.get_account_line_count(account_id)
            logger.warning("Rejected deactivation of account %s with %d lines", account_id, line_count)
            raise ConflictError(
                f"Cannot deactivate account {account_id}: it has {line_count} "
                f"transaction line{'s' if line_count != 1 else ''}",
                {"line_count": line_count},
            )
        logger.info("Deactivated account %s", account_id)

    def activate_account(self, account_id: int) -> None:
        """Re-activate an account.

        Raises:
            NotFoundError: If account not found
        """
        self.require_account(account_id)
        self.db.set_account_active(account_id, True)
        logger.info("Activated account %s", account_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If account not found
            ConflictError: If transaction lines or child accounts reference it
        """
        self.require_account(account_id)
        try:
            self.db.delete_account(account_id)
        except ConflictError as e:
            logger.warning("Rejected delete of account %s: %s", account_id, e.reason)
            raise
        logger.info("Deleted account %s", account_id)


