"""Transaction domain service (the ledger)."""

from typing import Optional, Sequence, Union
from datetime import date
from decimal import Decimal, InvalidOperation

from tallybook.database.base import Database
from tallybook.domain.entities import (
    BALANCE_TOLERANCE,
    ZERO,
    Actor,
    LineInput,
    Transaction as TransactionEntity,
    TransactionStatus,
)
from tallybook.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    accounts_inactive,
    accounts_not_found,
    stale_transaction_version,
    transaction_not_draft,
    transaction_not_found,
    unbalanced_transaction,
)
from tallybook.domain.permissions import require_elevated, require_writer
from tallybook.logging_config import get_logger

logger = get_logger("transaction")

MIN_LINES = 2
CENT = Decimal("0.01")


def parse_status(value: Union[str, TransactionStatus]) -> TransactionStatus:
    """Parse a transaction status name.

    Raises:
        ValidationError: If the status is unknown
    """
    if isinstance(value, TransactionStatus):
        return value
    try:
        return TransactionStatus(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(s.value for s in TransactionStatus)
        raise ValidationError(f"Invalid status '{value}'. Expected one of: {choices}") from None


def _to_decimal(value, field_name: str, index: int) -> Decimal:
    if value is None:
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        raise ValidationError(f"Line {index}: invalid {field_name} amount '{value}'")
    try:
        cents = amount.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(f"Line {index}: invalid {field_name} amount '{value}'") from None
    # Amounts are stored in cents
    if amount != cents:
        raise ValidationError(
            f"Line {index}: {field_name} amount '{value}' has more than two decimal places",
            {"line": index},
        )
    return cents


class TransactionService:
    """Service for recording and moving transactions through their lifecycle."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        actor: Actor,
        date: date,
        description: str,
        lines: Sequence[LineInput],
        status: Union[str, TransactionStatus] = TransactionStatus.DRAFT,
    ) -> int:
        """Record a new balanced transaction.

        Args:
            actor: Caller performing the write
            date: Transaction date
            description: Transaction description
            lines: At least two lines, each with exactly one nonzero amount
            status: Initial status, draft or posted

        Returns:
            Transaction ID

        Raises:
            AuthorizationError: If the actor may not write
            ValidationError: If a field is missing, a line is malformed or the
                transaction does not balance
            NotFoundError: If a referenced account does not exist
        """
        require_writer(actor, "create transactions")

        status = parse_status(status)
        if status == TransactionStatus.APPROVED:
            raise ValidationError("Transactions cannot be created as approved; approve them after posting")

        description = self._require_description(description)
        if date is None:
            raise ValidationError("Transaction date is required")
        normalized = self._validate_lines(lines)

        transaction_id = self.db.create_transaction(
            date=date,
            description=description,
            status=status,
            created_by=actor.actor_id,
            lines=normalized,
        )
        logger.info(
            "Created transaction %s (%s, %d lines) by %s",
            transaction_id,
            status.value,
            len(normalized),
            actor.actor_id,
        )
        return transaction_id

    @staticmethod
    def _require_description(description: Optional[str]) -> str:
        description = (description or "").strip()
        if not description:
            raise ValidationError("Transaction description is required")
        return description

    def _validate_lines(self, lines: Sequence[LineInput]) -> list[LineInput]:
        """Validate lines and return them with Decimal amounts.

        Checks run in order: line count, account existence and activation,
        one nonzero non-negative amount per line, then the balance.
        """
        lines = list(lines or [])
        if len(lines) < MIN_LINES:
            raise ValidationError(
                f"A transaction needs at least {MIN_LINES} lines, got {len(lines)}",
                {"line_count": len(lines)},
            )

        account_ids = [line.account_id for line in lines]
        accounts = self.db.get_accounts(account_ids)
        missing = sorted({account_id for account_id in account_ids if account_id not in accounts})
        if missing:
            raise NotFoundError(accounts_not_found(missing), {"account_ids": missing})
        inactive = sorted({acc.id for acc in accounts.values() if not acc.is_active})
        if inactive:
            raise ValidationError(accounts_inactive(inactive), {"account_ids": inactive})

        normalized = []
        for index, line in enumerate(lines, start=1):
            debit = _to_decimal(line.debit, "debit", index)
            credit = _to_decimal(line.credit, "credit", index)
            if debit < 0 or credit < 0:
                raise ValidationError(f"Line {index}: amounts cannot be negative", {"line": index})
            if (debit != 0) == (credit != 0):
                raise ValidationError(
                    f"Line {index}: exactly one of debit or credit must be nonzero",
                    {"line": index},
                )
            normalized.append(
                LineInput(
                    account_id=line.account_id,
                    debit=debit,
                    credit=credit,
                    description=line.description,
                )
            )

        total_debit = sum((line.debit for line in normalized), ZERO)
        total_credit = sum((line.credit for line in normalized), ZERO)
        imbalance = abs(total_debit - total_credit)
        if imbalance > BALANCE_TOLERANCE:
            logger.warning("Rejected unbalanced transaction (imbalance %s)", imbalance)
            raise ValidationError(
                unbalanced_transaction(total_debit, total_credit),
                {
                    "total_debit": total_debit,
                    "total_credit": total_credit,
                    "imbalance": imbalance,
                },
            )
        return normalized

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity (with lines) or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def get_transaction_by_reference(self, reference: str) -> Optional[TransactionEntity]:
        """Get transaction by reference, e.g. "TXN-2024-000001"."""
        return self.db.get_transaction_by_reference(reference.strip().upper())

    def require_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError."""
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id), {"transaction_id": transaction_id})
        return transaction

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Union[str, TransactionStatus, None] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[TransactionEntity]:
        """List transactions with optional filters, newest first.

        Args:
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive)
            status: Optional status filter
            search: Optional text matched against description and reference
            limit: Optional page size
            offset: Number of transactions to skip

        Returns:
            List of transaction entities with their lines
        """
        if status is not None:
            status = parse_status(status)
        if limit is not None and limit < 1:
            raise ValidationError("Limit must be positive")
        if offset < 0:
            raise ValidationError("Offset cannot be negative")
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            status=status,
            search=search,
            limit=limit,
            offset=offset,
        )

    def count_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Union[str, TransactionStatus, None] = None,
        search: Optional[str] = None,
    ) -> int:
        """Count transactions matching the list filters."""
        if status is not None:
            status = parse_status(status)
        return self.db.count_transactions(
            start_date=start_date, end_date=end_date, status=status, search=search
        )

    def update_transaction(
        self,
        actor: Actor,
        transaction_id: int,
        expected_version: int,
        description: Optional[str] = None,
        date: Optional[date] = None,
        lines: Optional[Sequence[LineInput]] = None,
        status: Union[str, TransactionStatus, None] = None,
    ) -> TransactionEntity:
        """Edit a draft transaction.

        Args:
            actor: Caller performing the write
            transaction_id: Transaction ID
            expected_version: Version the caller last read
            description: Optional new description
            date: Optional new date
            lines: Optional replacement lines, validated as on creation
            status: Optional transition to posted

        Returns:
            The updated transaction

        Raises:
            AuthorizationError: If the actor may not write
            NotFoundError: If the transaction does not exist
            ConflictError: If the transaction is not a draft or was changed
                since ``expected_version``
            ValidationError: If the new values are invalid
        """
        require_writer(actor, "update transactions")
        current = self.require_transaction(transaction_id)
        self._require_draft(current)
        self._require_version(current, expected_version)

        if status is not None:
            status = parse_status(status)
            if status == TransactionStatus.DRAFT:
                status = None
            elif status != TransactionStatus.POSTED:
                raise ConflictError(
                    f"Transaction {transaction_id} cannot move from draft to {status.value}",
                    {"status": current.status.value},
                )
        if description is not None:
            description = self._require_description(description)
        normalized = self._validate_lines(lines) if lines is not None else None

        if description is None and date is None and normalized is None and status is None:
            raise ValidationError("No changes given")

        self._compare_and_set(
            current,
            expected_version,
            date=date,
            description=description,
            lines=normalized,
            status=status,
        )
        logger.info("Updated transaction %s by %s", transaction_id, actor.actor_id)
        return self.require_transaction(transaction_id)

    def post_transaction(self, actor: Actor, transaction_id: int) -> TransactionEntity:
        """Move a draft transaction to posted.

        Raises:
            AuthorizationError: If the actor may not write
            NotFoundError: If the transaction does not exist
            ConflictError: If the transaction is not a draft
        """
        require_writer(actor, "post transactions")
        current = self.require_transaction(transaction_id)
        self._require_draft(current)
        self._compare_and_set(current, current.version, status=TransactionStatus.POSTED)
        logger.info("Posted transaction %s by %s", current.reference, actor.actor_id)
        return self.require_transaction(transaction_id)

    def approve_transaction(self, actor: Actor, transaction_id: int) -> TransactionEntity:
        """Move a posted transaction to approved. Approved is terminal.

        Raises:
            AuthorizationError: If the actor does not hold an elevated role
            NotFoundError: If the transaction does not exist
            ConflictError: If the transaction is not posted
        """
        try:
            require_elevated(actor, "approve transactions")
        except AuthorizationError:
            logger.warning("Rejected approval of transaction %s by %s", transaction_id, actor.actor_id)
            raise
        current = self.require_transaction(transaction_id)
        if current.status != TransactionStatus.POSTED:
            raise ConflictError(
                f"Transaction {transaction_id} is {current.status.value}; only posted transactions can be approved",
                {"status": current.status.value},
            )
        self._compare_and_set(
            current,
            current.version,
            status=TransactionStatus.APPROVED,
            approved_by=actor.actor_id,
        )
        logger.info("Approved transaction %s by %s", current.reference, actor.actor_id)
        return self.require_transaction(transaction_id)

    def delete_transaction(self, actor: Actor, transaction_id: int) -> None:
        """Delete a draft transaction and its lines.

        Raises:
            AuthorizationError: If the actor may not write
            NotFoundError: If the transaction does not exist
            ConflictError: If the transaction is not a draft
        """
        require_writer(actor, "delete transactions")
        current = self.require_transaction(transaction_id)
        self._require_draft(current)
        if not self.db.delete_transaction(transaction_id, TransactionStatus.DRAFT):
            self._raise_lost_update(transaction_id, current.version)
        logger.info("Deleted transaction %s by %s", current.reference, actor.actor_id)

    def _require_draft(self, transaction: TransactionEntity) -> None:
        if not transaction.is_draft:
            logger.warning("Rejected change to %s transaction %s", transaction.status.value, transaction.id)
            raise ConflictError(
                transaction_not_draft(transaction.id, transaction.status.value),
                {"status": transaction.status.value},
            )

    def _require_version(self, transaction: TransactionEntity, expected_version: int) -> None:
        if transaction.version != expected_version:
            logger.warning("Rejected stale update of transaction %s", transaction.id)
            raise ConflictError(
                stale_transaction_version(transaction.id, expected_version, transaction.version),
                {"expected_version": expected_version, "version": transaction.version},
            )

    def _compare_and_set(self, current: TransactionEntity, expected_version: int, **changes) -> None:
        updated = self.db.update_transaction(
            current.id,
            expected_version=expected_version,
            expected_status=current.status,
            **changes,
        )
        if not updated:
            self._raise_lost_update(current.id, expected_version)

    def _raise_lost_update(self, transaction_id: int, expected_version: int) -> None:
        """Explain why a guarded write matched no row."""
        latest = self.require_transaction(transaction_id)
        self._require_draft(latest)
        self._require_version(latest, expected_version)
        raise ConflictError(f"Transaction {transaction_id} was modified concurrently")
