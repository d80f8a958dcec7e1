"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Any, Iterable, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. Each error carries a
    machine-readable ``kind`` and optional structured ``details``.
    """

    kind = "domain_error"

    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__(reason)
        self.reason = reason
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Return the error as a structured payload."""
        payload: dict[str, Any] = {"error": self.kind, "reason": self.reason}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    kind = "validation_error"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    kind = "not_found"


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or illegal state changes."""

    kind = "conflict"


class AuthorizationError(DomainError):
    """Actor role is insufficient for the requested operation."""

    kind = "authorization_error"


class InternalError(DomainError):
    """Store unavailable or unexpected failure."""

    kind = "internal_error"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_code_not_found(code: str) -> str:
    """Return message for missing account by code."""
    return f"Account with code '{code}' not found"


def accounts_not_found(account_ids: Iterable[int]) -> str:
    """Return message for several missing accounts."""
    ids = ", ".join(str(account_id) for account_id in account_ids)
    return f"Accounts not found: {ids}"


def accounts_inactive(account_ids: Iterable[int]) -> str:
    """Return message for inactive accounts referenced by lines."""
    ids = ", ".join(str(account_id) for account_id in account_ids)
    return f"Accounts are inactive: {ids}"


def duplicate_account_code(code: str) -> str:
    """Return message for duplicate account code."""
    return f"Account with code '{code}' already exists"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def transaction_not_draft(transaction_id: int, status: str) -> str:
    """Return message when a non-draft transaction is mutated."""
    return f"Transaction {transaction_id} is {status}; only draft transactions can be modified"


def stale_transaction_version(transaction_id: int, expected: int, actual: int) -> str:
    """Return message for an optimistic concurrency failure."""
    return (
        f"Transaction {transaction_id} was modified concurrently "
        f"(expected version {expected}, found {actual})"
    )


def unbalanced_transaction(total_debit: Decimal, total_credit: Decimal) -> str:
    """Return message for a transaction whose debits and credits differ."""
    imbalance = abs(total_debit - total_credit)
    return (
        f"Transaction must balance: debits {total_debit:.2f} != credits {total_credit:.2f} "
        f"(imbalance {imbalance:.2f})"
    )


def account_in_use(account_id: int, line_count: int, child_count: int) -> str:
    """Return message when account has dependent lines or child accounts."""
    parts = []
    if line_count > 0:
        parts.append(f"{line_count} transaction line{'s' if line_count != 1 else ''}")
    if child_count > 0:
        parts.append(f"{child_count} child account{'s' if child_count != 1 else ''}")
    return f"Cannot delete account {account_id}: it has {', '.join(parts)}."


def role_not_permitted(role: str, action: str) -> str:
    """Return message when an actor's role may not perform an action."""
    return f"Role '{role}' is not permitted to {action}"
