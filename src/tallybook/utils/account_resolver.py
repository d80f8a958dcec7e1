"""Utility for resolving account codes and names to IDs."""

from tallybook.domain.account import AccountService
from tallybook.domain.errors import NotFoundError, account_code_not_found


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve an account code, name or ID to an account ID.

    Codes take precedence because they are usually numeric ("1020").
    A value written as "#12" is always treated as an ID.

    Args:
        account_service: AccountService instance
        account: Account code, name, "#ID" or integer ID

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account matches
    """
    if isinstance(account, int):
        return account_service.require_account(account).id

    value = account.strip()
    if value.startswith("#") and value[1:].isdigit():
        return account_service.require_account(int(value[1:])).id

    by_code = account_service.get_account_by_code(value)
    if by_code is not None:
        return by_code.id

    lowered = value.lower()
    for acc in account_service.list_accounts():
        if acc.name.lower() == lowered:
            return acc.id

    raise NotFoundError(account_code_not_found(value.upper()), {"code": value})
