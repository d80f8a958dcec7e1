"""Role checks for ledger mutations."""

from typing import Union

from tallybook.domain.entities import Actor, Role
from tallybook.domain.errors import AuthorizationError, ValidationError, role_not_permitted


def parse_role(value: Union[str, Role]) -> Role:
    """Parse a role name.

    Raises:
        ValidationError: If the role is unknown
    """
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(r.value for r in Role)
        raise ValidationError(f"Invalid role '{value}'. Expected one of: {choices}") from None


def require_writer(actor: Actor, action: str) -> None:
    """Raise AuthorizationError unless the actor may write to the ledger."""
    if not actor.can_write:
        raise AuthorizationError(
            role_not_permitted(actor.role.value, action),
            {"actor_id": actor.actor_id, "role": actor.role.value},
        )


def require_elevated(actor: Actor, action: str) -> None:
    """Raise AuthorizationError unless the actor holds an elevated role."""
    if not actor.is_elevated:
        raise AuthorizationError(
            role_not_permitted(actor.role.value, action),
            {"actor_id": actor.actor_id, "role": actor.role.value},
        )
