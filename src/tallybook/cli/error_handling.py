"""CLI error handling helpers."""

import click

from tallybook.domain.errors import DomainError
from tallybook.domain.payloads import to_json
from tallybook.logging_config import get_logger

logger = get_logger("cli")


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError, as_json: bool = False) -> None:
    """Render a domain error and exit with failure.

    With ``as_json`` a domain error is written as its structured payload
    (``{"error": kind, "reason": ..., "details": ...}``) instead of a line of text.
    """
    if isinstance(error, DomainError):
        logger.debug("Command failed with %s", error.kind, extra={"details": error.details})
        if as_json:
            click.echo(to_json(error.to_dict()), err=True)
            ctx.exit(1)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
