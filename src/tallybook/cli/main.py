"""Main CLI entry point."""

import click
from tallybook.database.factories import create_database
from tallybook.domain.entities import Actor, Role
from tallybook.domain.errors import InternalError
from tallybook.logging_config import configure_logging

# Import and register all commands at module level
from tallybook.cli.commands import (
    account,
    analytics,
    init_accounts,
    report,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides TALLYBOOK_DB_PATH environment variable)",
    envvar="TALLYBOOK_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL; takes precedence over --db-path",
    envvar="TALLYBOOK_DATABASE_URL",
)
@click.option(
    "--actor",
    default="cli",
    show_default=True,
    help="Identifier recorded as creator/approver of transactions",
    envvar="TALLYBOOK_ACTOR",
)
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role], case_sensitive=False),
    default=Role.ADMIN.value,
    show_default=True,
    help="Role of the actor",
    envvar="TALLYBOOK_ROLE",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="TALLYBOOK_LOG_LEVEL",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    show_default=True,
    envvar="TALLYBOOK_LOG_FORMAT",
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    database_url: str | None,
    actor: str,
    role: str,
    log_level: str,
    log_format: str,
):
    """Tallybook - double-entry bookkeeping for small businesses.

    Record balanced transactions against a chart of accounts and produce
    the balance sheet, income statement, trial balance and analytics.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level, fmt=log_format.lower())

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            db = create_database(database_url=database_url, database_path=db_path)
            db.connect()
            db.initialize_schema()
        except InternalError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)
        ctx.obj["actor"] = Actor(actor_id=actor, role=Role(role.lower()))


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
report.register_commands(cli)
analytics.register_commands(cli)
init_accounts.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
