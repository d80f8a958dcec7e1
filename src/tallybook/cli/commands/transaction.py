"""Transaction management commands."""

import click
from tallybook.cli.account_resolution import resolve_account_or_exit
from tallybook.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from tallybook.cli.error_handling import handle_domain_error
from tallybook.domain.account import AccountService
from tallybook.domain.entities import LineInput, Transaction, TransactionStatus
from tallybook.domain.errors import DomainError, NotFoundError, transaction_not_found
from tallybook.domain.payloads import to_json, transaction_payload, transactions_payload
from tallybook.domain.transaction import TransactionService
from tallybook.utils.amount_parser import format_amount, parse_line_amount
from tallybook.utils.date_parser import parse_date

STATUSES = [s.value for s in TransactionStatus]


@click.group()
def transaction_group():
    """Record and manage journal transactions."""
    pass


def _build_lines(ctx, account_service: AccountService, debits, credits) -> list[LineInput]:
    """Turn --debit/--credit CODE:AMOUNT options into line inputs."""
    lines = []
    for spec, side in [(d, "debit") for d in debits] + [(c, "credit") for c in credits]:
        try:
            code, amount = parse_line_amount(spec)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        account_id = resolve_account_or_exit(ctx, account_service, code)
        if side == "debit":
            lines.append(LineInput(account_id=account_id, debit=amount))
        else:
            lines.append(LineInput(account_id=account_id, credit=amount))
    return lines


def _find_transaction(ctx, service: TransactionService, identifier: str, as_json: bool = False) -> Transaction:
    """Look up a transaction by ID or reference, or exit."""
    if identifier.isdigit():
        txn = service.get_transaction(int(identifier))
    else:
        txn = service.get_transaction_by_reference(identifier)
    if txn is None:
        handle_domain_error(ctx, NotFoundError(transaction_not_found(identifier)), as_json=as_json)
    return txn


def _display_transaction(txn: Transaction, accounts: dict) -> None:
    click.echo(f"\n{txn.reference}  {txn.date}  [{txn.status.value}]  v{txn.version}")
    click.echo(f"  {txn.description}")
    click.echo(f"  Created by: {txn.created_by}" + (f"  Approved by: {txn.approved_by}" if txn.approved_by else ""))
    click.echo("-" * 80)
    click.echo(f"  {'Account':<40} {'Debit':>16} {'Credit':>16}")
    for line in txn.lines:
        acc = accounts.get(line.account_id)
        label = f"{acc.code} {acc.name}" if acc else str(line.account_id)
        debit = format_amount(line.debit) if line.debit else ""
        credit = format_amount(line.credit) if line.credit else ""
        click.echo(f"  {label[:40]:<40} {debit:>16} {credit:>16}")
    click.echo(f"  {'Total':<40} {format_amount(txn.total_debit):>16} {format_amount(txn.total_credit):>16}")


def _accounts_for(account_service: AccountService, transactions) -> dict:
    ids = {line.account_id for txn in transactions for line in txn.lines}
    return account_service.db.get_accounts(ids)


@transaction_group.command("add")
@click.option("--date", "txn_date", default="today", show_default=True, help="Transaction date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--description", "-m", required=True, help="Transaction description")
@click.option("--debit", "debits", multiple=True, metavar="CODE:AMOUNT", help="Debit line (repeatable)")
@click.option("--credit", "credits", multiple=True, metavar="CODE:AMOUNT", help="Credit line (repeatable)")
@click.option("--post", is_flag=True, help="Post immediately instead of saving as draft")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def add_transaction(ctx, txn_date: str, description: str, debits, credits, post: bool, as_json: bool):
    """Record a balanced transaction.

    Examples:
        tallybook transaction add -m "Owner investment" --debit 1020:10000 --credit 3010:10000
        tallybook transaction add -m "Office rent" --date 2024-03-01 --debit 5010:1500 --credit 1020:1500 --post
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    try:
        parsed_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    lines = _build_lines(ctx, account_service, debits, credits)
    status = TransactionStatus.POSTED if post else TransactionStatus.DRAFT

    try:
        transaction_id = service.create_transaction(
            ctx.obj["actor"], parsed_date, description, lines, status=status
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
        return

    txn = service.get_transaction(transaction_id)
    if as_json:
        click.echo(to_json(transaction_payload(txn, _accounts_for(account_service, [txn]))))
    else:
        click.echo(f"Created transaction {txn.reference} (ID: {txn.id}, {txn.status.value})")


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.option("--status", type=click.Choice(STATUSES, case_sensitive=False), help="Filter by status")
@click.option("--search", help="Match description or reference")
@click.option("--limit", type=click.IntRange(min=1), help="Maximum number of transactions")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Transactions to skip")
@click.option("--verbose", "-v", is_flag=True, help="Show transaction lines")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    status: str | None,
    search: str | None,
    limit: int | None,
    offset: int,
    verbose: bool,
    as_json: bool,
    **periods,
):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )

    try:
        transactions = service.list_transactions(
            start_date=start, end_date=end, status=status, search=search, limit=limit, offset=offset
        )
        total = service.count_transactions(start_date=start, end_date=end, status=status, search=search)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
        return

    accounts = _accounts_for(account_service, transactions)
    if as_json:
        click.echo(to_json(transactions_payload(transactions, accounts, total=total, limit=limit, offset=offset)))
        return

    if not transactions:
        click.echo("No transactions found.")
        return

    if verbose:
        click.echo(f"\nFound {total} transaction(s):")
        for txn in transactions:
            _display_transaction(txn, accounts)
        return

    click.echo(f"\nFound {total} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Reference':<16} {'Date':<12} {'Status':<10} {'Amount':>14}  {'Description':<36}")
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {txn.reference:<16} {str(txn.date):<12} {txn.status.value:<10} "
            f"{format_amount(txn.total_debit):>14}  {txn.description[:36]:<36}"
        )
    if len(transactions) < total:
        click.echo(f"Showing {offset + 1}-{offset + len(transactions)} of {total}")


@transaction_group.command("show")
@click.argument("transaction")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def show_transaction(ctx, transaction: str, as_json: bool):
    """Show a transaction by ID or reference."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)
    txn = _find_transaction(ctx, service, transaction, as_json=as_json)
    accounts = _accounts_for(account_service, [txn])
    if as_json:
        click.echo(to_json(transaction_payload(txn, accounts)))
    else:
        _display_transaction(txn, accounts)


@transaction_group.command("update")
@click.argument("transaction")
@click.option("--date", "txn_date", help="New transaction date")
@click.option("--description", "-m", help="New description")
@click.option("--debit", "debits", multiple=True, metavar="CODE:AMOUNT", help="Replacement debit line (repeatable)")
@click.option("--credit", "credits", multiple=True, metavar="CODE:AMOUNT", help="Replacement credit line (repeatable)")
@click.option("--post", is_flag=True, help="Post the transaction after applying changes")
@click.option(
    "--expected-version",
    type=int,
    help="Fail if the transaction changed since this version (defaults to the current version)",
)
@click.pass_context
def update_transaction(
    ctx,
    transaction: str,
    txn_date: str | None,
    description: str | None,
    debits,
    credits,
    post: bool,
    expected_version: int | None,
) -> None:
    """Update a draft transaction.

    Giving any --debit/--credit replaces all lines.

    Examples:
        tallybook transaction update 1 -m "Office rent (March)"
        tallybook transaction update 1 --debit 5010:1600 --credit 1020:1600
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)
    txn = _find_transaction(ctx, service, transaction)

    parsed_date = None
    if txn_date is not None:
        try:
            parsed_date = parse_date(txn_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    lines = None
    if debits or credits:
        lines = _build_lines(ctx, account_service, debits, credits)

    try:
        updated = service.update_transaction(
            ctx.obj["actor"],
            txn.id,
            expected_version=expected_version if expected_version is not None else txn.version,
            description=description,
            date=parsed_date,
            lines=lines,
            status=TransactionStatus.POSTED if post else None,
        )
        click.echo(f"Updated transaction {updated.reference} (version {updated.version}, {updated.status.value})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("post")
@click.argument("transaction")
@click.pass_context
def post_transaction(ctx, transaction: str) -> None:
    """Post a draft transaction so it counts in balances."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    txn = _find_transaction(ctx, service, transaction)
    try:
        posted = service.post_transaction(ctx.obj["actor"], txn.id)
        click.echo(f"Posted transaction {posted.reference}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("approve")
@click.argument("transaction")
@click.pass_context
def approve_transaction(ctx, transaction: str) -> None:
    """Approve a posted transaction (admin or accountant only)."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    txn = _find_transaction(ctx, service, transaction)
    try:
        approved = service.approve_transaction(ctx.obj["actor"], txn.id)
        click.echo(f"Approved transaction {approved.reference} by {approved.approved_by}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction: str, yes: bool) -> None:
    """Delete a draft transaction.

    Examples:
        tallybook transaction delete 1
        tallybook transaction delete TXN-2024-000001 --yes
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    txn = _find_transaction(ctx, service, transaction)

    # Confirm deletion
    if not yes and not click.confirm(f"Are you sure you want to delete transaction {txn.reference}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(ctx.obj["actor"], txn.id)
        click.echo(f"Deleted transaction {txn.reference}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
