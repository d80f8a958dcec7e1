"""Account management commands."""

import click
from tallybook.cli.account_resolution import resolve_account_or_exit
from tallybook.cli.error_handling import handle_domain_error
from tallybook.database.base import UNSET
from tallybook.domain.account import AccountService
from tallybook.domain.balance import BalanceCalculator
from tallybook.domain.entities import AccountType, NormalBalance
from tallybook.domain.errors import DomainError
from tallybook.domain.payloads import account_payload, accounts_payload, money, to_json
from tallybook.utils.amount_parser import format_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    required=True,
    help="Account type",
)
@click.option(
    "--normal-balance",
    type=click.Choice([s.value for s in NormalBalance], case_sensitive=False),
    help="Override the type's default normal balance",
)
@click.option("--parent", help="Parent account code")
@click.option("--description", help="Account description")
@click.option("--category", help="Statement grouping, e.g. 'current' or 'operating'")
@click.pass_context
def create_account(
    ctx,
    code: str,
    name: str,
    account_type: str,
    normal_balance: str | None,
    parent: str | None,
    description: str | None,
    category: str | None,
):
    """Create a new account.

    Examples:
        tallybook account create 1020 "Business Checking" --type asset --category current
        tallybook account create 3020 "Owner Drawings" --type equity --normal-balance debit
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    parent_id = None
    if parent:
        parent_id = resolve_account_or_exit(ctx, service, parent)

    try:
        account_id = service.create_account(
            code=code,
            name=name,
            account_type=account_type,
            normal_balance=normal_balance,
            parent_id=parent_id,
            description=description,
            category=category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    acc = service.get_account(account_id)
    click.echo(f"Created account {acc.code} '{acc.name}' (ID: {account_id}, {acc.type.value}, normal {acc.normal_balance.value})")


@account_group.command("list")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES, case_sensitive=False), help="Filter by type")
@click.option("--active/--inactive", "is_active", default=None, help="Filter by activation state")
@click.option("--tree", is_flag=True, help="Show the account hierarchy")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def list_accounts(ctx, account_type: str | None, is_active: bool | None, tree: bool, as_json: bool):
    """List accounts ordered by code."""
    db = ctx.obj["db"]
    service = AccountService(db)

    if tree:
        _display_tree(service.get_account_tree())
        return

    accounts = service.list_accounts(account_type=account_type, is_active=is_active)
    if as_json:
        click.echo(to_json(accounts_payload(accounts)))
        return

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"{acc.code:<8} {acc.name:<32} {acc.type.value:<10} {acc.normal_balance.value:<7} "
            f"{acc.category or '':<16}{status}"
        )


def _display_tree(nodes, indent: int = 0):
    if not nodes and indent == 0:
        click.echo("No accounts found.")
        return
    for node in nodes:
        status = "" if node["is_active"] else " (inactive)"
        click.echo(f"{'    ' * indent}{node['code']} {node['name']}{status}")
        _display_tree(node["children"], indent + 1)


@account_group.command("show")
@click.argument("account")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def show_account(ctx, account: str, as_json: bool):
    """Show an account and its current balance (posted and approved transactions)."""
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    balance = BalanceCalculator(db).compute_balance(account_id)
    acc = balance.account
    if as_json:
        payload = account_payload(acc)
        payload["balance"] = money(balance.balance)
        payload["lineCount"] = balance.line_count
        click.echo(to_json(payload))
        return

    click.echo(f"{acc.code} {acc.name}")
    click.echo(f"  Type: {acc.type.value} (normal balance: {acc.normal_balance.value})")
    click.echo(f"  Active: {'yes' if acc.is_active else 'no'}")
    if acc.category:
        click.echo(f"  Category: {acc.category}")
    if acc.parent_id is not None:
        parent = service.get_account(acc.parent_id)
        click.echo(f"  Parent: {parent.code} {parent.name}" if parent else f"  Parent: {acc.parent_id}")
    if acc.description:
        click.echo(f"  Description: {acc.description}")
    click.echo(f"  Balance: {format_amount(balance.balance)} ({balance.line_count} lines)")


@account_group.command("update")
@click.argument("account")
@click.option("--name", help="New account name")
@click.option("--description", help="New description (empty string to clear)")
@click.option("--category", help="New category (empty string to clear)")
@click.option("--parent", help="New parent account code (empty string to clear)")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    description: str | None,
    category: str | None,
    parent: str | None,
):
    """Update an account's name, description, category or parent.

    Examples:
        tallybook account update 1020 --name "Operating Checking"
        tallybook account update 1020 --parent ""  # Clear parent
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    parent_id = UNSET
    if parent is not None:
        parent_id = resolve_account_or_exit(ctx, service, parent) if parent else None

    try:
        service.update_account(
            account_id,
            name=name,
            description=UNSET if description is None else (description or None),
            category=UNSET if category is None else (category or None),
            parent_id=parent_id,
        )
        click.echo(f"Updated account {account}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("deactivate")
@click.argument("account")
@click.pass_context
def deactivate_account(ctx, account: str):
    """Deactivate an account that has no transaction lines."""
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.deactivate_account(account_id)
        click.echo(f"Deactivated account {account}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("activate")
@click.argument("account")
@click.pass_context
def activate_account(ctx, account: str):
    """Re-activate an account."""
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.activate_account(account_id)
        click.echo(f"Activated account {account}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool):
    """Delete an account.

    Accounts referenced by transaction lines or with child accounts cannot be deleted.

    Examples:
        tallybook account delete 1040
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.get_account(account_id)

    if not yes and not click.confirm(f"Are you sure you want to delete account {acc.code} '{acc.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account {acc.code} '{acc.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
