"""Financial report commands."""

from datetime import date

import click
from tallybook.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from tallybook.cli.error_handling import handle_domain_error
from tallybook.domain.entities import DateRange, StatementSection
from tallybook.domain.errors import DomainError
from tallybook.domain.payloads import (
    balance_sheet_payload,
    income_statement_payload,
    to_json,
    trial_balance_payload,
)
from tallybook.domain.statements import StatementService
from tallybook.utils.amount_parser import format_amount
from tallybook.utils.date_parser import get_date_range, parse_date

WIDTH = 72


@click.group()
def report_group():
    """Generate financial statements."""
    pass


def _display_section(title: str, section: StatementSection, by_category: bool) -> None:
    click.echo(f"\n{title}")
    click.echo("-" * WIDTH)
    if by_category and section.categories:
        for name, group in section.categories.items():
            click.echo(f"  {name.replace('_', ' ').title()}")
            for line in group.lines:
                label = f"{line.code} {line.name}" if line.code else line.name
                click.echo(f"    {label[:46]:<46} {format_amount(line.balance):>16}")
            click.echo(f"  {'Total ' + name.replace('_', ' '):<48} {format_amount(group.total):>16}")
    else:
        for line in section.lines:
            label = f"{line.code} {line.name}" if line.code else line.name
            click.echo(f"  {label[:46]:<46} {format_amount(line.balance):>16} {line.percentage:>6.1f}%")
    click.echo(f"{'Total ' + title.lower():<50} {format_amount(section.total):>16}")


def _parse_as_of(ctx, as_of: str | None) -> date:
    if as_of is None:
        return date.today()
    try:
        return parse_date(as_of)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)


@report_group.command("balance-sheet")
@click.option("--as-of", help="Last date included (defaults to today)")
@click.option("--start-date", help="First date included (defaults to the beginning of the ledger)")
@click.option("--by-category", is_flag=True, help="Group accounts by category")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def balance_sheet(ctx, as_of: str | None, start_date: str | None, by_category: bool, as_json: bool):
    """Show assets, liabilities and equity as of a date."""
    db = ctx.obj["db"]
    service = StatementService(db)

    as_of_date = _parse_as_of(ctx, as_of)
    start = None
    if start_date:
        start, _ = resolve_cli_date_range(ctx, start_date=start_date, end_date=None, period_flags={})

    try:
        sheet = service.balance_sheet(as_of_date, range_start=start)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
        return

    if as_json:
        click.echo(to_json(balance_sheet_payload(sheet)))
        return

    click.echo(f"Balance Sheet as of {sheet.as_of}" + (f" (from {sheet.range_start})" if sheet.range_start else ""))
    _display_section("Assets", sheet.assets, by_category)
    _display_section("Liabilities", sheet.liabilities, by_category)
    _display_section("Equity", sheet.equity, by_category)
    click.echo("=" * WIDTH)
    click.echo(
        f"{'Total liabilities and equity':<50} "
        f"{format_amount(sheet.total_liabilities + sheet.total_equity):>16}"
    )
    if sheet.is_balanced:
        click.echo("Balanced: yes")
    else:
        click.echo(f"Balanced: NO (difference {format_amount(sheet.difference)})")
    ratios = sheet.ratios
    click.echo(
        f"Debt to equity: {ratios.debt_to_equity:.2f} | Debt to assets: {ratios.debt_to_asset:.2f} | "
        f"Current ratio: {ratios.current_ratio:.2f}"
    )


@report_group.command("income-statement")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@period_options
@click.option("--by-category", is_flag=True, help="Group accounts by category")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def income_statement(
    ctx, start_date: str | None, end_date: str | None, by_category: bool, as_json: bool, **periods
):
    """Show revenue, expenses and net income for a period (defaults to this month)."""
    db = ctx.obj["db"]
    service = StatementService(db)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(periods),
        default_range=get_date_range("this-month"),
    )

    try:
        statement = service.income_statement(DateRange(start=start, end=end))
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
        return

    if as_json:
        click.echo(to_json(income_statement_payload(statement)))
        return

    click.echo(f"Income Statement {start or 'beginning'} to {end or 'today'}")
    _display_section("Revenue", statement.revenues, by_category)
    _display_section("Expenses", statement.expenses, by_category)
    click.echo("=" * WIDTH)
    click.echo(f"{'Net income':<50} {format_amount(statement.net_income):>16}")
    click.echo(
        f"Profit margin: {statement.profit_margin * 100:.2f}% | Expense ratio: {statement.expense_ratio * 100:.2f}%"
    )


@report_group.command("trial-balance")
@click.option("--start-date", help="Start date (defaults to the beginning of the ledger)")
@click.option("--end-date", help="End date (defaults to today)")
@period_options
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def trial_balance(ctx, start_date: str | None, end_date: str | None, as_json: bool, **periods):
    """List account balances in debit and credit columns."""
    db = ctx.obj["db"]
    service = StatementService(db)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )

    try:
        trial = service.trial_balance(DateRange(start=start, end=end))
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
        return

    if as_json:
        click.echo(to_json(trial_balance_payload(trial)))
        return

    if not trial.lines:
        click.echo("No balances found.")
        return

    click.echo(f"\n{'Code':<8} {'Account':<32} {'Debit':>14} {'Credit':>14}")
    click.echo("-" * WIDTH)
    for line in trial.lines:
        debit = format_amount(line.debit) if line.debit else ""
        credit = format_amount(line.credit) if line.credit else ""
        click.echo(f"{line.code:<8} {line.name[:32]:<32} {debit:>14} {credit:>14}")
    click.echo("-" * WIDTH)
    click.echo(f"{'Total':<41} {format_amount(trial.total_debits):>14} {format_amount(trial.total_credits):>14}")
    click.echo("Balanced: yes" if trial.is_balanced else f"Balanced: NO (difference {format_amount(trial.difference)})")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
