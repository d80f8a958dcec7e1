"""Analytics command."""

import click
from tallybook.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from tallybook.cli.error_handling import handle_domain_error
from tallybook.domain.analytics import AnalyticsService
from tallybook.domain.entities import DateRange
from tallybook.domain.errors import DomainError
from tallybook.domain.payloads import analytics_payload, to_json
from tallybook.utils.amount_parser import format_amount
from tallybook.utils.date_parser import get_date_range


def _trend_arrow(change: float) -> str:
    return "+" if change >= 0 else "-"


@click.command("analytics")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@period_options
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.pass_context
def analytics(ctx, start_date: str | None, end_date: str | None, as_json: bool, **periods):
    """Show KPIs, monthly trends and a comparison with the previous period.

    Defaults to the last twelve months.

    Examples:
        tallybook analytics
        tallybook analytics --this-year --json
    """
    db = ctx.obj["db"]
    service = AnalyticsService(db)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(periods),
        default_range=get_date_range("last-12-months"),
    )
    if start is None or end is None:
        click.echo("Error: Analytics need both --start-date and --end-date.", err=True)
        ctx.exit(1)

    try:
        report = service.build_analytics(DateRange(start=start, end=end))
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
        return

    if as_json:
        click.echo(to_json(analytics_payload(report)))
        return

    comparison = report.comparison
    current = comparison.current
    previous = comparison.previous
    click.echo(f"Analytics {start} to {end}")
    click.echo("=" * 72)
    for label, value, change in [
        ("Revenue", current.revenue, comparison.revenue_change),
        ("Expenses", current.expenses, comparison.expenses_change),
        ("Profit", current.profit, comparison.profit_change),
        ("Cash flow", current.cash_flow, comparison.cash_flow_change),
    ]:
        click.echo(f"{label:<12} {format_amount(value):>16}  {_trend_arrow(change)}{abs(change):.1f}% vs previous period")
    click.echo(
        f"Profit margin: {report.profit_margin * 100:.2f}% | Expense ratio: {report.expense_ratio * 100:.2f}% | "
        f"Average monthly growth: {report.growth.average_growth:.2f}%"
    )
    click.echo(f"Previous period: {previous.date_range.start} to {previous.date_range.end}")

    click.echo(f"\n{'Month':<10} {'Revenue':>16} {'Expenses':>16} {'Profit':>16}")
    click.echo("-" * 72)
    for trend in report.monthly_trends:
        click.echo(
            f"{trend.label:<10} {format_amount(trend.revenue):>16} "
            f"{format_amount(trend.expenses):>16} {format_amount(trend.profit):>16}"
        )

    for title, items in [("Top expenses", report.expense_breakdown), ("Revenue sources", report.revenue_sources)]:
        if not items:
            continue
        click.echo(f"\n{title}")
        click.echo("-" * 72)
        for item in items[:10]:
            click.echo(f"  {item.code:<8} {item.name[:36]:<36} {format_amount(item.value):>14} {item.percentage:>6.1f}%")


def register_commands(cli):
    """Register analytics command with main CLI."""
    cli.add_command(analytics)
