"""CLI helpers for date range resolution."""

from datetime import date
from typing import Any

import click

from tallybook.utils.date_parser import PERIODS, get_date_range, parse_date

PERIOD_HELP = {
    "this-month": "Current month to date",
    "this-quarter": "Current quarter to date",
    "this-year": "Current year to date",
    "this-week": "Current week to date",
    "last-month": "Previous calendar month",
    "last-quarter": "Previous calendar quarter",
    "last-year": "Previous calendar year",
    "last-week": "Previous week (Monday to Sunday)",
    "last-12-months": "Current month and the eleven before it",
}


def period_options(func):
    """Add one flag per named period (--this-month, --last-year, ...)."""
    for period in reversed(PERIODS):
        func = click.option(
            f"--{period}", period.replace("-", "_"), is_flag=True, help=PERIOD_HELP[period]
        )(func)
    return func


def pop_period_flags(kwargs: dict[str, Any]) -> dict[str, bool]:
    """Remove the period flags added by period_options from command kwargs."""
    return {period: bool(kwargs.pop(period.replace("-", "_"), False)) for period in PERIODS}


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    selected = [period for period, is_set in period_flags.items() if is_set]

    if len(selected) > 1:
        flags = ", ".join(f"--{period}" for period in selected)
        click.echo(f"Error: Only one period option can be specified at a time (got {flags}).", err=True)
        ctx.exit(1)

    if selected and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if selected:
        return get_date_range(selected[0])

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is None and end is None and default_range is not None:
        start, end = default_range

    if start is not None and end is not None and start > end:
        click.echo(f"Error: Start date {start} is after end date {end}", err=True)
        ctx.exit(1)

    return start, end
