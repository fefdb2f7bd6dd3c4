"""CLI helpers for date window resolution."""

from datetime import date

import click

from finledger.domain.date_window import DatePreset, resolve_window
from finledger.domain.entities import DateWindow
from finledger.domain.errors import ValidationError
from finledger.utils.date_parser import parse_date


def window_options(func):
    """Add the shared date window options to a command."""
    options = [
        click.option("--this-month", is_flag=True, help="Filter to the current month (default)"),
        click.option("--last-30-days", is_flag=True, help="Filter to the last 30 days"),
        click.option("--start-date", help="Custom range start (YYYY-MM-DD, 'yesterday', ...)"),
        click.option("--end-date", help="Custom range end (YYYY-MM-DD, 'today', ...)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_cli_window(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    this_month: bool = False,
    last_30_days: bool = False,
    today: date | None = None,
) -> DateWindow:
    """Resolve the CLI date window from preset flags or explicit dates.

    Without any option the window is the current month.
    """
    if this_month and last_30_days:
        click.echo(
            "Error: Only one period option (--this-month, --last-30-days) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if (this_month or last_30_days) and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --last-30-days) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if start_date or end_date:
        today = today or date.today()
        start = None
        end = None
        try:
            start = parse_date(start_date, today=today) if start_date else None
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)
        try:
            end = parse_date(end_date, today=today) if end_date else today
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)
        if start is None:
            start = end.replace(day=1)
        preset = DatePreset.CUSTOM
    else:
        start = end = None
        preset = DatePreset.LAST_30_DAYS if last_30_days else DatePreset.THIS_MONTH

    try:
        return resolve_window(preset, start, end, today=today)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
