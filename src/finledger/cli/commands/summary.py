"""Summary commands."""

import click
from finledger.cli.company_resolution import resolve_company_or_exit
from finledger.cli.date_filters import resolve_cli_window, window_options
from finledger.domain.company import CompanyService
from finledger.domain.currency import format_currency
from finledger.domain.entities import AggregationMode, AggregationResult
from finledger.domain.summary import SummaryService


def _display_partial(result: AggregationResult) -> None:
    if not result.is_partial:
        return
    if result.unconverted_record_ids:
        ids = ", ".join(str(i) for i in result.unconverted_record_ids)
        click.echo(f"Partial: records without an exchange rate were left out: {ids}")
    for error in result.errors:
        click.echo(f"Partial: skipped record {error.record_id}: {error.message}")


def _display_totals(result: AggregationResult, fallback_currency: str, indent: str = "") -> None:
    currency = result.currency or fallback_currency
    click.echo(f"{indent}Income:   {format_currency(result.total_income, currency)}")
    click.echo(f"{indent}Expenses: {format_currency(result.total_expenses, currency)}")
    click.echo(f"{indent}Net:      {format_currency(result.net, currency)}")


@click.command("summary")
@window_options
@click.option("--company", help="Limit to one company (name or ID)")
@click.option("--personal", is_flag=True, help="Show the personal ledger only")
@click.option("--by-client", is_flag=True, help="Break company income down per client")
@click.option("--exclude-vat", is_flag=True, help="Show totals without VAT")
@click.option("--raw", is_flag=True, help="Sum native amounts without currency conversion")
@click.pass_context
def summary(
    ctx,
    this_month: bool,
    last_30_days: bool,
    start_date: str | None,
    end_date: str | None,
    company: str | None,
    personal: bool,
    by_client: bool,
    exclude_vat: bool,
    raw: bool,
):
    """Show income, expenses and net for a period.

    Without options, shows the dashboard for the current month: totals per
    company in each company's currency, plus global totals converted to the
    base currency.

    Examples:
        finledger summary --last-30-days
        finledger summary --company Acme --by-client --exclude-vat
        finledger summary --personal --start-date 2024-01-01 --end-date 2024-03-31
    """
    if personal and company:
        click.echo("Error: --personal cannot be combined with --company.", err=True)
        ctx.exit(1)
    if by_client and not company:
        click.echo("Error: --by-client requires --company.", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    base_currency = ctx.obj["base_currency"]
    company_obj = None
    if company is not None:
        company_obj = resolve_company_or_exit(ctx, CompanyService(db), company)

    window = resolve_cli_window(
        ctx,
        start_date=start_date,
        end_date=end_date,
        this_month=this_month,
        last_30_days=last_30_days,
    )
    include_vat = not exclude_vat
    mode = AggregationMode.RAW if raw else AggregationMode.NORMALIZED
    service = SummaryService(db, base_currency=base_currency)

    click.echo(f"Summary {window.start} to {window.end}")
    click.echo("VAT included" if include_vat else "VAT excluded")
    if raw:
        click.echo("Raw totals: amounts in different currencies are added as-is")
    click.echo("")

    if personal:
        result = service.personal_summary(window, include_vat=include_vat, mode=mode)
        click.echo("Personal")
        _display_totals(result, base_currency, indent="  ")
        _display_partial(result)
        return

    if company_obj is not None:
        overview = service.company_overview(company_obj.id, window, include_vat=include_vat, mode=mode)
        click.echo(company_obj.name)
        _display_totals(overview.result, company_obj.default_currency, indent="  ")
        if by_client:
            click.echo("")
            click.echo(f"{'Client':<30} {'Income':>16}")
            click.echo("-" * 47)
            for client_summary in service.client_totals(company_obj.id, window, include_vat=include_vat):
                client = client_summary.client
                income = format_currency(client_summary.totals.income, client.preferred_currency)
                click.echo(f"{client.name:<30} {income:>16}")
        _display_partial(overview.result)
        return

    report = service.dashboard(window, include_vat=include_vat, mode=mode)
    if report.companies:
        click.echo(f"{'Company':<30} {'Income':>16} {'Expenses':>16} {'Net':>16}")
        click.echo("-" * 81)
        for company_summary in report.companies:
            currency = company_summary.company.default_currency
            totals = company_summary.totals
            click.echo(
                f"{company_summary.company.name:<30} "
                f"{format_currency(totals.income, currency):>16} "
                f"{format_currency(totals.expenses, currency):>16} "
                f"{format_currency(totals.net, currency):>16}"
            )
        click.echo("")
    else:
        click.echo("No companies found.")
        click.echo("")

    result = report.result
    currency = result.currency or base_currency
    click.echo("Personal expenses: " + format_currency(report.personal_expenses, currency))
    click.echo("Total")
    _display_totals(result, base_currency, indent="  ")
    _display_partial(result)


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
