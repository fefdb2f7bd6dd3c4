"""Company management commands."""

import click
from finledger.cli.company_resolution import resolve_company_or_exit
from finledger.cli.date_filters import resolve_cli_window, window_options
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.company import CompanyService
from finledger.domain.currency import DEFAULT_BASE_CURRENCY, format_currency, supported_codes
from finledger.domain.entities import AggregationMode
from finledger.domain.errors import DomainError
from finledger.domain.summary import SummaryService


@click.group("company")
def company_group():
    """Manage companies."""
    pass


@company_group.command("create")
@click.argument("name")
@click.option(
    "--currency",
    type=click.Choice(supported_codes(), case_sensitive=False),
    default=DEFAULT_BASE_CURRENCY,
    show_default=True,
    help="Default currency of the company",
)
@click.option("--description", help="Company description")
@click.pass_context
def create_company(ctx, name: str, currency: str, description: str | None):
    """Create a new company."""
    service = CompanyService(ctx.obj["db"])
    try:
        company_id = service.create_company(
            name=name, default_currency=currency, description=description
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created company '{name}' (ID: {company_id})")


@company_group.command("list")
@click.pass_context
def list_companies(ctx):
    """List all companies."""
    service = CompanyService(ctx.obj["db"])
    companies = service.list_companies()

    if not companies:
        click.echo("No companies found.")
        return

    click.echo(f"{'ID':<6} {'Name':<30} {'Currency':<8} Description")
    click.echo("-" * 70)
    for company in companies:
        click.echo(
            f"{company.id:<6} {company.name:<30} {company.default_currency:<8} {company.description or ''}"
        )


@company_group.command("show")
@click.argument("company")
@window_options
@click.option("--exclude-vat", is_flag=True, help="Show totals without VAT")
@click.option("--raw", is_flag=True, help="Sum native amounts without currency conversion")
@click.pass_context
def show_company(
    ctx,
    company: str,
    this_month: bool,
    last_30_days: bool,
    start_date: str | None,
    end_date: str | None,
    exclude_vat: bool,
    raw: bool,
):
    """Show a company's income, expenses and net for a period."""
    db = ctx.obj["db"]
    company_obj = resolve_company_or_exit(ctx, CompanyService(db), company)
    window = resolve_cli_window(
        ctx,
        start_date=start_date,
        end_date=end_date,
        this_month=this_month,
        last_30_days=last_30_days,
    )

    summary_service = SummaryService(db, base_currency=ctx.obj["base_currency"])
    mode = AggregationMode.RAW if raw else AggregationMode.NORMALIZED
    overview = summary_service.company_overview(
        company_obj.id, window, include_vat=not exclude_vat, mode=mode
    )
    result = overview.result
    currency = result.currency or company_obj.default_currency

    click.echo(f"{company_obj.name} ({window.start} to {window.end})")
    click.echo(f"  Income:   {format_currency(result.total_income, currency)}")
    click.echo(f"  Expenses: {format_currency(result.total_expenses, currency)}")
    click.echo(f"  Net:      {format_currency(result.net, currency)}")
    click.echo(f"  Clients:  {overview.client_count}")
    click.echo(f"  Projects: {overview.project_count}")
    click.echo("  VAT excluded" if exclude_vat else "  VAT included")
    if result.is_partial:
        click.echo(
            f"  Partial: {len(result.errors)} invalid and "
            f"{len(result.unconverted_record_ids)} unconverted records excluded"
        )


@company_group.command("delete")
@click.argument("company")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_company(ctx, company: str, yes: bool):
    """Delete a company with all its clients, projects and records."""
    service = CompanyService(ctx.obj["db"])
    company_obj = resolve_company_or_exit(ctx, service, company)

    if not yes:
        click.confirm(
            f"Delete company '{company_obj.name}' and all of its records?", abort=True
        )

    try:
        service.delete_company(company_obj.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted company '{company_obj.name}'")


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group)
