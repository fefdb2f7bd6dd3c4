"""Client management commands."""

import click
from finledger.cli.company_resolution import resolve_company_or_exit
from finledger.cli.date_filters import resolve_cli_window, window_options
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.company import CompanyService
from finledger.domain.currency import format_currency, supported_codes
from finledger.domain.errors import DomainError
from finledger.domain.summary import SummaryService
from finledger.utils.amount_parser import parse_amount


@click.group("client")
def client_group():
    """Manage company clients."""
    pass


@client_group.command("add")
@click.argument("company")
@click.argument("name")
@click.option(
    "--currency",
    type=click.Choice(supported_codes(), case_sensitive=False),
    help="Preferred currency (defaults to the company currency)",
)
@click.option("--website", help="Client website")
@click.option("--budget", help="Monthly budget")
@click.option("--months", type=int, help="Contract length in months")
@click.option("--payment-method", help="Payment method")
@click.option("--service", "services", multiple=True, help="Service provided (repeatable)")
@click.option("--notes", help="Notes")
@click.pass_context
def add_client(
    ctx,
    company: str,
    name: str,
    currency: str | None,
    website: str | None,
    budget: str | None,
    months: int | None,
    payment_method: str | None,
    services: tuple[str, ...],
    notes: str | None,
):
    """Add a client to a company.

    Examples:
        finledger client add Acme "Globex" --currency USD --budget 5000 --service "Brand Strategy"
    """
    service = CompanyService(ctx.obj["db"])
    company_obj = resolve_company_or_exit(ctx, service, company)

    monthly_budget = None
    if budget is not None:
        try:
            monthly_budget = parse_amount(budget)
        except ValueError as e:
            click.echo(f"Error: Invalid budget: {e}", err=True)
            ctx.exit(1)

    try:
        client_id = service.add_client(
            company_id=company_obj.id,
            name=name,
            preferred_currency=currency,
            website=website,
            monthly_budget=monthly_budget,
            contract_months=months,
            payment_method=payment_method,
            services=services,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added client '{name}' to {company_obj.name} (ID: {client_id})")


@client_group.command("list")
@click.argument("company")
@window_options
@click.option("--exclude-vat", is_flag=True, help="Show income without VAT")
@click.pass_context
def list_clients(
    ctx,
    company: str,
    this_month: bool,
    last_30_days: bool,
    start_date: str | None,
    end_date: str | None,
    exclude_vat: bool,
):
    """List a company's clients with their income for a period.

    Income is shown in each client's preferred currency; income recorded in
    other currencies is not counted.
    """
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
    summaries = summary_service.client_totals(company_obj.id, window, include_vat=not exclude_vat)
    if not summaries:
        click.echo("No clients found.")
        return

    click.echo(f"{'ID':<6} {'Name':<28} {'Currency':<8} {'Budget':>14} {'Income':>16}")
    click.echo("-" * 76)
    for summary in summaries:
        client = summary.client
        budget = (
            format_currency(client.monthly_budget, client.preferred_currency)
            if client.monthly_budget is not None
            else "-"
        )
        income = format_currency(summary.totals.income, client.preferred_currency)
        click.echo(
            f"{client.id:<6} {client.name:<28} {client.preferred_currency:<8} {budget:>14} {income:>16}"
        )


def register_commands(cli):
    """Register client commands with main CLI."""
    cli.add_command(client_group)
