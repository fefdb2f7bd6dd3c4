"""CSV export command."""

import click
from finledger.cli.company_resolution import resolve_company_or_exit
from finledger.cli.date_filters import resolve_cli_window, window_options
from finledger.domain.company import CompanyService
from finledger.domain.entities import RecordKind, Scope
from finledger.domain.export import export_rows, records_to_csv
from finledger.domain.ledger import LedgerService


def _display_names(company_service: CompanyService, company_ids) -> dict[tuple[str, int], str]:
    names = {}
    for company_id in company_ids:
        for client in company_service.list_clients(company_id):
            names[("client", client.id)] = client.name
        for project in company_service.list_projects(company_id):
            names[("project", project.id)] = project.name
    return names


@click.command("export")
@click.argument("kind", type=click.Choice([k.value for k in RecordKind]))
@click.option("--company", help="Company name or ID")
@click.option("--personal", is_flag=True, help="Export the personal ledger")
@window_options
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    help="Write CSV to this file instead of stdout",
)
@click.pass_context
def export(
    ctx,
    kind: str,
    company: str | None,
    personal: bool,
    this_month: bool,
    last_30_days: bool,
    start_date: str | None,
    end_date: str | None,
    output: str | None,
):
    """Export income or expense records in a period as CSV.

    Examples:
        finledger export income --company Acme --last-30-days -o income.csv
        finledger export expense --personal --start-date 2024-01-01 --end-date 2024-12-31
    """
    if personal and company:
        click.echo("Error: --personal cannot be combined with --company.", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    company_service = CompanyService(db)
    company_obj = None
    if company is not None:
        company_obj = resolve_company_or_exit(ctx, company_service, company)

    window = resolve_cli_window(
        ctx,
        start_date=start_date,
        end_date=end_date,
        this_month=this_month,
        last_30_days=last_30_days,
    )

    if personal:
        scope = Scope.PERSONAL
    elif company_obj is not None:
        scope = Scope.COMPANY
    else:
        scope = None

    ledger = LedgerService(db, base_currency=ctx.obj["base_currency"])
    records = ledger.list_records(
        kind=kind,
        scope=scope,
        company_id=company_obj.id if company_obj else None,
        window=window,
    )

    company_ids = [company_obj.id] if company_obj else {r.company_id for r in records if r.company_id}
    csv_text = records_to_csv(export_rows(records, _display_names(company_service, company_ids)))

    if output:
        with open(output, "w", newline="", encoding="utf-8") as f:
            f.write(csv_text)
        click.echo(f"Exported {len(records)} {kind} records to {output}")
    else:
        click.echo(csv_text, nl=False)


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export)
