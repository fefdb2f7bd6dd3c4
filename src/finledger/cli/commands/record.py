"""Income and expense record commands."""

import click
from finledger.cli.company_resolution import resolve_company_or_exit
from finledger.cli.date_filters import resolve_cli_window, window_options
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.aggregation import sum_effective
from finledger.domain.company import CompanyService
from finledger.domain.currency import format_currency, supported_codes
from finledger.domain.entities import LedgerRecord, LinkedType, RecordKind, Scope
from finledger.domain.errors import DomainError
from finledger.domain.ledger import LedgerService
from finledger.domain.normalizer import total_with_vat
from finledger.utils.amount_parser import parse_amount
from finledger.utils.date_parser import parse_date

KIND_CHOICE = click.Choice([k.value for k in RecordKind])
CURRENCY_CHOICE = click.Choice(supported_codes(), case_sensitive=False)


def _ledger_service(ctx) -> LedgerService:
    return LedgerService(
        ctx.obj["db"],
        base_currency=ctx.obj["base_currency"],
        rate_client=ctx.obj.get("rate_client"),
    )


def _parse_amount_or_exit(ctx, value: str | None, label: str):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def _linked_type(client_id: int | None, project_id: int | None) -> LinkedType:
    if client_id is not None:
        return LinkedType.CLIENT
    if project_id is not None:
        return LinkedType.PROJECT
    return LinkedType.NONE


def _echo_record(record: LedgerRecord, base_currency: str) -> None:
    click.echo(f"  Date: {record.date}")
    click.echo(f"  Title: {record.title}")
    click.echo(f"  Amount: {format_currency(record.amount, record.currency)}")
    click.echo(f"  VAT: {format_currency(record.vat_amount, record.currency)}")
    if record.currency != base_currency:
        if record.fx_rate_to_base is None:
            click.echo(f"  Exchange rate to {base_currency}: unavailable, set it with --fx-rate")
        else:
            click.echo(f"  Exchange rate to {base_currency}: {record.fx_rate_to_base}")
            click.echo(f"  Base amount: {format_currency(record.base_amount, base_currency)}")


@click.group("record")
def record_group():
    """Manage income and expense records."""
    pass


@record_group.command("add")
@click.argument("kind", type=KIND_CHOICE)
@click.option("--company", help="Company name or ID (company records)")
@click.option("--personal", is_flag=True, help="Record in the personal ledger")
@click.option("--date", "record_date", default="today", show_default=True, help="Record date")
@click.option("--title", required=True, help="Short description")
@click.option("--amount", required=True, help="Amount without VAT")
@click.option("--vat", default="0", show_default=True, help="VAT amount")
@click.option("--currency", type=CURRENCY_CHOICE, help="Currency (defaults to the company currency)")
@click.option("--fx-rate", help="Exchange rate to the base currency (looked up when omitted)")
@click.option("--client", "client_id", type=int, help="Link income to a client ID")
@click.option("--project", "project_id", type=int, help="Link income to a project ID")
@click.option("--details", help="Details (required for unlinked company income)")
@click.option("--category", help="Expense category")
@click.option("--notes", help="Notes")
@click.pass_context
def add_record(
    ctx,
    kind: str,
    company: str | None,
    personal: bool,
    record_date: str,
    title: str,
    amount: str,
    vat: str,
    currency: str | None,
    fx_rate: str | None,
    client_id: int | None,
    project_id: int | None,
    details: str | None,
    category: str | None,
    notes: str | None,
):
    """Add an income or expense record.

    Examples:
        finledger record add income --company Acme --amount 1000 --vat 200 --client 1 --title "Retainer"
        finledger record add expense --personal --amount 45.90 --currency EUR --title "Books"
    """
    if personal == (company is not None):
        click.echo("Error: Specify exactly one of --company or --personal.", err=True)
        ctx.exit(1)

    company_id = None
    if company is not None:
        company_id = resolve_company_or_exit(ctx, CompanyService(ctx.obj["db"]), company).id

    try:
        parsed_date = parse_date(record_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    parsed_amount = _parse_amount_or_exit(ctx, amount, "amount")
    parsed_vat = _parse_amount_or_exit(ctx, vat, "VAT amount")
    parsed_rate = _parse_amount_or_exit(ctx, fx_rate, "exchange rate")

    service = _ledger_service(ctx)
    try:
        record_id = service.create_record(
            kind=kind,
            date=parsed_date,
            title=title,
            amount=parsed_amount,
            vat_amount=parsed_vat,
            currency=currency,
            scope=Scope.PERSONAL if personal else Scope.COMPANY,
            company_id=company_id,
            fx_rate_to_base=parsed_rate,
            linked_type=_linked_type(client_id, project_id),
            linked_client_id=client_id,
            linked_project_id=project_id,
            details=details,
            category=category,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    record = service.get_record(record_id)
    click.echo(f"Created {kind} record {record_id}")
    _echo_record(record, service.base_currency)


@record_group.command("list")
@click.argument("kind", type=KIND_CHOICE, required=False)
@click.option("--company", help="Company name or ID")
@click.option("--personal", is_flag=True, help="Only personal records")
@window_options
@click.option("--exclude-vat", is_flag=True, help="Show totals without VAT")
@click.pass_context
def list_records(
    ctx,
    kind: str | None,
    company: str | None,
    personal: bool,
    this_month: bool,
    last_30_days: bool,
    start_date: str | None,
    end_date: str | None,
    exclude_vat: bool,
):
    """List records in a period, newest first."""
    include_vat = not exclude_vat
    company_obj = None
    if company is not None:
        company_obj = resolve_company_or_exit(ctx, CompanyService(ctx.obj["db"]), company)
    window = resolve_cli_window(
        ctx,
        start_date=start_date,
        end_date=end_date,
        this_month=this_month,
        last_30_days=last_30_days,
    )

    service = _ledger_service(ctx)
    records = service.list_records(
        kind=kind,
        scope=Scope.PERSONAL if personal else (Scope.COMPANY if company_obj else None),
        company_id=company_obj.id if company_obj else None,
        window=window,
    )

    if not records:
        click.echo("No records found.")
        return

    click.echo(
        f"{'ID':<6} {'Date':<12} {'Kind':<8} {'Title':<28} {'Amount':>14} {'Total':>14} {'Base':>14}"
    )
    click.echo("-" * 100)
    for record in records:
        total = total_with_vat(record.amount, record.vat_amount, include_vat)
        click.echo(
            f"{record.id:<6} {record.date.isoformat():<12} {record.kind.value:<8} "
            f"{record.title[:28]:<28} {format_currency(record.amount, record.currency):>14} "
            f"{format_currency(total, record.currency):>14} "
            f"{format_currency(record.base_amount, service.base_currency):>14}"
        )

    currencies = {record.currency for record in records}
    if kind is not None and len(currencies) == 1:
        total, errors = sum_effective(records, include_vat, service.base_currency)
        vat_label = "VAT included" if include_vat else "VAT excluded"
        click.echo(f"\nTotal: {format_currency(total, currencies.pop())} ({vat_label})")
        for error in errors:
            click.echo(f"Partial: skipped record {error.record_id}: {error.message}")


@record_group.command("update")
@click.argument("record_id", type=int)
@click.option("--date", "record_date", help="Record date")
@click.option("--title", help="Short description")
@click.option("--amount", help="Amount without VAT")
@click.option("--vat", help="VAT amount")
@click.option("--currency", type=CURRENCY_CHOICE, help="Currency")
@click.option("--fx-rate", help="Exchange rate to the base currency")
@click.option("--clear-fx-rate", is_flag=True, help="Remove the stored exchange rate")
@click.option("--client", "client_id", type=int, help="Link to a client ID")
@click.option("--project", "project_id", type=int, help="Link to a project ID")
@click.option("--unlink", is_flag=True, help="Remove client/project link (requires details)")
@click.option("--details", help="Details")
@click.option("--category", help="Expense category (empty string to clear)")
@click.option("--notes", help="Notes (empty string to clear)")
@click.pass_context
def update_record(
    ctx,
    record_id: int,
    record_date: str | None,
    title: str | None,
    amount: str | None,
    vat: str | None,
    currency: str | None,
    fx_rate: str | None,
    clear_fx_rate: bool,
    client_id: int | None,
    project_id: int | None,
    unlink: bool,
    details: str | None,
    category: str | None,
    notes: str | None,
):
    """Update a record.

    Updates only the fields that are provided; the base amount is recomputed.

    Examples:
        finledger record update 3 --amount 1200
        finledger record update 3 --currency USD --fx-rate 32.5
    """
    parsed_date = None
    if record_date is not None:
        try:
            parsed_date = parse_date(record_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    if client_id is not None and project_id is not None:
        click.echo("Error: Link to either a client or a project, not both.", err=True)
        ctx.exit(1)

    linked_type = None
    if unlink:
        if client_id is not None or project_id is not None:
            click.echo("Error: --unlink cannot be combined with --client or --project.", err=True)
            ctx.exit(1)
        linked_type = LinkedType.NONE
    elif client_id is not None or project_id is not None:
        linked_type = _linked_type(client_id, project_id)

    service = _ledger_service(ctx)
    try:
        record = service.update_record(
            record_id,
            date=parsed_date,
            title=title,
            amount=_parse_amount_or_exit(ctx, amount, "amount"),
            vat_amount=_parse_amount_or_exit(ctx, vat, "VAT amount"),
            currency=currency,
            fx_rate_to_base=_parse_amount_or_exit(ctx, fx_rate, "exchange rate"),
            clear_fx_rate=clear_fx_rate,
            linked_type=linked_type,
            linked_client_id=client_id,
            linked_project_id=project_id,
            details=details,
            category=category,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated record {record_id}")
    _echo_record(record, service.base_currency)


@record_group.command("delete")
@click.argument("record_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_record(ctx, record_id: int, yes: bool):
    """Delete a record."""
    service = _ledger_service(ctx)
    if not yes:
        click.confirm(f"Delete record {record_id}?", abort=True)
    try:
        service.delete_record(record_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted record {record_id}")


def register_commands(cli):
    """Register record commands with main CLI."""
    cli.add_command(record_group)
