"""Project management commands."""

import click
from finledger.cli.company_resolution import resolve_company_or_exit
from finledger.cli.error_handling import handle_domain_error
from finledger.domain.company import CompanyService
from finledger.domain.entities import ProjectStatus
from finledger.domain.errors import DomainError
from finledger.utils.date_parser import parse_date


@click.group("project")
def project_group():
    """Manage company projects."""
    pass


@project_group.command("add")
@click.argument("company")
@click.argument("name")
@click.option("--start-date", default="today", show_default=True, help="Project start date")
@click.option("--end-date", help="Project end date")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ProjectStatus]),
    default=ProjectStatus.PLANNED.value,
    show_default=True,
)
@click.option("--client", "client_id", type=int, help="Client ID the project is for")
@click.option("--description", help="Project description")
@click.option("--notes", help="Notes")
@click.pass_context
def add_project(
    ctx,
    company: str,
    name: str,
    start_date: str,
    end_date: str | None,
    status: str,
    client_id: int | None,
    description: str | None,
    notes: str | None,
):
    """Add a project to a company."""
    service = CompanyService(ctx.obj["db"])
    company_obj = resolve_company_or_exit(ctx, service, company)

    try:
        start = parse_date(start_date)
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        project_id = service.add_project(
            company_id=company_obj.id,
            name=name,
            start_date=start,
            end_date=end,
            status=status,
            client_id=client_id,
            description=description,
            notes=notes,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added project '{name}' to {company_obj.name} (ID: {project_id})")


@project_group.command("list")
@click.argument("company")
@click.pass_context
def list_projects(ctx, company: str):
    """List a company's projects."""
    service = CompanyService(ctx.obj["db"])
    company_obj = resolve_company_or_exit(ctx, service, company)
    projects = service.list_projects(company_obj.id)

    if not projects:
        click.echo("No projects found.")
        return

    click.echo(f"{'ID':<6} {'Name':<28} {'Status':<9} {'Start':<12} {'End':<12} Client")
    click.echo("-" * 78)
    for project in projects:
        client_name = ""
        if project.client_id is not None:
            client = service.get_client(project.client_id)
            client_name = client.name if client else ""
        end = project.end_date.isoformat() if project.end_date else "-"
        click.echo(
            f"{project.id:<6} {project.name:<28} {project.status.value:<9} "
            f"{project.start_date.isoformat():<12} {end:<12} {client_name}"
        )


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group)
