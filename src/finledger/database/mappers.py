"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the engine and services never
see ORM objects.
"""

from finledger.domain import entities as domain
from finledger.database.models import (
    Company as ORMCompany,
    Client as ORMClient,
    Project as ORMProject,
    LedgerEntry as ORMLedgerEntry,
)


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        name=orm_company.name,
        description=orm_company.description,
        default_currency=orm_company.default_currency,
        created_at=orm_company.created_at,
    )


def client_to_domain(orm_client: ORMClient) -> domain.Client:
    """Convert SQLAlchemy Client model to domain Client entity."""
    return domain.Client(
        id=orm_client.id,
        company_id=orm_client.company_id,
        name=orm_client.name,
        preferred_currency=orm_client.preferred_currency,
        website=orm_client.website,
        monthly_budget=orm_client.monthly_budget,
        contract_months=orm_client.contract_months,
        payment_method=orm_client.payment_method,
        services=tuple(orm_client.services or ()),
        notes=orm_client.notes,
        created_at=orm_client.created_at,
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        company_id=orm_project.company_id,
        client_id=orm_project.client_id,
        name=orm_project.name,
        description=orm_project.description,
        start_date=orm_project.start_date,
        end_date=orm_project.end_date,
        status=domain.ProjectStatus(orm_project.status),
        notes=orm_project.notes,
        created_at=orm_project.created_at,
    )


def record_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerRecord:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerRecord entity.

    The stored base_amount is carried over as-is; the normalizer recomputes it
    before any aggregation.
    """
    return domain.LedgerRecord(
        id=orm_entry.id,
        kind=domain.RecordKind(orm_entry.kind),
        scope=domain.Scope(orm_entry.scope),
        company_id=orm_entry.company_id,
        date=orm_entry.date,
        title=orm_entry.title,
        amount=orm_entry.amount,
        vat_amount=orm_entry.vat_amount,
        currency=orm_entry.currency,
        fx_rate_to_base=orm_entry.fx_rate_to_base,
        base_amount=orm_entry.base_amount,
        linked_type=domain.LinkedType(orm_entry.linked_type),
        linked_client_id=orm_entry.linked_client_id,
        linked_project_id=orm_entry.linked_project_id,
        details=orm_entry.details,
        category=orm_entry.category,
        notes=orm_entry.notes,
        created_at=orm_entry.created_at,
    )


def record_to_columns(record: domain.LedgerRecord) -> dict:
    """Flatten a domain LedgerRecord into ORM column values (without id)."""
    return {
        "kind": domain.RecordKind(record.kind).value,
        "scope": domain.Scope(record.scope).value,
        "company_id": record.company_id,
        "date": record.date,
        "title": record.title,
        "amount": record.amount,
        "vat_amount": record.vat_amount,
        "currency": record.currency,
        "fx_rate_to_base": record.fx_rate_to_base,
        "base_amount": record.base_amount,
        "linked_type": domain.LinkedType(record.linked_type).value,
        "linked_client_id": record.linked_client_id,
        "linked_project_id": record.linked_project_id,
        "details": record.details,
        "category": record.category,
        "notes": record.notes,
    }
