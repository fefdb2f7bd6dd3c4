"""Company, client and project domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from finledger.database.base import Database
from finledger.domain.currency import DEFAULT_BASE_CURRENCY, is_supported
from finledger.domain.entities import (
    Client as ClientEntity,
    Company as CompanyEntity,
    Project as ProjectEntity,
    ProjectStatus,
)
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    client_not_found,
    company_not_found,
    unknown_currency,
)


class CompanyService:
    """Service for managing companies and their clients and projects."""

    def __init__(self, db: Database):
        """Initialize company service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_company(
        self,
        name: str,
        default_currency: str = DEFAULT_BASE_CURRENCY,
        description: Optional[str] = None,
    ) -> int:
        """Create a new company.

        Args:
            name: Company name
            default_currency: Currency the company reports in
            description: Optional description

        Returns:
            Company ID

        Raises:
            ValidationError: If name is empty or currency unknown
            ConflictError: If company name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Company name cannot be empty")
        default_currency = default_currency.upper()
        if not is_supported(default_currency):
            raise ValidationError(unknown_currency(default_currency))
        if self.db.get_company_by_name(name) is not None:
            raise ConflictError(f"Company with name '{name}' already exists")

        return self.db.create_company(
            name=name, default_currency=default_currency, description=description
        )

    def get_company(self, company_id: int) -> Optional[CompanyEntity]:
        """Get company by ID."""
        return self.db.get_company(company_id)

    def require_company(self, company_id: int) -> CompanyEntity:
        """Get company by ID or raise NotFoundError."""
        company = self.db.get_company(company_id)
        if company is None:
            raise NotFoundError(company_not_found(company_id))
        return company

    def resolve_company(self, name_or_id: str | int) -> CompanyEntity:
        """Resolve a company from its ID or exact name.

        Raises:
            NotFoundError: If no company matches
        """
        if isinstance(name_or_id, int) or str(name_or_id).isdigit():
            company = self.db.get_company(int(name_or_id))
            if company is not None:
                return company
        company = self.db.get_company_by_name(str(name_or_id))
        if company is None:
            raise NotFoundError(f"Company '{name_or_id}' not found")
        return company

    def list_companies(self) -> list[CompanyEntity]:
        """List all companies."""
        return self.db.list_companies()

    def update_company(
        self,
        company_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        default_currency: Optional[str] = None,
    ) -> None:
        """Update company fields.

        Raises:
            NotFoundError: If company doesn't exist
            ConflictError: If the new name is taken
            ValidationError: If the currency is unknown
        """
        self.require_company(company_id)
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Company name cannot be empty")
            existing = self.db.get_company_by_name(name)
            if existing is not None and existing.id != company_id:
                raise ConflictError(f"Company with name '{name}' already exists")
        if default_currency is not None:
            default_currency = default_currency.upper()
            if not is_supported(default_currency):
                raise ValidationError(unknown_currency(default_currency))

        self.db.update_company(
            company_id, name=name, description=description, default_currency=default_currency
        )

    def delete_company(self, company_id: int) -> None:
        """Delete a company together with its clients, projects and records."""
        self.require_company(company_id)
        self.db.delete_company(company_id)

    # Clients

    def add_client(
        self,
        company_id: int,
        name: str,
        preferred_currency: Optional[str] = None,
        website: Optional[str] = None,
        monthly_budget: Optional[Decimal] = None,
        contract_months: Optional[int] = None,
        payment_method: Optional[str] = None,
        services: tuple[str, ...] = (),
        notes: Optional[str] = None,
    ) -> int:
        """Add a client to a company.

        The preferred currency defaults to the company's currency.

        Returns:
            Client ID
        """
        company = self.require_company(company_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Client name cannot be empty")
        preferred_currency = (preferred_currency or company.default_currency).upper()
        if not is_supported(preferred_currency):
            raise ValidationError(unknown_currency(preferred_currency))
        if monthly_budget is not None and monthly_budget < 0:
            raise ValidationError("Monthly budget cannot be negative")
        if contract_months is not None and contract_months <= 0:
            raise ValidationError("Contract length must be at least one month")

        return self.db.create_client(
            company_id=company_id,
            name=name,
            preferred_currency=preferred_currency,
            website=website,
            monthly_budget=monthly_budget,
            contract_months=contract_months,
            payment_method=payment_method,
            services=tuple(services),
            notes=notes,
        )

    def get_client(self, client_id: int) -> Optional[ClientEntity]:
        return self.db.get_client(client_id)

    def list_clients(self, company_id: int) -> list[ClientEntity]:
        self.require_company(company_id)
        return self.db.list_clients(company_id)

    # Projects

    def add_project(
        self,
        company_id: int,
        name: str,
        start_date: date,
        status: ProjectStatus | str = ProjectStatus.PLANNED,
        client_id: Optional[int] = None,
        description: Optional[str] = None,
        end_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Add a project to a company.

        Returns:
            Project ID

        Raises:
            ValidationError: On bad status, empty name or end before start
            NotFoundError: If company or client doesn't exist
        """
        self.require_company(company_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Project name cannot be empty")
        try:
            status = ProjectStatus(status)
        except ValueError:
            valid = ", ".join(s.value for s in ProjectStatus)
            raise ValidationError(f"Invalid project status '{status}'. Must be one of: {valid}") from None
        if end_date is not None and end_date < start_date:
            raise ValidationError("Project end date cannot be before its start date")
        if client_id is not None:
            client = self.db.get_client(client_id)
            if client is None:
                raise NotFoundError(client_not_found(client_id))
            if client.company_id != company_id:
                raise ValidationError(f"Client {client_id} does not belong to company {company_id}")

        return self.db.create_project(
            company_id=company_id,
            name=name,
            start_date=start_date,
            status=status.value,
            client_id=client_id,
            description=description,
            end_date=end_date,
            notes=notes,
        )

    def get_project(self, project_id: int) -> Optional[ProjectEntity]:
        return self.db.get_project(project_id)

    def list_projects(self, company_id: int) -> list[ProjectEntity]:
        self.require_company(company_id)
        return self.db.list_projects(company_id)
