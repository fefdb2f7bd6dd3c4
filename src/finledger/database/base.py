"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

from finledger.domain.entities import (
    Company,
    Client,
    Project,
    LedgerRecord,
    RecordKind,
    Scope,
)


class Database(ABC):
    """Abstract database interface for finledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Company operations
    @abstractmethod
    def create_company(
        self, name: str, default_currency: str, description: Optional[str] = None
    ) -> int:
        """Create a new company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def get_company_by_name(self, name: str) -> Optional[Company]:
        """Get company by name."""
        pass

    @abstractmethod
    def list_companies(self) -> list[Company]:
        """List all companies."""
        pass

    @abstractmethod
    def update_company(
        self,
        company_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        default_currency: Optional[str] = None,
    ) -> None:
        """Update company fields that are not None."""
        pass

    @abstractmethod
    def delete_company(self, company_id: int) -> None:
        """Delete a company with its clients, projects and records."""
        pass

    # Client operations
    @abstractmethod
    def create_client(
        self,
        company_id: int,
        name: str,
        preferred_currency: str,
        website: Optional[str] = None,
        monthly_budget: Optional[Decimal] = None,
        contract_months: Optional[int] = None,
        payment_method: Optional[str] = None,
        services: tuple[str, ...] = (),
        notes: Optional[str] = None,
    ) -> int:
        """Create a client. Returns client ID."""
        pass

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[Client]:
        """Get client by ID."""
        pass

    @abstractmethod
    def list_clients(self, company_id: int) -> list[Client]:
        """List clients of a company."""
        pass

    # Project operations
    @abstractmethod
    def create_project(
        self,
        company_id: int,
        name: str,
        start_date: date,
        status: str = "planned",
        client_id: Optional[int] = None,
        description: Optional[str] = None,
        end_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def list_projects(self, company_id: int) -> list[Project]:
        """List projects of a company."""
        pass

    # Ledger record operations
    @abstractmethod
    def create_record(self, record: LedgerRecord) -> int:
        """Store a new record (its id is ignored). Returns record ID."""
        pass

    @abstractmethod
    def get_record(self, record_id: int) -> Optional[LedgerRecord]:
        """Get record by ID."""
        pass

    @abstractmethod
    def update_record(self, record: LedgerRecord) -> None:
        """Overwrite every stored field of record.id with the given values."""
        pass

    @abstractmethod
    def delete_record(self, record_id: int) -> None:
        """Delete a record."""
        pass

    @abstractmethod
    def list_records(
        self,
        kind: Optional[RecordKind] = None,
        scope: Optional[Scope] = None,
        company_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        linked_client_id: Optional[int] = None,
    ) -> list[LedgerRecord]:
        """List records with optional filters.

        Args:
            kind: Optional income/expense filter
            scope: Optional company/personal filter
            company_id: Optional owning company filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            linked_client_id: Optional client linkage filter
        """
        pass
