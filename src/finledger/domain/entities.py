"""Domain model entities for finledger.

These are pure data classes representing business concepts, independent of
database schema. Services and the aggregation engine only ever see these;
the SQLAlchemy models stay behind the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class RecordKind(str, Enum):
    """Whether a ledger record adds to income or to expenses."""

    INCOME = "income"
    EXPENSE = "expense"


class Scope(str, Enum):
    """Owner discriminator separating company books from the personal ledger."""

    COMPANY = "company"
    PERSONAL = "personal"


class LinkedType(str, Enum):
    """What an income record is attributed to."""

    CLIENT = "client"
    PROJECT = "project"
    NONE = "none"


class ProjectStatus(str, Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    DONE = "done"


class GroupBy(str, Enum):
    """Entity key used for per-entity totals."""

    NONE = "none"
    COMPANY = "company"
    CLIENT = "client"
    PROJECT = "project"


class AggregationMode(str, Enum):
    """How global totals treat records in different currencies.

    RAW sums native amounts as if all currencies were comparable.
    NORMALIZED converts every record to the base currency first.
    """

    RAW = "raw"
    NORMALIZED = "normalized"


@dataclass(frozen=True)
class Company:
    """Company domain entity."""

    id: int
    name: str
    description: Optional[str]
    default_currency: str
    created_at: datetime


@dataclass(frozen=True)
class Client:
    """Client of a company."""

    id: int
    company_id: int
    name: str
    preferred_currency: str
    website: Optional[str] = None
    monthly_budget: Optional[Decimal] = None
    contract_months: Optional[int] = None
    payment_method: Optional[str] = None
    services: tuple[str, ...] = ()
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Project:
    """Project run by a company, optionally for a client."""

    id: int
    company_id: int
    name: str
    start_date: date
    status: ProjectStatus = ProjectStatus.PLANNED
    client_id: Optional[int] = None
    description: Optional[str] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LedgerRecord:
    """Income or expense entry in a company's books or the personal ledger."""

    id: Optional[int]
    kind: RecordKind
    date: date
    amount: Decimal
    vat_amount: Decimal = Decimal("0")
    currency: str = "TRY"
    scope: Scope = Scope.COMPANY
    company_id: Optional[int] = None
    title: str = ""
    fx_rate_to_base: Optional[Decimal] = None
    base_amount: Optional[Decimal] = None
    linked_type: LinkedType = LinkedType.NONE
    linked_client_id: Optional[int] = None
    linked_project_id: Optional[int] = None
    details: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date range used to select records."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        """Return True if day falls inside the window, ignoring time of day."""
        if isinstance(day, datetime):
            day = day.date()
        return self.start <= day <= self.end


@dataclass(frozen=True)
class EntityTotals:
    """Income, expenses and net for one grouped entity."""

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


@dataclass(frozen=True)
class RecordError:
    """A record excluded from aggregation and the reason why."""

    record_id: Optional[int]
    message: str


@dataclass(frozen=True)
class AggregationResult:
    """Totals derived from a set of records. Never persisted."""

    total_income: Decimal
    total_expenses: Decimal
    mode: AggregationMode
    currency: Optional[str]
    record_count: int = 0
    per_entity: dict[int, EntityTotals] = field(default_factory=dict)
    errors: tuple[RecordError, ...] = ()
    unconverted_record_ids: tuple[int, ...] = ()

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses

    @property
    def is_partial(self) -> bool:
        """True when some records in the window did not contribute to the totals."""
        return bool(self.errors or self.unconverted_record_ids)


@dataclass(frozen=True)
class CompanySummary:
    """One company's totals in its own currency."""

    company: Company
    totals: EntityTotals


@dataclass(frozen=True)
class ClientSummary:
    """Income attributed to a client, in the client's preferred currency."""

    client: Client
    totals: EntityTotals


@dataclass(frozen=True)
class CompanyOverview:
    """Totals and counts for a single company."""

    company: Company
    result: AggregationResult
    client_count: int
    project_count: int


@dataclass(frozen=True)
class DashboardReport:
    """Cross-company view: per-company totals plus global totals.

    Global totals cover company income and expenses and personal expenses.
    """

    window: DateWindow
    include_vat: bool
    result: AggregationResult
    companies: tuple[CompanySummary, ...]
    personal_expenses: Decimal
