"""Shared pytest fixtures for finledger tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from finledger.database.factories import create_sqlite_database
from finledger.domain.company import CompanyService
from finledger.domain.entities import DateWindow, LedgerRecord, RecordKind, Scope
from finledger.domain.exchange_rates import UNAVAILABLE
from finledger.domain.ledger import LedgerService
from finledger.domain.summary import SummaryService


class FakeRateClient:
    """Rate client answering from a fixed table, recording every lookup."""

    def __init__(self, rates=None):
        self.rates = rates or {}
        self.calls = []

    def get_rate(self, from_currency, to_currency):
        self.calls.append((from_currency, to_currency))
        if from_currency == to_currency:
            return Decimal("1")
        return self.rates.get((from_currency, to_currency), UNAVAILABLE)


def make_record(record_id=1, **overrides) -> LedgerRecord:
    """Build a valid company expense record, with overrides."""
    fields = dict(
        id=record_id,
        kind=RecordKind.EXPENSE,
        date=date(2024, 3, 10),
        amount=Decimal("100"),
        vat_amount=Decimal("0"),
        currency="TRY",
        scope=Scope.COMPANY,
        company_id=1,
        title=f"Record {record_id}",
    )
    fields.update(overrides)
    return LedgerRecord(**fields)


@pytest.fixture
def march_2024():
    """Window covering March 2024."""
    return DateWindow(start=date(2024, 3, 1), end=date(2024, 3, 31))


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def company_service(temp_db):
    """Create a CompanyService with a temporary database."""
    return CompanyService(temp_db)


@pytest.fixture
def rate_client():
    """Rate client knowing USD and EUR to TRY."""
    return FakeRateClient({("USD", "TRY"): Decimal("32.5"), ("EUR", "TRY"): Decimal("35.2")})


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService without rate lookups."""
    return LedgerService(temp_db, base_currency="TRY")


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with TRY as base currency."""
    return SummaryService(temp_db, base_currency="TRY")


@pytest.fixture
def sample_company(company_service):
    """Create a sample TRY company."""
    company_id = company_service.create_company(name="Acme", default_currency="TRY")
    return company_service.get_company(company_id)


@pytest.fixture
def sample_client(company_service, sample_company):
    """Create a sample client of the sample company."""
    client_id = company_service.add_client(
        company_id=sample_company.id, name="Globex", services=("Branding",)
    )
    return company_service.get_client(client_id)


@pytest.fixture
def sample_project(company_service, sample_company, sample_client):
    """Create a sample project for the sample client."""
    project_id = company_service.add_project(
        company_id=sample_company.id,
        name="Website",
        start_date=date(2024, 1, 1),
        status="active",
        client_id=sample_client.id,
    )
    return company_service.get_project(project_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
