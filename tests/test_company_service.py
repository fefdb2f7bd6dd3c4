"""Tests for company, client and project management."""

from datetime import date
from decimal import Decimal

import pytest

from finledger.domain.entities import ProjectStatus
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError


def test_create_company(company_service):
    company_id = company_service.create_company("Acme", default_currency="usd", description="Design")

    company = company_service.get_company(company_id)
    assert company.name == "Acme"
    assert company.default_currency == "USD"
    assert company.description == "Design"
    assert company.created_at is not None


def test_create_company_defaults_to_try(company_service):
    company = company_service.get_company(company_service.create_company("Acme"))

    assert company.default_currency == "TRY"


def test_duplicate_company_name_conflicts(company_service, sample_company):
    with pytest.raises(ConflictError):
        company_service.create_company("Acme")


@pytest.mark.parametrize("name,currency", [("", "TRY"), ("   ", "TRY"), ("Acme", "GBP")])
def test_invalid_company_rejected(company_service, name, currency):
    with pytest.raises(ValidationError):
        company_service.create_company(name, default_currency=currency)


def test_resolve_company_by_name_or_id(company_service, sample_company):
    assert company_service.resolve_company("Acme").id == sample_company.id
    assert company_service.resolve_company(str(sample_company.id)).id == sample_company.id
    assert company_service.resolve_company(sample_company.id).name == "Acme"


def test_resolve_unknown_company(company_service):
    with pytest.raises(NotFoundError):
        company_service.resolve_company("Nobody")


def test_list_companies_sorted_by_name(company_service):
    company_service.create_company("Zeta")
    company_service.create_company("Alpha")

    assert [c.name for c in company_service.list_companies()] == ["Alpha", "Zeta"]


def test_update_company(company_service, sample_company):
    company_service.update_company(sample_company.id, name="Acme Ltd", default_currency="EUR")

    company = company_service.get_company(sample_company.id)
    assert company.name == "Acme Ltd"
    assert company.default_currency == "EUR"


def test_update_company_name_conflict(company_service, sample_company):
    company_service.create_company("Other")

    with pytest.raises(ConflictError):
        company_service.update_company(sample_company.id, name="Other")


def test_update_missing_company(company_service):
    with pytest.raises(NotFoundError):
        company_service.update_company(999, name="X")


def test_delete_company_removes_children(
    company_service, ledger_service, sample_company, sample_client, sample_project
):
    record_id = ledger_service.create_record(
        kind="expense",
        date=date(2024, 3, 1),
        title="Rent",
        amount=Decimal("100"),
        company_id=sample_company.id,
    )

    company_service.delete_company(sample_company.id)

    assert company_service.get_company(sample_company.id) is None
    assert company_service.get_client(sample_client.id) is None
    assert company_service.get_project(sample_project.id) is None
    assert ledger_service.get_record(record_id) is None


def test_delete_missing_company(company_service):
    with pytest.raises(NotFoundError):
        company_service.delete_company(42)


class TestClients:
    def test_add_client_defaults_to_company_currency(self, company_service):
        company_id = company_service.create_company("Acme", default_currency="EUR")

        client = company_service.get_client(company_service.add_client(company_id, "Globex"))

        assert client.preferred_currency == "EUR"
        assert client.services == ()

    def test_add_client_with_details(self, company_service, sample_company):
        client_id = company_service.add_client(
            sample_company.id,
            "Initech",
            preferred_currency="USD",
            website="https://initech.example",
            monthly_budget=Decimal("5000"),
            contract_months=6,
            payment_method="Wire",
            services=["Branding", "SEO"],
            notes="Net 30",
        )

        client = company_service.get_client(client_id)
        assert client.preferred_currency == "USD"
        assert client.monthly_budget == Decimal("5000")
        assert client.contract_months == 6
        assert client.services == ("Branding", "SEO")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": ""},
            {"name": "X", "preferred_currency": "JPY"},
            {"name": "X", "monthly_budget": Decimal("-1")},
            {"name": "X", "contract_months": 0},
        ],
    )
    def test_invalid_client_rejected(self, company_service, sample_company, kwargs):
        with pytest.raises(ValidationError):
            company_service.add_client(sample_company.id, **kwargs)

    def test_client_for_missing_company(self, company_service):
        with pytest.raises(NotFoundError):
            company_service.add_client(99, "Globex")

    def test_list_clients(self, company_service, sample_company, sample_client):
        other = company_service.create_company("Other")
        company_service.add_client(other, "Elsewhere")

        assert [c.name for c in company_service.list_clients(sample_company.id)] == ["Globex"]


class TestProjects:
    def test_add_project(self, company_service, sample_project, sample_client):
        assert sample_project.status is ProjectStatus.ACTIVE
        assert sample_project.client_id == sample_client.id
        assert sample_project.start_date == date(2024, 1, 1)

    def test_end_before_start_rejected(self, company_service, sample_company):
        with pytest.raises(ValidationError):
            company_service.add_project(
                sample_company.id,
                "Late",
                start_date=date(2024, 2, 1),
                end_date=date(2024, 1, 1),
            )

    def test_unknown_status_rejected(self, company_service, sample_company):
        with pytest.raises(ValidationError):
            company_service.add_project(
                sample_company.id, "P", start_date=date(2024, 1, 1), status="paused"
            )

    def test_client_of_other_company_rejected(self, company_service, sample_client):
        other = company_service.create_company("Other")

        with pytest.raises(ValidationError):
            company_service.add_project(
                other, "P", start_date=date(2024, 1, 1), client_id=sample_client.id
            )

    def test_missing_client_rejected(self, company_service, sample_company):
        with pytest.raises(NotFoundError):
            company_service.add_project(
                sample_company.id, "P", start_date=date(2024, 1, 1), client_id=404
            )

    def test_list_projects(self, company_service, sample_company, sample_project):
        assert [p.name for p in company_service.list_projects(sample_company.id)] == ["Website"]
