"""Ledger record domain service."""

import logging
from dataclasses import replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from finledger.database.base import Database
from finledger.domain.currency import DEFAULT_BASE_CURRENCY, is_supported
from finledger.domain.entities import (
    DateWindow,
    LedgerRecord,
    LinkedType,
    RecordKind,
    Scope,
)
from finledger.domain.errors import (
    InvalidAmountError,
    NotFoundError,
    ValidationError,
    client_not_found,
    company_not_found,
    project_not_found,
    record_not_found,
    unknown_currency,
)
from finledger.domain.exchange_rates import UNAVAILABLE, ExchangeRateClient
from finledger.domain.normalizer import normalize_record

logger = logging.getLogger(__name__)

# Scales of the stored money and rate columns
MONEY_PLACES = 2
RATE_PLACES = 6


def _check_places(value: Optional[Decimal], places: int, field_name: str, record_id: Optional[int]) -> None:
    if value is None:
        return
    if value.normalize().as_tuple().exponent < -places:
        raise InvalidAmountError(
            f"{field_name} cannot have more than {places} decimal places: {value}", record_id
        )


class LedgerService:
    """Service for creating, editing and listing income and expense records."""

    def __init__(
        self,
        db: Database,
        base_currency: str = DEFAULT_BASE_CURRENCY,
        rate_client: Optional[ExchangeRateClient] = None,
    ):
        """Initialize ledger service.

        Args:
            db: Database instance
            base_currency: Currency that base amounts are expressed in
            rate_client: Optional exchange-rate client used when a foreign
                record arrives without a rate
        """
        self.db = db
        self.base_currency = base_currency
        self.rate_client = rate_client

    def _lookup_rate(self, currency: str) -> Optional[Decimal]:
        """Fetch a rate for currency, or None when no client or no rate."""
        if self.rate_client is None or currency == self.base_currency:
            return None
        rate = self.rate_client.get_rate(currency, self.base_currency)
        if rate is UNAVAILABLE:
            logger.info("No exchange rate for %s->%s, leaving it blank", currency, self.base_currency)
            return None
        rate = rate.quantize(Decimal(1).scaleb(-RATE_PLACES))
        if rate <= 0:
            logger.info("Exchange rate for %s->%s rounds to zero, leaving it blank", currency, self.base_currency)
            return None
        return rate

    def _check_references(self, record: LedgerRecord) -> None:
        if record.company_id is not None and self.db.get_company(record.company_id) is None:
            raise NotFoundError(company_not_found(record.company_id))

        if record.linked_client_id is not None:
            client = self.db.get_client(record.linked_client_id)
            if client is None:
                raise NotFoundError(client_not_found(record.linked_client_id))
            if client.company_id != record.company_id:
                raise ValidationError(
                    f"Client {client.id} does not belong to company {record.company_id}"
                )

        if record.linked_project_id is not None:
            project = self.db.get_project(record.linked_project_id)
            if project is None:
                raise NotFoundError(project_not_found(record.linked_project_id))
            if project.company_id != record.company_id:
                raise ValidationError(
                    f"Project {project.id} does not belong to company {record.company_id}"
                )

    def _prepare(self, record: LedgerRecord) -> LedgerRecord:
        """Validate a record and recompute its base amount."""
        if not record.title or not record.title.strip():
            raise ValidationError("Title cannot be empty")
        if not is_supported(record.currency):
            raise ValidationError(unknown_currency(record.currency))
        normalized = normalize_record(record, self.base_currency).record
        _check_places(normalized.amount, MONEY_PLACES, "Amount", record.id)
        _check_places(normalized.vat_amount, MONEY_PLACES, "VAT amount", record.id)
        _check_places(normalized.fx_rate_to_base, RATE_PLACES, "Exchange rate", record.id)
        if normalized.base_amount is not None:
            normalized = replace(
                normalized,
                base_amount=normalized.base_amount.quantize(Decimal(1).scaleb(-MONEY_PLACES), ROUND_HALF_UP),
            )
        self._check_references(normalized)
        return normalized

    def create_record(
        self,
        kind: RecordKind | str,
        date: date,
        title: str,
        amount: Decimal,
        vat_amount: Decimal = Decimal("0"),
        currency: Optional[str] = None,
        scope: Scope | str = Scope.COMPANY,
        company_id: Optional[int] = None,
        fx_rate_to_base: Optional[Decimal] = None,
        linked_type: LinkedType | str = LinkedType.NONE,
        linked_client_id: Optional[int] = None,
        linked_project_id: Optional[int] = None,
        details: Optional[str] = None,
        category: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create an income or expense record.

        Args:
            kind: income or expense
            date: Record date
            title: Short description
            amount: Net amount, without VAT
            vat_amount: VAT amount
            currency: Currency code; defaults to the company's currency, or
                the base currency for personal records
            scope: company or personal
            company_id: Owning company, required for company scope
            fx_rate_to_base: Rate to the base currency; looked up when missing
            linked_type: client, project or none (company income only)
            linked_client_id: Client for client-linked income
            linked_project_id: Project for project-linked income
            details: Free text, required for unlinked company income
            category: Expense category
            notes: Notes

        Returns:
            Record ID

        Raises:
            ValidationError: If the record breaks any record invariant
            NotFoundError: If the company, client or project doesn't exist
        """
        scope = Scope(scope)
        if currency is None:
            currency = self.base_currency
            if scope is Scope.COMPANY and company_id is not None:
                company = self.db.get_company(company_id)
                if company is None:
                    raise NotFoundError(company_not_found(company_id))
                currency = company.default_currency
        currency = currency.upper()

        if fx_rate_to_base is None and currency != self.base_currency:
            fx_rate_to_base = self._lookup_rate(currency)

        record = LedgerRecord(
            id=None,
            kind=RecordKind(kind),
            scope=scope,
            company_id=company_id,
            date=date,
            title=title,
            amount=amount,
            vat_amount=vat_amount,
            currency=currency,
            fx_rate_to_base=fx_rate_to_base,
            linked_type=LinkedType(linked_type),
            linked_client_id=linked_client_id,
            linked_project_id=linked_project_id,
            details=details or None,
            category=category,
            notes=notes,
        )
        record = self._prepare(record)
        record_id = self.db.create_record(record)
        logger.debug("Created %s record %s", record.kind.value, record_id)
        return record_id

    def get_record(self, record_id: int) -> Optional[LedgerRecord]:
        """Get record by ID."""
        return self.db.get_record(record_id)

    def require_record(self, record_id: int) -> LedgerRecord:
        record = self.db.get_record(record_id)
        if record is None:
            raise NotFoundError(record_not_found(record_id))
        return record

    def update_record(
        self,
        record_id: int,
        date: Optional[date] = None,
        title: Optional[str] = None,
        amount: Optional[Decimal] = None,
        vat_amount: Optional[Decimal] = None,
        currency: Optional[str] = None,
        fx_rate_to_base: Optional[Decimal] = None,
        linked_type: Optional[LinkedType | str] = None,
        linked_client_id: Optional[int] = None,
        linked_project_id: Optional[int] = None,
        details: Optional[str] = None,
        category: Optional[str] = None,
        notes: Optional[str] = None,
        clear_fx_rate: bool = False,
    ) -> LedgerRecord:
        """Update record fields.

        Only provided fields change. Changing the currency drops the old rate
        unless a new one is given. The base amount is always recomputed.

        Returns:
            The stored record

        Raises:
            NotFoundError: If the record doesn't exist
            ValidationError: If the updated record is invalid
        """
        existing = self.require_record(record_id)
        changes: dict = {}

        if date is not None:
            changes["date"] = date
        if title is not None:
            changes["title"] = title
        if amount is not None:
            changes["amount"] = amount
        if vat_amount is not None:
            changes["vat_amount"] = vat_amount
        if details is not None:
            changes["details"] = details or None
        if category is not None:
            changes["category"] = category or None
        if notes is not None:
            changes["notes"] = notes or None

        if clear_fx_rate:
            if fx_rate_to_base is not None:
                raise ValidationError("Cannot set and clear the exchange rate at once")
            changes["fx_rate_to_base"] = None
        elif fx_rate_to_base is not None:
            changes["fx_rate_to_base"] = fx_rate_to_base

        if currency is not None:
            currency = currency.upper()
            if currency != existing.currency:
                changes["currency"] = currency
                if fx_rate_to_base is None and not clear_fx_rate:
                    changes["fx_rate_to_base"] = self._lookup_rate(currency)

        if linked_type is not None:
            linked_type = LinkedType(linked_type)
            changes["linked_type"] = linked_type
            changes["linked_client_id"] = linked_client_id if linked_type is LinkedType.CLIENT else None
            changes["linked_project_id"] = linked_project_id if linked_type is LinkedType.PROJECT else None
        elif linked_client_id is not None or linked_project_id is not None:
            raise ValidationError("Changing the linked client or project requires a linked type")

        record = self._prepare(replace(existing, **changes))
        self.db.update_record(record)
        logger.debug("Updated record %s", record_id)
        return record

    def delete_record(self, record_id: int) -> None:
        """Delete a record.

        Raises:
            NotFoundError: If the record doesn't exist
        """
        self.require_record(record_id)
        self.db.delete_record(record_id)

    def list_records(
        self,
        kind: Optional[RecordKind | str] = None,
        scope: Optional[Scope | str] = None,
        company_id: Optional[int] = None,
        window: Optional[DateWindow] = None,
        linked_client_id: Optional[int] = None,
    ) -> list[LedgerRecord]:
        """List records, newest first.

        Args:
            kind: Optional income/expense filter
            scope: Optional company/personal filter
            company_id: Optional company filter
            window: Optional inclusive date window
            linked_client_id: Optional client filter

        Returns:
            List of record entities
        """
        return self.db.list_records(
            kind=RecordKind(kind) if kind is not None else None,
            scope=Scope(scope) if scope is not None else None,
            company_id=company_id,
            start_date=window.start if window else None,
            end_date=window.end if window else None,
            linked_client_id=linked_client_id,
        )
