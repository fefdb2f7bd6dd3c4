"""Summary domain service: dashboards and per-entity totals."""

import logging
from typing import Optional

from finledger.database.base import Database
from finledger.domain.aggregation import aggregate
from finledger.domain.currency import DEFAULT_BASE_CURRENCY
from finledger.domain.entities import (
    AggregationMode,
    AggregationResult,
    ClientSummary,
    CompanyOverview,
    CompanySummary,
    DashboardReport,
    DateWindow,
    EntityTotals,
    GroupBy,
    LedgerRecord,
    RecordKind,
    Scope,
)
from finledger.domain.errors import NotFoundError, company_not_found

logger = logging.getLogger(__name__)


class SummaryService:
    """Service for building summary views over stored records.

    The filter selection (window, VAT toggle, currency mode) is passed into
    every call; the service keeps no filter state of its own.
    """

    def __init__(self, db: Database, base_currency: str = DEFAULT_BASE_CURRENCY):
        """Initialize summary service.

        Args:
            db: Database instance
            base_currency: Currency for normalized totals
        """
        self.db = db
        self.base_currency = base_currency

    def _fetch(
        self,
        window: DateWindow,
        kind: Optional[RecordKind] = None,
        scope: Optional[Scope] = None,
        company_id: Optional[int] = None,
    ) -> list[LedgerRecord]:
        # the database date filter only narrows the fetch; aggregate() re-filters
        return self.db.list_records(
            kind=kind,
            scope=scope,
            company_id=company_id,
            start_date=window.start,
            end_date=window.end,
        )

    def dashboard(
        self,
        window: DateWindow,
        include_vat: bool = True,
        mode: AggregationMode = AggregationMode.NORMALIZED,
    ) -> DashboardReport:
        """Build the cross-company dashboard.

        Each company's totals only count records in the company's default
        currency. Global totals cover all company records plus personal
        expenses and follow ``mode``.
        """
        companies = self.db.list_companies()
        company_records = self._fetch(window, scope=Scope.COMPANY)
        personal_expenses = self._fetch(window, kind=RecordKind.EXPENSE, scope=Scope.PERSONAL)

        result = aggregate(
            company_records + personal_expenses,
            window,
            include_vat,
            self.base_currency,
            group_by=GroupBy.COMPANY,
            entity_currencies={c.id: c.default_currency for c in companies},
            mode=mode,
        )
        personal = aggregate(personal_expenses, window, include_vat, self.base_currency, mode=mode)

        summaries = tuple(
            CompanySummary(company=c, totals=result.per_entity.get(c.id, EntityTotals()))
            for c in companies
        )
        if result.is_partial:
            logger.info(
                "Dashboard is partial: %d invalid, %d unconverted records",
                len(result.errors),
                len(result.unconverted_record_ids),
            )
        return DashboardReport(
            window=window,
            include_vat=include_vat,
            result=result,
            companies=summaries,
            personal_expenses=personal.total_expenses,
        )

    def company_overview(
        self,
        company_id: int,
        window: DateWindow,
        include_vat: bool = True,
        mode: AggregationMode = AggregationMode.NORMALIZED,
    ) -> CompanyOverview:
        """Totals for one company plus its client and project counts.

        Raises:
            NotFoundError: If the company doesn't exist
        """
        company = self.db.get_company(company_id)
        if company is None:
            raise NotFoundError(company_not_found(company_id))

        records = self._fetch(window, scope=Scope.COMPANY, company_id=company_id)
        result = aggregate(records, window, include_vat, self.base_currency, mode=mode)
        return CompanyOverview(
            company=company,
            result=result,
            client_count=len(self.db.list_clients(company_id)),
            project_count=len(self.db.list_projects(company_id)),
        )

    def client_totals(
        self,
        company_id: int,
        window: DateWindow,
        include_vat: bool = True,
    ) -> list[ClientSummary]:
        """Income per client, each in the client's preferred currency.

        Income recorded in another currency is left out of that client's
        total rather than converted.

        Raises:
            NotFoundError: If the company doesn't exist
        """
        if self.db.get_company(company_id) is None:
            raise NotFoundError(company_not_found(company_id))

        clients = self.db.list_clients(company_id)
        records = self._fetch(window, kind=RecordKind.INCOME, scope=Scope.COMPANY, company_id=company_id)
        result = aggregate(
            records,
            window,
            include_vat,
            self.base_currency,
            group_by=GroupBy.CLIENT,
            entity_currencies={c.id: c.preferred_currency for c in clients},
        )
        return [
            ClientSummary(client=c, totals=result.per_entity.get(c.id, EntityTotals()))
            for c in clients
        ]

    def personal_summary(
        self,
        window: DateWindow,
        include_vat: bool = True,
        mode: AggregationMode = AggregationMode.NORMALIZED,
    ) -> AggregationResult:
        """Totals of the personal ledger."""
        records = self._fetch(window, scope=Scope.PERSONAL)
        return aggregate(records, window, include_vat, self.base_currency, mode=mode)
