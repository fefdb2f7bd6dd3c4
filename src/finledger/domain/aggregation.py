"""Aggregation of ledger records into income, expense and net totals."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from finledger.domain.entities import (
    AggregationMode,
    AggregationResult,
    DateWindow,
    EntityTotals,
    GroupBy,
    LedgerRecord,
    RecordError,
    RecordKind,
)
from finledger.domain.errors import RecordValidationError
from finledger.domain.normalizer import NormalizedRecord, normalize_record, resolve_base_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def entity_key(record: LedgerRecord, group_by: GroupBy) -> Optional[int]:
    """Return the id a record is grouped under, or None if it has none."""
    if group_by is GroupBy.COMPANY:
        return record.company_id
    if group_by is GroupBy.CLIENT:
        return record.linked_client_id
    if group_by is GroupBy.PROJECT:
        return record.linked_project_id
    return None


def _error_sort_key(error: RecordError) -> tuple[Any, ...]:
    return (error.record_id is None, error.record_id or 0, error.message)


def aggregate(
    records: Iterable[LedgerRecord],
    window: DateWindow,
    include_vat: bool,
    base_currency: str,
    group_by: GroupBy = GroupBy.NONE,
    entity_currencies: Optional[Mapping[int, str]] = None,
    mode: AggregationMode = AggregationMode.NORMALIZED,
) -> AggregationResult:
    """Aggregate records inside a date window.

    Records are filtered to the window, validated one by one, and summed in a
    single pass. Invalid records are reported in ``errors`` and skipped.

    Global totals follow ``mode``: RAW adds native amounts whatever their
    currency, NORMALIZED converts each record's VAT-adjusted amount to
    ``base_currency`` and reports records without a known rate in
    ``unconverted_record_ids``.

    Per-entity totals always stay in native amounts. When an entity has an
    entry in ``entity_currencies`` only records in that currency count toward
    it; records in other currencies are left out of that entity, not converted.

    Args:
        records: Records to aggregate; never mutated
        window: Inclusive date window
        include_vat: Add VAT to each record's amount
        base_currency: Currency used for normalized totals
        group_by: Entity key for per-entity totals
        entity_currencies: Optional currency per entity id
        mode: Global currency handling

    Returns:
        AggregationResult
    """
    mode = AggregationMode(mode)
    group_by = GroupBy(group_by)
    entity_currencies = entity_currencies or {}

    totals = {RecordKind.INCOME: ZERO, RecordKind.EXPENSE: ZERO}
    per_entity: dict[int, dict[RecordKind, Decimal]] = defaultdict(
        lambda: {RecordKind.INCOME: ZERO, RecordKind.EXPENSE: ZERO}
    )
    errors: list[RecordError] = []
    unconverted: list[int] = []
    count = 0

    for record in records:
        try:
            normalized = normalize_record(record, base_currency)
        except RecordValidationError as e:
            # records with a usable date outside the window are not reported
            record_date = getattr(record, "date", None)
            if isinstance(record_date, date) and not window.contains(record_date):
                continue
            logger.warning("Skipping record %s: %s", record.id, e)
            errors.append(RecordError(record_id=record.id, message=str(e)))
            continue

        if not window.contains(normalized.record.date):
            continue

        count += 1
        kind = normalized.record.kind
        effective = normalized.effective_amount(include_vat)

        if mode is AggregationMode.RAW:
            totals[kind] += effective
        else:
            converted = _convert(normalized, effective, base_currency)
            if converted is None:
                unconverted.append(normalized.id)
            else:
                totals[kind] += converted

        if group_by is not GroupBy.NONE:
            key = entity_key(normalized.record, group_by)
            if key is None:
                continue
            expected_currency = entity_currencies.get(key)
            if expected_currency is not None and normalized.record.currency != expected_currency:
                continue
            per_entity[key][kind] += effective

    return AggregationResult(
        total_income=totals[RecordKind.INCOME],
        total_expenses=totals[RecordKind.EXPENSE],
        mode=mode,
        currency=base_currency if mode is AggregationMode.NORMALIZED else None,
        record_count=count,
        per_entity={
            key: EntityTotals(income=value[RecordKind.INCOME], expenses=value[RecordKind.EXPENSE])
            for key, value in per_entity.items()
        },
        errors=tuple(sorted(errors, key=_error_sort_key)),
        unconverted_record_ids=tuple(sorted(unconverted, key=lambda rid: (rid is None, rid or 0))),
    )


def _convert(normalized: NormalizedRecord, effective: Decimal, base_currency: str) -> Optional[Decimal]:
    record = normalized.record
    return resolve_base_amount(effective, record.currency, base_currency, record.fx_rate_to_base)


def sum_effective(
    records: Iterable[LedgerRecord], include_vat: bool, base_currency: str
) -> tuple[Decimal, tuple[RecordError, ...]]:
    """Sum VAT-adjusted native amounts of valid records, ignoring currency.

    Used for single-currency lists such as one company's income table.

    Returns:
        The total and the errors of records left out of it. A non-empty
        error tuple means the total covers a subset and is partial.
    """
    total = ZERO
    errors = []
    for record in records:
        try:
            total += normalize_record(record, base_currency).effective_amount(include_vat)
        except RecordValidationError as e:
            logger.warning("Skipping record %s: %s", record.id, e)
            errors.append(RecordError(record_id=record.id, message=str(e)))
    return total, tuple(sorted(errors, key=_error_sort_key))
