"""Record normalization: VAT totals, base-currency amounts and record checks."""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from finledger.domain.currency import is_currency_code
from finledger.domain.entities import LedgerRecord, LinkedType, RecordKind, Scope
from finledger.domain.errors import InvalidAmountError, InvalidRecordError, with_record


@dataclass(frozen=True)
class NormalizedRecord:
    """A validated record with monetary fields coerced to Decimal."""

    record: LedgerRecord
    base_amount: Optional[Decimal]

    @property
    def id(self) -> Optional[int]:
        return self.record.id

    def effective_amount(self, include_vat: bool) -> Decimal:
        return total_with_vat(self.record.amount, self.record.vat_amount, include_vat)


def to_decimal(value, field_name: str, record_id: Optional[int] = None) -> Decimal:
    """Coerce a monetary value to Decimal.

    Raises:
        InvalidAmountError: If the value is missing or not a finite number
    """
    if value is None:
        raise InvalidAmountError(with_record(f"{field_name} is missing", record_id), record_id)
    if isinstance(value, bool):
        raise InvalidAmountError(
            with_record(f"{field_name} must be numeric, got {value!r}", record_id), record_id
        )
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() keeps floats at their printed precision
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError(
                with_record(f"{field_name} must be numeric, got {value!r}", record_id), record_id
            ) from None
    if not result.is_finite():
        raise InvalidAmountError(
            with_record(f"{field_name} must be finite, got {value!r}", record_id), record_id
        )
    return result


def total_with_vat(amount: Decimal, vat_amount: Decimal, include_vat: bool) -> Decimal:
    """Return amount plus VAT when include_vat is set, else the bare amount.

    Raises:
        InvalidAmountError: If vat_amount is negative or not a finite number
    """
    if not vat_amount.is_finite():
        raise InvalidAmountError(f"VAT amount must be finite, got {vat_amount}")
    if vat_amount < 0:
        raise InvalidAmountError(f"VAT amount cannot be negative: {vat_amount}")
    return amount + vat_amount if include_vat else amount


def resolve_base_amount(
    amount: Decimal,
    currency: str,
    base_currency: str,
    fx_rate_to_base: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """Convert an amount into the base currency.

    Returns:
        The amount unchanged for base-currency records, amount * rate when a
        rate is known, or None when the base amount cannot be determined.

    Raises:
        InvalidAmountError: If a rate is given for a foreign currency and it is not positive
    """
    if currency == base_currency:
        return amount
    if fx_rate_to_base is None:
        return None
    if fx_rate_to_base <= 0:
        raise InvalidAmountError(f"Exchange rate must be positive, got {fx_rate_to_base}")
    return amount * fx_rate_to_base


def validate_linkage(
    linked_type: "LinkedType | str",
    linked_client_id: Optional[int],
    linked_project_id: Optional[int],
    details: Optional[str],
    record_id: Optional[int] = None,
) -> LinkedType:
    """Check that client/project linkage is consistent with linked_type.

    Returns:
        The parsed LinkedType

    Raises:
        InvalidRecordError: If the linkage is inconsistent or unlinked without details
    """
    try:
        linked_type = LinkedType(linked_type)
    except ValueError:
        raise InvalidRecordError(
            with_record(f"Unknown linked type '{linked_type}'", record_id), record_id
        ) from None

    if linked_type is LinkedType.CLIENT:
        if linked_client_id is None or linked_project_id is not None:
            raise InvalidRecordError(
                with_record("Client-linked records need a client and no project", record_id),
                record_id,
            )
    elif linked_type is LinkedType.PROJECT:
        if linked_project_id is None or linked_client_id is not None:
            raise InvalidRecordError(
                with_record("Project-linked records need a project and no client", record_id),
                record_id,
            )
    else:
        if linked_client_id is not None or linked_project_id is not None:
            raise InvalidRecordError(
                with_record("Unlinked records cannot reference a client or project", record_id),
                record_id,
            )
        if details is None or not str(details).strip():
            raise InvalidRecordError(
                with_record("Details are required for unlinked income", record_id), record_id
            )
    return linked_type


def normalize_record(record: LedgerRecord, base_currency: str) -> NormalizedRecord:
    """Validate a record and recompute its base-currency amount.

    Any stored base_amount is ignored. Linkage rules only apply to company
    income; expenses and personal records must simply not be linked.

    Raises:
        InvalidAmountError: For missing, non-numeric or negative monetary fields
        InvalidRecordError: For other malformed fields
    """
    record_id = record.id

    try:
        kind = RecordKind(record.kind)
        scope = Scope(record.scope)
    except ValueError as e:
        raise InvalidRecordError(with_record(str(e), record_id), record_id) from None

    if not isinstance(record.date, date):
        raise InvalidRecordError(with_record("date is missing", record_id), record_id)
    if not is_currency_code(record.currency):
        raise InvalidRecordError(
            with_record(f"Invalid currency code {record.currency!r}", record_id), record_id
        )
    if scope is Scope.COMPANY and record.company_id is None:
        raise InvalidRecordError(
            with_record("Company records need a company", record_id), record_id
        )
    if scope is Scope.PERSONAL and record.company_id is not None:
        raise InvalidRecordError(
            with_record("Personal records cannot belong to a company", record_id), record_id
        )

    amount = to_decimal(record.amount, "amount", record_id)
    vat_amount = to_decimal(record.vat_amount, "VAT amount", record_id)
    if amount < 0:
        raise InvalidAmountError(
            with_record(f"amount cannot be negative: {amount}", record_id), record_id
        )
    if vat_amount < 0:
        raise InvalidAmountError(
            with_record(f"VAT amount cannot be negative: {vat_amount}", record_id), record_id
        )

    fx_rate = record.fx_rate_to_base
    if record.currency == base_currency:
        fx_rate = None
    elif fx_rate is not None:
        fx_rate = to_decimal(fx_rate, "exchange rate", record_id)
        if fx_rate <= 0:
            raise InvalidAmountError(
                with_record(f"Exchange rate must be positive, got {fx_rate}", record_id),
                record_id,
            )

    if kind is RecordKind.INCOME and scope is Scope.COMPANY:
        linked_type = validate_linkage(
            record.linked_type,
            record.linked_client_id,
            record.linked_project_id,
            record.details,
            record_id,
        )
    else:
        linked_type = LinkedType.NONE
        if (
            record.linked_type != LinkedType.NONE
            or record.linked_client_id is not None
            or record.linked_project_id is not None
        ):
            raise InvalidRecordError(
                with_record("Only company income can be linked to a client or project", record_id),
                record_id,
            )

    base_amount = resolve_base_amount(amount, record.currency, base_currency, fx_rate)
    normalized = replace(
        record,
        kind=kind,
        scope=scope,
        amount=amount,
        vat_amount=vat_amount,
        fx_rate_to_base=fx_rate,
        base_amount=base_amount,
        linked_type=linked_type,
    )
    return NormalizedRecord(record=normalized, base_amount=base_amount)
