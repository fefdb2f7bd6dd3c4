"""Tests for record normalization."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import make_record
from finledger.domain.entities import LinkedType, RecordKind, Scope
from finledger.domain.errors import InvalidAmountError, InvalidRecordError
from finledger.domain.normalizer import (
    normalize_record,
    resolve_base_amount,
    to_decimal,
    total_with_vat,
    validate_linkage,
)


def _income(record_id=1, **overrides):
    fields = dict(
        kind=RecordKind.INCOME,
        linked_type=LinkedType.NONE,
        details="Consulting",
    )
    fields.update(overrides)
    return make_record(record_id, **fields)


class TestTotalWithVat:
    @pytest.mark.parametrize(
        "amount,vat",
        [("0", "0"), ("100", "18"), ("49.99", "0.01"), ("1234.56", "246.91")],
    )
    def test_include_vat_adds_vat(self, amount, vat):
        amount, vat = Decimal(amount), Decimal(vat)

        assert total_with_vat(amount, vat, True) == amount + vat
        assert total_with_vat(amount, vat, False) == amount

    def test_total_with_vat_is_at_least_amount(self):
        assert total_with_vat(Decimal("10"), Decimal("0"), True) >= Decimal("10")
        assert total_with_vat(Decimal("10"), Decimal("2"), True) >= Decimal("10")

    def test_negative_vat_raises(self):
        with pytest.raises(InvalidAmountError):
            total_with_vat(Decimal("100"), Decimal("-1"), True)

    @pytest.mark.parametrize("vat", [Decimal("NaN"), Decimal("sNaN"), Decimal("Infinity")])
    def test_non_finite_vat_raises(self, vat):
        with pytest.raises(InvalidAmountError):
            total_with_vat(Decimal("100"), vat, True)


class TestResolveBaseAmount:
    def test_foreign_currency_with_rate_is_converted(self):
        assert resolve_base_amount(Decimal("100"), "EUR", "TRY", Decimal("35.2")) == Decimal("3520")

    def test_base_currency_returns_amount(self):
        assert resolve_base_amount(Decimal("100"), "TRY", "TRY", None) == Decimal("100")

    def test_base_currency_ignores_rate(self):
        assert resolve_base_amount(Decimal("100"), "TRY", "TRY", Decimal("5")) == Decimal("100")

    def test_foreign_currency_without_rate_is_unknown(self):
        assert resolve_base_amount(Decimal("100"), "EUR", "TRY", None) is None

    @pytest.mark.parametrize("rate", ["0", "-1.5"])
    def test_non_positive_rate_raises(self, rate):
        with pytest.raises(InvalidAmountError):
            resolve_base_amount(Decimal("100"), "EUR", "TRY", Decimal(rate))


class TestToDecimal:
    @pytest.mark.parametrize("value,expected", [(10, "10"), ("12.50", "12.50"), (0.1, "0.1")])
    def test_coerces_numbers(self, value, expected):
        assert to_decimal(value, "amount") == Decimal(expected)

    @pytest.mark.parametrize("value", [None, True, "abc", "NaN", "Infinity"])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(InvalidAmountError) as excinfo:
            to_decimal(value, "amount", record_id=7)

        assert excinfo.value.record_id == 7
        assert "Record 7" in str(excinfo.value)


class TestValidateLinkage:
    def test_unlinked_without_details_fails(self):
        with pytest.raises(InvalidRecordError):
            validate_linkage("none", None, None, "")

    def test_unlinked_with_whitespace_details_fails(self):
        with pytest.raises(InvalidRecordError):
            validate_linkage("none", None, None, "   ")

    def test_unlinked_with_details_passes(self):
        assert validate_linkage("none", None, None, "Workshop") is LinkedType.NONE

    def test_client_link_needs_client_only(self):
        assert validate_linkage("client", 3, None, None) is LinkedType.CLIENT
        with pytest.raises(InvalidRecordError):
            validate_linkage("client", None, None, None)
        with pytest.raises(InvalidRecordError):
            validate_linkage("client", 3, 4, None)

    def test_project_link_needs_project_only(self):
        assert validate_linkage("project", None, 4, None) is LinkedType.PROJECT
        with pytest.raises(InvalidRecordError):
            validate_linkage("project", 3, 4, None)

    def test_unlinked_with_reference_fails(self):
        with pytest.raises(InvalidRecordError):
            validate_linkage("none", 3, None, "Workshop")

    def test_unknown_linked_type_fails(self):
        with pytest.raises(InvalidRecordError):
            validate_linkage("vendor", None, None, "x")


class TestNormalizeRecord:
    def test_unlinked_income_without_details_is_invalid(self):
        record = _income(details="")

        with pytest.raises(InvalidRecordError) as excinfo:
            normalize_record(record, "TRY")
        assert excinfo.value.record_id == 1

    def test_unlinked_income_with_details_is_valid(self):
        normalized = normalize_record(_income(details="Workshop"), "TRY")

        assert normalized.record.linked_type is LinkedType.NONE

    def test_recomputes_base_amount_ignoring_stored_value(self):
        record = make_record(
            currency="EUR",
            amount=Decimal("100"),
            fx_rate_to_base=Decimal("35.2"),
            base_amount=Decimal("1"),
        )

        normalized = normalize_record(record, "TRY")

        assert normalized.base_amount == Decimal("3520")
        assert normalized.record.base_amount == Decimal("3520")

    def test_base_currency_record_drops_rate(self):
        record = make_record(currency="TRY", fx_rate_to_base=Decimal("3"))

        normalized = normalize_record(record, "TRY")

        assert normalized.record.fx_rate_to_base is None
        assert normalized.base_amount == Decimal("100")

    def test_foreign_record_without_rate_has_no_base_amount(self):
        normalized = normalize_record(make_record(currency="USD"), "TRY")

        assert normalized.base_amount is None

    def test_original_record_is_not_mutated(self):
        record = make_record(amount="100.50", base_amount=Decimal("9"))

        normalize_record(record, "TRY")

        assert record.amount == "100.50"
        assert record.base_amount == Decimal("9")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"amount": Decimal("-1")},
            {"vat_amount": Decimal("-0.01")},
            {"amount": None},
            {"amount": "ten"},
            {"currency": "EUR", "fx_rate_to_base": Decimal("0")},
        ],
    )
    def test_bad_amounts_raise_invalid_amount(self, overrides):
        with pytest.raises(InvalidAmountError):
            normalize_record(make_record(**overrides), "TRY")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"kind": "refund"},
            {"scope": "family"},
            {"date": None},
            {"currency": "usd"},
            {"company_id": None},
            {"scope": Scope.PERSONAL, "company_id": 1},
            {"linked_type": LinkedType.CLIENT, "linked_client_id": 2},
        ],
    )
    def test_malformed_records_raise_invalid_record(self, overrides):
        with pytest.raises(InvalidRecordError):
            normalize_record(make_record(**overrides), "TRY")

    def test_personal_records_need_no_company(self):
        record = make_record(scope=Scope.PERSONAL, company_id=None, date=date(2024, 3, 2))

        assert normalize_record(record, "TRY").record.scope is Scope.PERSONAL

    def test_effective_amount_follows_vat_toggle(self):
        normalized = normalize_record(make_record(amount=Decimal("100"), vat_amount=Decimal("18")), "TRY")

        assert normalized.effective_amount(True) == Decimal("118")
        assert normalized.effective_amount(False) == Decimal("100")
