"""Shared domain error messages and error types."""

from typing import Optional

from finledger.domain.currency import supported_codes


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidRangeError(ValidationError):
    """Date window whose start falls after its end, or is missing a bound."""


class UnknownPresetError(ValidationError):
    """Date preset token outside the supported set."""


class RecordValidationError(ValidationError):
    """Validation failure tied to a single ledger record."""

    def __init__(self, message: str, record_id: Optional[int] = None):
        super().__init__(message)
        self.record_id = record_id


class InvalidAmountError(RecordValidationError):
    """Negative VAT, negative amount, bad rate, or non-numeric monetary field."""


class InvalidRecordError(RecordValidationError):
    """Malformed record, such as inconsistent client/project linkage."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


def company_not_found(company_id: int) -> str:
    """Return message for missing company."""
    return f"Company {company_id} not found"


def client_not_found(client_id: int) -> str:
    """Return message for missing client."""
    return f"Client {client_id} not found"


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def record_not_found(record_id: int) -> str:
    """Return message for missing ledger record."""
    return f"Record {record_id} not found"


def unknown_currency(code: str) -> str:
    """Return message for a currency missing from the currency table."""
    return f"Unknown currency '{code}'. Supported currencies: {', '.join(supported_codes())}"


def with_record(message: str, record_id: Optional[int]) -> str:
    """Prefix a message with the record it belongs to, when known."""
    if record_id is None:
        return message
    return f"Record {record_id}: {message}"
