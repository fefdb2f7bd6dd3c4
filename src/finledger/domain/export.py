"""CSV export of ledger records."""

import csv
import io
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from finledger.domain.entities import LedgerRecord, LinkedType, RecordKind
from finledger.domain.normalizer import total_with_vat


def records_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """Serialize flat rows to CSV text.

    The header comes from the first row's keys. Values containing commas,
    quotes or newlines are quoted and None renders as an empty field.

    Returns:
        CSV text, or an empty string for no rows
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if row.get(header) is None else row.get(header) for header in headers])
    return buffer.getvalue()


def _linked_to(record: LedgerRecord, names: Mapping[tuple[str, int], str]) -> str:
    if record.linked_type == LinkedType.CLIENT:
        return names.get(("client", record.linked_client_id), "")
    if record.linked_type == LinkedType.PROJECT:
        return names.get(("project", record.linked_project_id), "")
    return "Unlinked"


def export_rows(
    records: Sequence[LedgerRecord],
    names: Optional[Mapping[tuple[str, int], str]] = None,
) -> list[dict[str, Any]]:
    """Build flat export rows for ledger records.

    Args:
        records: Records of a single kind (all income or all expenses)
        names: Display names keyed by ("client", id) or ("project", id)

    Returns:
        List of dicts with a stable column order
    """
    names = names or {}
    rows = []
    for record in records:
        row: dict[str, Any] = {
            "Date": record.date.isoformat(),
            "Title": record.title,
            "Amount": record.amount,
            "VAT": record.vat_amount,
            "Currency": record.currency,
            "Total (with VAT)": total_with_vat(record.amount, record.vat_amount or Decimal("0"), True),
            "FX Rate": record.fx_rate_to_base,
            "Base Amount": record.base_amount,
        }
        if record.kind == RecordKind.INCOME:
            row["Linked To"] = _linked_to(record, names)
            row["Details"] = record.details
        else:
            row["Category"] = record.category or "Uncategorized"
            row["Notes"] = record.notes
        rows.append(row)
    return rows
