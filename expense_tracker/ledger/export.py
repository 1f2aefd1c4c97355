"""
Export Formatter

Serializes a list of expenses to CSV text. Producing a downloadable file
from the text is the presentation layer's job.

Format:
    Date,Name,Category,Amount,Notes        <- header, unquoted
    "2024-01-15","Coffee","Food","12.50","" <- every field quoted

Rows are joined with "\\n" and there is no trailing newline.

IMPORTANT: Export is blocked only when the FULL ledger is empty. A filter
that matches nothing on a non-empty ledger still exports the header row.
"""

import csv
import io
from datetime import date
from typing import Iterable, Sequence

from expense_tracker.ledger.statistics import format_amount
from expense_tracker.models.expense import ExpenseRecord


CSV_HEADER = ("Date", "Name", "Category", "Amount", "Notes")
LINE_SEPARATOR = "\n"


class EmptyExportError(Exception):
    """There are no expenses at all, so there is nothing to export."""

    def __init__(self, message: str = "No expenses to export!"):
        super().__init__(message)


def _quoted_row(values: Sequence[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator=LINE_SEPARATOR)
    writer.writerow(values)
    # QUOTE_ALL: the row always ends in a quote before the terminator
    return buffer.getvalue()[: -len(LINE_SEPARATOR)]


def record_to_row(record: ExpenseRecord) -> tuple[str, str, str, str, str]:
    return (
        record.date.isoformat(),
        record.name,
        record.category.value,
        format_amount(record.amount),
        record.notes or "",
    )


def generate_csv(
    records: Iterable[ExpenseRecord],
    ledger_records: Iterable[ExpenseRecord],
) -> str:
    """
    Build the CSV payload for records.

    Args:
        records: What to export, usually the filter engine's output
        ledger_records: The full ledger, used only for the emptiness check

    Raises:
        EmptyExportError: If the full ledger has no records
    """
    if not any(True for _ in ledger_records):
        raise EmptyExportError()

    lines = [",".join(CSV_HEADER)]
    lines.extend(_quoted_row(record_to_row(record)) for record in records)
    return LINE_SEPARATOR.join(lines)


def export_filename(app_name: str, username: str, today: date) -> str:
    """'noura_expenses_alice_2024-01-15.csv'"""
    return f"{app_name}_expenses_{username}_{today.isoformat()}.csv"
