"""
Export Serialization

Turns expense records into raw CSV or JSON text. Getting that text onto
the user's disk is left to the caller.

CSV layout:
    Date,Amount,Category,Note
    10/18/2026,12.5,Food,"Lunch with ""Sam"" at noon"

The Note column is always double-quoted with embedded quotes doubled.
Date uses a display format in local time; Amount and Category are raw.
Rows are joined with "\\n" and there is no trailing newline.
"""

import json
import math
from typing import Iterable

from spendlog.models.expense import Expense
from spendlog.queries.windows import to_local


CSV_HEADER = ("Date", "Amount", "Category", "Note")

DEFAULT_CSV_DATE_FORMAT = "%m/%d/%Y"


def format_amount(amount: float) -> str:
    """Shortest numeric spelling: 10.0 -> "10", 12.5 -> "12.5", NaN -> "NaN"."""
    if math.isnan(amount):
        return "NaN"
    if math.isinf(amount):
        return "Infinity" if amount > 0 else "-Infinity"
    if amount.is_integer() and abs(amount) < 1e21:
        return str(int(amount))
    # Exponent form from 1e21 up: "1e+21", not twenty-two digits.
    return repr(amount)


def quote_note(note: str) -> str:
    return '"' + note.replace('"', '""') + '"'


def expenses_to_csv(
    expenses: Iterable[Expense],
    date_format: str = DEFAULT_CSV_DATE_FORMAT,
) -> str:
    lines = [",".join(CSV_HEADER)]
    for expense in expenses:
        lines.append(",".join([
            to_local(expense.date).strftime(date_format),
            format_amount(expense.amount),
            expense.category,
            quote_note(expense.note),
        ]))
    return "\n".join(lines)


def expenses_to_json(expenses: Iterable[Expense]) -> str:
    """Indented JSON array of {id, amount, note, category, date, timestamp}."""
    return json.dumps(
        [expense.to_export_dict() for expense in expenses],
        indent=2,
        ensure_ascii=False,
    )
