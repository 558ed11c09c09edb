"""
export.py - CSV / XLSX export of expense records

The CSV layout is fixed:
    Date,Name,Category,Amount,Currency
with Name and Category always double-quoted. The XLSX workbook contains the
same columns on an "expenses" sheet plus a "totals_by_currency" sheet.
"""

from io import BytesIO
from typing import Iterable, Optional
import datetime

import pandas as pd

from expense_widget.aggregator import totals_by_currency
from expense_widget.models import Expense

CSV_HEADER = ["Date", "Name", "Category", "Amount", "Currency"]


def _quote(text: str) -> str:
    return '"' + str(text).replace('"', '""') + '"'


def _plain_number(amount: float) -> str:
    # 15.0 -> "15", 4.5 -> "4.5"
    amount = float(amount)
    if amount.is_integer():
        return str(int(amount))
    return repr(amount)


def to_csv(records: Iterable[Expense]) -> str:
    """Render records (in the given order) as CSV text without a trailing newline."""
    lines = [",".join(CSV_HEADER)]
    for e in records:
        lines.append(",".join([
            e.date,
            _quote(e.name),
            _quote(e.category),
            _plain_number(e.amount),
            e.currency,
        ]))
    return "\n".join(lines)


def to_dataframe(records: Iterable[Expense]) -> pd.DataFrame:
    """Build a DataFrame with the CSV columns, one row per record."""
    rows = [
        {
            "Date": e.date,
            "Name": e.name,
            "Category": e.category,
            "Amount": float(e.amount),
            "Currency": e.currency,
        }
        for e in records
    ]
    return pd.DataFrame(rows, columns=CSV_HEADER)


def to_xlsx_bytes(records: Iterable[Expense]) -> bytes:
    """Workbook bytes with an "expenses" sheet and a "totals_by_currency" sheet."""
    records = list(records)
    df = to_dataframe(records)
    totals = pd.DataFrame(
        sorted(totals_by_currency(records).items()),
        columns=["Currency", "Total"],
    )
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="expenses")
        totals.to_excel(writer, index=False, sheet_name="totals_by_currency")
    # context manager already saved into buffer
    buffer.seek(0)
    return buffer.getvalue()


def export_filename(ext: str, today: Optional[datetime.date] = None) -> str:
    """expenses_YYYY-MM-DD.<ext>"""
    today = today or datetime.date.today()
    return f"expenses_{today.isoformat()}.{ext.lstrip('.')}"
