"""
CSV export: one row per invoice record.
"""

import csv
import io

CSV_HEADERS = [
    "Invoice #", "Client", "Date", "Year", "Quarter", "Month",
    "Subtotal (CAD)", "Tax HST (CAD)", "Total (CAD)", "Currency", "File",
    "Items Purchased", "Total Quantity",
]


def _as_number(value) -> float:
    if value is None or value == "":
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _cell(value) -> str:
    """Render a value as text; whole floats lose their trailing .0"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def items_purchased(line_items: list[dict]) -> str:
    return " | ".join(_cell(li.get("description")) for li in line_items)


def total_quantity(line_items: list[dict]):
    if not line_items:
        return ""
    return sum(_as_number(li.get("quantity")) for li in line_items)


def record_row(record: dict) -> list[str]:
    line_items = record.get("lineItems") or []
    values = [
        record.get("invoiceNumber"), record.get("clientName"), record.get("date"),
        record.get("year"), record.get("quarter"), record.get("monthName"),
        record.get("subtotal"), record.get("tax"), record.get("total"),
        record.get("currency"), record.get("fileName"),
        items_purchased(line_items),
        total_quantity(line_items),
    ]
    return [_cell(v) for v in values]


def generate_csv(records: list[dict]) -> bytes:
    """
    Render records as CSV.

    The header line is plain; every data value is quoted with embedded
    quotes doubled, and missing values come out as ``""``.
    """
    lines = [",".join(CSV_HEADERS)]
    for record in records:
        buf = io.StringIO()
        csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="").writerow(record_row(record))
        lines.append(buf.getvalue())
    return "\n".join(lines).encode("utf-8")
