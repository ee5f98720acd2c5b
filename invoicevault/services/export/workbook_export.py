"""
Spreadsheet (xlsx) export laid out as an accounting ledger.

Records are grouped into one sheet per fiscal period and written one row
per line item, so each purchased item carries its own amount, profit and
cut. The invoice-level columns (number, date, client, tax, amount received,
payment method) are filled on the first line item of each invoice only.
"""

import io
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

# (header, column width)
COLUMNS = [
    ("Invoice #", 16),
    ("Date", 12),
    ("Client", 28),
    ("Item Description", 40),
    ("Quantity", 10),
    ("Unit Price", 12),
    ("Cost Price", 12),
    ("Amount", 12),
    ("Total Cost", 12),
    ("Profit", 12),
    ("Cut (50%)", 12),
    ("Tax (HST)", 12),
    ("Amount Received", 16),
    ("Payment Method", 16),
]

TITLE_ROW = 1
HEADER_ROW = 2
FIRST_DATA_ROW = 3

# 1-based column indexes
COL_INVOICE_NUMBER = 1
COL_DATE = 2
COL_CLIENT = 3
COL_DESCRIPTION = 4
COL_QUANTITY = 5
COL_UNIT_PRICE = 6
COL_COST_PRICE = 7
COL_AMOUNT = 8
COL_TOTAL_COST = 9
COL_PROFIT = 10
COL_CUT = 11
COL_TAX = 12
COL_AMOUNT_RECEIVED = 13
COL_PAYMENT_METHOD = 14

NUMERIC_COLUMNS = (
    COL_QUANTITY, COL_UNIT_PRICE, COL_COST_PRICE, COL_AMOUNT, COL_TOTAL_COST,
    COL_PROFIT, COL_CUT, COL_TAX, COL_AMOUNT_RECEIVED,
)
NUMBER_FORMAT = "0.00"

# 2025 is reported in two half-year periods; every other year is one sheet.
SPLIT_YEAR = 2025
SPLIT_FIRST_HALF = "2025 Jan-Jun"
SPLIT_SECOND_HALF = "2025 Jul-Dec"
UNKNOWN_PERIOD = "Unknown"

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
TITLE_FONT = Font(bold=True, size=14)
THIN = Side(style="thin", color="999999")
HEADER_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)

_CENTS = Decimal("0.01")


def round2(value) -> float:
    """Round half-up to two decimals (0.125 -> 0.13, unlike round()); inf/nan become 0"""
    if not math.isfinite(value):
        return 0.0
    try:
        return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # too many digits to hold cents; a float this large has none anyway
        return float(value)


def to_number(value) -> float:
    """Best-effort numeric coercion; blanks and junk count as 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(Decimal(str(value).replace(",", "").replace("$", "").strip()))
    except (InvalidOperation, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _to_int(value):
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def period_key(record: dict) -> str:
    """Sheet name for a record: its year, with 2025 split into halves"""
    year = _to_int(record.get("year"))
    if year is None:
        return UNKNOWN_PERIOD
    if year == SPLIT_YEAR:
        month = _to_int(record.get("month"))
        if month is not None and month > 6:
            return SPLIT_SECOND_HALF
        return SPLIT_FIRST_HALF
    return str(year)


def group_by_period(records: list[dict]) -> dict[str, list[dict]]:
    groups: dict[str, list[dict]] = {}
    for record in records:
        groups.setdefault(period_key(record), []).append(record)
    return {key: groups[key] for key in sorted(groups)}


def display_date(value) -> str:
    """
    Reverse the stored date's field order for display.

    ``2025-03-14`` becomes ``14/03/2025``. Anything that does not split
    into three parts is returned unchanged.
    """
    if not value:
        return ""
    text = str(value).strip()
    for sep in ("-", "/", "."):
        parts = text.split(sep)
        if len(parts) == 3:
            return "/".join(reversed(parts))
    return text


def line_item_figures(item: dict) -> dict:
    """Amount, cost, profit and cut for one line item, rounded to cents"""
    quantity = to_number(item.get("quantity"))
    unit_price = to_number(item.get("unitPrice"))
    cost_price = to_number(item.get("ourPrice"))

    amount = round2(quantity * unit_price)
    total_cost = round2(quantity * cost_price)
    profit = round2(amount - total_cost)
    cut = round2(profit / 2)
    return {
        "quantity": quantity,
        "unit_price": unit_price,
        "cost_price": cost_price,
        "amount": amount,
        "total_cost": total_cost,
        "profit": profit,
        "cut": cut,
    }


def _write_title_and_header(ws, title: str):
    last_col = get_column_letter(len(COLUMNS))
    ws.merge_cells(f"A{TITLE_ROW}:{last_col}{TITLE_ROW}")
    title_cell = ws.cell(row=TITLE_ROW, column=1, value=title)
    title_cell.font = TITLE_FONT
    title_cell.alignment = Alignment(horizontal="center")

    for col, (header, width) in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=HEADER_ROW, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        ws.column_dimensions[get_column_letter(col)].width = width
    ws.freeze_panes = f"A{FIRST_DATA_ROW}"


def _write_invoice_fields(ws, row: int, record: dict):
    ws.cell(row=row, column=COL_INVOICE_NUMBER, value=record.get("invoiceNumber") or "")
    ws.cell(row=row, column=COL_DATE, value=display_date(record.get("date")))
    ws.cell(row=row, column=COL_CLIENT, value=record.get("clientName") or "")
    ws.cell(row=row, column=COL_TAX, value=round2(to_number(record.get("tax"))))
    ws.cell(row=row, column=COL_AMOUNT_RECEIVED, value=round2(to_number(record.get("total"))))
    ws.cell(row=row, column=COL_PAYMENT_METHOD, value=record.get("paymentMethod") or "")


def _write_line_item(ws, row: int, item: dict):
    figures = line_item_figures(item)
    ws.cell(row=row, column=COL_DESCRIPTION, value=item.get("description") or "")
    ws.cell(row=row, column=COL_QUANTITY, value=figures["quantity"])
    ws.cell(row=row, column=COL_UNIT_PRICE, value=figures["unit_price"])
    ws.cell(row=row, column=COL_COST_PRICE, value=figures["cost_price"])
    ws.cell(row=row, column=COL_AMOUNT, value=figures["amount"])
    ws.cell(row=row, column=COL_TOTAL_COST, value=figures["total_cost"])
    ws.cell(row=row, column=COL_PROFIT, value=figures["profit"])
    ws.cell(row=row, column=COL_CUT, value=figures["cut"])


def write_period_sheet(ws, period: str, records: list[dict]) -> int:
    """
    Fill one worksheet with the ledger rows for ``records``.

    Returns:
        Number of data rows written
    """
    _write_title_and_header(ws, f"InvoiceVault Ledger {period}")

    row = FIRST_DATA_ROW
    for record in records:
        line_items = record.get("lineItems") or [None]
        for index, item in enumerate(line_items):
            if index == 0:
                _write_invoice_fields(ws, row, record)
            if item is not None:
                _write_line_item(ws, row, item)
            for col in NUMERIC_COLUMNS:
                ws.cell(row=row, column=col).number_format = NUMBER_FORMAT
            row += 1
    return row - FIRST_DATA_ROW


def generate_workbook(records: list[dict], now: datetime | None = None) -> bytes:
    """
    Render records as an xlsx workbook, one sheet per fiscal period.

    With no records a single empty sheet named for the current year is
    produced.

    Args:
        records: Invoice record dicts
        now: Clock override for the empty-workbook sheet name

    Returns:
        The workbook file contents
    """
    groups = group_by_period(records)
    if not groups:
        groups = {str((now or datetime.now()).year): []}

    wb = Workbook()
    wb.remove(wb.active)
    for period, period_records in groups.items():
        ws = wb.create_sheet(title=period)
        rows = write_period_sheet(ws, period, period_records)
        logger.debug("Wrote ledger sheet", sheet=period, invoices=len(period_records), rows=rows)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
