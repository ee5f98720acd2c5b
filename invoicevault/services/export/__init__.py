from dataclasses import dataclass
from .csv_export import generate_csv
from .workbook_export import generate_workbook
from ..errors import ValidationError

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

EXPORT_FORMATS = {
    "csv": (generate_csv, CSV_MEDIA_TYPE, "invoicevault_export.csv"),
    "xlsx": (generate_workbook, XLSX_MEDIA_TYPE, "invoicevault_export.xlsx"),
}


@dataclass
class ExportFile:
    content: bytes
    media_type: str
    filename: str


def generate(records: list[dict], fmt: str) -> ExportFile:
    """
    Render records in the requested export format.

    Args:
        records: Invoice record dicts, in listing order
        fmt: "csv" or "xlsx"

    Raises:
        ValidationError: If the format is not supported
    """
    key = (fmt or "").lower()
    if key not in EXPORT_FORMATS:
        raise ValidationError(f"Unsupported export format: {fmt}")
    render, media_type, filename = EXPORT_FORMATS[key]
    return ExportFile(content=render(records), media_type=media_type, filename=filename)
