from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from urllib.parse import quote

from openpyxl import load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.worksheet.worksheet import Worksheet

from domain.models import ExcelExportRequest
from services.backup.csv_codec import normalize_birthday
from services.observability.metrics import timing_metric

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "ee-4411-11供應商工安認證申請表"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

COLUMN_WIDTHS = {
    "A": 9,
    "B": 30.00,
    "C": 23.50,
    "D": 9,
    "E": 13.13,
    "F": 14,
    "G": 14,
    "H": 33.00,
}

# header cells keep their printed label; values are appended after it
HEADER_CELLS = {
    "applicantName": "C2",
    "vendorName": "A3",
    "vendorRep": "C3",
    "contactPerson": "A4",
    "phone": "C4",
}

FIRST_WORKER_ROW = 6
LAST_WORKER_ROW = 15
MAX_WORKERS = LAST_WORKER_ROW - FIRST_WORKER_ROW + 1

BIRTHDAY_FONT = Font(name="Calibri", size=12, bold=False)
BIRTHDAY_ALIGNMENT = Alignment(vertical="center", horizontal="center")


class TemplateMissingError(Exception):
    pass


def append_to_cell(ws: Worksheet, address: str, text: str | None) -> None:
    cell = ws[address]
    original = str(cell.value).strip() if cell.value is not None else ""
    cell.value = f"{original}{text or ''}"


def write_to_cell(ws: Worksheet, address: str, text: str | None) -> None:
    ws[address].value = text or ""


def fill_worksheet(ws: Worksheet, payload: ExcelExportRequest) -> int:
    """Write header and worker fields; returns how many workers were written."""
    for letter, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[letter].width = width

    for field, address in HEADER_CELLS.items():
        append_to_cell(ws, address, getattr(payload, field))

    written = payload.workers[:MAX_WORKERS]
    if len(payload.workers) > MAX_WORKERS:
        logger.info(
            "dropping %d workers past row %d", len(payload.workers) - MAX_WORKERS, LAST_WORKER_ROW
        )

    for row, worker in enumerate(written, start=FIRST_WORKER_ROW):
        write_to_cell(ws, f"B{row}", worker.name)
        write_to_cell(ws, f"C{row}", worker.idNumber)
        write_to_cell(ws, f"D{row}", worker.bloodType)

        birthday = ws[f"E{row}"]
        birthday.value = normalize_birthday(worker.birthday)
        birthday.font = BIRTHDAY_FONT
        birthday.alignment = BIRTHDAY_ALIGNMENT
    return len(written)


def fill_template(template_path: Path, payload: ExcelExportRequest) -> bytes:
    """Load the template workbook, fill its first sheet and return the xlsx bytes."""
    if not template_path.exists():
        raise TemplateMissingError(f"template not found: {template_path}")

    with timing_metric("excel: load template"):
        wb = load_workbook(template_path)
    ws = wb.worksheets[0]

    with timing_metric("excel: fill and serialize"):
        fill_worksheet(ws, payload)
        out = BytesIO()
        wb.save(out)
    return out.getvalue()


def export_filename(applicant: str | None) -> str:
    return f"{FILENAME_PREFIX}_{applicant or 'Export'}.xlsx"


def content_disposition(filename: str) -> str:
    # same escaping as encodeURIComponent so browsers decode either parameter
    encoded = quote(filename, safe="!~*'()")
    return f"attachment; filename=\"{encoded}\"; filename*=UTF-8''{encoded}"
