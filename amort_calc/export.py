"""Export helpers for amortization schedules.

Schedules can be written to JSON (with summary), CSV, Excel workbooks via
``openpyxl`` and PDF documents via ``reportlab``. The byte-returning variants
are used by the web front-end to stream downloads; the path variants by the
command line. ``build_email_link`` prepares a ``mailto:`` hand-off asking the
recipient to attach one of the exported files.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .data_models import AmortizationEntry
from .exceptions import ExportError
from .formatter import entry_to_row, format_payment_date, schedule_headers
from .logging import get_logger

logger = get_logger(__name__)

EXPORT_FORMATS = ("json", "csv", "xlsx", "pdf")
SHEET_TITLE = "Amortization Schedule"
MONEY_FORMAT = "#,##0.00"
# Columns C..J of the workbook hold monetary values
MONEY_COLUMNS = "CDEFGHIJ"

DEFAULT_EMAIL_SUBJECT = "Loan amortization schedule"
DEFAULT_EMAIL_BODY = (
    "Hello,\n\n"
    "Please review the attached loan amortization schedule.\n"
    "Note: download the Excel or PDF file from the calculator first, then "
    "attach it to this email yourself.\n\n"
    "Generated by amort-calc.\n"
)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    return value


def entry_to_dict(entry: AmortizationEntry) -> Dict[str, Any]:
    return {
        "period": entry.period,
        "payment_date": entry.payment_date.isoformat(),
        "starting_balance": float(entry.starting_balance),
        "scheduled_payment": float(entry.scheduled_payment),
        "extra_payment": float(entry.extra_payment),
        "total_payment": float(entry.total_payment),
        "principal": float(entry.principal),
        "interest": float(entry.interest),
        "ending_balance": float(entry.ending_balance),
        "cumulative_interest": float(entry.cumulative_interest),
    }


def serialize_schedule(schedule: List[AmortizationEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    return [entry_to_dict(e) for e in schedule]


def serialize_summary(summary: Dict[str, object]) -> Dict[str, Any]:
    return _to_jsonable(summary)


def export_to_json(path: Path, schedule: List[AmortizationEntry], summary: Dict[str, object]) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": serialize_summary(summary), "schedule": serialize_schedule(schedule)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Wrote %d schedule rows to %s", len(schedule), path)


def schedule_to_csv_text(schedule: List[AmortizationEntry], locale: str = "iso") -> str:
    """Render the schedule as CSV; monetary values are plain two-decimal numbers."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(schedule_headers(locale))
    for e in schedule:
        writer.writerow(
            [
                e.period,
                format_payment_date(e.payment_date, locale),
                f"{e.starting_balance:.2f}",
                f"{e.scheduled_payment:.2f}",
                f"{e.extra_payment:.2f}",
                f"{e.total_payment:.2f}",
                f"{e.principal:.2f}",
                f"{e.interest:.2f}",
                f"{e.ending_balance:.2f}",
                f"{e.cumulative_interest:.2f}",
            ]
        )
    return buffer.getvalue()


def export_to_csv(path: Path, schedule: List[AmortizationEntry], locale: str = "iso") -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(schedule_to_csv_text(schedule, locale))
    logger.info("Wrote %d schedule rows to %s", len(schedule), path)


def build_workbook(schedule: List[AmortizationEntry], locale: str = "iso") -> Workbook:
    """Build an ``openpyxl`` workbook holding the schedule on a single sheet."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(schedule_headers(locale))
    for cell in sheet[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")

    for e in schedule:
        sheet.append(
            [
                e.period,
                format_payment_date(e.payment_date, locale),
                e.starting_balance,
                e.scheduled_payment,
                e.extra_payment,
                e.total_payment,
                e.principal,
                e.interest,
                e.ending_balance,
                e.cumulative_interest,
            ]
        )

    for col_letter in MONEY_COLUMNS:
        for cell in sheet[col_letter][1:]:
            cell.number_format = MONEY_FORMAT
    for col in sheet.columns:
        width = max(len(str(cell.value)) for cell in col if cell.value is not None)
        sheet.column_dimensions[col[0].column_letter].width = width + 2
    return workbook


def schedule_to_xlsx_bytes(schedule: List[AmortizationEntry], locale: str = "iso") -> bytes:
    output = io.BytesIO()
    build_workbook(schedule, locale).save(output)
    return output.getvalue()


def export_to_xlsx(path: Path, schedule: List[AmortizationEntry], locale: str = "iso") -> None:
    """Export schedule to an Excel workbook."""
    build_workbook(schedule, locale).save(path)
    logger.info("Wrote %d schedule rows to %s", len(schedule), path)


def _register_font(font_path: Optional[str]) -> str:
    """Register a TrueType font for non-Latin labels; return the font name to use."""
    if not font_path:
        return "Helvetica"
    name = Path(font_path).stem
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, font_path))
    return name


def schedule_to_pdf_bytes(
    schedule: List[AmortizationEntry],
    locale: str = "iso",
    title: str = SHEET_TITLE,
    font_path: Optional[str] = None,
) -> bytes:
    """Render the schedule as a landscape A4 PDF table.

    Thai labels need a font with Thai glyphs; pass its ``.ttf`` file as
    ``font_path``. Without one the built-in Helvetica is used.
    """
    font_name = _register_font(font_path)
    if locale == "th" and not font_path:
        logger.warning("No Thai font supplied; PDF may not render Thai characters correctly")

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), topMargin=25, bottomMargin=25)
    styles = getSampleStyleSheet()
    title_style = styles["Title"].clone("ScheduleTitle", fontName=font_name)

    data = [schedule_headers(locale)] + [entry_to_row(e, locale) for e in schedule]
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, -1), font_name),
                ("FONTSIZE", (0, 0), (-1, -1), 7),
                ("BACKGROUND", (0, 0), (-1, 0), colors.Color(20 / 255, 150 / 255, 150 / 255)),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("ALIGN", (0, 0), (-1, 0), "CENTER"),
                ("ALIGN", (0, 1), (0, -1), "CENTER"),
                ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.Color(0.94, 0.99, 0.98)]),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )

    doc.build([Paragraph(title, title_style), Spacer(1, 12), table])
    return buffer.getvalue()


def export_to_pdf(
    path: Path,
    schedule: List[AmortizationEntry],
    locale: str = "iso",
    font_path: Optional[str] = None,
) -> None:
    """Export schedule to a PDF file."""
    path.write_bytes(schedule_to_pdf_bytes(schedule, locale, font_path=font_path))
    logger.info("Wrote %d schedule rows to %s", len(schedule), path)


def export_schedule(
    path: Path,
    schedule: List[AmortizationEntry],
    summary: Dict[str, object],
    locale: str = "iso",
    font_path: Optional[str] = None,
) -> None:
    """Dispatch on the file suffix of ``path``."""
    suffix = path.suffix.lower().lstrip(".")
    if suffix not in EXPORT_FORMATS:
        raise ExportError(f"Unsupported output format {path.suffix!r}; use .json, .csv, .xlsx or .pdf")
    if suffix == "json":
        export_to_json(path, schedule, summary)
    elif suffix == "csv":
        export_to_csv(path, schedule, locale)
    elif suffix == "xlsx":
        export_to_xlsx(path, schedule, locale)
    else:
        export_to_pdf(path, schedule, locale, font_path)


def build_email_link(subject: str = DEFAULT_EMAIL_SUBJECT, body: str = DEFAULT_EMAIL_BODY, to: str = "") -> str:
    """Return a ``mailto:`` URL with a percent-encoded subject and body."""
    return f"mailto:{quote(to, safe='@')}?subject={quote(subject)}&body={quote(body)}"
