import csv
import io
import logging
import time
import zipfile

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from fieldsales.core.exceptions import InvalidRequestError, UpstreamFailureError
from fieldsales.core.export_file import ExportFile
from fieldsales.services.report_catalog import humanize_column

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="354A5F", end_color="354A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ZIP_MIMETYPE = "application/zip"

# Accepted format names → canonical format
FORMAT_ALIASES = {
    "xlsx": "xlsx",
    "spreadsheet": "xlsx",
    "csv": "csv",
    "archive": "csv",
}

_SHEET_TITLE_MAX = 31


def normalize_format(fmt: str | None) -> str:
    canonical = FORMAT_ALIASES.get((fmt or "").lower())
    if canonical is None:
        raise InvalidRequestError(
            "Unsupported format. Supported values: json, csv, xlsx.", details={"format": fmt}
        )
    return canonical


def report_filename(ext: str, now_ms: int | None = None) -> str:
    """``custom-report-<epoch millis>.<ext>``"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"custom-report-{now_ms}.{ext}"


def _apply_header_style(ws, row: int, col_count: int) -> None:
    """Apply dark-header styling to an Excel row (1-indexed)."""
    for col in range(1, col_count + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)


def _auto_width(ws) -> None:
    """Auto-size column widths based on content (capped at 60 chars)."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is not None:
                max_len = max(max_len, min(len(str(cell.value)), 60))
        ws.column_dimensions[col_letter].width = max(max_len + 4, 12)


def build_workbook(tables) -> bytes:
    """One sheet per entity: humanized header row, then data rows."""
    wb = Workbook()
    wb.remove(wb.active)

    for table in tables.values():
        ws = wb.create_sheet(title=table.table_id[:_SHEET_TITLE_MAX])
        ws.append([humanize_column(c) for c in table.columns])
        _apply_header_style(ws, 1, len(table.columns))
        for row in table.rows:
            ws.append([row.get(c) for c in table.columns])
        ws.freeze_panes = "A2"
        _auto_width(ws)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _table_csv(table) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([humanize_column(c) for c in table.columns])
    for row in table.rows:
        writer.writerow([row.get(c) for c in table.columns])
    return buf.getvalue()


def build_csv_archive(tables) -> bytes:
    """ZIP with one ``<entity>.csv`` per entity."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for table in tables.values():
            zf.writestr(f"{table.table_id}.csv", _table_csv(table).encode("utf-8"))
    return buf.getvalue()


def encode_report(tables, fmt: str) -> ExportFile:
    """Encode flattened report tables (``{entity: ReportTable}``) as a download.

    Raises InvalidRequestError for an unknown format and
    UpstreamFailureError when encoding fails; no partial file is returned.
    """
    canonical = normalize_format(fmt)
    try:
        if canonical == "xlsx":
            content, ext, mimetype = build_workbook(tables), "xlsx", XLSX_MIMETYPE
        else:
            content, ext, mimetype = build_csv_archive(tables), "zip", ZIP_MIMETYPE
    except (ValueError, TypeError, OSError) as exc:
        logger.exception("Encoding %s export failed", canonical)
        raise UpstreamFailureError(f"Could not encode {canonical} export", cause=exc) from exc

    export = ExportFile(content=content, filename=report_filename(ext), mimetype=mimetype)
    logger.info("Encoded %s export: %d entities, %d bytes", canonical, len(tables), len(content),
                extra={"format": canonical})
    return export
