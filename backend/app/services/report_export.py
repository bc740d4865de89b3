"""
Scam log exports for the Reports page.

Public API:
  filter_by_threat_type(rows, threat_type) -> list[dict]
  export_csv(rows) -> bytes
  export_xlsx(rows, stats, generated_at) -> bytes
  export_filename(fmt, generated_at) -> str
"""

import csv
import io
from datetime import datetime
from typing import Optional

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from app.models.scam_log import ScamStats
from app.services.stats import parse_timestamp


EXPORT_COLUMNS = [
    "Date",
    "Type",
    "Sender",
    "Subject",
    "Risk Level",
    "Risk Score",
    "Flagged Reasons",
]

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

_HEADER_FONT = Font(bold=True, size=11, color="FFFFFF")
_TITLE_FONT = Font(bold=True, size=13)
_SUBTITLE_FONT = Font(bold=False, size=10, italic=True)

# Red header band, same as the dashboard's threat colour
_HEADER_FILL = PatternFill(
    start_color="DC3545",
    end_color="DC3545",
    fill_type="solid",
)

_COLUMN_WIDTHS: dict[str, int] = {
    "Date": 20,
    "Type": 8,
    "Sender": 32,
    "Subject": 36,
    "Risk Level": 12,
    "Risk Score": 11,
    "Flagged Reasons": 60,
}
_DEFAULT_COLUMN_WIDTH = 16


def filter_by_threat_type(rows: list[dict], threat_type: Optional[str]) -> list[dict]:
    """Keep rows whose risk_level equals ``threat_type``; "all" or None keeps everything."""
    if not threat_type or threat_type == "all":
        return list(rows)
    return [r for r in rows if r.get("risk_level") == threat_type]


def _format_date(created_at: str) -> str:
    return parse_timestamp(created_at).strftime("%Y-%m-%d %H:%M:%S")


def _row_cells(row: dict, reasons_separator: str) -> list:
    score = row.get("risk_score")
    return [
        _format_date(row["created_at"]),
        row.get("message_type", ""),
        row.get("sender", ""),
        row.get("subject") or "",
        row.get("risk_level", ""),
        "" if score is None else score,
        reasons_separator.join(row.get("flagged_reasons") or []),
    ]


def export_csv(rows: list[dict]) -> bytes:
    """Every cell is quoted; flagged reasons are joined with "; "."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow(_row_cells(row, "; "))
    return buf.getvalue().encode("utf-8")


def export_xlsx(rows: list[dict], stats: ScamStats, generated_at: datetime) -> bytes:
    """
    Build the Excel report: a title and summary block followed by the log
    table with a styled, frozen header row.
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Scam Report"

    # ------------------------------------------------------------------
    # Rows 1-2: Title and generation date
    # ------------------------------------------------------------------
    ws.append(["Scam Protection Report"])
    ws.cell(row=1, column=1).font = _TITLE_FONT
    ws.append([f"Generated: {generated_at.strftime('%B %d, %Y')}"])
    ws.cell(row=2, column=1).font = _SUBTITLE_FONT

    # ------------------------------------------------------------------
    # Rows 3-7: Summary statistics
    # ------------------------------------------------------------------
    ws.append([])
    ws.append(["Total Threats Blocked", stats.total_threats])
    ws.append(["Active Alerts", stats.active_alerts])
    ws.append(["Messages Analyzed", stats.total_analyzed])
    ws.append(["Protection Score", f"{stats.protection_score}%"])
    ws.append([])

    # ------------------------------------------------------------------
    # Row 9: Column headers
    # ------------------------------------------------------------------
    ws.append(EXPORT_COLUMNS)
    header_row_idx = ws.max_row

    for col_idx in range(1, len(EXPORT_COLUMNS) + 1):
        cell = ws.cell(row=header_row_idx, column=col_idx)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(horizontal="center")

    for row in rows:
        ws.append(_row_cells(row, ", "))

    for col_idx, col_name in enumerate(EXPORT_COLUMNS, start=1):
        width = _COLUMN_WIDTHS.get(col_name, _DEFAULT_COLUMN_WIDTH)
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    ws.freeze_panes = ws.cell(row=header_row_idx + 1, column=1)

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.read()


def export_filename(fmt: str, generated_at: datetime) -> str:
    stamp = generated_at.strftime("%Y-%m-%d")
    if fmt == "xlsx":
        return f"scam-protection-report-{stamp}.xlsx"
    return f"scam-logs-{stamp}.csv"
