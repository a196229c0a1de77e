# dailyreport/services/spreadsheet_service.py
"""
Excel import/export for staff, branches and daily achievements.

Rows are plain dicts keyed by column header. Parsing only: no cell styling.
"""
import io
from typing import BinaryIO, Dict, List

import openpyxl
from openpyxl.utils import get_column_letter

from ..core.config import ACHIEVEMENT_COLUMNS, BRANCH_COLUMNS, METRIC_NAMES, NA, STAFF_COLUMNS
from ..schemas.organization import Branch
from ..schemas.report import DailyAchievement
from ..schemas.staff import StaffMember
from .hierarchy_service import direct_reports

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def read_rows(stream: BinaryIO) -> List[Dict[str, str]]:
    """
    Rows of the first worksheet as dicts keyed by the header row. Rows whose
    cells are all empty are skipped.
    """
    wb = openpyxl.load_workbook(stream, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        columns = [_cell_text(h) for h in header]

        records = []
        for values in rows:
            cells = [_cell_text(v) for v in values]
            if not any(cells):
                continue
            records.append({col: cells[i] if i < len(cells) else "" for i, col in enumerate(columns) if col})
        return records
    finally:
        wb.close()


# --- STAFF ---

def staff_rows_to_records(rows: List[Dict[str, str]]) -> List[dict]:
    """Map spreadsheet rows onto staff import input. Location columns are ignored."""
    records = []
    for row in rows:
        records.append({
            "employee_name": row.get("Staff Name", "").upper(),
            "employee_code": row.get("Employee Code", ""),
            "function": row.get("Designation", ""),
            "branch_name": row.get("Branch Name") or NA,
            "contact_number": row.get("Contact Number", ""),
            "managed_zones": row.get("Managed Zones", ""),
            "managed_branches": row.get("Managed Branches", ""),
            "reports_to_employee_code": row.get("Reports To Employee Code") or None,
        })
    return records


def staff_to_rows(staff: List[StaffMember], all_staff: List[StaffMember]) -> List[Dict]:
    rows = []
    for s in staff:
        row = dict(zip(STAFF_COLUMNS, [
            s.employee_name,
            s.employee_code,
            s.function,
            s.branch_name,
            s.district_name,
            s.zone,
            s.region,
            s.contact_number,
            ", ".join(s.managed_zones),
            ", ".join(s.managed_branches),
            s.reports_to_employee_code or "",
        ]))
        row["Subordinates Count"] = len(direct_reports(s, all_staff))
        rows.append(row)
    return rows


# --- BRANCHES ---

def branch_rows_to_records(rows: List[Dict[str, str]]) -> List[dict]:
    return [
        {
            "branch_name": row.get("Branch Name", ""),
            "zone": row.get("Zone", ""),
            "region": row.get("Region", ""),
            "district_name": row.get("District Name", ""),
            "mobile_number": row.get("Mobile Number") or NA,
        }
        for row in rows
    ]


def branches_to_rows(branches: List[Branch]) -> List[Dict]:
    return [
        dict(zip(BRANCH_COLUMNS, [
            b.branch_name,
            b.zone,
            b.region,
            b.district_name,
            b.branch_manager_name,
            b.branch_manager_code,
            b.mobile_number,
        ]))
        for b in branches
    ]


# --- DAILY ACHIEVEMENTS ---

def achievement_rows_to_records(rows: List[Dict[str, str]]) -> List[dict]:
    """Map rows onto achievement import input. Blank metric cells count as 0; total columns are ignored."""
    records = []
    for row in rows:
        # Date cells come back as "YYYY-MM-DD 00:00:00"
        day = row.get("Date", "").split(" ")[0]
        records.append({
            "date": day or None,
            "employee_code": row.get("Employee Code", ""),
            "metrics": {name: row.get(name) or 0 for name in METRIC_NAMES},
        })
    return records


def achievements_to_rows(records: List[DailyAchievement]) -> List[Dict]:
    rows = []
    for r in records:
        row = {"Date": r.date.strftime("%d/%m/%Y"), "Employee Code": r.employee_code,
               "Staff Name": r.staff_name, "Branch Name": r.branch_name}
        row.update({name: r.metrics.get(name, 0) for name in ACHIEVEMENT_COLUMNS[4:]})
        rows.append(row)
    return rows


# --- WORKBOOK ---

def _auto_adjust_worksheet_columns(worksheet):
    for i, column_cells in enumerate(worksheet.columns, 1):
        max_length = max((len(str(c.value)) for c in column_cells if c.value is not None), default=0)
        worksheet.column_dimensions[get_column_letter(i)].width = max_length + 2


def build_workbook(rows: List[Dict], title: str, columns: List[str] = None) -> io.BytesIO:
    """One-sheet workbook: header row then one row per dict. Returns a rewound buffer."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title

    headers = columns or (list(rows[0].keys()) if rows else [])
    ws.append(headers)
    for row in rows:
        ws.append([row.get(h, "") for h in headers])
    _auto_adjust_worksheet_columns(ws)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output
