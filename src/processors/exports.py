import csv
import io
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional, Union

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill

from config.settings import OUTPUT_DIR
from models.attendance import MonthlyAttendanceSummary
from models.payroll import SALARY_COLUMNS, TEXT_COLUMNS, BonusSummary, ComplianceForm, SalaryCalculation
from utils.formatters import month_name
from .summaries import salary_column_totals
from .templates import THIN_BORDER, autosize, style_header, workbook_bytes

logger = logging.getLogger(__name__)

BONUS_HEADERS = ['Employee ID', 'Employee Name', 'Basic Salary', 'Bonus Amount', 'Period Months']

SITE_REPORT_HEADERS = [
    'Employee ID', 'Employee Name', 'Year', 'Month', 'Present Days', 'Absent Days',
    'Late Days', 'Half Days', 'Overtime Hours', 'Working Days', 'Holidays',
    'Attendance %', 'Basic Salary', 'Calculated Salary',
]

FORM_B_HEADERS = [
    'Sl.No', 'Employee Code', 'Employee Name', 'Designation',
    'Rate of Wage (BS)', 'Rate of Wage (DA)', 'Days Worked', 'Overtime', 'Total Days',
    'BS', 'DA', 'HRA', 'COV', 'OTA', 'AE', 'Total Earnings',
    'ESI', 'CT', 'PTAX', 'ADV', 'Total Deductions', 'Net Payable',
]


def _csv_text(header: List[str], rows: List[List[Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return format(value.normalize(), 'f') if value == value.to_integral() else str(value)
    return value


def _days(value: float) -> Any:
    """Whole day counts without a trailing .0; half days keep their fraction"""
    return int(value) if float(value).is_integer() else value


# ========== CSV builders ==========

def bonus_csv(summary: BonusSummary) -> str:
    rows = [
        [r.employee_id, r.employee_name, _plain(r.basic_salary), _plain(r.bonus_amount), r.period_months]
        for r in summary.records
    ]
    return _csv_text(BONUS_HEADERS, rows)


def site_salary_csv(summaries: List[MonthlyAttendanceSummary]) -> str:
    rows = [
        [
            s.employee_id, s.employee_name, s.year, s.month,
            _days(s.present_days), _days(s.absent_days), _days(s.late_days), _days(s.half_days),
            s.total_overtime_hours, s.working_days, s.holiday_count,
            s.attendance_percentage, s.basic_salary or 0, s.calculated_salary or 0,
        ]
        for s in summaries
    ]
    return _csv_text(SITE_REPORT_HEADERS, rows)


def site_salary_filename(year: int, month: int) -> str:
    return f"salary_report_{month_name(month)}_{year}.csv"


def form_b_csv(form: ComplianceForm) -> str:
    rows = []
    for row in form.rows:
        rate = row.get('rateOfWage') or {}
        gross = row.get('grossEarnings') or {}
        deductions = row.get('deductions') or {}
        rows.append([
            row.get('slNo'), row.get('employeeCode'), row.get('employeeName'), row.get('designation'),
            rate.get('bs', 0), rate.get('da', 0), row.get('daysWorked', 0), row.get('overtime', 0),
            row.get('totalDays', 0),
            gross.get('bs', 0), gross.get('da', 0), gross.get('hra', 0), gross.get('cov', 0),
            gross.get('ota', 0), gross.get('ae', 0), row.get('totalEarnings', 0),
            deductions.get('esi', 0), deductions.get('cit', deductions.get('ct', 0)),
            deductions.get('ptax', 0), deductions.get('adv', 0), deductions.get('total', 0),
            row.get('netPayable', 0),
        ])
    return _csv_text(FORM_B_HEADERS, rows)


def form_b_csv_filename(site: Optional[str], year: int, month: int) -> str:
    return f"Form-B-{site or 'All'}-{year}-{month}.csv"


# ========== Excel builder ==========

def salary_workbook(rows: List[SalaryCalculation], year: int, month: int) -> bytes:
    """Styled salary sheet with a totals row, built locally from calculated rows"""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = f"Salary {month_name(month)[:3]} {year}"

    ws.append([column for column, _ in SALARY_COLUMNS])
    style_header(ws)

    for record in rows:
        ws.append([
            getattr(record, attr) if attr in TEXT_COLUMNS else float(getattr(record, attr))
            for _, attr in SALARY_COLUMNS
        ])

    totals = salary_column_totals(rows)
    total_row = ['TOTAL'] + [
        '' if attr in TEXT_COLUMNS else float(totals[attr])
        for _, attr in SALARY_COLUMNS[1:]
    ]
    ws.append(total_row)

    total_fill = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")
    last_row = ws.max_row
    for row in ws.iter_rows(min_row=2, max_row=last_row):
        for cell in row:
            cell.border = THIN_BORDER
            if isinstance(cell.value, float):
                cell.number_format = '#,##0.00'
                cell.alignment = Alignment(horizontal='right')
    for cell in ws[last_row]:
        cell.font = Font(bold=True)
        cell.fill = total_fill

    ws.freeze_panes = 'C2'
    autosize(ws)
    return workbook_bytes(wb)


def salary_workbook_filename(year: int, month: int) -> str:
    return f"salary_calculation_{month_name(month)}_{year}.xlsx"


class DocumentWriter:
    """Writes generated documents under OUTPUT_DIR/<kind>"""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = output_dir or OUTPUT_DIR

    def save(self, kind: str, filename: str, content: Union[bytes, str]) -> Path:
        folder = self.output_dir / kind
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / Path(filename).name
        if isinstance(content, str):
            path.write_text(content, encoding='utf-8')
        else:
            path.write_bytes(content)
        logger.info("Saved %s document %s (%d bytes)", kind, path.name, path.stat().st_size)
        return path
