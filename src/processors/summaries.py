from decimal import Decimal
from typing import Any, Dict, List

from models.attendance import MonthlyAttendanceSummary
from models.payroll import SALARY_COLUMNS, TEXT_COLUMNS, SalaryCalculation


def attendance_band(percentage: float) -> str:
    """Colour band for an attendance percentage"""
    if percentage >= 90:
        return 'good'
    if percentage >= 75:
        return 'warning'
    return 'poor'


def monthly_salary_stats(rows: List[SalaryCalculation]) -> Dict[str, Any]:
    """Header figures shown above a monthly salary run"""
    if not rows:
        return {
            'total_employees': 0,
            'total_payroll': Decimal('0'),
            'average_salary': Decimal('0'),
            'total_basic': Decimal('0'),
            'total_deductions': Decimal('0'),
        }
    total_payroll = sum((r.net_salary for r in rows), Decimal('0'))
    return {
        'total_employees': len(rows),
        'total_payroll': total_payroll,
        'average_salary': (total_payroll / len(rows)).quantize(Decimal('0.01')),
        'total_basic': sum((r.basic for r in rows), Decimal('0')),
        'total_deductions': sum((r.total_deductions for r in rows), Decimal('0')),
    }


def salary_column_totals(rows: List[SalaryCalculation]) -> Dict[str, Decimal]:
    """Sum every numeric salary column (used for the workbook totals row)"""
    totals = {}
    for _, attr in SALARY_COLUMNS:
        if attr in TEXT_COLUMNS:
            continue
        totals[attr] = sum((getattr(r, attr) for r in rows), Decimal('0'))
    return totals


def site_report_totals(summaries: List[MonthlyAttendanceSummary]) -> Dict[str, Any]:
    """Totals across a site's monthly attendance summaries"""
    count = len(summaries)
    return {
        'employees': count,
        'present_days': sum(s.present_days for s in summaries),
        'absent_days': sum(s.absent_days for s in summaries),
        'overtime_hours': round(sum(s.total_overtime_hours for s in summaries), 2),
        'average_attendance': round(sum(s.attendance_percentage for s in summaries) / count, 2) if count else 0.0,
        'total_salary': round(sum(s.calculated_salary for s in summaries), 2),
    }
