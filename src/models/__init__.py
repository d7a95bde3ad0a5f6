from .employee import Employee, normalize_employee
from .attendance import AttendanceRecord, MonthlyAttendanceSummary
from .organization import Site, SalaryCode, Deduction
from .user import User
from .payroll import SalaryCalculation, BonusRecord, BonusSummary, ComplianceForm

__all__ = [
    'Employee',
    'normalize_employee',
    'AttendanceRecord',
    'MonthlyAttendanceSummary',
    'Site',
    'SalaryCode',
    'Deduction',
    'User',
    'SalaryCalculation',
    'BonusRecord',
    'BonusSummary',
    'ComplianceForm'
]
