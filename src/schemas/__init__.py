from .employee import EmployeeRegistration
from .forms import (
    SalaryCodeForm,
    AttendanceMark,
    AttendanceUpdate,
    BulkAttendance,
    DeductionForm,
    UserForm,
    SiteForm,
)
from .payroll import PayrollSelection, SelectionError, SalaryPeriod, BonusFilters, ComplianceFilters

__all__ = [
    'EmployeeRegistration',
    'SalaryCodeForm',
    'AttendanceMark',
    'AttendanceUpdate',
    'BulkAttendance',
    'DeductionForm',
    'UserForm',
    'SiteForm',
    'PayrollSelection',
    'SelectionError',
    'SalaryPeriod',
    'BonusFilters',
    'ComplianceFilters'
]
