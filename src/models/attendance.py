from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ATTENDANCE_STATUSES = ['Present', 'Absent', 'Late', 'Half Day', 'Holiday', 'Leave']
MARKABLE_STATUSES = ['Present', 'Absent', 'Late', 'Half Day']


@dataclass
class AttendanceRecord:
    """Single attendance entry"""
    attendance_id: str
    employee_id: str
    attendance_date: str
    attendance_status: str
    employee_name: Optional[str] = None
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    overtime_hours: float = 0.0
    late_minutes: int = 0
    early_departure_minutes: int = 0
    total_hours_worked: float = 0.0
    is_holiday: bool = False
    is_weekend: bool = False
    remarks: Optional[str] = None
    marked_by: Optional[str] = None
    is_approved: bool = False
    created_date: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'AttendanceRecord':
        return cls(
            attendance_id=str(data.get('attendance_id', '')),
            employee_id=str(data.get('employee_id', '')),
            attendance_date=data.get('attendance_date', ''),
            attendance_status=data.get('attendance_status', ''),
            employee_name=data.get('employee_name'),
            check_in_time=data.get('check_in_time'),
            check_out_time=data.get('check_out_time'),
            overtime_hours=float(data.get('overtime_hours') or 0),
            late_minutes=int(data.get('late_minutes') or 0),
            early_departure_minutes=int(data.get('early_departure_minutes') or 0),
            total_hours_worked=float(data.get('total_hours_worked') or 0),
            is_holiday=bool(data.get('is_holiday', False)),
            is_weekend=bool(data.get('is_weekend', False)),
            remarks=data.get('remarks'),
            marked_by=data.get('marked_by'),
            is_approved=bool(data.get('is_approved', False)),
            created_date=data.get('created_date'),
        )


@dataclass
class MonthlyAttendanceSummary:
    """Attendance totals for one employee and month"""
    employee_id: str
    year: int
    month: int
    present_days: float = 0.0
    absent_days: float = 0.0
    late_days: float = 0.0
    half_days: float = 0.0
    total_overtime_hours: float = 0.0
    working_days: int = 0
    holiday_count: int = 0
    attendance_percentage: float = 0.0
    employee_name: str = ''
    basic_salary: float = 0.0
    calculated_salary: float = 0.0
    records: List[AttendanceRecord] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'MonthlyAttendanceSummary':
        return cls(
            employee_id=str(data.get('employee_id', '')),
            year=int(data.get('year') or 0),
            month=int(data.get('month') or 0),
            present_days=float(data.get('present_days') or 0),
            absent_days=float(data.get('absent_days') or 0),
            late_days=float(data.get('late_days') or 0),
            half_days=float(data.get('half_days') or 0),
            total_overtime_hours=float(data.get('total_overtime_hours') or 0),
            working_days=int(data.get('working_days') or 0),
            holiday_count=int(data.get('holiday_count') or 0),
            attendance_percentage=float(data.get('attendance_percentage') or 0),
            employee_name=data.get('employee_name') or '',
            basic_salary=float(data.get('basic_salary') or 0),
            calculated_salary=float(data.get('calculated_salary') or 0),
            records=[AttendanceRecord.from_api(r) for r in data.get('records') or []],
        )
