from datetime import date
from typing import Any, Dict, List, Optional

from models.attendance import AttendanceRecord, MonthlyAttendanceSummary
from .client import BackendClient, unwrap


def _attendance(body: Any) -> List[AttendanceRecord]:
    return [AttendanceRecord.from_api(r) for r in (unwrap(body) or [])]


class AttendanceService:
    """Attendance marking and reporting for admins and supervisors"""

    def __init__(self, client: BackendClient):
        self.client = client

    def mark(self, request: Dict[str, Any]) -> AttendanceRecord:
        body = self.client.post('/attendance/mark', json=request, fallback='Failed to mark attendance')
        return AttendanceRecord.from_api(unwrap(body) or {})

    def bulk_mark(self, records: List[Dict[str, Any]], marked_by: Optional[str] = None) -> Dict[str, Any]:
        payload = {'attendance_records': records}
        if marked_by:
            payload['marked_by'] = marked_by
        body = self.client.post('/attendance/bulk-mark', json=payload, fallback='Failed to mark attendance')
        if not isinstance(body, dict):
            body = {'results': body if isinstance(body, list) else []}
        elif 'successful_count' not in body and isinstance(body.get('data'), dict):
            body = body['data']
        return {
            'successful_count': body.get('successful_count', 0),
            'total_count': body.get('total_count', len(records)),
            'results': body.get('results', []),
        }

    def for_employee(self, employee_id: str, start_date: Optional[str] = None,
                     end_date: Optional[str] = None) -> List[AttendanceRecord]:
        body = self.client.get(f'/attendance/employee/{employee_id}',
                               params={'start_date': start_date, 'end_date': end_date},
                               fallback='Failed to fetch attendance')
        return _attendance(body)

    def by_date(self, day: str) -> List[AttendanceRecord]:
        return _attendance(self.client.get(f'/attendance/date/{day}', fallback='Failed to fetch attendance'))

    def today(self) -> List[AttendanceRecord]:
        return _attendance(self.client.get('/attendance/today', fallback="Failed to fetch today's attendance"))

    def monthly_summary(self, employee_id: str, year: int, month: int) -> MonthlyAttendanceSummary:
        body = self.client.get(f'/attendance/monthly-summary/{employee_id}',
                               params={'year': year, 'month': month},
                               fallback='Failed to fetch monthly summary')
        return MonthlyAttendanceSummary.from_api(unwrap(body) or {})

    def update(self, attendance_id: str, request: Dict[str, Any]) -> AttendanceRecord:
        body = self.client.put(f'/attendance/update/{attendance_id}', json=request,
                               fallback='Failed to update attendance')
        return AttendanceRecord.from_api(unwrap(body) or {})

    def site_employees(self) -> List[Dict[str, Any]]:
        return unwrap(self.client.get('/attendance/site-employees', fallback='Failed to fetch site employees')) or []

    def site_attendance(self, start_date: Optional[str] = None, end_date: Optional[str] = None,
                        employee_id: Optional[str] = None, site_id: Optional[str] = None) -> List[AttendanceRecord]:
        params = {
            'start_date': start_date,
            'end_date': end_date,
            'employee_id': employee_id,
            'site_id': site_id,
        }
        return _attendance(self.client.get('/attendance/site-attendance', params=params,
                                           fallback='Failed to fetch site attendance'))


class SelfService:
    """Endpoints an employee uses for their own profile, attendance and salary"""

    def __init__(self, client: BackendClient):
        self.client = client

    def profile(self) -> Dict[str, Any]:
        return unwrap(self.client.get('/employee/profile', fallback='Failed to load profile')) or {}

    def mark_attendance(self, request: Dict[str, Any]) -> Dict[str, Any]:
        body = self.client.post('/employee/attendance/mark', json=request, fallback='Failed to mark attendance')
        return unwrap(body) or {}

    def attendance_history(self, page: int = 1, per_page: int = 15, month: Optional[int] = None,
                           year: Optional[int] = None) -> Dict[str, Any]:
        params = {'page': page, 'per_page': per_page, 'month': month, 'year': year}
        data = unwrap(self.client.get('/employee/attendance/history', params=params,
                                      fallback='Failed to load attendance history')) or {}
        return {
            'records': [AttendanceRecord.from_api(r) for r in data.get('records') or []],
            'pagination': data.get('pagination') or {},
        }

    def attendance_summary(self) -> Dict[str, Any]:
        return unwrap(self.client.get('/employee/attendance/summary',
                                      fallback='Failed to load attendance summary')) or {}

    def today_attendance(self, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        """Latest history entry, only if it is for today"""
        today_iso = (today or date.today()).isoformat()
        history = self.attendance_history(page=1, per_page=1)
        if history['records'] and history['records'][0].attendance_date == today_iso:
            return history['records'][0]
        return None

    def current_salary(self, month: int, year: int) -> Dict[str, Any]:
        return unwrap(self.client.get('/employee/salary/current', params={'month': month, 'year': year},
                                      fallback='Failed to load salary')) or {}

    def dashboard_stats(self) -> Dict[str, Any]:
        return unwrap(self.client.get('/employee/dashboard/stats', fallback='Failed to load dashboard')) or {}
