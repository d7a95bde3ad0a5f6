import logging
from typing import Any, Dict, List, Optional, Tuple

from models.organization import SalaryCode
from models.payroll import SalaryCalculation
from .client import BackendClient, BackendError, SessionExpiredError, unwrap

logger = logging.getLogger(__name__)

FileTuple = Tuple[str, Any, str]


class SalaryService:
    """Salary calculation endpoints; the arithmetic itself happens on the backend"""

    def __init__(self, client: BackendClient):
        self.client = client

    def upload_for_calculation(self, attendance_file: FileTuple,
                               adjustments_file: Optional[FileTuple] = None) -> List[SalaryCalculation]:
        files = {'attendance': attendance_file}
        if adjustments_file:
            files['adjustments'] = adjustments_file
        body = self.client.post('/salary/upload', files=files, fallback='Failed to process salary sheets')
        return [SalaryCalculation.from_api(row) for row in unwrap(body) or []]

    def calculate_monthly(self, year: int, month: int, site_id: Optional[str] = None) -> List[SalaryCalculation]:
        payload = {'year': year, 'month': month}
        if site_id:
            payload['site_id'] = site_id
        body = self.client.post('/salary/calculate-monthly', json=payload, fallback='Failed to calculate salary')
        return [SalaryCalculation.from_api(row) for row in unwrap(body) or []]

    def calculate_individual(self, employee_id: str, year: int, month: int,
                             adjustments: Optional[Dict[str, float]] = None) -> SalaryCalculation:
        payload = {'employee_id': employee_id, 'year': year, 'month': month}
        if adjustments:
            payload['adjustments'] = adjustments
        body = self.client.post('/salary/calculate-individual', json=payload, fallback='Failed to calculate salary')
        return SalaryCalculation.from_api(unwrap(body) or {})

    def attendance_template(self) -> bytes:
        content, _ = self.client.get_file('/salary/template/attendance', fallback='Failed to download template')
        return content

    def adjustments_template(self) -> bytes:
        content, _ = self.client.get_file('/salary/template/adjustments', fallback='Failed to download template')
        return content

    def export(self, rows: List[SalaryCalculation]) -> bytes:
        content, _ = self.client.post_file(
            '/salary/export',
            json={'salary_data': [row.to_api() for row in rows]},
            fallback='Failed to export salary data',
            expected=(
                'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
                'application/vnd.ms-excel',
                'application/octet-stream',
            ),
        )
        return content


class SalaryCodeService:
    """Salary code (site + rank + state -> base wage) maintenance"""

    def __init__(self, client: BackendClient):
        self.client = client

    def list(self) -> List[SalaryCode]:
        body = self.client.get('/salary-codes', fallback='Failed to fetch salary codes')
        data = body.get('data') if isinstance(body, dict) else body
        return [SalaryCode.from_api(row) for row in data or []]

    def get(self, salary_code: str) -> SalaryCode:
        body = self.client.get(f'/salary-codes/{salary_code}', fallback='Failed to fetch salary code')
        return SalaryCode.from_api(unwrap(body) or {})

    def create(self, payload: Dict[str, Any]) -> SalaryCode:
        """Create via /salary-codes, falling back once to /salary-codes/create"""
        try:
            body = self.client.post('/salary-codes', json=payload, fallback='Failed to create salary code')
        except SessionExpiredError:
            raise
        except BackendError as e:
            logger.info("Primary salary code endpoint failed (%s), trying /salary-codes/create", e.message)
            body = self.client.post('/salary-codes/create', json=payload, fallback='Failed to create salary code')
        return SalaryCode.from_api(unwrap(body) or {})

    def bulk_create(self, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        body = self.client.post('/salary-codes/bulk', json={'salary_codes': rows},
                                fallback='Failed to import salary codes')
        data = unwrap(body)
        if isinstance(data, list):
            return {'created_count': len(data), 'error_count': 0, 'errors': []}
        data = data or {}
        errors = data.get('errors') or []
        return {
            'created_count': data.get('created_count', len(data.get('created_codes') or [])),
            'error_count': data.get('error_count', len(errors)),
            'errors': errors,
        }
