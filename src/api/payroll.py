import logging
from typing import Any, Dict, List, Optional

from models.payroll import BonusSummary, ComplianceForm
from utils.formatters import format_date_iso, month_bounds
from .client import EXCEL_CONTENT_TYPES, BackendClient, BackendError, SessionExpiredError, unwrap

logger = logging.getLogger(__name__)

FORM_PATHS = {
    'B': '/forms/form-b',
    'C': '/forms/form-c',
    'D': '/forms/form-d',
}


class PayrollService:
    """Payslip preview/generation and bonus calculation under /payroll"""

    def __init__(self, client: BackendClient):
        self.client = client

    def employees(self, site_id: Optional[str] = None) -> List[Dict[str, Any]]:
        body = self.client.get('/payroll/employees', params={'site_id': site_id},
                               fallback='Failed to fetch employees')
        return unwrap(body) or []

    def sites(self) -> List[Dict[str, Any]]:
        return unwrap(self.client.get('/payroll/sites', fallback='Failed to fetch sites')) or []

    def preview(self, employee_ids: List[Any], year: int, month: int) -> Dict[str, Any]:
        start_date, end_date = month_bounds(year, month)
        params = {
            'employee_ids': ','.join(str(i) for i in employee_ids),
            'year': year,
            'month': month,
            'start_date': format_date_iso(start_date),
            'end_date': format_date_iso(end_date),
        }
        data = unwrap(self.client.get('/payroll/preview', params=params, fallback='Failed to load preview')) or {}
        return {
            'preview_html': data.get('preview_html', ''),
            'preview_count': data.get('preview_count', 0),
            'total_employees': data.get('total_employees', len(employee_ids)),
        }

    def generate(self, request: Dict[str, Any]) -> bytes:
        """POST the selection and return the payslip PDF"""
        content, _ = self.client.post_file('/payroll/generate', json=request,
                                           fallback='Failed to generate payslips')
        if not content:
            raise BackendError('Failed to generate payslips: empty document')
        logger.info("Generated payslip PDF (%d bytes) for %s-%s",
                    len(content), request.get('year'), request.get('month'))
        return content

    def calculate_bonus(self, year: int, start_month: int, end_month: int,
                        site_id: Optional[str] = None) -> BonusSummary:
        payload = {'year': year, 'start_month': start_month, 'end_month': end_month}
        if site_id:
            payload['site_id'] = site_id
        body = self.client.post('/payroll/bonus', json=payload, fallback='Failed to calculate bonus')
        return BonusSummary.from_api(unwrap(body) or {})


class FormsService:
    """Statutory registers: Form B (wages), Form C (EPF), Form D (ESIC)"""

    def __init__(self, client: BackendClient):
        self.client = client

    @staticmethod
    def _params(year: int, month: int, site: Optional[str]) -> Dict[str, Any]:
        params = {'year': year, 'month': month}
        if site and site.lower() != 'all':
            params['site'] = site
        return params

    def form(self, form_type: str, year: int, month: int, site: Optional[str] = None) -> ComplianceForm:
        path = FORM_PATHS[form_type]
        body = self.client.get(path, params=self._params(year, month, site),
                               fallback=f'Failed to fetch Form {form_type} data')
        return ComplianceForm.from_api(form_type, body if isinstance(body, dict) else {'data': body})

    def download(self, form_type: str, year: int, month: int, site: Optional[str] = None) -> bytes:
        path = FORM_PATHS[form_type] + '/download'
        content, _ = self.client.get_file(path, params=self._params(year, month, site),
                                          fallback=f'Failed to download Form {form_type}',
                                          expected=EXCEL_CONTENT_TYPES)
        return content

    def form_b(self, year: int, month: int, site: Optional[str] = None) -> ComplianceForm:
        return self.form('B', year, month, site)

    def available_sites(self) -> List[str]:
        """Distinct site names from the salary codes; empty list if they cannot be loaded"""
        try:
            body = self.client.get('/salary-codes', fallback='Failed to fetch salary codes')
        except SessionExpiredError:
            raise
        except BackendError as e:
            logger.warning("Could not load sites for compliance forms: %s", e.message)
            return []
        rows = body.get('data') if isinstance(body, dict) else body
        sites = []
        for row in rows or []:
            name = (row.get('site_name') or '').strip()
            if name and name not in sites:
                sites.append(name)
        return sorted(sites)
