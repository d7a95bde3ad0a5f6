import logging
from typing import Any, Dict, List, Optional

from models.employee import DOCUMENT_FIELDS, normalize_employee
from .client import BackendClient, unwrap

logger = logging.getLogger(__name__)


def _records(body: Any) -> List[Dict[str, Any]]:
    data = unwrap(body)
    return [normalize_employee(record) for record in (data or [])]


class EmployeeService:
    """Employee directory, registration and maintenance"""

    def __init__(self, client: BackendClient):
        self.client = client

    def list(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return _records(self.client.get('/employees/all', params=params, fallback='Failed to fetch employees'))

    def get(self, employee_id: str) -> Dict[str, Any]:
        body = self.client.get(f'/employees/{employee_id}', fallback='Failed to fetch employee')
        return normalize_employee(unwrap(body) or {})

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        body = self.client.post('/employees', json=data, fallback='Failed to create employee')
        return normalize_employee(unwrap(body) or {})

    def update(self, employee_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        body = self.client.put(f'/employees/{employee_id}', json=data, fallback='Failed to update employee')
        return normalize_employee(unwrap(body) or {})

    def delete(self, employee_id: str) -> None:
        self.client.delete(f'/employees/{employee_id}', fallback='Failed to delete employee')

    def bulk_import(self, employees: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        body = self.client.post('/employees/bulk-import', json={'employees': employees},
                                fallback='Failed to import employees')
        return _records(body)

    def search(self, query: str) -> List[Dict[str, Any]]:
        return _records(self.client.get('/employees/search', params={'q': query},
                                        fallback='Failed to search employees'))

    def register(self, form: Dict[str, str], documents: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Multipart registration: mapped form fields plus optional scanned documents"""
        files = {}
        for name, upload in (documents or {}).items():
            if name not in DOCUMENT_FIELDS:
                logger.warning("Ignoring unknown document field %s", name)
                continue
            files[name] = upload
        body = self.client.post('/employees/register', data=form, files=files or None,
                                fallback='Error registering employee')
        return normalize_employee(unwrap(body) or {})

    def debug(self, employee_id: str) -> Dict[str, Any]:
        return unwrap(self.client.get(f'/employees/{employee_id}/debug',
                                      fallback='Failed to load employee diagnostics')) or {}

    def fix_skill_level(self, employee_id: str, skill_level: str) -> Dict[str, Any]:
        return self.update(employee_id, {'skill_level': skill_level})

    def site_employees(self) -> List[Dict[str, Any]]:
        return _records(self.client.get('/employees/site_employees', fallback='Failed to fetch site employees'))
