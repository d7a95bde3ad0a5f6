from typing import Any, Dict, List, Tuple

from models.organization import Deduction, Site
from models.user import User
from .client import BackendClient, unwrap

FileTuple = Tuple[str, Any, str]


class SiteService:
    """Work sites (paginated)"""

    def __init__(self, client: BackendClient):
        self.client = client

    def list(self, page: int = 1, per_page: int = 10, search: str = '') -> Tuple[List[Site], Dict[str, Any]]:
        body = self.client.get('/sites', params={'page': page, 'per_page': per_page, 'search': search},
                               fallback='Failed to fetch sites')
        sites = [Site.from_api(row) for row in unwrap(body) or []]
        pagination = body.get('pagination') if isinstance(body, dict) else None
        return sites, pagination or {'page': page, 'per_page': per_page, 'total': len(sites), 'pages': 1}

    def create(self, data: Dict[str, Any]) -> Site:
        return Site.from_api(unwrap(self.client.post('/sites', json=data, fallback='Failed to create site')) or {})

    def update(self, site_id: str, data: Dict[str, Any]) -> Site:
        body = self.client.put(f'/sites/{site_id}', json=data, fallback='Failed to update site')
        return Site.from_api(unwrap(body) or {})

    def delete(self, site_id: str) -> None:
        self.client.delete(f'/sites/{site_id}', fallback='Failed to delete site')

    def bulk_import(self, upload: FileTuple) -> Dict[str, Any]:
        body = self.client.post('/sites/bulk', files={'file': upload}, fallback='Failed to import sites')
        data = body if isinstance(body, dict) and 'created' in body else unwrap(body)
        if not isinstance(data, dict):
            data = {}
        return {'created': data.get('created', 0), 'errors': data.get('errors') or []}


class DeductionService:
    """Employee deductions recovered in monthly installments"""

    def __init__(self, client: BackendClient):
        self.client = client

    def list(self) -> List[Deduction]:
        body = self.client.get('/deductions', fallback='Failed to fetch deductions')
        return [Deduction.from_api(row) for row in unwrap(body) or []]

    def create(self, data: Dict[str, Any]) -> Deduction:
        body = self.client.post('/deductions', json=data, fallback='Failed to create deduction')
        return Deduction.from_api(unwrap(body) or {})

    def update(self, deduction_id: str, data: Dict[str, Any]) -> None:
        self.client.put(f'/deductions/{deduction_id}', json=data, fallback='Failed to update deduction')

    def delete(self, deduction_id: str) -> None:
        self.client.delete(f'/deductions/{deduction_id}', fallback='Failed to delete deduction')

    def for_employee(self, employee_id: str) -> List[Deduction]:
        body = self.client.get(f'/deductions/employee/{employee_id}', fallback='Failed to fetch deductions')
        return [Deduction.from_api(row) for row in unwrap(body) or []]

    def bulk_upload(self, upload: FileTuple) -> Dict[str, Any]:
        body = self.client.post('/deductions/bulk', files={'file': upload}, fallback='Failed to upload deductions')
        data = unwrap(body) or {}
        return {
            'success_count': data.get('success_count', 0),
            'error_count': data.get('error_count', 0),
            'errors': data.get('errors') or [],
        }

    def template(self) -> bytes:
        content, _ = self.client.get_file('/deductions/template', fallback='Failed to download template')
        return content


class UserService:
    """Console accounts, managed by superadmins"""

    def __init__(self, client: BackendClient):
        self.client = client

    def list(self) -> List[User]:
        body = self.client.get('/superadmin/users', fallback='Failed to fetch users')
        return [User.from_api(row) for row in unwrap(body) or []]

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return unwrap(self.client.post('/superadmin/users', json=data, fallback='Failed to create user')) or {}

    def update(self, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return unwrap(self.client.put(f'/superadmin/users/{user_id}', json=data,
                                      fallback='Failed to update user')) or {}

    def delete(self, user_id: str) -> None:
        self.client.delete(f'/superadmin/users/{user_id}', fallback='Failed to delete user')
