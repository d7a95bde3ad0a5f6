from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ROLES = ['superadmin', 'admin', 'hr', 'manager', 'supervisor', 'employee']
ADMIN_ROLES = ['superadmin', 'admin', 'hr', 'manager']


@dataclass
class User:
    """Logged-in user as returned by /auth/login and /auth/me"""
    id: str
    email: str
    name: str
    role: str
    permissions: List[str] = field(default_factory=list)
    employee_id: Optional[str] = None
    site_id: Optional[str] = None
    department: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=str(data.get('id', '')),
            email=data.get('email') or '',
            name=data.get('name') or '',
            role=data.get('role') or '',
            permissions=list(data.get('permissions') or []),
            employee_id=data.get('employee_id'),
            site_id=data.get('site_id'),
            department=data.get('department'),
            is_active=bool(data.get('is_active', True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'permissions': self.permissions,
            'employee_id': self.employee_id,
            'site_id': self.site_id,
            'department': self.department,
            'is_active': self.is_active,
        }

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
