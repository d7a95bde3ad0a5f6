from typing import Dict, List

from models.user import ADMIN_ROLES

PUBLIC_ROUTES = ['/', '/login']
ADMIN_PREFIXES = [
    '/dashboard', '/employees', '/attendance', '/salary-codes', '/salary', '/reports',
    '/sites', '/compliance',
]
EMPLOYEE_PREFIX = '/employee'
SUPERVISOR_PREFIX = '/supervisor'

PERMISSIONS = {
    'superadmin': [
        'view_employees', 'create_employees', 'edit_employees', 'delete_employees',
        'mark_attendance', 'view_attendance', 'calculate_salary', 'view_reports',
        'manage_salary_codes', 'manage_users',
    ],
    'admin': [
        'view_employees', 'create_employees', 'edit_employees', 'delete_employees',
        'mark_attendance', 'view_attendance', 'calculate_salary', 'view_reports',
        'manage_salary_codes',
    ],
    'hr': [
        'view_employees', 'create_employees', 'edit_employees',
        'mark_attendance', 'view_attendance', 'calculate_salary', 'view_reports',
    ],
    'manager': [
        'view_employees', 'view_attendance', 'mark_attendance', 'view_reports',
    ],
    'supervisor': [
        'view_employees', 'mark_attendance', 'view_attendance', 'view_reports',
    ],
    'employee': [],
}

ADMIN_NAVIGATION = [
    {'id': 'dashboard', 'label': 'Dashboard', 'route': '/dashboard'},
    {'id': 'employees', 'label': 'Employee Management', 'children': [
        {'id': 'employees-list', 'label': 'All Employees', 'route': '/employees/list'},
        {'id': 'employees-register', 'label': 'Register Employee', 'route': '/employees/register'},
        {'id': 'employees-bulk-import', 'label': 'Bulk Import', 'route': '/employees/bulk-import'},
    ]},
    {'id': 'attendance', 'label': 'Attendance', 'children': [
        {'id': 'attendance-mark', 'label': 'Mark Attendance', 'route': '/attendance/mark'},
        {'id': 'attendance-bulk', 'label': 'Bulk Attendance', 'route': '/attendance/bulk-mark'},
        {'id': 'attendance-reports', 'label': 'Attendance Reports', 'route': '/attendance/reports'},
    ]},
    {'id': 'salary-codes', 'label': 'Salary Codes', 'permission': 'manage_salary_codes', 'children': [
        {'id': 'salary-codes-list', 'label': 'All Salary Codes', 'route': '/salary-codes/list'},
        {'id': 'salary-codes-create', 'label': 'Create Salary Code', 'route': '/salary-codes/create'},
    ]},
    {'id': 'salary', 'label': 'Salary', 'permission': 'calculate_salary', 'children': [
        {'id': 'salary-calculate', 'label': 'Calculate Salary', 'route': '/salary/calculate'},
        {'id': 'salary-reports', 'label': 'Salary Reports', 'route': '/salary/reports'},
    ]},
    {'id': 'payroll', 'label': 'Payroll', 'permission': 'calculate_salary', 'route': '/dashboard/payroll'},
    {'id': 'deductions', 'label': 'Deductions', 'permission': 'calculate_salary', 'route': '/dashboard/deductions'},
    {'id': 'sites', 'label': 'Sites', 'permission': 'manage_salary_codes', 'route': '/sites'},
    {'id': 'compliance', 'label': 'Compliance Forms', 'permission': 'view_reports', 'route': '/compliance'},
    {'id': 'users', 'label': 'Users', 'permission': 'manage_users', 'route': '/dashboard/users'},
]

SUPERVISOR_NAVIGATION = [
    {'id': 'dashboard', 'label': 'Dashboard', 'route': '/supervisor/dashboard'},
    {'id': 'attendance-mark', 'label': 'Mark Attendance', 'route': '/supervisor/attendance/mark'},
    {'id': 'attendance-bulk', 'label': 'Bulk Attendance', 'route': '/supervisor/attendance/bulk'},
    {'id': 'attendance-records', 'label': 'Attendance Records', 'route': '/supervisor/attendance/records'},
    {'id': 'salary-report', 'label': 'Site Salary Report', 'route': '/supervisor/salary'},
]

EMPLOYEE_NAVIGATION = [
    {'id': 'dashboard', 'label': 'Dashboard', 'route': '/employee/dashboard'},
    {'id': 'profile', 'label': 'My Profile', 'route': '/employee/profile'},
    {'id': 'attendance', 'label': 'My Attendance', 'route': '/employee/attendance'},
    {'id': 'salary', 'label': 'My Salary', 'route': '/employee/salary'},
]


def default_route(role: str) -> str:
    """Landing page after login"""
    if role in ADMIN_ROLES:
        return '/dashboard'
    if role == 'supervisor':
        return '/supervisor/dashboard'
    if role == 'employee':
        return '/employee/dashboard'
    return '/login'


def is_public_route(path: str) -> bool:
    return path in PUBLIC_ROUTES


def is_admin_route(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in ADMIN_PREFIXES)


def is_employee_route(path: str) -> bool:
    return path.startswith(EMPLOYEE_PREFIX)


def is_supervisor_route(path: str) -> bool:
    return path.startswith(SUPERVISOR_PREFIX)


def has_access(path: str, role: str) -> bool:
    # '/employees' also starts with '/employee', so admin routes are checked first
    if is_public_route(path):
        return True
    if is_admin_route(path):
        return role in ADMIN_ROLES
    if is_employee_route(path):
        return role == 'employee'
    if is_supervisor_route(path):
        return role == 'supervisor'
    return False


def permissions_for(role: str) -> List[str]:
    return list(PERMISSIONS.get(role, []))


def has_permission(role: str, permission: str, granted: List[str] = None) -> bool:
    """Role permissions, plus any the backend granted explicitly ('all' grants everything)"""
    granted = granted or []
    return 'all' in granted or permission in granted or permission in PERMISSIONS.get(role, [])


def navigation_for(role: str) -> List[Dict]:
    """Menu sections the role may see"""
    if role == 'employee':
        return [dict(item) for item in EMPLOYEE_NAVIGATION]
    if role == 'supervisor':
        return [dict(item) for item in SUPERVISOR_NAVIGATION]
    if role not in ADMIN_ROLES:
        return []
    allowed = PERMISSIONS.get(role, [])
    sections = []
    for item in ADMIN_NAVIGATION:
        permission = item.get('permission')
        if permission and permission not in allowed:
            continue
        section = {key: value for key, value in item.items() if key != 'permission'}
        sections.append(section)
    return sections
