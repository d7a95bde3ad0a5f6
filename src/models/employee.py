from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DEPARTMENT_CODES = {
    'HR': 'HR',
    'IT': 'IT',
    'Finance': 'FIN',
    'Marketing': 'MKT',
    'Operations': 'OPS',
    'Sales': 'SAL',
    'Engineering': 'ENG',
    'Customer Support': 'CS',
    'Legal': 'LEG',
    'Administration': 'ADM',
}

DEPARTMENTS = list(DEPARTMENT_CODES)
EMPLOYMENT_TYPES = ['Full-time', 'Part-time', 'Contract', 'Intern']
GENDERS = ['Male', 'Female', 'Other']
MARITAL_STATUSES = ['Single', 'Married', 'Divorced', 'Widowed']
BLOOD_GROUPS = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']
QUALIFICATIONS = ["High School", "Intermediate", "Diploma", "Bachelor's", "Master's", "PhD"]
SKILL_LEVELS = ['Highly Skilled', 'Skilled', 'Semi-Skilled', 'Un-Skilled']

# Supporting documents accepted by the registration endpoint
DOCUMENT_FIELDS = [
    'cheque', 'aadhaar_front', 'aadhaar_back', 'pan_front', 'pan_back',
    'voter_front', 'voter_back', 'passbook_front',
]


def normalize_employee(record: Dict[str, Any]) -> Dict[str, Any]:
    """Ensure every employee record carries an 'id' (backend uses employee_id)"""
    normalized = dict(record)
    normalized['id'] = record.get('employee_id', record.get('id'))
    return normalized


@dataclass
class Employee:
    """Employee as returned by the backend"""
    employee_id: str
    name: str
    department: str = ''
    designation: str = ''
    site_id: Optional[str] = None
    salary_code: Optional[str] = None
    skill_level: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    status: str = 'active'
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Employee':
        data = normalize_employee(data)
        name = data.get('name') or data.get('full_name') or data.get('fullName') or ' '.join(
            part for part in (data.get('first_name'), data.get('last_name')) if part
        )
        return cls(
            employee_id=str(data['id']),
            name=name,
            department=data.get('department') or data.get('department_id') or '',
            designation=data.get('designation') or '',
            site_id=data.get('site_id'),
            salary_code=data.get('salary_code') or data.get('salaryCode'),
            skill_level=data.get('skill_level') or data.get('skillCategory'),
            phone_number=data.get('phone_number') or data.get('mobileNumber'),
            email=data.get('email'),
            status=data.get('status') or 'active',
            raw=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        merged = dict(self.raw)
        merged.update({
            'id': self.employee_id,
            'employee_id': self.employee_id,
            'name': self.name,
            'department': self.department,
            'designation': self.designation,
            'site_id': self.site_id,
            'salary_code': self.salary_code,
            'skill_level': self.skill_level,
            'status': self.status,
        })
        return merged

    def __str__(self):
        return f"Employee({self.employee_id}, {self.name})"
