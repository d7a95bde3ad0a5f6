from dataclasses import dataclass
from typing import Any, Dict, Optional

STATES = [
    'UP', 'MP', 'MH', 'GJ', 'RJ', 'PB', 'HR', 'DL', 'UK', 'HP',
    'JK', 'CH', 'BR', 'JH', 'WB', 'OR', 'AP', 'TG', 'KA', 'KL',
    'TN', 'GA', 'AS', 'ML', 'MN', 'MZ', 'NL', 'SK', 'TR', 'AR',
    'AN', 'LD', 'PY', 'DN', 'DD', 'LA',
]

RANKS = [
    'SS', 'SG', 'SI', 'DR', 'JSS', 'ASS', 'DS', 'JDS', 'ADS', 'EE', 'JEE', 'AEE',
    'SE', 'JSE', 'ASE', 'ME', 'JME', 'AME', 'CE', 'JCE', 'ACE',
    'TL', 'JTL', 'ATL', 'MGR', 'JMGR', 'AMGR', 'GM', 'JGM', 'AGM',
]


@dataclass
class Site:
    """Work site"""
    site_id: str
    site_name: str
    state: str = ''
    location: str = ''
    is_active: bool = True

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Site':
        return cls(
            site_id=str(data.get('site_id', '')),
            site_name=data.get('site_name') or '',
            state=data.get('state') or '',
            location=data.get('location') or '',
            is_active=bool(data.get('is_active', True)),
        )


@dataclass
class SalaryCode:
    """Wage lookup key for a site, rank and state"""
    salary_code: str
    site_name: str
    rank: str
    state: str
    base_wage: float
    id: Optional[int] = None
    skill_level: Optional[str] = None
    is_active: bool = True
    display_name: str = ''

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'SalaryCode':
        return cls(
            salary_code=data.get('salary_code') or '',
            site_name=data.get('site_name') or '',
            rank=data.get('rank') or '',
            state=data.get('state') or '',
            base_wage=float(data.get('base_wage') or 0),
            id=data.get('id'),
            skill_level=data.get('skill_level'),
            is_active=bool(data.get('is_active', True)),
            display_name=data.get('display_name') or '',
        )


@dataclass
class Deduction:
    """Recoverable amount spread over monthly installments"""
    deduction_id: str
    employee_id: str
    deduction_type: str
    total_amount: float
    months: int
    monthly_installment: float
    start_month: str
    employee_name: str = ''
    status: str = 'Active'

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Deduction':
        return cls(
            deduction_id=str(data.get('deduction_id', '')),
            employee_id=str(data.get('employee_id', '')),
            deduction_type=data.get('deduction_type') or '',
            total_amount=float(data.get('total_amount') or 0),
            months=int(data.get('months') or 0),
            monthly_installment=float(data.get('monthly_installment') or 0),
            start_month=data.get('start_month') or '',
            employee_name=data.get('employee_name') or '',
            status=data.get('status') or 'Active',
        )
