from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional


def to_decimal(value: Any) -> Decimal:
    """Convert a backend number (int, float, str or None) to Decimal"""
    if value is None or value == '':
        return Decimal('0')
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal('0')


# Column names used by the backend salary endpoints, in display order
SALARY_COLUMNS = [
    ('Employee ID', 'employee_id'),
    ('Employee Name', 'employee_name'),
    ('Skill Level', 'skill_level'),
    ('Present Days', 'present_days'),
    ('Daily Wage', 'daily_wage'),
    ('Basic', 'basic'),
    ('Special Basic', 'special_basic'),
    ('DA', 'da'),
    ('HRA', 'hra'),
    ('Overtime', 'overtime'),
    ('Others', 'others'),
    ('Total Earnings', 'total_earnings'),
    ('PF', 'pf'),
    ('ESIC', 'esic'),
    ('Society', 'society'),
    ('Income Tax', 'income_tax'),
    ('Insurance', 'insurance'),
    ('Others Recoveries', 'others_recoveries'),
    ('Total Deductions', 'total_deductions'),
    ('Net Salary', 'net_salary'),
]

TEXT_COLUMNS = {'employee_id', 'employee_name', 'skill_level'}

# Components an operator may adjust for an individual calculation
ADJUSTABLE_COMPONENTS = [
    'Special Basic', 'DA', 'HRA', 'Overtime', 'Others',
    'Society', 'Income Tax', 'Insurance', 'Others Recoveries',
]


@dataclass
class SalaryCalculation:
    """One employee's salary line as computed by the backend"""
    employee_id: str
    employee_name: str
    skill_level: str = ''
    present_days: Decimal = Decimal('0')
    daily_wage: Decimal = Decimal('0')
    basic: Decimal = Decimal('0')
    special_basic: Decimal = Decimal('0')
    da: Decimal = Decimal('0')
    hra: Decimal = Decimal('0')
    overtime: Decimal = Decimal('0')
    others: Decimal = Decimal('0')
    total_earnings: Decimal = Decimal('0')
    pf: Decimal = Decimal('0')
    esic: Decimal = Decimal('0')
    society: Decimal = Decimal('0')
    income_tax: Decimal = Decimal('0')
    insurance: Decimal = Decimal('0')
    others_recoveries: Decimal = Decimal('0')
    total_deductions: Decimal = Decimal('0')
    net_salary: Decimal = Decimal('0')

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'SalaryCalculation':
        values = {}
        for column, attr in SALARY_COLUMNS:
            raw = data.get(column, data.get(attr))
            if attr in TEXT_COLUMNS:
                values[attr] = '' if raw is None else str(raw)
            else:
                values[attr] = to_decimal(raw)
        return cls(**values)

    def to_api(self) -> Dict[str, Any]:
        """Column-keyed dict the backend export endpoint expects"""
        row = {}
        for column, attr in SALARY_COLUMNS:
            value = getattr(self, attr)
            row[column] = value if attr in TEXT_COLUMNS else float(value)
        return row


@dataclass
class BonusRecord:
    """Bonus line returned by the backend bonus calculation"""
    employee_id: str
    employee_name: str
    basic_salary: Decimal
    bonus_amount: Decimal
    period_months: int

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'BonusRecord':
        return cls(
            employee_id=str(data.get('employee_id', '')),
            employee_name=data.get('employee_name') or '',
            basic_salary=to_decimal(data.get('basic_salary')),
            bonus_amount=to_decimal(data.get('bonus_amount')),
            period_months=int(data.get('period_months') or 0),
        )


@dataclass
class BonusSummary:
    """Bonus calculation result for a period"""
    records: List[BonusRecord] = field(default_factory=list)
    total_employees: int = 0
    total_bonus: Decimal = Decimal('0')
    period: Optional[Dict[str, Any]] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'BonusSummary':
        records = [BonusRecord.from_api(r) for r in data.get('bonus_records') or []]
        return cls(
            records=records,
            total_employees=int(data.get('total_employees') or len(records)),
            total_bonus=to_decimal(data.get('total_bonus')),
            period=data.get('period'),
        )


@dataclass
class ComplianceForm:
    """Statutory register (Form B wages, Form C EPF, Form D ESIC) for a month"""
    form_type: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    totals: Dict[str, Any] = field(default_factory=dict)
    filters: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, form_type: str, body: Dict[str, Any]) -> 'ComplianceForm':
        return cls(
            form_type=form_type,
            rows=list(body.get('data') or []),
            totals=dict(body.get('totals') or {}),
            filters=dict(body.get('filters') or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'form_type': self.form_type,
            'data': self.rows,
            'totals': self.totals,
            'filters': self.filters,
        }
