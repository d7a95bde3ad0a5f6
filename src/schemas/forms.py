from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.attendance import MARKABLE_STATUSES
from models.user import ROLES
from utils.validators import TIME_PATTERN


class SalaryCodeForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    siteName: str = Field(min_length=1)
    rank: str = Field(min_length=1)
    stateName: str = Field(min_length=1)
    wages: float = Field(ge=1)

    def to_payload(self, created_by: str) -> Dict[str, Any]:
        return {
            'site_name': self.siteName,
            'rank': self.rank,
            'state': self.stateName,
            'base_wage': self.wages,
            'created_by': created_by,
        }


def _check_time(value: Optional[str]) -> Optional[str]:
    if value in (None, ''):
        return None
    if not TIME_PATTERN.match(value):
        raise ValueError('Time must be HH:MM')
    return value


class AttendanceMark(BaseModel):
    employee_id: str = Field(min_length=1)
    attendance_date: str = Field(min_length=1)
    attendance_status: str
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    overtime_hours: float = Field(default=0, ge=0)
    remarks: Optional[str] = None
    marked_by: Optional[str] = None

    @field_validator('employee_id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator('attendance_status')
    @classmethod
    def check_status(cls, v: str) -> str:
        if v not in MARKABLE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(MARKABLE_STATUSES)}")
        return v

    @field_validator('check_in_time', 'check_out_time')
    @classmethod
    def check_times(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)


class AttendanceUpdate(BaseModel):
    attendance_status: Optional[str] = None
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    overtime_hours: Optional[float] = Field(default=None, ge=0)
    remarks: Optional[str] = None

    @field_validator('attendance_status')
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in MARKABLE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(MARKABLE_STATUSES)}")
        return v

    @field_validator('check_in_time', 'check_out_time')
    @classmethod
    def check_times(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)


class BulkAttendance(BaseModel):
    """Same day, many employees"""
    attendance_records: List[AttendanceMark] = Field(min_length=1)
    marked_by: Optional[str] = None


class DeductionForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    employee_id: str = Field(min_length=1)
    deduction_type: str = Field(min_length=1)
    total_amount: float = Field(gt=0)
    months: int = Field(ge=1)
    start_month: str = Field(min_length=1)

    @field_validator('employee_id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @property
    def monthly_installment(self) -> float:
        """Display preview only; the backend computes the stored installment"""
        amount = Decimal(str(self.total_amount)) / Decimal(self.months)
        return float(amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


class UserForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    role: str
    password: Optional[str] = None
    site_id: Optional[str] = None
    is_active: bool = True

    @field_validator('email')
    @classmethod
    def check_email(cls, v: str) -> str:
        if '@' not in v:
            raise ValueError('Invalid email address')
        return v.lower()

    @field_validator('role')
    @classmethod
    def check_role(cls, v: str) -> str:
        if v not in ROLES:
            raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
        return v

    @model_validator(mode='after')
    def supervisor_needs_site(self) -> 'UserForm':
        if self.role == 'supervisor' and not self.site_id:
            raise ValueError('Please select a site for supervisor role.')
        return self

    def to_payload(self, creating: bool) -> Dict[str, Any]:
        """Password is required on create; on update a blank one keeps the current password"""
        if creating and not self.password:
            raise ValueError('Password is required')
        payload = self.model_dump(exclude_none=True)
        if not self.password:
            payload.pop('password', None)
        if self.role != 'supervisor':
            payload.pop('site_id', None)
        return payload


class SiteForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    site_name: str = Field(min_length=1)
    state: str = Field(min_length=1)
    location: Optional[str] = None
