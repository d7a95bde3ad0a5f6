import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _as_number(value: Any) -> Any:
    """Employee ids are numeric on the backend; compare them as numbers when possible"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


class SelectionError(ValueError):
    """Payroll selection that cannot be sent to the backend"""


class PayrollSelection(BaseModel):
    mode: Literal['single', 'range', 'multi'] = 'single'
    year: Optional[int] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    site_id: Optional[str] = None
    employee_id: Optional[Any] = None
    range_from: Optional[Any] = None
    range_to: Optional[Any] = None
    employee_ids: List[Any] = Field(default_factory=list)

    def selected_ids(self, employees: List[Dict[str, Any]]) -> List[Any]:
        """Resolve the selection against the loaded employee list"""
        if self.mode == 'single':
            return [self.employee_id] if self.employee_id not in (None, '') else []
        if self.mode == 'range':
            if self.range_from in (None, '') or self.range_to in (None, ''):
                return []
            low, high = _as_number(self.range_from), _as_number(self.range_to)
            selected = []
            for emp in employees:
                emp_id = _as_number(emp.get('employee_id', emp.get('id')))
                try:
                    if low <= emp_id <= high:
                        selected.append(emp_id)
                except TypeError:
                    continue
            return selected
        return list(self.employee_ids)

    def validate_selection(self, employees: List[Dict[str, Any]]) -> List[Any]:
        if not self.year or not self.month:
            raise SelectionError('Please select year and month')
        selected = self.selected_ids(employees)
        if not selected:
            raise SelectionError('Please select at least one employee')
        return selected

    def filename(self, now_ms: Optional[int] = None) -> str:
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        return f"payslip_{self.year}_{self.month}_{stamp}.pdf"

    def generation_request(self, employees: List[Dict[str, Any]],
                           now_ms: Optional[int] = None) -> Dict[str, Any]:
        """Body for POST /payroll/generate"""
        selected = self.validate_selection(employees)
        request = {'year': self.year, 'month': self.month, 'filename': self.filename(now_ms)}
        if self.mode == 'range':
            request['employee_range'] = {'from': _as_number(self.range_from), 'to': _as_number(self.range_to)}
        else:
            request['employee_ids'] = selected
        return request


class SalaryPeriod(BaseModel):
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)


class BonusFilters(BaseModel):
    year: int
    start_month: int = Field(ge=1, le=12)
    end_month: int = Field(ge=1, le=12)
    site: Optional[str] = None

    @model_validator(mode='after')
    def check_period(self) -> 'BonusFilters':
        if self.start_month > self.end_month:
            raise ValueError('Start month cannot be greater than end month')
        return self

    @property
    def site_id(self) -> Optional[str]:
        if not self.site or self.site.lower() == 'all':
            return None
        return self.site

    def csv_filename(self) -> str:
        return f"bonus_calculation_{self.year}_{self.start_month}-{self.end_month}.csv"


class ComplianceFilters(BaseModel):
    year: int
    month: int = Field(ge=1, le=12)
    site: Optional[str] = None

    @field_validator('site')
    @classmethod
    def blank_site(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip() or v.strip().lower() == 'all':
            return None
        return v.strip()
