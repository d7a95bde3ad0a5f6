from .importers import (
    ImportParseError,
    ImportResult,
    SalaryCodeImporter,
    SiteImporter,
    EmployeeImportPreview,
    normalize_header,
)
from .templates import TemplateBuilder
from .exports import DocumentWriter
from .summaries import attendance_band, monthly_salary_stats, site_report_totals


__all__ = [
    'ImportParseError',
    'ImportResult',
    'SalaryCodeImporter',
    'SiteImporter',
    'EmployeeImportPreview',
    'normalize_header',
    'TemplateBuilder',
    'DocumentWriter',
    'attendance_band',
    'monthly_salary_stats',
    'site_report_totals'
]