import io
from pathlib import Path
from typing import List, Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from config.settings import OUTPUT_DIR

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="B4C7E7", end_color="B4C7E7", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def style_header(ws, header_row: int = 1):
    for cell in ws[header_row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)


def autosize(ws, minimum: int = 10, maximum: int = 40):
    for column in ws.columns:
        letter = column[0].column_letter
        width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        ws.column_dimensions[letter].width = min(max(width + 2, minimum), maximum)


def workbook_bytes(wb) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TemplateBuilder:
    """Blank bulk-import workbooks with a styled header and sample rows"""

    TEMPLATES = {
        'salary_codes': (
            'salary_codes_template.xlsx',
            'Salary Codes',
            ['Site name', 'Rank', 'State Name', 'Wages'],
            [
                ['Acme Plant', 'Security Guard', 'Karnataka', 15000],
                ['Contoso Mall', 'Supervisor', 'Maharashtra', 22000],
            ],
        ),
        'sites': (
            'sites_template.xlsx',
            'Sites',
            ['Site name', 'Location', 'State'],
            [
                ['Acme Plant', 'Industrial Area', 'Karnataka'],
                ['Contoso Mall', 'Downtown', 'Maharashtra'],
            ],
        ),
        'employees': (
            'employee_template.xlsx',
            'Employee Template',
            ['Employee ID', 'First Name', 'Last Name', 'Email', 'Phone',
             'Designation', 'Department', 'Basic Salary'],
            [
                ['EMP001', 'John', 'Doe', 'john.doe@company.com', '+1-234-567-8900',
                 'Software Engineer', 'IT', 75000],
            ],
        ),
    }

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = output_dir or OUTPUT_DIR / "templates"
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def filename(cls, kind: str) -> str:
        return cls.TEMPLATES[kind][0]

    def build(self, kind: str) -> bytes:
        _, title, headers, samples = self.TEMPLATES[kind]
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = title
        ws.append(headers)
        for sample in samples:
            ws.append(sample)
        style_header(ws)
        autosize(ws)
        return workbook_bytes(wb)

    def write(self, kind: str) -> Path:
        path = self.output_dir / self.filename(kind)
        path.write_bytes(self.build(kind))
        return path

    def write_all(self) -> List[Path]:
        return [self.write(kind) for kind in self.TEMPLATES]

