"""
Tests for generated files: CSV exports, the local salary workbook,
bulk-import templates and the document writer.
"""

from decimal import Decimal

from models.attendance import MonthlyAttendanceSummary
from models.payroll import BonusSummary, ComplianceForm, SalaryCalculation
from processors.exports import (
    BONUS_HEADERS,
    DocumentWriter,
    bonus_csv,
    form_b_csv,
    form_b_csv_filename,
    salary_workbook,
    salary_workbook_filename,
    site_salary_csv,
    site_salary_filename,
)
from processors.templates import HEADER_FILL, TemplateBuilder
from conftest import sheet_rows


def salary_row(employee_id, name, basic, net):
    return SalaryCalculation.from_api({
        "Employee ID": employee_id,
        "Employee Name": name,
        "Basic": basic,
        "Total Deductions": basic - net,
        "Net Salary": net,
    })


class TestCsv:

    def test_bonus_csv(self):
        summary = BonusSummary.from_api({"bonus_records": [
            {"employee_id": 1, "employee_name": "Ravi", "basic_salary": "12000.00",
             "bonus_amount": "999.60", "period_months": 12},
        ]})

        lines = bonus_csv(summary).splitlines()

        assert lines[0] == ",".join(BONUS_HEADERS)
        assert lines[1] == "1,Ravi,12000,999.60,12"

    def test_site_salary_csv(self):
        summary = MonthlyAttendanceSummary.from_api({
            "employee_id": 101, "employee_name": "Ravi", "year": 2025, "month": 3,
            "present_days": 22, "attendance_percentage": 95.65, "calculated_salary": 14300,
        })

        lines = site_salary_csv([summary]).splitlines()

        assert lines[0].startswith("Employee ID,Employee Name,Year,Month,Present Days")
        assert lines[1].startswith("101,Ravi,2025,3,22,0")
        assert lines[1].endswith(",95.65,0,14300.0")
        assert site_salary_filename(2025, 3) == "salary_report_March_2025.csv"

    def test_site_salary_csv_keeps_half_days(self):
        summary = MonthlyAttendanceSummary.from_api({
            "employee_id": 102, "employee_name": "Asha", "year": 2025, "month": 3,
            "present_days": 21.5, "absent_days": 2, "half_days": 1,
        })

        assert site_salary_csv([summary]).splitlines()[1].startswith("102,Asha,2025,3,21.5,2,0,1,")

    def test_form_b_csv(self):
        form = ComplianceForm.from_api("B", {"data": [{
            "slNo": 1, "employeeCode": "E1", "employeeName": "Ravi", "designation": "Guard",
            "rateOfWage": {"bs": 500, "da": 50}, "daysWorked": 26, "totalDays": 26,
            "grossEarnings": {"bs": 13000, "da": 1300},
            "totalEarnings": 14300,
            "deductions": {"esi": 108, "cit": 0, "total": 108},
            "netPayable": 14192,
        }]})

        lines = form_b_csv(form).splitlines()

        assert lines[0].startswith("Sl.No,Employee Code,Employee Name")
        assert lines[1] == "1,E1,Ravi,Guard,500,50,26,0,26,13000,1300,0,0,0,0,14300,108,0,0,0,108,14192"
        assert form_b_csv_filename(None, 2025, 3) == "Form-B-All-2025-3.csv"


class TestSalaryWorkbook:

    def test_rows_and_totals(self):
        rows = [salary_row("101", "Ravi", 10000, 9000), salary_row("102", "Asha", 12000, 11000)]

        content = salary_workbook(rows, 2025, 3)
        data = sheet_rows(content)

        assert data[0][0] == "Employee ID"
        assert data[0][-1] == "Net Salary"
        assert data[1][:2] == ("101", "Ravi")
        total = data[-1]
        assert total[0] == "TOTAL"
        assert total[-1] == 20000
        assert len(data) == 4
        assert salary_workbook_filename(2025, 3) == "salary_calculation_March_2025.xlsx"

    def test_stays_decimal_safe(self):
        rows = [salary_row("1", "A", Decimal("0.1"), Decimal("0.1")), salary_row("2", "B", Decimal("0.2"), Decimal("0.2"))]

        total = sheet_rows(salary_workbook(rows, 2025, 1))[-1]

        assert total[-1] == 0.3


class TestTemplates:

    def test_salary_code_template_has_styled_header(self, tmp_path):
        import io
        import openpyxl

        builder = TemplateBuilder(tmp_path)
        wb = openpyxl.load_workbook(io.BytesIO(builder.build("salary_codes")))
        ws = wb.active

        assert [c.value for c in ws[1]] == ["Site name", "Rank", "State Name", "Wages"]
        assert ws["A1"].font.bold
        assert ws["A1"].fill.start_color.rgb.endswith(HEADER_FILL.start_color.rgb[-6:])
        assert ws.max_row == 3

    def test_write_all(self, tmp_path):
        paths = TemplateBuilder(tmp_path).write_all()

        assert sorted(p.name for p in paths) == [
            "employee_template.xlsx", "salary_codes_template.xlsx", "sites_template.xlsx",
        ]
        assert all(p.parent == tmp_path and p.stat().st_size > 0 for p in paths)


class TestDocumentWriter:

    def test_writes_under_kind_folder(self, tmp_path):
        writer = DocumentWriter(tmp_path)

        pdf = writer.save("payroll", "payslip_2025_3_1.pdf", b"%PDF")
        csv_path = writer.save("bonus", "bonus.csv", "a,b\n")

        assert pdf == tmp_path / "payroll" / "payslip_2025_3_1.pdf"
        assert pdf.read_bytes() == b"%PDF"
        assert csv_path.read_text(encoding="utf-8") == "a,b\n"

    def test_strips_directories_from_filename(self, tmp_path):
        path = DocumentWriter(tmp_path).save("forms", "../../evil.xlsx", b"x")

        assert path == tmp_path / "forms" / "evil.xlsx"
