"""
Tests for formatting, validation and summary helpers.
"""

from datetime import date
from decimal import Decimal

import pytest

from models.attendance import MonthlyAttendanceSummary
from models.payroll import SalaryCalculation
from processors.summaries import attendance_band, monthly_salary_stats, site_report_totals
from utils.formatters import (
    current_month_year,
    form_filename,
    format_currency,
    format_number,
    format_whole_rupees,
    month_bounds,
    month_name,
)
from utils.validators import (
    validate_aadhaar,
    validate_ifsc,
    validate_pan,
    validate_phone,
    validate_time,
    validate_upload,
)


class TestFormatters:

    @pytest.mark.parametrize("amount, expected", [
        (1234567.5, "₹12,34,567.50"),
        (999, "₹999.00"),
        (100000, "₹1,00,000.00"),
        (-2500.456, "-₹2,500.46"),
        (None, "₹0.00"),
        ("", "₹0.00"),
    ])
    def test_format_currency(self, amount, expected):
        assert format_currency(amount) == expected

    def test_whole_rupees(self):
        assert format_whole_rupees(Decimal("15234.5")) == "₹15,235"

    def test_format_number(self):
        assert format_number(1234567.125) == "12,34,567.125"
        assert format_number(2000) == "2,000"
        assert format_number(None) == "0"

    def test_month_helpers(self):
        assert month_name(3) == "March"
        assert month_name(13) == ""
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert current_month_year(date(2025, 7, 9)) == {"year": 2025, "month": 7}

    def test_form_filename(self):
        assert form_filename("C", None, 3, 2025) == "FormC_EPF_All_March_2025.xlsx"
        assert form_filename("d", "Acme Plant", 1, 2025) == "FormD_ESIC_Acme Plant_January_2025.xlsx"
        assert form_filename("B", "Acme", 12, 2024) == "FormB_Acme_December_2024.xlsx"


class TestValidators:

    def test_identity_numbers(self):
        assert validate_aadhaar("123412341234")
        assert not validate_aadhaar("12341234123")
        assert validate_pan("ABCDE1234F")
        assert not validate_pan("abcde1234f")
        assert validate_ifsc("SBIN0001234")
        assert not validate_ifsc("SBIN1001234")
        assert validate_phone("9876543210")
        assert not validate_phone("98765")

    @pytest.mark.parametrize("value, expected", [
        ("09:05", True), ("23:59:59", True), ("24:00", False), ("9:05", False), ("", False),
    ])
    def test_time(self, value, expected):
        assert validate_time(value) is expected

    def test_upload_extension(self):
        assert validate_upload("sheet.XLSX", 100) == (True, None)
        assert validate_upload("sheet.xls", 100) == (True, None)
        assert validate_upload("sheet.csv", 100) == (False, "Please upload a valid Excel file (.xlsx or .xls)")
        assert validate_upload("sites.csv", 100, (".xlsx", ".csv")) == (True, None)
        assert validate_upload("sites.pdf", 100, (".xlsx", ".csv")) == (False, "Please upload a CSV or Excel file")

    def test_upload_size(self):
        assert validate_upload("big.xlsx", 11 * 1024 * 1024) == (False, "File size should be less than 10MB")


class TestSummaries:

    @pytest.mark.parametrize("percentage, band", [(95, "good"), (90, "good"), (80, "warning"), (74.9, "poor")])
    def test_attendance_band(self, percentage, band):
        assert attendance_band(percentage) == band

    def test_monthly_salary_stats(self):
        rows = [
            SalaryCalculation.from_api({"Employee ID": "1", "Basic": 10000, "Total Deductions": 1200, "Net Salary": 8800}),
            SalaryCalculation.from_api({"Employee ID": "2", "Basic": 12000, "Total Deductions": 1500, "Net Salary": 10501}),
        ]

        stats = monthly_salary_stats(rows)

        assert stats["total_employees"] == 2
        assert stats["total_payroll"] == Decimal("19301")
        assert stats["average_salary"] == Decimal("9650.50")
        assert stats["total_basic"] == Decimal("22000")
        assert stats["total_deductions"] == Decimal("2700")

    def test_monthly_salary_stats_empty(self):
        assert monthly_salary_stats([])["total_employees"] == 0

    def test_site_report_totals(self):
        summaries = [
            MonthlyAttendanceSummary(employee_id="1", year=2025, month=3, present_days=20,
                                     attendance_percentage=90.0, total_overtime_hours=1.5, calculated_salary=100.0),
            MonthlyAttendanceSummary(employee_id="2", year=2025, month=3, present_days=10,
                                     attendance_percentage=45.0, calculated_salary=50.25),
        ]

        totals = site_report_totals(summaries)

        assert totals == {
            "employees": 2,
            "present_days": 30,
            "absent_days": 0,
            "overtime_hours": 1.5,
            "average_attendance": 67.5,
            "total_salary": 150.25,
        }
        assert site_report_totals([])["average_attendance"] == 0.0
