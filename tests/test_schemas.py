"""
Tests for form validation: registration, attendance, salary codes,
deductions, users, and payroll/bonus/compliance selections.
"""

import pytest
from pydantic import ValidationError

from schemas import (
    AttendanceMark,
    AttendanceUpdate,
    BonusFilters,
    BulkAttendance,
    ComplianceFilters,
    DeductionForm,
    EmployeeRegistration,
    PayrollSelection,
    SalaryCodeForm,
    SalaryPeriod,
    SelectionError,
    UserForm,
)


def registration(**overrides):
    data = {
        "fullName": "Ravi Kumar Sharma",
        "dateOfBirth": "1990-05-14",
        "gender": "Male",
        "maritalStatus": "Married",
        "nationality": "Indian",
        "permanentAddress": "12 MG Road, Bengaluru",
        "mobileNumber": "9876543210",
        "aadhaarNumber": "123412341234",
        "panCardNumber": "abcde1234f",
        "dateOfJoining": "2024-01-02",
        "employmentType": "Full-time",
        "department": "Finance",
        "designation": "Accountant",
        "workLocation": "Head Office",
        "salaryCode": "ACMEPLANTSGKA",
        "pfApplicability": "true",
        "esicApplicability": "false",
        "bankAccountNumber": "001122334455",
        "bankName": "State Bank",
        "ifscCode": "sbin0001234",
        "highestQualification": "Bachelor's",
        "yearOfPassing": "2012",
        "experienceDuration": "3",
        "emergencyContactName": "Meena",
        "emergencyRelationship": "Spouse",
        "emergencyPhoneNumber": "9876500000",
    }
    data.update(overrides)
    return data


class TestEmployeeRegistration:

    def test_backend_form_mapping(self):
        form = EmployeeRegistration(**registration()).to_backend_form()

        assert form["first_name"] == "Ravi"
        assert form["last_name"] == "Kumar Sharma"
        assert form["adhar_number"] == "123412341234"
        assert form["pan_card_number"] == "ABCDE1234F"
        assert form["ifsc_code"] == "SBIN0001234"
        assert form["department_id"] == "FIN"
        assert form["pf_applicability"] == "true"
        assert form["esic_applicability"] == "false"
        assert form["experience_duration"] == "3"
        assert form["year_of_passing"] == "2012"
        assert form["hire_date"] == "2024-01-02"
        assert "fullName" not in form
        assert "voter_id_driving_license" not in form

    def test_single_name_gets_placeholder_last_name(self):
        form = EmployeeRegistration(**registration(fullName="Ravi")).to_backend_form()

        assert form["first_name"] == "Ravi"
        assert form["last_name"] == "N/A"

    @pytest.mark.parametrize("field, value, message", [
        ("aadhaarNumber", "1234", "Aadhaar number must be 12 digits"),
        ("panCardNumber", "ABC123", "Invalid PAN card number"),
        ("ifscCode", "SBIN1001234", "Invalid IFSC code"),
        ("yearOfPassing", "1850", "Year of passing must be between 1900"),
    ])
    def test_invalid_identity_fields(self, field, value, message):
        with pytest.raises(ValidationError, match=message):
            EmployeeRegistration(**registration(**{field: value}))

    def test_unknown_gender_is_rejected(self):
        with pytest.raises(ValidationError):
            EmployeeRegistration(**registration(gender="Unknown"))


class TestAttendanceForms:

    def test_mark_accepts_numeric_employee_id(self):
        form = AttendanceMark(employee_id=101, attendance_date="2025-03-03",
                              attendance_status="Present", check_in_time="09:05")

        assert form.employee_id == "101"
        assert form.check_in_time == "09:05"

    def test_mark_rejects_unmarkable_status(self):
        with pytest.raises(ValidationError, match="Status must be one of"):
            AttendanceMark(employee_id="1", attendance_date="2025-03-03", attendance_status="Holiday")

    def test_mark_rejects_bad_time(self):
        with pytest.raises(ValidationError, match="HH:MM"):
            AttendanceMark(employee_id="1", attendance_date="2025-03-03",
                           attendance_status="Late", check_in_time="25:00")

    def test_update_allows_partial(self):
        assert AttendanceUpdate(remarks="Left early").model_dump(exclude_none=True) == {"remarks": "Left early"}

    def test_bulk_needs_records(self):
        with pytest.raises(ValidationError):
            BulkAttendance(attendance_records=[])


class TestSalaryCodeAndDeductions:

    def test_salary_code_payload(self):
        form = SalaryCodeForm(siteName=" Acme Plant ", rank="SG", stateName="KA", wages=15000)

        assert form.to_payload(created_by="hr@example.com") == {
            "site_name": "Acme Plant",
            "rank": "SG",
            "state": "KA",
            "base_wage": 15000.0,
            "created_by": "hr@example.com",
        }

    def test_salary_code_needs_positive_wage(self):
        with pytest.raises(ValidationError):
            SalaryCodeForm(siteName="A", rank="SG", stateName="KA", wages=0)

    def test_monthly_installment_rounds_half_up(self):
        form = DeductionForm(employee_id=5, deduction_type="Advance", total_amount=1000,
                             months=3, start_month="2025-04")

        assert form.employee_id == "5"
        assert form.monthly_installment == 333.33

    def test_deduction_needs_a_month(self):
        with pytest.raises(ValidationError):
            DeductionForm(employee_id="5", deduction_type="Advance", total_amount=1000,
                          months=0, start_month="2025-04")


class TestUserForm:

    def test_supervisor_needs_site(self):
        with pytest.raises(ValidationError, match="Please select a site for supervisor role."):
            UserForm(name="Sam", email="sam@example.com", role="supervisor", password="x")

    def test_create_requires_password(self):
        form = UserForm(name="Sam", email="Sam@Example.com", role="hr")

        with pytest.raises(ValueError, match="Password is required"):
            form.to_payload(creating=True)

    def test_update_without_password_keeps_it_out(self):
        form = UserForm(name="Sam", email="Sam@Example.com", role="hr", site_id="S1")

        payload = form.to_payload(creating=False)

        assert payload["email"] == "sam@example.com"
        assert "password" not in payload
        assert "site_id" not in payload

    def test_unknown_role(self):
        with pytest.raises(ValidationError, match="Role must be one of"):
            UserForm(name="Sam", email="sam@example.com", role="owner")


EMPLOYEES = [{"employee_id": i} for i in (101, 102, 103, 110)]


class TestPayrollSelection:

    def test_single(self):
        selection = PayrollSelection(year=2025, month=3, employee_id="102")

        assert selection.validate_selection(EMPLOYEES) == ["102"]

    def test_range_is_inclusive_and_numeric(self):
        selection = PayrollSelection(mode="range", year=2025, month=3, range_from="101", range_to="103")

        assert selection.selected_ids(EMPLOYEES) == [101, 102, 103]

    def test_multi(self):
        selection = PayrollSelection(mode="multi", year=2025, month=3, employee_ids=[101, 110])

        assert selection.selected_ids(EMPLOYEES) == [101, 110]

    def test_missing_period(self):
        with pytest.raises(SelectionError, match="Please select year and month"):
            PayrollSelection(employee_id="1").validate_selection(EMPLOYEES)

    def test_empty_selection(self):
        selection = PayrollSelection(mode="range", year=2025, month=3, range_from="200", range_to="300")

        with pytest.raises(SelectionError, match="Please select at least one employee"):
            selection.validate_selection(EMPLOYEES)

    def test_generation_request_for_range(self):
        selection = PayrollSelection(mode="range", year=2025, month=3, range_from="101", range_to="102")

        request = selection.generation_request(EMPLOYEES, now_ms=1700000000000)

        assert request == {
            "year": 2025,
            "month": 3,
            "filename": "payslip_2025_3_1700000000000.pdf",
            "employee_range": {"from": 101, "to": 102},
        }

    def test_generation_request_for_multi(self):
        selection = PayrollSelection(mode="multi", year=2025, month=3, employee_ids=[101])

        assert selection.generation_request(EMPLOYEES, now_ms=1)["employee_ids"] == [101]


class TestFilters:

    def test_bonus_period_order(self):
        with pytest.raises(ValidationError, match="Start month cannot be greater than end month"):
            BonusFilters(year=2024, start_month=6, end_month=3)

    def test_bonus_site_all(self):
        filters = BonusFilters(year=2024, start_month=1, end_month=12, site="all")

        assert filters.site_id is None
        assert filters.csv_filename() == "bonus_calculation_2024_1-12.csv"

    @pytest.mark.parametrize("site, expected", [(None, None), ("", None), ("All", None), (" Acme ", "Acme")])
    def test_compliance_site(self, site, expected):
        assert ComplianceFilters(year=2025, month=3, site=site).site == expected

    def test_compliance_month_range(self):
        with pytest.raises(ValidationError):
            ComplianceFilters(year=2025, month=13)

    def test_salary_period_coerces_numeric_text(self):
        period = SalaryPeriod(year="2025", month="3")

        assert (period.year, period.month) == (2025, 3)

    @pytest.mark.parametrize("year, month", [("2025x", 3), (2025, 0), (2025, 13), (1999, 5)])
    def test_salary_period_rejects_bad_values(self, year, month):
        with pytest.raises(ValidationError):
            SalaryPeriod(year=year, month=month)
