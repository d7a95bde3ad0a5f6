"""Validation for the employee registration form."""

from datetime import date
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.employee import DEPARTMENT_CODES
from utils.validators import AADHAAR_PATTERN, IFSC_PATTERN, PAN_PATTERN

# Form field -> backend field; fields not listed keep their name
BACKEND_FIELDS = {
    'dateOfBirth': 'date_of_birth',
    'maritalStatus': 'marital_status',
    'bloodGroup': 'blood_group',
    'permanentAddress': 'address',
    'mobileNumber': 'phone_number',
    'alternateContactNumber': 'alternate_contact_number',
    'aadhaarNumber': 'adhar_number',
    'panCardNumber': 'pan_card_number',
    'voterIdOrLicense': 'voter_id_driving_license',
    'uanNumber': 'uan',
    'esicNumber': 'esic_number',
    'dateOfJoining': 'hire_date',
    'employmentType': 'employment_type',
    'department': 'department_id',
    'workLocation': 'work_location',
    'reportingManager': 'reporting_manager',
    'salaryCode': 'salary_code',
    'skillCategory': 'skill_category',
    'pfApplicability': 'pf_applicability',
    'esicApplicability': 'esic_applicability',
    'professionalTaxApplicability': 'professional_tax_applicability',
    'salaryAdvanceOrLoan': 'salary_advance_loan',
    'bankAccountNumber': 'bank_account_number',
    'bankName': 'bank_name',
    'ifscCode': 'ifsc_code',
    'highestQualification': 'highest_qualification',
    'yearOfPassing': 'year_of_passing',
    'additionalCertifications': 'additional_certifications',
    'experienceDuration': 'experience_duration',
    'emergencyContactName': 'emergency_contact_name',
    'emergencyRelationship': 'emergency_contact_relationship',
    'emergencyPhoneNumber': 'emergency_contact_phone',
}


class EmployeeRegistration(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    # Personal
    fullName: str = Field(min_length=1)
    dateOfBirth: str = Field(min_length=1)
    gender: Literal['Male', 'Female', 'Other']
    maritalStatus: Literal['Single', 'Married', 'Divorced', 'Widowed']
    bloodGroup: Optional[str] = None
    nationality: str = Field(min_length=1)
    permanentAddress: str = Field(min_length=1)
    mobileNumber: str = Field(min_length=10)
    alternateContactNumber: Optional[str] = None

    # Identity
    aadhaarNumber: str
    panCardNumber: str
    voterIdOrLicense: Optional[str] = None
    uanNumber: Optional[str] = None
    esicNumber: Optional[str] = None

    # Employment
    dateOfJoining: str = Field(min_length=1)
    employmentType: Literal['Full-time', 'Part-time', 'Contract', 'Intern']
    department: str = Field(min_length=1)
    designation: str = Field(min_length=1)
    workLocation: str = Field(min_length=1)
    reportingManager: Optional[str] = None
    salaryCode: str = Field(min_length=1)
    skillCategory: Optional[str] = None
    pfApplicability: bool = False
    esicApplicability: bool = False
    professionalTaxApplicability: bool = False
    salaryAdvanceOrLoan: float = 0

    # Bank
    bankAccountNumber: str = Field(min_length=1)
    bankName: str = Field(min_length=1)
    ifscCode: str

    # Education
    highestQualification: str = Field(min_length=1)
    yearOfPassing: int
    additionalCertifications: Optional[str] = None
    experienceDuration: float = Field(default=0, ge=0)

    # Emergency contact
    emergencyContactName: str = Field(min_length=1)
    emergencyRelationship: str = Field(min_length=1)
    emergencyPhoneNumber: str = Field(min_length=10)

    @field_validator('aadhaarNumber')
    @classmethod
    def check_aadhaar(cls, v: str) -> str:
        if not AADHAAR_PATTERN.match(v):
            raise ValueError('Aadhaar number must be 12 digits')
        return v

    @field_validator('panCardNumber')
    @classmethod
    def check_pan(cls, v: str) -> str:
        v = v.upper()
        if not PAN_PATTERN.match(v):
            raise ValueError('Invalid PAN card number')
        return v

    @field_validator('ifscCode')
    @classmethod
    def check_ifsc(cls, v: str) -> str:
        v = v.upper()
        if not IFSC_PATTERN.match(v):
            raise ValueError('Invalid IFSC code')
        return v

    @field_validator('yearOfPassing')
    @classmethod
    def check_year(cls, v: int) -> int:
        if v < 1900 or v > date.today().year:
            raise ValueError(f'Year of passing must be between 1900 and {date.today().year}')
        return v

    def to_backend_form(self) -> Dict[str, str]:
        """Flatten into the multipart fields /employees/register expects"""
        parts = self.fullName.split()
        form = {
            'first_name': parts[0] if parts else '',
            'last_name': ' '.join(parts[1:]) if len(parts) > 1 else 'N/A',
        }
        for name, value in self.model_dump().items():
            if name == 'fullName' or value is None or value == '':
                continue
            if name == 'department':
                value = DEPARTMENT_CODES.get(value, value)
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            elif isinstance(value, float) and value.is_integer():
                value = int(value)
            form[BACKEND_FIELDS.get(name, name)] = str(value)
        return form
