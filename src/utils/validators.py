import re
from pathlib import Path
from typing import Iterable, Optional, Tuple

from config.settings import MAX_UPLOAD_BYTES

AADHAAR_PATTERN = re.compile(r'^\d{12}$')
PAN_PATTERN = re.compile(r'^[A-Z]{5}[0-9]{4}[A-Z]$')
IFSC_PATTERN = re.compile(r'^[A-Z]{4}0[A-Z0-9]{6}$')
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$')

EXCEL_EXTENSIONS = ('.xlsx', '.xls')


def validate_aadhaar(number: str) -> bool:
    """Aadhaar numbers are exactly 12 digits"""
    return bool(AADHAAR_PATTERN.match(number or ''))


def validate_pan(pan: str) -> bool:
    """PAN format: five letters, four digits, one letter"""
    return bool(PAN_PATTERN.match(pan or ''))


def validate_ifsc(code: str) -> bool:
    """IFSC format: four letters, a zero, six alphanumerics"""
    return bool(IFSC_PATTERN.match(code or ''))


def validate_phone(number: str) -> bool:
    return len((number or '').strip()) >= 10


def validate_time(value: str) -> bool:
    """HH:MM or HH:MM:SS"""
    return bool(TIME_PATTERN.match(value or ''))


def validate_upload(filename: str, size: int, extensions: Iterable[str] = EXCEL_EXTENSIONS,
                    max_bytes: int = MAX_UPLOAD_BYTES) -> Tuple[bool, Optional[str]]:
    """Check an uploaded spreadsheet's extension and size"""
    extensions = tuple(extensions)
    if Path(filename or '').suffix.lower() not in extensions:
        if '.csv' in extensions:
            return False, 'Please upload a CSV or Excel file'
        return False, 'Please upload a valid Excel file (.xlsx or .xls)'
    if size > max_bytes:
        return False, f'File size should be less than {max_bytes // (1024 * 1024)}MB'
    return True, None
