"""Parse bulk-import spreadsheets before they are forwarded to the backend.

Row numbers in error messages are spreadsheet row numbers: the header is
row 1, so the first data row is row 2.
"""

import csv
import io
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import openpyxl

logger = logging.getLogger(__name__)


class ImportParseError(ValueError):
    """The uploaded file cannot be turned into rows at all"""


def normalize_header(header: Any) -> str:
    """'Site name', 'site_name' and 'SiteName' all become 'sitename'"""
    return re.sub(r'\s+', '', str(header or '')).replace('_', '').lower()


def _text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def json_cell(value: Any) -> Any:
    """Dates and times as ISO strings; midnight datetimes become plain dates"""
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == time.min else value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def parse_amount(value: Any) -> Optional[float]:
    """Numeric cell or text such as '15,000'; None when it is not a number"""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else float(value)
    text = str(value).replace(',', '').strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


@dataclass
class ImportResult:
    """Valid rows ready to send, plus per-row problems"""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    total_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rows': self.rows,
            'errors': self.errors,
            'total_rows': self.total_rows,
            'valid_rows': len(self.rows),
        }


def read_first_sheet(content: bytes) -> Tuple[List[Any], List[Tuple[int, Tuple[Any, ...]]]]:
    """Return (header, [(row_number, values), ...]) from the first worksheet"""
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        logger.warning("Could not open uploaded workbook: %s", e)
        raise ImportParseError('Unable to read the uploaded spreadsheet') from e

    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header = None
        data = []
        for row_number, values in enumerate(rows, start=1):
            if header is None:
                header = list(values)
                continue
            if all(v is None or (isinstance(v, str) and not v.strip()) for v in values):
                continue
            data.append((row_number, tuple(values)))
    finally:
        wb.close()

    if not header or not data:
        raise ImportParseError('The selected sheet is empty.')
    return header, data


def header_map(header: List[Any], required: List[str]) -> Dict[str, int]:
    """Map normalized header name -> column index; raise if a required one is missing"""
    columns = {}
    for index, name in enumerate(header):
        if name is not None and normalize_header(name) not in columns:
            columns[normalize_header(name)] = index
    missing = [name for name in required if normalize_header(name) not in columns]
    if missing:
        raise ImportParseError(f"Missing required columns: {', '.join(missing)}")
    return columns


def _cell(values: Tuple[Any, ...], columns: Dict[str, int], name: str) -> Any:
    index = columns.get(normalize_header(name))
    if index is None or index >= len(values):
        return None
    return values[index]


class SalaryCodeImporter:
    """Salary code rows: Site name, Rank, State Name, Wages"""

    REQUIRED_HEADERS = ['Site name', 'Rank', 'State Name', 'Wages']

    def parse(self, content: bytes) -> ImportResult:
        header, data = read_first_sheet(content)
        columns = header_map(header, self.REQUIRED_HEADERS)

        result = ImportResult()
        for row_number, values in data:
            site = _text(_cell(values, columns, 'Site name'))
            rank = _text(_cell(values, columns, 'Rank'))
            state = _text(_cell(values, columns, 'State Name'))
            wage = parse_amount(_cell(values, columns, 'Wages'))

            if not site and not rank and not state and wage is None:
                continue
            result.total_rows += 1

            missing = []
            if not site:
                missing.append('Site name')
            if not rank:
                missing.append('Rank')
            if not state:
                missing.append('State Name')
            if wage is None or wage <= 0:
                missing.append('Wages')
            if missing:
                result.errors.append(f"Row {row_number}: Missing/invalid {', '.join(missing)}")
                continue

            result.rows.append({'site_name': site, 'rank': rank, 'state': state, 'base_wage': wage})

        logger.info("Parsed %d salary code rows (%d errors)", len(result.rows), len(result.errors))
        return result


class SiteImporter:
    """Site rows from Excel or CSV: Site name, State and optionally Location"""

    REQUIRED_HEADERS = ['Site name', 'State']
    OPTIONAL_HEADERS = ['Location']

    def parse(self, content: bytes, filename: str) -> ImportResult:
        if Path(filename or '').suffix.lower() == '.csv':
            return self.parse_csv(content)
        header, data = read_first_sheet(content)
        columns = header_map(header, self.REQUIRED_HEADERS)
        result = ImportResult()
        for row_number, values in data:
            self._add_row(result, row_number, {
                'site_name': _text(_cell(values, columns, 'Site name')),
                'state': _text(_cell(values, columns, 'State')),
                'location': _text(_cell(values, columns, 'Location')),
            })
        return result

    def parse_csv(self, content: bytes) -> ImportResult:
        text = content.decode('utf-8-sig', errors='replace')
        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) < 2:
            raise ImportParseError('CSV file must have at least a header row and one data row')

        parsed = list(csv.reader(lines))
        header = [h.strip() for h in parsed[0]]
        columns = header_map(header, self.REQUIRED_HEADERS)

        result = ImportResult()
        for index, values in enumerate(parsed[1:]):
            row_number = index + 2
            if len(values) != len(header):
                result.total_rows += 1
                result.errors.append(f"Row {row_number}: Column count mismatch")
                continue
            values = tuple(v.strip() for v in values)
            self._add_row(result, row_number, {
                'site_name': _text(_cell(values, columns, 'Site name')),
                'state': _text(_cell(values, columns, 'State')),
                'location': _text(_cell(values, columns, 'Location')),
            })
        return result

    @staticmethod
    def _add_row(result: ImportResult, row_number: int, row: Dict[str, str]):
        result.total_rows += 1
        if not row['site_name'] or not row['state']:
            result.errors.append(f"Row {row_number}: Missing required fields (Site name, State)")
            return
        result.rows.append(row)


class EmployeeImportPreview:
    """First sheet as header-keyed dicts, for review before /employees/bulk-import"""

    PREVIEW_ROWS = 5

    def parse(self, content: bytes) -> Dict[str, Any]:
        header, data = read_first_sheet(content)
        names = [_text(h) for h in header]
        records = []
        for _, values in data:
            record = {}
            for name, value in zip(names, values):
                if name and value is not None:
                    record[name] = json_cell(value)
            records.append(record)
        return {
            'columns': [n for n in names if n],
            'records': records,
            'preview': records[:self.PREVIEW_ROWS],
            'total': len(records),
        }
