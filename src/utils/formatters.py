import calendar
import math
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

Number = Union[int, float, Decimal, str, None]


def _group_indian(digits: str) -> str:
    """Group an integer string the Indian way: 12,34,567"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups + [tail])


def _to_decimal(value: Number) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    try:
        result = Decimal(str(value))
    except ArithmeticError:
        return None
    if result.is_nan():
        return None
    return result


def _format_indian(amount: Decimal, places: int, trim: bool = False) -> str:
    quantum = Decimal(1).scaleb(-places)
    rounded = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    sign = '-' if rounded < 0 else ''
    text = f"{abs(rounded):.{places}f}"
    integer, _, fraction = text.partition('.')
    if trim:
        fraction = fraction.rstrip('0')
    result = _group_indian(integer)
    if fraction:
        result = f"{result}.{fraction}"
    return f"{sign}{result}"


def format_currency(amount: Number, symbol: str = "₹", places: int = 2) -> str:
    """Format an amount in rupees with Indian digit grouping"""
    value = _to_decimal(amount) or Decimal('0')
    text = _format_indian(value, places)
    if text.startswith('-'):
        return f"-{symbol}{text[1:]}"
    return f"{symbol}{text}"


def format_whole_rupees(amount: Number) -> str:
    """Rupee amount without paise, as shown on compliance registers"""
    return format_currency(amount, places=0)


def format_number(value: Number) -> str:
    """Indian-grouped number; missing values display as 0"""
    number = _to_decimal(value)
    if number is None:
        return '0'
    return _format_indian(number, 3, trim=True)


def month_name(month: int) -> str:
    """English month name for 1-12, empty string otherwise"""
    if 1 <= month <= 12:
        return calendar.month_name[month]
    return ''


def month_bounds(year: int, month: int):
    """First and last day of a month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def format_date_iso(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def current_month_year(today: Optional[date] = None) -> dict:
    today = today or date.today()
    return {'year': today.year, 'month': today.month}


FORM_FILENAME_PREFIXES = {
    'B': 'FormB',
    'C': 'FormC_EPF',
    'D': 'FormD_ESIC',
}


def form_filename(form_type: str, site: Optional[str], month: int, year: int) -> str:
    """Download name for a compliance register, e.g. FormC_EPF_All_March_2025.xlsx"""
    prefix = FORM_FILENAME_PREFIXES[form_type.upper()]
    site_name = site or 'All'
    return f"{prefix}_{site_name}_{month_name(month)}_{year}.xlsx"
