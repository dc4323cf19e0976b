"""
Date helpers
Dates travel as plain YYYY-MM-DD strings; nothing here converts timezones
"""
import re
from datetime import date, datetime, timedelta

# Excel serial day 0 (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = date(1899, 12, 30)

ISO_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$')
DAY_FIRST_PATTERN = re.compile(r'^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4}|\d{2})$')


class DateFormatError(ValueError):
    """Value cannot be read as a date"""


def _build(year, month, day, original):
    try:
        return date(year, month, day).isoformat()
    except ValueError as e:
        raise DateFormatError(f'Fecha inválida: {original}') from e


def normalize_date(value):
    """Return value as YYYY-MM-DD

    Accepts date/datetime objects (pandas Timestamps included), Excel serial
    numbers and strings in YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, DD.MM.YYYY or
    DD/MM/YY form. Empty input gives ''.
    """
    if value is None:
        return ''

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, bool):
        raise DateFormatError(f'Tipo de fecha no soportado: {value!r}')

    if isinstance(value, (int, float)):
        if value != value or value < 1:  # NaN or before the epoch
            raise DateFormatError(f'Número de fecha inválido: {value}')
        return (EXCEL_EPOCH + timedelta(days=int(value))).isoformat()

    if not isinstance(value, str):
        raise DateFormatError(f'Tipo de fecha no soportado: {type(value).__name__} - {value}')

    text = value.strip()
    if not text:
        return ''

    match = ISO_PATTERN.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _build(year, month, day, value)

    match = DAY_FIRST_PATTERN.match(text)
    if match:
        day, month, year = match.groups()
        year = int(year)
        if year < 100:
            year += 2000
        return _build(year, int(month), int(day), value)

    # Spreadsheet cells holding serial numbers as text
    if re.fullmatch(r'\d+(\.\d+)?', text):
        return normalize_date(float(text))

    raise DateFormatError(f'Formato de fecha no reconocido: {value}')


def month_of(iso_date):
    """Month number of a YYYY-MM-DD string, 0 when malformed"""
    if not isinstance(iso_date, str):
        return 0
    match = ISO_PATTERN.match(iso_date.strip())
    if not match:
        return 0
    month = int(match.group(2))
    return month if 1 <= month <= 12 else 0


def year_of(iso_date):
    """Year of a YYYY-MM-DD string as text, '' when malformed"""
    if not isinstance(iso_date, str):
        return ''
    match = ISO_PATTERN.match(iso_date.strip())
    return match.group(1) if match else ''


def add_days(iso_date, days):
    """YYYY-MM-DD shifted by a number of days"""
    start = date.fromisoformat(normalize_date(iso_date))
    return (start + timedelta(days=int(days))).isoformat()


def today_iso():
    return date.today().isoformat()
