"""
Spreadsheet reading and writing
Uploads are read with pandas; layouts and exports are written with openpyxl
"""
import io
import logging
from datetime import date, datetime
from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

HEADER_FONT = Font(bold=True, color='FFFFFF')
HEADER_FILL = PatternFill('solid', fgColor='1E3A8A')


class SpreadsheetError(ValueError):
    """Uploaded file cannot be read as a spreadsheet"""


def _clean(value):
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, str):
        value = value.strip()
        return value or None
    # numpy scalars -> python
    if hasattr(value, 'item'):
        return value.item()
    return value


def read_rows(stream, filename):
    """All rows of the first sheet, header included

    Cells keep their spreadsheet type (numbers, datetimes, text); empty
    cells become None and trailing empty cells are dropped.
    """
    extension = Path(filename or '').suffix.lower()
    try:
        if extension == '.csv':
            frame = pd.read_csv(stream, header=None, dtype=object, keep_default_na=False)
        else:
            engine = 'xlrd' if extension == '.xls' else 'openpyxl'
            frame = pd.read_excel(stream, sheet_name=0, header=None, engine=engine)
    except Exception as e:
        logger.warning(f'Could not read spreadsheet {filename}: {e}')
        raise SpreadsheetError(str(e)) from e

    rows = []
    for raw in frame.itertuples(index=False, name=None):
        row = [_clean(value) for value in raw]
        while row and row[-1] is None:
            row.pop()
        rows.append(row)
    return rows


def _column_widths(headers, rows):
    widths = []
    for index, header in enumerate(headers):
        longest = len(str(header))
        for row in rows:
            if index < len(row) and row[index] is not None:
                longest = max(longest, len(str(row[index])))
        widths.append(min(max(longest + 2, 10), 60))
    return widths


def build_workbook(sheet_name, headers, rows, widths=None):
    """xlsx file with a styled header row, returned as BytesIO"""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name[:31]

    sheet.append(list(headers))
    for cell in sheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center', vertical='center')

    for row in rows:
        sheet.append([_excel_value(value) for value in row])

    for index, width in enumerate(widths or _column_widths(headers, rows), start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width
    sheet.freeze_panes = 'A2'

    output = io.BytesIO()
    workbook.save(output)
    output.seek(0)
    return output


def _excel_value(value):
    if isinstance(value, (datetime, date, int, float)) or value is None:
        return value
    return str(value)


def export_filename(label):
    """Boxito_<label>_<YYYY-MM-DD>.xlsx"""
    return f'Boxito_{label}_{date.today().isoformat()}.xlsx'
