"""
Bulk upload validation
Single pass over spreadsheet rows: each line ends up either correct
(possibly with warnings) or rejected with one or more errors
"""
import logging
import re
import threading
import uuid
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

ERROR = 'error'
WARNING = 'warning'

PREVIEW_LIMIT = 5
PREVIEW_COLUMNS = 6


class ValidationIssue:
    """A problem found in one cell of the upload"""

    def __init__(self, fila, campo, valor, error, severidad=ERROR):
        self.fila = fila
        self.campo = campo
        self.valor = valor
        self.error = error
        self.severidad = severidad

    def to_dict(self):
        return {
            'fila': self.fila,
            'campo': self.campo,
            'valor': '' if self.valor is None else str(self.valor),
            'error': self.error,
            'severidad': self.severidad,
        }


class RowIssues:
    """Collector handed to row validators for a single line"""

    def __init__(self, fila):
        self.fila = fila
        self.items = []

    def error(self, campo, valor, mensaje):
        self.items.append(ValidationIssue(self.fila, campo, valor, mensaje, ERROR))

    def warning(self, campo, valor, mensaje):
        self.items.append(ValidationIssue(self.fila, campo, valor, mensaje, WARNING))

    @property
    def has_errors(self):
        return any(issue.severidad == ERROR for issue in self.items)

    @property
    def has_warnings(self):
        return any(issue.severidad == WARNING for issue in self.items)


class ValidationResult:
    """Outcome of validating an upload"""

    def __init__(self):
        self.totalLineas = 0
        self.lineasCorrectas = 0
        self.lineasConErrores = 0
        self.lineasConAdvertencias = 0
        self.errores = []
        self.datosCorrectos = []
        self.datosConErrores = []

    @property
    def only_errors(self):
        return [issue for issue in self.errores if issue.severidad == ERROR]

    @property
    def only_warnings(self):
        return [issue for issue in self.errores if issue.severidad == WARNING]

    @property
    def can_process(self):
        return self.lineasCorrectas > 0

    @property
    def decision(self):
        """'errors', 'warnings' or 'clean'"""
        if self.lineasConErrores > 0:
            return 'errors'
        if self.lineasConAdvertencias > 0:
            return 'warnings'
        return 'clean'

    @property
    def preview_columns(self):
        if not self.datosCorrectos:
            return []
        return list(self.datosCorrectos[0].keys())[:PREVIEW_COLUMNS]

    @property
    def preview_rows(self):
        columns = self.preview_columns
        return [[row.get(column) for column in columns] for row in self.datosCorrectos[:PREVIEW_LIMIT]]

    def to_dict(self):
        return {
            'totalLineas': self.totalLineas,
            'lineasCorrectas': self.lineasCorrectas,
            'lineasConErrores': self.lineasConErrores,
            'lineasConAdvertencias': self.lineasConAdvertencias,
            'errores': [issue.to_dict() for issue in self.errores],
            'datosCorrectos': self.datosCorrectos,
            'datosConErrores': [[_jsonable(cell) for cell in row] for row in self.datosConErrores],
            'decision': self.decision,
            'canProcess': self.can_process,
        }


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def cell(row, index):
    """Cell value or None past the end of the row"""
    return row[index] if index < len(row) else None


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def cell_text(value):
    """Cell as trimmed text; whole floats lose their '.0'"""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_amount(value):
    """Number from a spreadsheet cell: '1,838.50', '$ 2000', 750.75"""
    if isinstance(value, bool):
        raise ValueError(f'Monto inválido: {value}')
    if isinstance(value, (int, float)):
        if value != value:
            raise ValueError('Monto inválido: NaN')
        return float(value)
    text = re.sub(r'[\s$,]', '', str(value or ''))
    if not text:
        raise ValueError('Monto vacío')
    return float(text)


def validate_rows(rows, row_validator):
    """Validate every data row of a sheet

    `rows` includes the header line. `row_validator(row, issues)` returns the
    normalized record, or None when it reported errors.
    """
    result = ValidationResult()

    for index, row in enumerate(rows[1:]):
        fila = index + 2
        if not row or is_blank(row[0]):
            continue

        result.totalLineas += 1
        issues = RowIssues(fila)

        try:
            record = row_validator(row, issues)
        except (TypeError, ValueError) as e:
            issues.error('general', 'N/A', f'Error procesando línea: {e}')
            record = None

        result.errores.extend(issues.items)

        if issues.has_errors or record is None:
            if not issues.has_errors:
                issues.error('general', 'N/A', 'Línea no procesable')
                result.errores.append(issues.items[-1])
            result.lineasConErrores += 1
            result.datosConErrores.append(list(row))
            continue

        result.datosCorrectos.append(record)
        result.lineasCorrectas += 1
        if issues.has_warnings:
            result.lineasConAdvertencias += 1

    logger.info(
        f'Bulk validation: {result.lineasCorrectas}/{result.totalLineas} correct, '
        f'{result.lineasConErrores} with errors, {result.lineasConAdvertencias} with warnings'
    )
    return result


def file_error_result(filename, error):
    """Result for a file that could not be read at all"""
    result = ValidationResult()
    result.lineasConErrores = 1
    result.errores.append(ValidationIssue(1, 'archivo', filename, f'Error procesando archivo: {error}', ERROR))
    return result


class PendingUploads:
    """Validated rows waiting for the user's confirmation"""

    def __init__(self, ttl=timedelta(minutes=30)):
        self.ttl = ttl
        self._entries = {}
        self._lock = threading.Lock()

    def add(self, page, rows, result=None):
        token = uuid.uuid4().hex
        with self._lock:
            self._purge()
            self._entries[token] = {
                'page': page,
                'rows': rows,
                'result': result,
                'created': datetime.now()
            }
        return token

    def get(self, page, token):
        """Entry stored under token for page, or None when unknown or expired

        The entry stays until discarded so a failed confirmation can be retried.
        """
        with self._lock:
            self._purge()
            entry = self._entries.get(token)
            if not entry or entry['page'] != page:
                return None
            return entry

    def discard(self, token):
        with self._lock:
            self._entries.pop(token, None)

    def _purge(self):
        limit = datetime.now() - self.ttl
        for token in [t for t, e in self._entries.items() if e['created'] < limit]:
            del self._entries[token]

    def __len__(self):
        return len(self._entries)


def confirmation_summary(response, sent):
    """(created, failed) counts from a bulk endpoint response

    Receipts answer {count}, invoices answer {created, errors}.
    """
    if not isinstance(response, dict):
        return sent, 0
    created = response.get('created', response.get('count', sent))
    failed = response.get('errors', 0)
    if not isinstance(failed, int):
        failed = len(failed) if isinstance(failed, list) else 0
    return created, failed
