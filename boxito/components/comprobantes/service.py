"""
Comprobantes Service
Receipts list, statistics, form saving and bulk spreadsheet upload
"""
import logging

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import get_backend
from boxito.core.bulk_upload import cell, cell_text, file_error_result, is_blank, parse_amount, validate_rows
from boxito.core.dates import DateFormatError, month_of, normalize_date
from boxito.core.schemas import ReceiptForm
from boxito.core.spreadsheets import SpreadsheetError, build_workbook, read_rows
from boxito.core.tables import contains

logger = logging.getLogger(__name__)

BULK_COLUMNS = ('id_asociado', 'status', 'monto', 'tipo', 'fecha', 'link', 'factura')

LAYOUT_EXAMPLES = [
    ['649', 'APROBADO', 1838.50, 'ABONO', '04/08/2025', 'https://app.shopeenvios.com/comprobante/file?id_estado=1010170', ''],
    ['649', 'APROBADO', 1511.25, 'ABONO', '2025-08-04', 'https://app.shopeenvios.com/comprobante/file?id_estado=1010157', ''],
    ['463', 'PENDIENTE', 2000.00, 'CARGO', '04/08/25', 'https://app.shopeenvios.com/comprobante/file?id_estado=1009958', 'A12345'],
    ['301', 'APROBADO', 750.75, 'ABONO', '3/8/2025', '', 'B67890'],
]

# Instruction lines start with an empty id, so uploads skip them
LAYOUT_INSTRUCTIONS = [
    'INSTRUCCIONES:',
    '- Fecha: Usar DD/MM/YYYY o YYYY-MM-DD',
    '- Monto: Solo números, decimales con punto',
    '- Status: APROBADO, PENDIENTE, RECHAZADO',
    '- Tipo: ABONO, CARGO, TRANSFERENCIA',
    '- Link: URL completa (opcional)',
    '- Factura: Número de factura (opcional)',
]

LAYOUT_WIDTHS = [12, 12, 10, 15, 40, 50, 15]


def validate_receipt_row(row, issues):
    """Check one upload line; returns the receipt or None on errors"""
    id_asociado, status, monto, tipo, fecha, link, factura = (cell(row, i) for i in range(len(BULK_COLUMNS)))

    if is_blank(id_asociado):
        issues.error('id_asociado', id_asociado, 'ID Asociado es obligatorio')
    if is_blank(status):
        issues.error('status', status, 'Status es obligatorio')
    if is_blank(tipo):
        issues.error('tipo', tipo, 'Tipo es obligatorio')

    amount = None
    if is_blank(monto):
        issues.error('monto', monto, 'Monto debe ser un número válido')
    else:
        try:
            amount = parse_amount(monto)
        except ValueError:
            issues.error('monto', monto, 'Monto debe ser un número válido')
        else:
            if amount < 0:
                issues.error('monto', monto, 'El monto no puede ser negativo')

    fecha_iso = ''
    if is_blank(fecha):
        issues.error('fecha', fecha, 'Fecha es obligatoria')
    else:
        try:
            fecha_iso = normalize_date(fecha)
        except DateFormatError as e:
            issues.error('fecha', fecha, f'Formato de fecha inválido: {e}')

    if not is_blank(status) and cell_text(status).upper() not in BoxitoConfig.RECEIPT_STATUSES:
        issues.warning(
            'status', status,
            f'Status no estándar. Se recomienda: {", ".join(BoxitoConfig.RECEIPT_STATUSES)}'
        )
    if not is_blank(tipo) and cell_text(tipo).upper() not in BoxitoConfig.RECEIPT_TYPES:
        issues.warning(
            'tipo', tipo,
            f'Tipo no estándar. Se recomienda: {", ".join(BoxitoConfig.RECEIPT_TYPES)}'
        )

    if issues.has_errors:
        return None

    return {
        'id_asociado': cell_text(id_asociado),
        'status': cell_text(status),
        'monto': amount,
        'tipo': cell_text(tipo),
        'fecha': fecha_iso,
        'link': cell_text(link),
        'factura': cell_text(factura)
    }


@register_component('comprobantes')
class ComprobantesService:
    """Service for the receipts page"""

    SORTABLE = ('id_asociado', 'status', 'monto', 'tipo', 'fecha', 'factura')

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('comprobantes')

    def list_receipts(self):
        return get_backend().list(self.resource['path'])

    @staticmethod
    def read_filters(args):
        return {
            'id': args.get('id', ''),
            'status': args.get('status', ''),
            'tipo': args.get('tipo', ''),
            'factura': args.get('factura', ''),
            'mes': args.get('mes', 'all') or 'all',
        }

    @staticmethod
    def filter_receipts(receipts, filters):
        """Apply the page filters; the month comes from the receipt date"""
        mes = str(filters.get('mes', 'all'))
        selected_month = int(mes) if mes.isdigit() and 1 <= int(mes) <= 12 else None

        result = []
        for receipt in receipts:
            if not contains(receipt.get('id_asociado'), filters.get('id')):
                continue
            if not contains(receipt.get('status'), filters.get('status')):
                continue
            if not contains(receipt.get('tipo'), filters.get('tipo')):
                continue
            if not contains(receipt.get('factura'), filters.get('factura')):
                continue
            if selected_month is not None and month_of(receipt.get('fecha')) != selected_month:
                continue
            result.append(receipt)
        return result

    @staticmethod
    def compute_stats(receipts):
        aprobados = sum(1 for r in receipts if r.get('status') == 'APROBADO')
        pendientes = sum(1 for r in receipts if r.get('status') == 'PENDIENTE')
        rechazados = sum(1 for r in receipts if r.get('status') == 'RECHAZADO')
        monto_total = sum(float(r.get('monto') or 0) for r in receipts)
        tasa = (aprobados / len(receipts)) * 100 if receipts else 0
        return {
            'totalAprobados': aprobados,
            'totalPendientes': pendientes,
            'totalRechazados': rechazados,
            'montoTotal': round(monto_total, 2),
            'tasaAprobacion': round(tasa, 1)
        }

    def save_receipt(self, data, receipt_id=None):
        """Validate the form and create or update the receipt

        Raises pydantic.ValidationError or BackendError.
        """
        form = ReceiptForm(**data)
        payload = form.model_dump()
        backend = get_backend()
        if receipt_id:
            logger.info(f'Updating receipt {receipt_id}')
            return backend.update(self.resource['path'], receipt_id, payload)
        logger.info(f'Creating receipt for associate {form.id_asociado}')
        return backend.create(self.resource['path'], payload)

    def delete_receipt(self, receipt_id):
        logger.info(f'Deleting receipt {receipt_id}')
        return get_backend().delete(self.resource['path'], receipt_id)

    @staticmethod
    def validate_upload(upload):
        """Validate an uploaded workbook; never raises for unreadable files"""
        try:
            rows = read_rows(upload.stream, upload.filename)
        except SpreadsheetError as e:
            return file_error_result(upload.filename, e)
        return validate_rows(rows, validate_receipt_row)

    def confirm_upload(self, rows):
        return get_backend().post(self.resource['bulk_path'], {self.resource['bulk_key']: rows})

    @staticmethod
    def layout_workbook():
        instructions = [['', '', '', '', line, '', ''] for line in LAYOUT_INSTRUCTIONS]
        return build_workbook(
            'Layout_Comprobantes',
            BULK_COLUMNS,
            LAYOUT_EXAMPLES + instructions,
            widths=LAYOUT_WIDTHS
        )

    @staticmethod
    def export_workbook(receipts):
        rows = [
            [
                index,
                r.get('id_asociado'),
                r.get('status'),
                r.get('monto'),
                r.get('tipo'),
                r.get('fecha'),
                r.get('link') or '',
                r.get('factura') or ''
            ]
            for index, r in enumerate(receipts, start=1)
        ]
        headers = ['#', 'ID Asociado', 'Status', 'Monto', 'Tipo', 'Fecha', 'Link', 'Factura']
        return build_workbook('Comprobantes', headers, rows)
