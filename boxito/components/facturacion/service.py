"""
Facturación Service
Invoices: filters, collection statistics, form saving and bulk upload
"""
import logging

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import get_backend
from boxito.core.bulk_upload import cell, cell_text, file_error_result, is_blank, parse_amount, validate_rows
from boxito.core.dates import DateFormatError, add_days, month_of, normalize_date
from boxito.core.schemas import InvoiceForm
from boxito.core.spreadsheets import SpreadsheetError, build_workbook, read_rows
from boxito.core.tables import as_number, contains

logger = logging.getLogger(__name__)

BULK_COLUMNS = (
    'paqueteria', 'numero_comprobante', 'cliente', 'rfc', 'credito',
    'fecha_creacion', 'fecha_vencimiento', 'total'
)

LAYOUT_EXAMPLES = [
    ['DHL', 'FAC-2025-001', 'EMPRESA EJEMPLO SA', 'EEJ990101AAA', 30, '2025-01-15', '2025-02-14', 25000.50],
    ['FedEx', 'FAC-2025-002', 'CLIENTE DEMO SC', 'CDE990202BBB', 15, '2025-01-16', '2025-01-31', 15750.00],
    ['UPS', 'FAC-2025-003', 'NEGOCIO PRUEBA', 'NPR990303CCC', 0, '2025-01-17', '2025-01-17', 8500.25],
]

EXPORT_HEADERS = [
    '#', 'Paquetería', 'Número Comprobante', 'Cliente', 'RFC', 'Crédito',
    'Fecha Creación', 'Fecha Vencimiento', 'Total', 'Pago 1', 'Pago 2', 'Pago 3',
    'NC', 'Por Cobrar', 'Estatus', 'Comentarios'
]


def _credit_days(value, issues):
    """Whole number of credit days; anything else warns and becomes 0"""
    if is_blank(value):
        return 0
    try:
        number = float(str(value).strip())
    except ValueError:
        number = None
    if number is None or not number.is_integer() or number < 0:
        issues.warning('credito', value, 'Crédito no es un número entero válido, se usará 0')
        return 0
    return int(number)


def validate_invoice_row(row, issues):
    """Check one upload line; returns the invoice or None on errors"""
    (paqueteria, numero_comprobante, cliente, rfc, credito,
     fecha_creacion, fecha_vencimiento, total) = (cell(row, i) for i in range(len(BULK_COLUMNS)))

    if is_blank(paqueteria):
        issues.error('paqueteria', paqueteria, 'Paquetería es obligatoria')
    if is_blank(numero_comprobante):
        issues.error('numero_comprobante', numero_comprobante, 'Número de comprobante es obligatorio')
    if is_blank(cliente):
        issues.error('cliente', cliente, 'Cliente es obligatorio')
    if len(cell_text(rfc)) < 12:
        issues.error('rfc', rfc, 'RFC debe tener al menos 12 caracteres')

    amount = None
    try:
        amount = parse_amount(total)
    except ValueError:
        issues.error('total', total, 'Total debe ser un número válido')
    else:
        if amount <= 0:
            issues.error('total', total, 'Total debe ser mayor a 0')

    creacion = ''
    if is_blank(fecha_creacion):
        issues.error('fecha_creacion', fecha_creacion, 'Fecha de creación es obligatoria')
    else:
        try:
            creacion = normalize_date(fecha_creacion)
        except DateFormatError as e:
            issues.error('fecha_creacion', fecha_creacion, f'Formato de fecha inválido: {e}')

    dias = _credit_days(credito, issues)

    vencimiento = ''
    if not is_blank(fecha_vencimiento):
        try:
            vencimiento = normalize_date(fecha_vencimiento)
        except DateFormatError:
            issues.warning(
                'fecha_vencimiento', fecha_vencimiento,
                'Fecha de vencimiento inválida, se calculará con los días de crédito'
            )

    if issues.has_errors:
        return None

    if not vencimiento:
        vencimiento = add_days(creacion, dias)

    return {
        'paqueteria': cell_text(paqueteria),
        'numero_comprobante': cell_text(numero_comprobante),
        'cliente': cell_text(cliente),
        'rfc': cell_text(rfc).upper(),
        'credito': dias,
        'fecha_creacion': creacion,
        'fecha_vencimiento': vencimiento,
        'total': amount,
        'pago1': 0,
        'fecha_pago1': None,
        'pago2': 0,
        'fecha_pago2': None,
        'pago3': 0,
        'fecha_pago3': None,
        'nc': 0,
        'por_cobrar': amount,
        'estatus': 'Pendiente',
        'comentarios': '',
        'cfdi': '',
        'soporte': ''
    }


@register_component('facturacion')
class FacturacionService:
    """Service for the invoices page"""

    SORTABLE = (
        'paqueteria', 'numero_comprobante', 'cliente', 'rfc', 'credito',
        'fecha_creacion', 'fecha_vencimiento', 'total', 'por_cobrar', 'estatus'
    )

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('facturacion')

    def list_invoices(self):
        return get_backend().list(self.resource['path'])

    @staticmethod
    def read_filters(args):
        return {
            'estatus': args.get('estatus', 'all') or 'all',
            'cliente': args.get('cliente', ''),
            'numero': args.get('numero', ''),
            'mes': args.get('mes', '0') or '0',
        }

    @staticmethod
    def filter_invoices(invoices, filters):
        estatus = filters.get('estatus', 'all')
        mes = str(filters.get('mes', '0'))
        selected_month = int(mes) if mes.isdigit() and 1 <= int(mes) <= 12 else None

        result = []
        for invoice in invoices:
            if estatus != 'all' and invoice.get('estatus') != estatus:
                continue
            if not contains(invoice.get('cliente'), filters.get('cliente')):
                continue
            if not contains(invoice.get('numero_comprobante'), filters.get('numero')):
                continue
            if selected_month is not None and month_of(invoice.get('fecha_creacion')) != selected_month:
                continue
            result.append(invoice)
        return result

    @staticmethod
    def compute_stats(invoices):
        total_facturado = sum(as_number(f.get('total')) for f in invoices)
        total_cobrado = sum(as_number(f.get('total')) - as_number(f.get('por_cobrar')) for f in invoices)
        tasa = (total_cobrado / total_facturado) * 100 if total_facturado > 0 else 0
        return {
            'totalFacturado': round(total_facturado, 2),
            'totalCobrado': round(total_cobrado, 2),
            'tasaCobro': round(tasa, 1),
            'facturasPagadas': sum(1 for f in invoices if f.get('estatus') == 'Pagada'),
            'facturasPendientes': sum(1 for f in invoices if f.get('estatus') == 'Pendiente')
        }

    def save_invoice(self, data, invoice_id=None):
        """Validate, derive due date/balance/status and save

        Returns the validated form so callers can react to the new status.
        """
        form = InvoiceForm(**data)
        payload = form.model_dump()
        backend = get_backend()
        if invoice_id:
            logger.info(f'Updating invoice {invoice_id}')
            backend.update(self.resource['path'], invoice_id, payload)
        else:
            logger.info(f'Creating invoice {form.numero_comprobante}')
            backend.create(self.resource['path'], payload)
        return form

    def delete_invoice(self, invoice_id):
        logger.info(f'Deleting invoice {invoice_id}')
        return get_backend().delete(self.resource['path'], invoice_id)

    @staticmethod
    def validate_upload(upload):
        try:
            rows = read_rows(upload.stream, upload.filename)
        except SpreadsheetError as e:
            return file_error_result(upload.filename, e)
        return validate_rows(rows, validate_invoice_row)

    def confirm_upload(self, rows):
        return get_backend().post(self.resource['bulk_path'], {self.resource['bulk_key']: rows})

    @staticmethod
    def layout_workbook():
        return build_workbook('Layout_Facturacion', BULK_COLUMNS, LAYOUT_EXAMPLES)

    @staticmethod
    def export_workbook(invoices):
        rows = [
            [
                index,
                f.get('paqueteria'),
                f.get('numero_comprobante'),
                f.get('cliente'),
                f.get('rfc'),
                f.get('credito'),
                f.get('fecha_creacion'),
                f.get('fecha_vencimiento'),
                f.get('total'),
                f.get('pago1') or 0,
                f.get('pago2') or 0,
                f.get('pago3') or 0,
                f.get('nc') or 0,
                f.get('por_cobrar'),
                f.get('estatus'),
                f.get('comentarios') or ''
            ]
            for index, f in enumerate(invoices, start=1)
        ]
        return build_workbook('Facturas', EXPORT_HEADERS, rows)
