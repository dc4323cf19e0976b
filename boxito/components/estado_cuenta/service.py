"""
Estado de Cuenta Service
"""
from datetime import date

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import get_backend
from boxito.core.dates import month_of
from boxito.core.spreadsheets import build_workbook
from boxito.core.tables import as_number, contains

YEARS_SHOWN = 5


def paid_amount(invoice):
    """Payments plus credit notes applied to an invoice"""
    return sum(as_number(invoice.get(field)) for field in ('pago1', 'pago2', 'pago3', 'nc'))


@register_component('estado_cuenta')
class EstadoCuentaService:
    """Service for the account statement page"""

    SORTABLE = ('fecha_creacion', 'numero_comprobante', 'cliente', 'total', 'por_cobrar', 'estatus')

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('estado_cuenta')

    def list_invoices(self):
        return get_backend().list(self.resource['path'])

    @staticmethod
    def year_choices(today=None):
        current = (today or date.today()).year
        return [str(current - offset) for offset in range(YEARS_SHOWN)]

    @staticmethod
    def read_filters(args, today=None):
        return {
            'cliente': args.get('cliente', ''),
            'anio': args.get('anio') or str((today or date.today()).year),
            'mes': args.get('mes', 'all') or 'all',
        }

    @staticmethod
    def filter_invoices(invoices, filters):
        anio = filters.get('anio', 'all')
        mes = str(filters.get('mes', 'all'))
        selected_month = int(mes) if mes.isdigit() and 1 <= int(mes) <= 12 else None

        result = []
        for invoice in invoices:
            if not contains(invoice.get('cliente'), filters.get('cliente')):
                continue
            if anio != 'all' and not str(invoice.get('fecha_creacion') or '').startswith(anio):
                continue
            if selected_month is not None and month_of(invoice.get('fecha_creacion')) != selected_month:
                continue
            result.append(invoice)
        return result

    @staticmethod
    def summarize(invoices):
        return {
            'totalFacturado': round(sum(as_number(f.get('total')) for f in invoices), 2),
            'totalPagado': round(sum(paid_amount(f) for f in invoices), 2),
            'totalPorCobrar': round(sum(as_number(f.get('por_cobrar')) for f in invoices), 2)
        }

    @staticmethod
    def statement_rows(invoices):
        """Invoices with the paid column added"""
        return [dict(invoice, pagado=round(paid_amount(invoice), 2)) for invoice in invoices]

    @staticmethod
    def export_workbook(invoices):
        headers = ['Fecha', 'Número Comprobante', 'Cliente', 'Total', 'Pagado', 'Por Cobrar', 'Estatus']
        rows = [
            [
                f.get('fecha_creacion'),
                f.get('numero_comprobante'),
                f.get('cliente'),
                as_number(f.get('total')),
                round(paid_amount(f), 2),
                as_number(f.get('por_cobrar')),
                f.get('estatus')
            ]
            for f in invoices
        ]
        return build_workbook('Estado de Cuenta', headers, rows)
