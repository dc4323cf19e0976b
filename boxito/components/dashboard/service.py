"""
Dashboard Service
Normalizes /api/dashboard/stats and /api/dashboard/overview for display
"""
import logging

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import BackendError, get_backend
from boxito.core.tables import as_number

logger = logging.getLogger(__name__)

STAT_KEYS = (
    'ingresos_hoy', 'recargas_dia', 'facturas_pendientes', 'saldos_vencidos',
    'total_facturas', 'total_facturado', 'total_por_cobrar', 'facturas_vencidas'
)

TOP_CLIENTS = 5


def _percentage(part, whole):
    return round(part / whole * 100, 1) if whole else 0


@register_component('dashboard')
class DashboardService:
    """Service for the dashboard page"""

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('dashboard')

    @staticmethod
    def normalize_stats(raw):
        """Every known stat as a number; missing keys become 0"""
        raw = raw if isinstance(raw, dict) else {}
        return {key: as_number(raw.get(key)) for key in STAT_KEYS}

    @staticmethod
    def normalize_overview(raw):
        raw = raw if isinstance(raw, dict) else {}
        financial = raw.get('financial') or {}
        totals = raw.get('totals') or {}
        summary = raw.get('summary') or {}
        return {
            'financial': {
                'collectionRate': round(as_number(financial.get('collectionRate')), 1),
                'overdueRate': round(as_number(financial.get('overdueRate')), 1),
                'totalRevenue': as_number(financial.get('totalRevenue')),
                'totalPaid': as_number(financial.get('totalPaid')),
                'totalOutstanding': as_number(financial.get('totalOutstanding')),
                'totalOverdue': as_number(financial.get('totalOverdue')),
            },
            'totals': {
                'invoices': int(as_number(totals.get('invoices'))),
                'paidInvoices': int(as_number(totals.get('paidInvoices'))),
                'pendingInvoices': int(as_number(totals.get('pendingInvoices'))),
                'overdueInvoices': int(as_number(totals.get('overdueInvoices'))),
            },
            'monthlyData': list(raw.get('monthlyData') or []),
            'topClients': list(raw.get('topClients') or [])[:TOP_CLIENTS],
            'summary': {
                'avgInvoiceAmount': as_number(summary.get('avgInvoiceAmount')),
            },
        }

    @staticmethod
    def status_breakdown(overview):
        """Paid / pending / overdue counts with their share of all invoices"""
        totals = overview['totals']
        parts = [
            ('Pagadas', totals['paidInvoices'], '#10b981'),
            ('Pendientes', totals['pendingInvoices'], '#f59e0b'),
            ('Vencidas', totals['overdueInvoices'], '#ef4444'),
        ]
        whole = totals['invoices'] or sum(count for _, count, _ in parts)
        return [
            {'name': name, 'value': count, 'color': color, 'porcentaje': _percentage(count, whole)}
            for name, count, color in parts
        ]

    @staticmethod
    def monthly_series(overview):
        """Monthly rows with a bar width relative to the biggest month"""
        months = overview['monthlyData']
        peak = max((as_number(m.get('amount')) for m in months), default=0)
        return [
            {
                'month': m.get('month'),
                'count': int(as_number(m.get('count'))),
                'amount': as_number(m.get('amount')),
                'paid': as_number(m.get('paid')),
                'outstanding': as_number(m.get('outstanding')),
                'bar': _percentage(as_number(m.get('amount')), peak),
            }
            for m in months
        ]

    def load(self):
        """Stats and overview; the overview is optional

        Raises BackendError when the stats cannot be loaded.
        """
        backend = get_backend()
        stats = self.normalize_stats(backend.fetch(self.resource['stats_path']))
        try:
            overview = self.normalize_overview(backend.fetch(self.resource['overview_path']))
        except BackendError as e:
            logger.warning(f'Dashboard overview unavailable: {e.message}')
            overview = None

        data = {'stats': stats, 'overview': overview}
        if overview:
            data['breakdown'] = self.status_breakdown(overview)
            data['monthly'] = self.monthly_series(overview)
        return data
