"""
Cancelación de Guías Service
"""
import logging

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import get_backend
from boxito.core.dates import today_iso
from boxito.core.schemas import GuideCancellationForm, GuideStatusForm
from boxito.core.spreadsheets import build_workbook
from boxito.core.tables import as_number, contains

logger = logging.getLogger(__name__)

REQUEST_FIELDS = (
    'numero_guia', 'paqueteria', 'cliente', 'motivo', 'fecha_solicitud',
    'url_guia', 'archivo_guia', 'comentarios'
)


def form_from_fields(fields, files=None):
    """Request data from the HTML form; the guide PDF is kept by file name"""
    data = {key: fields.get(key, '') for key in REQUEST_FIELDS}
    upload = (files or {}).get('archivo')
    if upload and upload.filename:
        data['archivo_guia'] = upload.filename
    return data


@register_component('cancelacion_guias')
class CancelacionGuiasService:
    """Service for the guide cancellations page"""

    SORTABLE = (
        'numero_guia', 'paqueteria', 'cliente', 'fecha_solicitud', 'estatus',
        'costo_cancelacion', 'reembolso', 'fecha_respuesta'
    )

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('cancelacion_guias')

    def list_cancellations(self):
        return get_backend().list(self.resource['path'])

    @staticmethod
    def read_filters(args):
        return {
            'estatus': args.get('estatus', 'all') or 'all',
            'cliente': args.get('cliente', ''),
            'paqueteria': args.get('paqueteria', ''),
            'numero_guia': args.get('numero_guia', ''),
        }

    @staticmethod
    def filter_cancellations(cancellations, filters):
        estatus = filters.get('estatus', 'all')
        return [
            c for c in cancellations
            if (estatus == 'all' or c.get('estatus') == estatus)
            and contains(c.get('cliente'), filters.get('cliente'))
            and contains(c.get('paqueteria'), filters.get('paqueteria'))
            and contains(c.get('numero_guia'), filters.get('numero_guia'))
        ]

    @staticmethod
    def compute_stats(cancellations):
        def count(estatus):
            return sum(1 for c in cancellations if c.get('estatus') == estatus)

        canceladas = count('Cancelada')
        total = len(cancellations)
        return {
            'totalPendientes': count('Pendiente'),
            'totalEnProceso': count('En Proceso'),
            'totalCanceladas': canceladas,
            'totalRechazadas': count('Rechazada'),
            'costoTotal': round(sum(as_number(c.get('costo_cancelacion')) for c in cancellations), 2),
            'reembolsoTotal': round(sum(as_number(c.get('reembolso')) for c in cancellations), 2),
            'tasaExito': round(canceladas / total * 100, 1) if total else 0
        }

    @staticmethod
    def welcome_message(cancellations):
        if not cancellations:
            return None
        pendientes = sum(1 for c in cancellations if c.get('estatus') == 'Pendiente')
        canceladas = sum(1 for c in cancellations if c.get('estatus') == 'Cancelada')
        if pendientes == 0:
            return '¡Increíble! No hay cancelaciones pendientes. ¡Todo al día!'
        return (
            f'Tienes {canceladas} guías canceladas exitosamente y {pendientes} '
            f'solicitudes pendientes. ¡Vamos a procesarlas!'
        )

    @staticmethod
    def new_request_defaults():
        return {'fecha_solicitud': today_iso(), 'estatus': 'Pendiente'}

    def save_cancellation(self, data, cancellation_id=None):
        data = dict(data)
        if not data.get('fecha_solicitud'):
            data['fecha_solicitud'] = today_iso()
        form = GuideCancellationForm(**data)
        payload = form.model_dump()
        backend = get_backend()
        if cancellation_id:
            logger.info(f'Updating cancellation {cancellation_id}')
            return backend.update(self.resource['path'], cancellation_id, payload)
        payload['estatus'] = 'Pendiente'
        logger.info(f'Creating cancellation for guide {form.numero_guia}')
        return backend.create(self.resource['path'], payload)

    def update_status(self, cancellation_id, data):
        """PUT the new status; returns the validated status form"""
        form = GuideStatusForm(**data)
        payload = form.model_dump()
        if payload['fecha_respuesta'] is None and form.estatus in ('Cancelada', 'Rechazada'):
            payload['fecha_respuesta'] = today_iso()
        logger.info(f'Cancellation {cancellation_id} -> {form.estatus}')
        get_backend().put(f"{self.resource['path']}/{cancellation_id}/status", payload)
        return form

    def delete_cancellation(self, cancellation_id):
        logger.info(f'Deleting cancellation {cancellation_id}')
        return get_backend().delete(self.resource['path'], cancellation_id)

    @staticmethod
    def export_workbook(cancellations):
        headers = [
            '#', 'Número de Guía', 'Paquetería', 'Cliente', 'Motivo', 'Fecha Solicitud',
            'Estatus', 'Responsable', 'Costo Cancelación', 'Reembolso', 'Referencia',
            'Fecha Respuesta', 'Comentarios'
        ]
        rows = [
            [
                index,
                c.get('numero_guia'),
                c.get('paqueteria'),
                c.get('cliente'),
                c.get('motivo'),
                c.get('fecha_solicitud'),
                c.get('estatus'),
                c.get('responsable') or '',
                as_number(c.get('costo_cancelacion')),
                as_number(c.get('reembolso')),
                c.get('numero_referencia') or '',
                c.get('fecha_respuesta') or '',
                c.get('comentarios') or ''
            ]
            for index, c in enumerate(cancellations, start=1)
        ]
        return build_workbook('Cancelaciones', headers, rows)
