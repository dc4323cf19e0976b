"""
Propuestas Service
"""
import logging
from datetime import date

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import get_backend
from boxito.core.schemas import ProposalForm
from boxito.core.spreadsheets import build_workbook
from boxito.core.tables import contains

logger = logging.getLogger(__name__)

DOCUMENT_FIELDS = ('pdf', 'xlsx')


def form_from_fields(fields, files=None):
    """Proposal data from the HTML form; documents are kept by file name"""
    files = files or {}
    data = {key: fields.get(key, '') for key in ('id_cliente', 'cliente', 'anio', 'comentarios')}
    for key in DOCUMENT_FIELDS:
        upload = files.get(f'archivo_{key}')
        data[key] = upload.filename if upload and upload.filename else fields.get(key, '')
    return data


@register_component('propuestas')
class PropuestasService:
    """Service for the proposals page"""

    SORTABLE = ('id_cliente', 'cliente', 'anio', 'created_at')

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('propuestas')

    def list_proposals(self):
        return get_backend().list(self.resource['path'])

    @staticmethod
    def read_filters(args):
        return {
            'cliente': args.get('cliente', ''),
            'anio': args.get('anio', 'all') or 'all',
        }

    @staticmethod
    def filter_proposals(proposals, filters):
        anio = filters.get('anio', 'all')
        return [
            p for p in proposals
            if contains(p.get('cliente'), filters.get('cliente'))
            and (anio == 'all' or str(p.get('anio')) == anio)
        ]

    @staticmethod
    def available_years(proposals, today=None):
        """Years present in the records plus the current one, newest first"""
        years = {str(p.get('anio')) for p in proposals if p.get('anio')}
        years.add(str((today or date.today()).year))
        return sorted(years, reverse=True)

    @staticmethod
    def compute_stats(proposals):
        total = len(proposals)
        completas = sum(1 for p in proposals if p.get('pdf') and p.get('xlsx'))
        return {
            'totalPropuestas': total,
            'conPdf': sum(1 for p in proposals if p.get('pdf')),
            'conExcel': sum(1 for p in proposals if p.get('xlsx')),
            'completas': completas,
            'tasaCompletitud': round(completas / total * 100, 1) if total else 0
        }

    def save_proposal(self, data, proposal_id=None):
        form = ProposalForm(**data)
        payload = form.model_dump()
        backend = get_backend()
        if proposal_id:
            logger.info(f'Updating proposal {proposal_id}')
            return backend.update(self.resource['path'], proposal_id, payload)
        logger.info(f'Creating proposal for {form.cliente} ({form.anio})')
        return backend.create(self.resource['path'], payload)

    def delete_proposal(self, proposal_id):
        logger.info(f'Deleting proposal {proposal_id}')
        return get_backend().delete(self.resource['path'], proposal_id)

    @staticmethod
    def export_workbook(proposals):
        headers = ['#', 'Cliente', 'Año', 'PDF', 'Excel', 'Comentarios', 'Fecha Creación']
        rows = [
            [
                index,
                p.get('cliente'),
                p.get('anio'),
                p.get('pdf') or 'No disponible',
                p.get('xlsx') or 'No disponible',
                p.get('comentarios') or '',
                str(p.get('created_at') or '').split('T')[0]
            ]
            for index, p in enumerate(proposals, start=1)
        ]
        return build_workbook('Propuestas', headers, rows)
