"""
Directorio Service
Client records, completion percentage and directory statistics
"""
import logging

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import get_backend
from boxito.core.schemas import ClientForm
from boxito.core.tables import as_number, contains

logger = logging.getLogger(__name__)

# form key -> flattened backend key
DOCUMENTS = {
    'constanciaFiscal': 'constancia_fiscal',
    'actaConstitutiva': 'acta_constitutiva',
    'identificacion': 'identificacion',
    'comprobanteDomicilio': 'comprobante_domicilio',
}

BASIC_FIELDS = ('id_cliente', 'cliente', 'rfc', 'credito', 'contacto', 'direccion', 'mail', 'tel')


def _filled(value):
    return bool(value) and str(value).strip() != ''


def completion_percentage(data):
    """Share of the 12 tracked items present in a nested client form

    Collection contact 1 counts only with both name and email; zero credit
    counts as missing.
    """
    documentos = data.get('documentos') or {}
    cobro1 = data.get('contactoCobro1') or {}
    items = [
        data.get('cliente'), data.get('rfc'), data.get('credito'),
        data.get('contacto'), data.get('direccion'), data.get('mail'), data.get('tel'),
        documentos.get('constanciaFiscal'),
        documentos.get('actaConstitutiva'),
        documentos.get('identificacion'),
        documentos.get('comprobanteDomicilio'),
        cobro1.get('nombre') and cobro1.get('correo'),
    ]
    completos = sum(1 for item in items if _filled(item))
    return round(completos / len(items) * 100)


def record_to_form(client):
    """Backend's flattened client back into the nested form shape"""
    form = {field: client.get(field) if client.get(field) is not None else '' for field in BASIC_FIELDS}
    form['credito'] = client.get('credito') or 0
    form['documentos'] = {key: client.get(column) or '' for key, column in DOCUMENTS.items()}
    for n in (1, 2):
        form[f'contactoCobro{n}'] = {
            'nombre': client.get(f'contacto_cobro{n}_nombre') or '',
            'correo': client.get(f'contacto_cobro{n}_correo') or '',
        }
    return form


def form_from_fields(fields, files=None):
    """Nested client data from the flat HTML form

    Uploaded documents are recorded by file name; without a new upload the
    previous name sent in doc_<key> is kept.
    """
    files = files or {}
    data = {field: fields.get(field, '') for field in BASIC_FIELDS}
    documentos = {}
    for key in DOCUMENTS:
        upload = files.get(f'archivo_{key}')
        documentos[key] = upload.filename if upload and upload.filename else fields.get(f'doc_{key}', '')
    data['documentos'] = documentos
    for n in (1, 2):
        data[f'contactoCobro{n}'] = {
            'nombre': fields.get(f'cobro{n}_nombre', ''),
            'correo': fields.get(f'cobro{n}_correo', ''),
        }
    return data


def completion_of(client):
    return as_number(client.get('porcentaje_completado'))


@register_component('directorio')
class DirectorioService:
    """Service for the client directory page"""

    SORTABLE = ('id_cliente', 'cliente', 'rfc', 'credito', 'contacto', 'mail', 'tel', 'porcentaje_completado')

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('directorio')

    def list_clients(self):
        return get_backend().list(self.resource['path'])

    @staticmethod
    def read_filters(args):
        return {
            'nombre': args.get('nombre', ''),
            'rfc': args.get('rfc', ''),
            'completado': args.get('completado', 'all') or 'all',
        }

    @staticmethod
    def filter_clients(clients, filters):
        completado = filters.get('completado', 'all')
        result = []
        for client in clients:
            if not contains(client.get('cliente'), filters.get('nombre')):
                continue
            if not contains(client.get('rfc'), filters.get('rfc')):
                continue
            if completado == 'completo' and completion_of(client) != 100:
                continue
            if completado == 'incompleto' and completion_of(client) >= 100:
                continue
            result.append(client)
        return result

    @staticmethod
    def compute_stats(clients):
        porcentajes = [completion_of(c) for c in clients]
        promedio = sum(porcentajes) / len(porcentajes) if porcentajes else 0
        return {
            'clientesCompletos': sum(1 for p in porcentajes if p == 100),
            'clientesParciales': sum(1 for p in porcentajes if 50 <= p < 100),
            'clientesIncompletos': sum(1 for p in porcentajes if p < 50),
            'promedioCompletado': round(promedio, 1)
        }

    @staticmethod
    def welcome_summary(clients):
        stats = DirectorioService.compute_stats(clients)
        return {
            'total': len(clients),
            'completos': stats['clientesCompletos'],
            'parciales': stats['clientesParciales']
        }

    def save_client(self, data, client_id=None):
        """Validate and save a client; returns (form, porcentajeCompletado)"""
        form = ClientForm(**data)
        payload = form.model_dump()
        porcentaje = completion_percentage(payload)
        payload['porcentajeCompletado'] = porcentaje
        backend = get_backend()
        if client_id:
            logger.info(f'Updating client {client_id} ({porcentaje}% complete)')
            backend.update(self.resource['path'], client_id, payload)
        else:
            logger.info(f'Creating client {form.cliente} ({porcentaje}% complete)')
            backend.create(self.resource['path'], payload)
        return form, porcentaje

    def delete_client(self, client_id):
        logger.info(f'Deleting client {client_id}')
        return get_backend().delete(self.resource['path'], client_id)
