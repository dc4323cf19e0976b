"""
Directorio Routes
"""
import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from boxito.core import BackendError
from boxito.core.mascot import completion_badge, pick
from boxito.core.pages import flash_validation_error, json_backend_error, json_validation_error
from boxito.core.tables import TableQuery
from .service import DOCUMENTS, DirectorioService, form_from_fields, record_to_form

logger = logging.getLogger(__name__)

directorio_bp = Blueprint('directorio', __name__, template_folder='templates')

service = DirectorioService()

PAGE = 'directorio'


def _flash_completion(cliente, porcentaje, updated):
    accion = 'actualizado' if updated else 'registrado'
    flash(f'{pick(PAGE, "registro")} Cliente {cliente} {accion} con {porcentaje}% de información', 'success')
    if porcentaje == 100:
        flash(f'{pick(PAGE, "completado")} ¡Cliente completamente documentado!', 'success')
    elif porcentaje >= 80:
        flash('¡Casi perfecto! Solo faltan algunos detalles para completar al 100%', 'info')
    else:
        flash('¡Buen inicio! Cada campo completado mejora la gestión del cliente', 'info')


@directorio_bp.route('/directorio')
def index():
    """Client directory page"""
    try:
        clients = service.list_clients()
    except BackendError as e:
        logger.error(f'Could not load clients: {e.message}')
        flash(f'Error al cargar clientes: {e.message}', 'error')
        clients = []

    filters = service.read_filters(request.args)
    filtered = service.filter_clients(clients, filters)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)

    editing = None
    edit_id = request.args.get('editar')
    if edit_id:
        record = next((c for c in clients if str(c.get('id')) == edit_id), None)
        if record:
            editing = dict(record_to_form(record), id=record.get('id'))

    return render_template(
        'directorio.html',
        filters=filters,
        query=query,
        table=query.apply(filtered),
        stats=service.compute_stats(filtered),
        welcome=service.welcome_summary(clients),
        editing=editing,
        documents=DOCUMENTS,
        badge=completion_badge,
        tip=pick(PAGE, 'consejos')
    )


@directorio_bp.route('/directorio/guardar', methods=['POST'])
@directorio_bp.route('/directorio/<client_id>/guardar', methods=['POST'])
def save(client_id=None):
    data = form_from_fields(request.form, request.files)
    try:
        form, porcentaje = service.save_client(data, client_id)
    except ValidationError as e:
        flash_validation_error(e)
    except BackendError as e:
        logger.error(f'Could not save client: {e.message}')
        flash(f'Algo no salió como esperaba: {e.message}', 'error')
    else:
        _flash_completion(form.cliente, porcentaje, client_id is not None)
    return redirect(url_for('directorio.index'))


@directorio_bp.route('/directorio/<client_id>/eliminar', methods=['POST'])
def delete(client_id):
    try:
        service.delete_client(client_id)
    except BackendError as e:
        logger.error(f'Could not delete client {client_id}: {e.message}')
        flash(f'Error al eliminar cliente: {e.message}', 'error')
    else:
        flash('Cliente eliminado del directorio', 'success')
    return redirect(url_for('directorio.index'))


# JSON API

@directorio_bp.route('/api/directorio')
def api_list():
    try:
        clients = service.list_clients()
    except BackendError as e:
        return json_backend_error(e)
    filters = service.read_filters(request.args)
    filtered = service.filter_clients(clients, filters)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)
    return jsonify({
        'filters': filters,
        'stats': service.compute_stats(filtered),
        'welcome': service.welcome_summary(clients),
        'table': query.apply(filtered).to_dict()
    })


@directorio_bp.route('/api/directorio', methods=['POST'])
@directorio_bp.route('/api/directorio/<client_id>', methods=['PUT'])
def api_save(client_id=None):
    try:
        form, porcentaje = service.save_client(request.get_json(silent=True) or {}, client_id)
    except ValidationError as e:
        return json_validation_error(e)
    except BackendError as e:
        return json_backend_error(e)
    data = form.model_dump()
    data['porcentajeCompletado'] = porcentaje
    return jsonify(data), (200 if client_id else 201)


@directorio_bp.route('/api/directorio/<client_id>', methods=['DELETE'])
def api_delete(client_id):
    try:
        service.delete_client(client_id)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify({'success': True})


def init_directorio(app):
    """Initialize client directory component with Flask app"""
    app.register_blueprint(directorio_bp)
    return directorio_bp
