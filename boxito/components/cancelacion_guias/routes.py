"""
Cancelación de Guías Routes
"""
import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from boxito.config.settings import BoxitoConfig
from boxito.core import BackendError
from boxito.core.mascot import pick
from boxito.core.pages import flash_validation_error, json_backend_error, json_validation_error, send_workbook
from boxito.core.spreadsheets import export_filename
from boxito.core.tables import TableQuery
from .service import CancelacionGuiasService, form_from_fields

logger = logging.getLogger(__name__)

cancelacion_guias_bp = Blueprint('cancelacion_guias', __name__, template_folder='templates')

service = CancelacionGuiasService()

PAGE = 'cancelacion_guias'


def _flash_status(numero_guia, estatus):
    flash(f'{pick(PAGE, "estadoActualizado")} Guía {numero_guia} → {estatus}', 'success')
    if estatus == 'Cancelada':
        flash(f'{pick(PAGE, "procesada")} Cliente satisfecho con la gestión', 'success')
    elif estatus == 'En Proceso':
        flash('¡Excelente seguimiento! El cliente sabe que estamos trabajando en su solicitud', 'info')


@cancelacion_guias_bp.route('/cancelacion-guias')
def index():
    """Guide cancellations page"""
    try:
        cancellations = service.list_cancellations()
    except BackendError as e:
        logger.error(f'Could not load guide cancellations: {e.message}')
        flash(f'Error al cargar cancelaciones de guías: {e.message}', 'error')
        cancellations = []

    filters = service.read_filters(request.args)
    filtered = service.filter_cancellations(cancellations, filters)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)

    def find(record_id):
        return next((c for c in cancellations if str(c.get('id')) == record_id), None) if record_id else None

    return render_template(
        'cancelacion_guias.html',
        filters=filters,
        query=query,
        table=query.apply(filtered),
        stats=service.compute_stats(filtered),
        welcome=service.welcome_message(cancellations),
        editing=find(request.args.get('editar')),
        status_target=find(request.args.get('estatus_de')),
        defaults=service.new_request_defaults(),
        statuses=BoxitoConfig.GUIDE_STATUSES,
        tip=pick(PAGE, 'consejos')
    )


@cancelacion_guias_bp.route('/cancelacion-guias/guardar', methods=['POST'])
@cancelacion_guias_bp.route('/cancelacion-guias/<cancellation_id>/guardar', methods=['POST'])
def save(cancellation_id=None):
    try:
        service.save_cancellation(form_from_fields(request.form, request.files), cancellation_id)
    except ValidationError as e:
        flash_validation_error(e)
    except BackendError as e:
        logger.error(f'Could not save guide cancellation: {e.message}')
        flash(f'Error al guardar la solicitud: {e.message}', 'error')
    else:
        flash(pick(PAGE, 'registro'), 'success')
    return redirect(url_for('cancelacion_guias.index'))


@cancelacion_guias_bp.route('/cancelacion-guias/<cancellation_id>/estatus', methods=['POST'])
def update_status(cancellation_id):
    try:
        form = service.update_status(cancellation_id, request.form.to_dict())
    except ValidationError as e:
        flash_validation_error(e)
    except BackendError as e:
        logger.error(f'Could not update status of {cancellation_id}: {e.message}')
        flash(f'Error al actualizar estado: {e.message}', 'error')
    else:
        _flash_status(request.form.get('numero_guia', cancellation_id), form.estatus)
    return redirect(url_for('cancelacion_guias.index'))


@cancelacion_guias_bp.route('/cancelacion-guias/<cancellation_id>/eliminar', methods=['POST'])
def delete(cancellation_id):
    try:
        service.delete_cancellation(cancellation_id)
    except BackendError as e:
        logger.error(f'Could not delete guide cancellation {cancellation_id}: {e.message}')
        flash(f'Error al eliminar la solicitud: {e.message}', 'error')
    else:
        flash('Solicitud de cancelación eliminada', 'success')
    return redirect(url_for('cancelacion_guias.index'))


@cancelacion_guias_bp.route('/cancelacion-guias/exportar')
def export():
    try:
        cancellations = service.filter_cancellations(
            service.list_cancellations(), service.read_filters(request.args)
        )
    except BackendError as e:
        logger.error(f'Could not export guide cancellations: {e.message}')
        flash(f'Error al exportar: {e.message}', 'error')
        return redirect(url_for('cancelacion_guias.index'))
    if not cancellations:
        flash('No hay cancelaciones para exportar en los filtros actuales', 'warning')
        return redirect(url_for('cancelacion_guias.index', **request.args))
    return send_workbook(service.export_workbook(cancellations), export_filename('Cancelaciones_Guias'))


# JSON API

@cancelacion_guias_bp.route('/api/cancelacion-guias')
def api_list():
    try:
        cancellations = service.list_cancellations()
    except BackendError as e:
        return json_backend_error(e)
    filters = service.read_filters(request.args)
    filtered = service.filter_cancellations(cancellations, filters)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)
    return jsonify({
        'filters': filters,
        'stats': service.compute_stats(filtered),
        'table': query.apply(filtered).to_dict()
    })


@cancelacion_guias_bp.route('/api/cancelacion-guias', methods=['POST'])
@cancelacion_guias_bp.route('/api/cancelacion-guias/<cancellation_id>', methods=['PUT'])
def api_save(cancellation_id=None):
    try:
        saved = service.save_cancellation(request.get_json(silent=True) or {}, cancellation_id)
    except ValidationError as e:
        return json_validation_error(e)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify(saved), (200 if cancellation_id else 201)


@cancelacion_guias_bp.route('/api/cancelacion-guias/<cancellation_id>/estatus', methods=['PUT'])
def api_update_status(cancellation_id):
    try:
        form = service.update_status(cancellation_id, request.get_json(silent=True) or {})
    except ValidationError as e:
        return json_validation_error(e)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify(form.model_dump())


@cancelacion_guias_bp.route('/api/cancelacion-guias/<cancellation_id>', methods=['DELETE'])
def api_delete(cancellation_id):
    try:
        service.delete_cancellation(cancellation_id)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify({'success': True})


def init_cancelacion_guias(app):
    """Initialize guide cancellations component with Flask app"""
    app.register_blueprint(cancelacion_guias_bp)
    return cancelacion_guias_bp
