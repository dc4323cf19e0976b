"""
Propuestas Routes
"""
import logging
from datetime import date

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from boxito.core import BackendError
from boxito.core.mascot import pick
from boxito.core.pages import flash_validation_error, json_backend_error, json_validation_error, send_workbook
from boxito.core.spreadsheets import export_filename
from boxito.core.tables import TableQuery
from .service import PropuestasService, form_from_fields

logger = logging.getLogger(__name__)

propuestas_bp = Blueprint('propuestas', __name__, template_folder='templates')

service = PropuestasService()

PAGE = 'propuestas'


@propuestas_bp.route('/propuestas')
def index():
    """Proposals page"""
    try:
        proposals = service.list_proposals()
    except BackendError as e:
        logger.error(f'Could not load proposals: {e.message}')
        flash(f'Error al cargar propuestas: {e.message}', 'error')
        proposals = []

    filters = service.read_filters(request.args)
    filtered = service.filter_proposals(proposals, filters)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)

    editing = None
    edit_id = request.args.get('editar')
    if edit_id:
        editing = next((p for p in proposals if str(p.get('id')) == edit_id), None)

    return render_template(
        'propuestas.html',
        filters=filters,
        query=query,
        table=query.apply(filtered),
        stats=service.compute_stats(filtered),
        years=service.available_years(proposals),
        current_year=str(date.today().year),
        editing=editing,
        tip=pick(PAGE, 'consejos')
    )


@propuestas_bp.route('/propuestas/guardar', methods=['POST'])
@propuestas_bp.route('/propuestas/<proposal_id>/guardar', methods=['POST'])
def save(proposal_id=None):
    try:
        service.save_proposal(form_from_fields(request.form, request.files), proposal_id)
    except ValidationError as e:
        flash_validation_error(e)
    except BackendError as e:
        logger.error(f'Could not save proposal: {e.message}')
        flash(f'Error al guardar propuesta: {e.message}', 'error')
    else:
        flash(pick(PAGE, 'registro'), 'success')
    return redirect(url_for('propuestas.index'))


@propuestas_bp.route('/propuestas/<proposal_id>/eliminar', methods=['POST'])
def delete(proposal_id):
    try:
        service.delete_proposal(proposal_id)
    except BackendError as e:
        logger.error(f'Could not delete proposal {proposal_id}: {e.message}')
        flash(f'Error al eliminar propuesta: {e.message}', 'error')
    else:
        flash('Propuesta eliminada correctamente', 'success')
    return redirect(url_for('propuestas.index'))


@propuestas_bp.route('/propuestas/exportar')
def export():
    try:
        proposals = service.filter_proposals(service.list_proposals(), service.read_filters(request.args))
    except BackendError as e:
        logger.error(f'Could not export proposals: {e.message}')
        flash(f'Error al exportar: {e.message}', 'error')
        return redirect(url_for('propuestas.index'))
    if not proposals:
        flash('No hay propuestas para exportar en los filtros actuales', 'warning')
        return redirect(url_for('propuestas.index', **request.args))
    return send_workbook(service.export_workbook(proposals), export_filename('Propuestas'))


# JSON API

@propuestas_bp.route('/api/propuestas')
def api_list():
    try:
        proposals = service.list_proposals()
    except BackendError as e:
        return json_backend_error(e)
    filters = service.read_filters(request.args)
    filtered = service.filter_proposals(proposals, filters)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)
    return jsonify({
        'filters': filters,
        'years': service.available_years(proposals),
        'stats': service.compute_stats(filtered),
        'table': query.apply(filtered).to_dict()
    })


@propuestas_bp.route('/api/propuestas', methods=['POST'])
@propuestas_bp.route('/api/propuestas/<proposal_id>', methods=['PUT'])
def api_save(proposal_id=None):
    try:
        saved = service.save_proposal(request.get_json(silent=True) or {}, proposal_id)
    except ValidationError as e:
        return json_validation_error(e)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify(saved), (200 if proposal_id else 201)


@propuestas_bp.route('/api/propuestas/<proposal_id>', methods=['DELETE'])
def api_delete(proposal_id):
    try:
        service.delete_proposal(proposal_id)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify({'success': True})


def init_propuestas(app):
    """Initialize proposals component with Flask app"""
    app.register_blueprint(propuestas_bp)
    return propuestas_bp
