"""
Comprobantes Routes
HTML page, form posts, bulk upload and JSON API for receipts
"""
import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from boxito.config.settings import BoxitoConfig
from boxito.core import BackendError
from boxito.core.mascot import pick
from boxito.core.pages import (
    api_confirm_bulk, api_validate_bulk, bulk_preview, cancel_bulk, confirm_bulk,
    flash_validation_error, json_backend_error, json_validation_error, send_workbook,
    uploaded_spreadsheet
)
from boxito.core.spreadsheets import export_filename
from boxito.core.tables import TableQuery
from .service import ComprobantesService

logger = logging.getLogger(__name__)

# Create blueprint for receipts
comprobantes_bp = Blueprint('comprobantes', __name__, template_folder='templates')

# Initialize service
service = ComprobantesService()

PAGE = 'comprobantes'


def _filtered_receipts():
    filters = service.read_filters(request.args)
    return filters, service.filter_receipts(service.list_receipts(), filters)


@comprobantes_bp.route('/comprobantes')
def index():
    """Receipts page"""
    try:
        filters, receipts = _filtered_receipts()
    except BackendError as e:
        logger.error(f'Could not load receipts: {e.message}')
        flash(f'Error al cargar comprobantes: {e.message}', 'error')
        filters, receipts = service.read_filters(request.args), []

    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)
    editing = None
    edit_id = request.args.get('editar')
    if edit_id:
        editing = next((r for r in receipts if str(r.get('id')) == edit_id), None)

    return render_template(
        'comprobantes.html',
        filters=filters,
        query=query,
        table=query.apply(receipts),
        stats=service.compute_stats(receipts),
        editing=editing,
        months=BoxitoConfig.month_choices(),
        statuses=BoxitoConfig.RECEIPT_STATUSES,
        types=BoxitoConfig.RECEIPT_TYPES,
        tip=pick(PAGE, 'consejos')
    )


@comprobantes_bp.route('/comprobantes/guardar', methods=['POST'])
@comprobantes_bp.route('/comprobantes/<receipt_id>/guardar', methods=['POST'])
def save(receipt_id=None):
    try:
        service.save_receipt(request.form.to_dict(), receipt_id)
    except ValidationError as e:
        flash_validation_error(e)
    except BackendError as e:
        logger.error(f'Could not save receipt: {e.message}')
        flash(f'Error al guardar comprobante: {e.message}', 'error')
    else:
        flash(pick(PAGE, 'registro'), 'success')
    return redirect(url_for('comprobantes.index'))


@comprobantes_bp.route('/comprobantes/<receipt_id>/eliminar', methods=['POST'])
def delete(receipt_id):
    try:
        service.delete_receipt(receipt_id)
    except BackendError as e:
        logger.error(f'Could not delete receipt {receipt_id}: {e.message}')
        flash(f'Error al eliminar comprobante: {e.message}', 'error')
    else:
        flash('Comprobante eliminado correctamente', 'success')
    return redirect(url_for('comprobantes.index'))


@comprobantes_bp.route('/comprobantes/layout')
def download_layout():
    return send_workbook(service.layout_workbook(), 'Boxito_Layout_Comprobantes.xlsx')


@comprobantes_bp.route('/comprobantes/exportar')
def export():
    try:
        _, receipts = _filtered_receipts()
    except BackendError as e:
        logger.error(f'Could not export receipts: {e.message}')
        flash(f'Error al exportar: {e.message}', 'error')
        return redirect(url_for('comprobantes.index'))
    if not receipts:
        flash('No hay comprobantes para exportar en los filtros actuales', 'warning')
        return redirect(url_for('comprobantes.index', **request.args))
    return send_workbook(service.export_workbook(receipts), export_filename('Comprobantes'))


@comprobantes_bp.route('/comprobantes/carga-masiva', methods=['POST'])
def upload():
    upload_file = uploaded_spreadsheet()
    if upload_file is None:
        return redirect(url_for('comprobantes.index'))
    return bulk_preview(PAGE, service.validate_upload(upload_file))


@comprobantes_bp.route('/comprobantes/carga-masiva/confirmar', methods=['POST'])
def confirm_upload():
    return confirm_bulk(PAGE, service)


@comprobantes_bp.route('/comprobantes/carga-masiva/cancelar', methods=['POST'])
def cancel_upload():
    return cancel_bulk(PAGE)


# JSON API

@comprobantes_bp.route('/api/comprobantes')
def api_list():
    try:
        filters, receipts = _filtered_receipts()
    except BackendError as e:
        return json_backend_error(e)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)
    return jsonify({
        'filters': filters,
        'stats': service.compute_stats(receipts),
        'table': query.apply(receipts).to_dict()
    })


@comprobantes_bp.route('/api/comprobantes', methods=['POST'])
@comprobantes_bp.route('/api/comprobantes/<receipt_id>', methods=['PUT'])
def api_save(receipt_id=None):
    try:
        saved = service.save_receipt(request.get_json(silent=True) or {}, receipt_id)
    except ValidationError as e:
        return json_validation_error(e)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify(saved), (200 if receipt_id else 201)


@comprobantes_bp.route('/api/comprobantes/<receipt_id>', methods=['DELETE'])
def api_delete(receipt_id):
    try:
        service.delete_receipt(receipt_id)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify({'success': True})


@comprobantes_bp.route('/api/comprobantes/validar', methods=['POST'])
def api_validate_upload():
    return api_validate_bulk(PAGE, service)


@comprobantes_bp.route('/api/comprobantes/confirmar', methods=['POST'])
def api_confirm_upload():
    return api_confirm_bulk(PAGE, service)


def init_comprobantes(app):
    """Initialize receipts component with Flask app"""
    app.register_blueprint(comprobantes_bp)
    return comprobantes_bp
