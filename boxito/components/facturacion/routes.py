"""
Facturación Routes
HTML page, form posts, bulk upload and JSON API for invoices
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
from .service import FacturacionService

logger = logging.getLogger(__name__)

# Create blueprint for invoices
facturacion_bp = Blueprint('facturacion', __name__, template_folder='templates')

# Initialize service
service = FacturacionService()

PAGE = 'facturacion'


def _filtered_invoices():
    filters = service.read_filters(request.args)
    return filters, service.filter_invoices(service.list_invoices(), filters)


@facturacion_bp.route('/facturacion')
def index():
    """Invoices page"""
    try:
        filters, invoices = _filtered_invoices()
    except BackendError as e:
        logger.error(f'Could not load invoices: {e.message}')
        flash(f'Error al cargar facturas: {e.message}', 'error')
        filters, invoices = service.read_filters(request.args), []

    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)
    editing = None
    edit_id = request.args.get('editar')
    if edit_id:
        editing = next((f for f in invoices if str(f.get('id')) == edit_id), None)

    return render_template(
        'facturacion.html',
        filters=filters,
        query=query,
        table=query.apply(invoices),
        stats=service.compute_stats(invoices),
        editing=editing,
        months=BoxitoConfig.month_choices(),
        statuses=BoxitoConfig.INVOICE_STATUSES,
        tip=pick(PAGE, 'consejos')
    )


@facturacion_bp.route('/facturacion/guardar', methods=['POST'])
@facturacion_bp.route('/facturacion/<invoice_id>/guardar', methods=['POST'])
def save(invoice_id=None):
    try:
        form = service.save_invoice(request.form.to_dict(), invoice_id)
    except ValidationError as e:
        flash_validation_error(e)
    except BackendError as e:
        logger.error(f'Could not save invoice: {e.message}')
        flash(f'Error al guardar factura: {e.message}', 'error')
    else:
        flash(pick(PAGE, 'pagada' if form.estatus == 'Pagada' else 'registro'), 'success')
    return redirect(url_for('facturacion.index'))


@facturacion_bp.route('/facturacion/<invoice_id>/eliminar', methods=['POST'])
def delete(invoice_id):
    try:
        service.delete_invoice(invoice_id)
    except BackendError as e:
        logger.error(f'Could not delete invoice {invoice_id}: {e.message}')
        flash(f'Error al eliminar factura: {e.message}', 'error')
    else:
        flash('Factura eliminada exitosamente', 'success')
    return redirect(url_for('facturacion.index'))


@facturacion_bp.route('/facturacion/layout')
def download_layout():
    return send_workbook(service.layout_workbook(), 'Boxito_Layout_Facturacion.xlsx')


@facturacion_bp.route('/facturacion/exportar')
def export():
    try:
        _, invoices = _filtered_invoices()
    except BackendError as e:
        logger.error(f'Could not export invoices: {e.message}')
        flash(f'Error al exportar: {e.message}', 'error')
        return redirect(url_for('facturacion.index'))
    if not invoices:
        flash('No hay facturas para exportar en los filtros actuales', 'warning')
        return redirect(url_for('facturacion.index', **request.args))
    return send_workbook(service.export_workbook(invoices), export_filename('Facturas'))


@facturacion_bp.route('/facturacion/carga-masiva', methods=['POST'])
def upload():
    upload_file = uploaded_spreadsheet()
    if upload_file is None:
        return redirect(url_for('facturacion.index'))
    return bulk_preview(PAGE, service.validate_upload(upload_file))


@facturacion_bp.route('/facturacion/carga-masiva/confirmar', methods=['POST'])
def confirm_upload():
    return confirm_bulk(PAGE, service)


@facturacion_bp.route('/facturacion/carga-masiva/cancelar', methods=['POST'])
def cancel_upload():
    return cancel_bulk(PAGE)


# JSON API

@facturacion_bp.route('/api/facturacion')
def api_list():
    try:
        filters, invoices = _filtered_invoices()
    except BackendError as e:
        return json_backend_error(e)
    query = TableQuery.from_args(request.args, sortable=service.SORTABLE)
    return jsonify({
        'filters': filters,
        'stats': service.compute_stats(invoices),
        'table': query.apply(invoices).to_dict()
    })


@facturacion_bp.route('/api/facturacion', methods=['POST'])
@facturacion_bp.route('/api/facturacion/<invoice_id>', methods=['PUT'])
def api_save(invoice_id=None):
    try:
        form = service.save_invoice(request.get_json(silent=True) or {}, invoice_id)
    except ValidationError as e:
        return json_validation_error(e)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify(form.model_dump()), (200 if invoice_id else 201)


@facturacion_bp.route('/api/facturacion/<invoice_id>', methods=['DELETE'])
def api_delete(invoice_id):
    try:
        service.delete_invoice(invoice_id)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify({'success': True})


@facturacion_bp.route('/api/facturacion/validar', methods=['POST'])
def api_validate_upload():
    return api_validate_bulk(PAGE, service)


@facturacion_bp.route('/api/facturacion/confirmar', methods=['POST'])
def api_confirm_upload():
    return api_confirm_bulk(PAGE, service)


def init_facturacion(app):
    """Initialize invoices component with Flask app"""
    app.register_blueprint(facturacion_bp)
    return facturacion_bp
