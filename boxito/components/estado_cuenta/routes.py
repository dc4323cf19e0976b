"""
Estado de Cuenta Routes
"""
import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for

from boxito.config.settings import BoxitoConfig
from boxito.core import BackendError
from boxito.core.pages import json_backend_error, send_workbook
from boxito.core.spreadsheets import export_filename
from boxito.core.tables import TableQuery
from .service import EstadoCuentaService

logger = logging.getLogger(__name__)

estado_cuenta_bp = Blueprint('estado_cuenta', __name__, template_folder='templates')

service = EstadoCuentaService()


def _statement():
    filters = service.read_filters(request.args)
    invoices = service.filter_invoices(service.list_invoices(), filters)
    return filters, service.statement_rows(invoices)


@estado_cuenta_bp.route('/estado-cuenta')
def index():
    """Account statement page"""
    try:
        filters, invoices = _statement()
    except BackendError as e:
        logger.error(f'Could not load invoices for statement: {e.message}')
        flash(f'Error al cargar el estado de cuenta: {e.message}', 'error')
        filters, invoices = service.read_filters(request.args), []

    query = TableQuery.from_args(request.args, sortable=service.SORTABLE + ('pagado',))
    return render_template(
        'estado_cuenta.html',
        filters=filters,
        query=query,
        table=query.apply(invoices),
        summary=service.summarize(invoices),
        years=service.year_choices(),
        months=BoxitoConfig.month_choices()
    )


@estado_cuenta_bp.route('/estado-cuenta/exportar')
def export():
    try:
        _, invoices = _statement()
    except BackendError as e:
        logger.error(f'Could not export account statement: {e.message}')
        flash(f'Error al exportar: {e.message}', 'error')
        return redirect(url_for('estado_cuenta.index'))
    return send_workbook(service.export_workbook(invoices), export_filename('Estado_de_Cuenta'))


@estado_cuenta_bp.route('/api/estado-cuenta')
def api_statement():
    try:
        filters, invoices = _statement()
    except BackendError as e:
        return json_backend_error(e)
    return jsonify({
        'filters': filters,
        'summary': service.summarize(invoices),
        'invoices': invoices
    })


def init_estado_cuenta(app):
    """Initialize account statement component with Flask app"""
    app.register_blueprint(estado_cuenta_bp)
    return estado_cuenta_bp
