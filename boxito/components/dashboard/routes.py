"""
Dashboard Routes
"""
import logging
from datetime import datetime

from flask import Blueprint, flash, jsonify, render_template

from boxito.core import BackendError
from boxito.core.mascot import pick
from boxito.core.pages import json_backend_error
from .service import DashboardService

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__, template_folder='templates')

service = DashboardService()


@dashboard_bp.route('/dashboard')
def index():
    """Main dashboard page"""
    try:
        data = service.load()
    except BackendError as e:
        logger.error(f'Could not load dashboard stats: {e.message}')
        flash(f'Error al cargar estadísticas del dashboard: {e.message}', 'error')
        data = {'stats': service.normalize_stats({}), 'overview': None}

    return render_template(
        'dashboard.html',
        current_time=datetime.now(),
        motivation=pick('dashboard', 'motivacion'),
        **data
    )


@dashboard_bp.route('/api/dashboard')
def api_dashboard():
    try:
        return jsonify(service.load())
    except BackendError as e:
        return json_backend_error(e)


def init_dashboard(app):
    """Initialize dashboard component with Flask app"""
    app.register_blueprint(dashboard_bp)
    return dashboard_bp
