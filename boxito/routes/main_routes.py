"""
Main page routes for Boxito
"""
from flask import Blueprint, current_app, jsonify, redirect, url_for

from boxito import __version__
from boxito.components import registry
from boxito.core import pending_uploads

# Create main blueprint
main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def home():
    """Landing page is the dashboard"""
    return redirect(url_for('dashboard.index'))


@main_bp.route('/health')
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Boxito',
        'version': __version__,
        'backend': current_app.config['BACKEND_URL'],
        'components': sorted(registry.get_all_components()),
        'pending_uploads': len(pending_uploads)
    })
