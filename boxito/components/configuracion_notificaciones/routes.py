"""
Configuración de Notificaciones Routes
"""
import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from boxito.config.settings import BoxitoConfig
from boxito.core import BackendError
from boxito.core.pages import flash_validation_error, json_backend_error, json_validation_error
from .service import ConfiguracionNotificacionesService, form_from_fields

logger = logging.getLogger(__name__)

configuracion_notificaciones_bp = Blueprint(
    'configuracion_notificaciones',
    __name__,
    template_folder='templates'
)

service = ConfiguracionNotificacionesService()


@configuracion_notificaciones_bp.route('/configuracion-notificaciones')
def index():
    """Notification settings page"""
    try:
        settings = service.get_settings()
    except BackendError as e:
        logger.error(f'Could not load notification settings: {e.message}')
        flash(f'Error al cargar configuración: {e.message}', 'error')
        settings = dict(BoxitoConfig.NOTIFICATION_DEFAULTS)
    return render_template('configuracion_notificaciones.html', settings=settings)


@configuracion_notificaciones_bp.route('/configuracion-notificaciones/guardar', methods=['POST'])
def save():
    try:
        service.save_settings(form_from_fields(request.form))
    except ValidationError as e:
        flash_validation_error(e)
    except BackendError as e:
        logger.error(f'Could not save notification settings: {e.message}')
        flash(f'Error al guardar configuración: {e.message}', 'error')
    else:
        flash('📦 Configuración de notificaciones actualizada exitosamente', 'success')
    return redirect(url_for('configuracion_notificaciones.index'))


@configuracion_notificaciones_bp.route('/configuracion-notificaciones/probar', methods=['POST'])
def test_alerts():
    try:
        message, category = service.check_alerts()
    except BackendError as e:
        logger.error(f'Alert check failed: {e.message}')
        flash(f'Error al ejecutar prueba de alertas: {e.message}', 'error')
    else:
        flash(message, category)
    return redirect(url_for('configuracion_notificaciones.index'))


# JSON API

@configuracion_notificaciones_bp.route('/api/configuracion-notificaciones')
def api_get():
    try:
        return jsonify(service.get_settings())
    except BackendError as e:
        return json_backend_error(e)


@configuracion_notificaciones_bp.route('/api/configuracion-notificaciones', methods=['PUT'])
def api_save():
    try:
        form = service.save_settings(request.get_json(silent=True) or {})
    except ValidationError as e:
        return json_validation_error(e)
    except BackendError as e:
        return json_backend_error(e)
    return jsonify(form.model_dump())


@configuracion_notificaciones_bp.route('/api/configuracion-notificaciones/probar', methods=['POST'])
def api_test_alerts():
    try:
        message, category = service.check_alerts()
    except BackendError as e:
        return json_backend_error(e)
    return jsonify({'message': message, 'category': category})


def init_configuracion_notificaciones(app):
    """Initialize notification settings component with Flask app"""
    app.register_blueprint(configuracion_notificaciones_bp)
    return configuracion_notificaciones_bp
