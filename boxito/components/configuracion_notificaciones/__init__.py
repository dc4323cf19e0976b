"""
Configuración de Notificaciones Component
Invoice alert preferences and manual alert check
"""
from .routes import configuracion_notificaciones_bp, init_configuracion_notificaciones
from .service import ConfiguracionNotificacionesService, summarize_check

__all__ = [
    'configuracion_notificaciones_bp',
    'init_configuracion_notificaciones',
    'ConfiguracionNotificacionesService',
    'summarize_check'
]
