"""
Cancelación de Guías Component
Waybill cancellation requests and their status workflow
"""
from .routes import cancelacion_guias_bp, init_cancelacion_guias
from .service import CancelacionGuiasService

__all__ = ['cancelacion_guias_bp', 'init_cancelacion_guias', 'CancelacionGuiasService']
