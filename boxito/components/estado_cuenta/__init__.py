"""
Estado de Cuenta Component
Read-only invoice statement per client, year and month
"""
from .routes import estado_cuenta_bp, init_estado_cuenta
from .service import EstadoCuentaService

__all__ = ['estado_cuenta_bp', 'init_estado_cuenta', 'EstadoCuentaService']
