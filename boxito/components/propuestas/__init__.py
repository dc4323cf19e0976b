"""
Propuestas Component
Commercial proposals per client and year
"""
from .routes import propuestas_bp, init_propuestas
from .service import PropuestasService

__all__ = ['propuestas_bp', 'init_propuestas', 'PropuestasService']
