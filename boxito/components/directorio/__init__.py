"""
Directorio Component
Client directory with file completion tracking
"""
from .routes import directorio_bp, init_directorio
from .service import DirectorioService, completion_percentage

__all__ = ['directorio_bp', 'init_directorio', 'DirectorioService', 'completion_percentage']
