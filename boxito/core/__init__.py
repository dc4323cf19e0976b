"""
Core services for Boxito components
"""
from flask import current_app

from boxito.config.settings import BoxitoConfig
from .backend_client import BackendClient, BackendError, BackendUnavailable
from .bulk_upload import PendingUploads

# Global state - shared across all components
pending_uploads = PendingUploads(ttl=BoxitoConfig.PENDING_UPLOAD_TTL)


def init_core(app):
    """Attach the backend client to the app unless one is already set"""
    if 'boxito_backend' not in app.extensions:
        app.extensions['boxito_backend'] = BackendClient(
            app.config['BACKEND_URL'],
            token=app.config.get('BACKEND_API_TOKEN') or None,
            timeout=app.config.get('BACKEND_TIMEOUT', 10)
        )
    pending_uploads.ttl = app.config.get('PENDING_UPLOAD_TTL', pending_uploads.ttl)
    return app.extensions['boxito_backend']


def get_backend():
    """Backend client of the current app"""
    return current_app.extensions['boxito_backend']


__all__ = [
    'BackendClient',
    'BackendError',
    'BackendUnavailable',
    'PendingUploads',
    'pending_uploads',
    'init_core',
    'get_backend'
]
