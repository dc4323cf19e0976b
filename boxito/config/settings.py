"""
Boxito configuration settings
"""
import os
from datetime import timedelta


class BoxitoConfig:
    """Centralized configuration for the back-office"""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'boxito-secret-key-change-in-production')
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)

    # Uploads (10MB)
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024
    ALLOWED_SPREADSHEET_EXTENSIONS = ('.xlsx', '.xlsm', '.xls', '.csv')
    PENDING_UPLOAD_TTL = timedelta(minutes=30)

    # Rate limiting
    RATELIMIT_STORAGE_URI = "memory://"
    RATELIMIT_DEFAULT = "100 per minute"

    # REST backend
    BACKEND_URL = os.environ.get('BOXITO_BACKEND_URL', 'http://localhost:3001')
    BACKEND_TIMEOUT = float(os.environ.get('BOXITO_BACKEND_TIMEOUT', 10))
    BACKEND_API_TOKEN = os.environ.get('BOXITO_API_TOKEN', '')

    # Server
    HOST = os.environ.get('BOXITO_HOST', '0.0.0.0')
    PORT = int(os.environ.get('BOXITO_PORT', 8080))

    # Tables
    TABLE_PAGE_SIZES = (10, 25, 50, 100)
    TABLE_DEFAULT_PAGE_SIZE = 10
    TABLE_PAGE_WINDOW = 5

    # Backend resources used by each page
    RESOURCES = {
        'dashboard': {
            'name': 'Dashboard',
            'stats_path': '/api/dashboard/stats',
            'overview_path': '/api/dashboard/overview',
        },
        'directorio': {
            'name': 'Directorio de Clientes',
            'path': '/api/clients',
        },
        'comprobantes': {
            'name': 'Comprobantes',
            'path': '/api/receipts',
            'bulk_path': '/api/receipts/bulk',
            'bulk_key': 'receipts',
        },
        'propuestas': {
            'name': 'Propuestas Comerciales',
            'path': '/api/proposals',
        },
        'cancelacion_guias': {
            'name': 'Cancelación de Guías',
            'path': '/api/guide-cancellations',
        },
        'facturacion': {
            'name': 'Facturación',
            'path': '/api/invoices',
            'bulk_path': '/api/invoices/bulk-upload',
            'bulk_key': 'invoices',
        },
        'estado_cuenta': {
            'name': 'Estado de Cuenta',
            'path': '/api/invoices',
        },
        'configuracion_notificaciones': {
            'name': 'Configuración de Notificaciones',
            'settings_path': '/api/notification-automation/settings',
            'check_path': '/api/notification-automation/check-invoices',
        },
    }

    # Catalogs
    RECEIPT_STATUSES = ('APROBADO', 'PENDIENTE', 'RECHAZADO')
    RECEIPT_TYPES = ('ABONO', 'CARGO', 'TRANSFERENCIA')
    GUIDE_STATUSES = ('Pendiente', 'En Proceso', 'Cancelada', 'Rechazada')
    INVOICE_STATUSES = ('Pendiente', 'Pagada')

    MONTH_NAMES = (
        'Enero', 'Febrero', 'Marzo', 'Abril', 'Mayo', 'Junio',
        'Julio', 'Agosto', 'Septiembre', 'Octubre', 'Noviembre', 'Diciembre'
    )

    # Defaults shown before the backend answers
    NOTIFICATION_DEFAULTS = {
        'email_enabled': True,
        'sms_enabled': False,
        'factoring_email': 'facturacion@shopeenvios.com',
        'factoring_phone': '+52XXXXXXXXXX',
        'overdue_days_alert': 1,
        'due_soon_days_alert': 3,
    }

    @classmethod
    def get_resource(cls, page):
        """Get backend resource configuration for a page"""
        return cls.RESOURCES.get(page, {})

    @classmethod
    def month_choices(cls):
        """(value, label) pairs for month selectors"""
        return [(str(i), name) for i, name in enumerate(cls.MONTH_NAMES, start=1)]


class TestingConfig(BoxitoConfig):
    """Configuration used by the test suite"""
    TESTING = True
    SECRET_KEY = 'testing'
    BACKEND_URL = 'http://backend.test'
    BACKEND_API_TOKEN = 'test-token'
    RATELIMIT_ENABLED = False
