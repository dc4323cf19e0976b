"""
Boxito back-office
Flask application built from one component per page
"""
import logging

from flask import Flask, flash, redirect, request, url_for
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import RequestEntityTooLarge

from boxito.components import registry
from boxito.config.settings import BoxitoConfig
from boxito.core import init_core
from boxito.core.pages import query_url
from boxito.routes.main_routes import main_bp

from boxito.components.dashboard import init_dashboard
from boxito.components.directorio import init_directorio
from boxito.components.comprobantes import init_comprobantes
from boxito.components.propuestas import init_propuestas
from boxito.components.cancelacion_guias import init_cancelacion_guias
from boxito.components.facturacion import init_facturacion
from boxito.components.estado_cuenta import init_estado_cuenta
from boxito.components.configuracion_notificaciones import init_configuracion_notificaciones

logger = logging.getLogger(__name__)


class BoxitoApp:
    """Main application class"""

    def __init__(self, config=BoxitoConfig):
        self.app = None
        self.config = config
        self.limiter = None

    def create_app(self, backend=None):
        """Create and configure Flask application

        `backend` replaces the REST client, which tests use to inject a fake.
        """
        self.app = Flask(__name__)

        # Load configuration
        self.app.config.from_object(self.config)

        # Initialize extensions
        self.limiter = Limiter(
            key_func=get_remote_address,
            app=self.app,
            default_limits=[self.app.config['RATELIMIT_DEFAULT']],
            storage_uri=self.app.config['RATELIMIT_STORAGE_URI']
        )

        if backend is not None:
            self.app.extensions['boxito_backend'] = backend
        init_core(self.app)

        # Initialize components
        init_dashboard(self.app)
        init_directorio(self.app)
        init_comprobantes(self.app)
        init_propuestas(self.app)
        init_cancelacion_guias(self.app)
        init_facturacion(self.app)
        init_estado_cuenta(self.app)
        init_configuracion_notificaciones(self.app)

        # Register main blueprint
        self.app.register_blueprint(main_bp)

        self.app.add_template_global(query_url)

        @self.app.context_processor
        def inject_navigation():
            return {'navigation': registry.navigation()}

        @self.app.errorhandler(RequestEntityTooLarge)
        def upload_too_large(e):
            limit_mb = self.app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
            logger.warning(f'Rejected upload larger than {limit_mb}MB on {request.path}')
            if request.path.startswith('/api/'):
                return {'error': f'El archivo excede el límite de {limit_mb}MB'}, 413
            flash(f'El archivo excede el límite de {limit_mb}MB', 'error')
            return redirect(request.referrer or url_for('main.home'))

        logger.info(f'Boxito ready with components: {", ".join(registry.get_all_components())}')
        return self.app

    def run(self):
        """Start the application"""
        host = self.app.config['HOST']
        port = self.app.config['PORT']

        logger.info("Boxito back-office")
        logger.info(f"Starting on: http://{host}:{port}")
        logger.info(f"REST backend: {self.app.config['BACKEND_URL']}")

        self.app.run(host=host, port=port, debug=False)


def main():
    """Main entry point"""
    logging.basicConfig(level=logging.INFO)
    boxito = BoxitoApp()
    boxito.create_app()
    boxito.run()


if __name__ == '__main__':
    main()
