import io

from boxito import __version__
from boxito.boxito_app import BoxitoApp
from boxito.components import ComponentRegistry, registry
from boxito.config.settings import BoxitoConfig, TestingConfig
from boxito.core import BackendClient

PAGES = [
    'dashboard', 'directorio', 'comprobantes', 'propuestas', 'cancelacion_guias',
    'facturacion', 'estado_cuenta', 'configuracion_notificaciones'
]


def test_every_page_is_registered():
    assert sorted(registry.get_all_components()) == sorted(PAGES)


def test_navigation_follows_configured_order():
    assert [entry['name'] for entry in registry.navigation()] == PAGES
    assert registry.navigation()[0] == {'name': 'dashboard', 'label': 'Dashboard', 'endpoint': 'dashboard.index'}


def test_navigation_skips_unregistered_pages():
    local = ComponentRegistry()
    local.register_component('facturacion', object)
    assert [entry['name'] for entry in local.navigation()] == ['facturacion']


def test_default_backend_client_is_built_from_config():
    app = BoxitoApp(TestingConfig).create_app()
    client = app.extensions['boxito_backend']
    assert isinstance(client, BackendClient)
    assert client.base_url == 'http://backend.test'
    assert client.token == 'test-token'


def test_home_redirects_to_dashboard(client):
    response = client.get('/')
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/dashboard')


def test_health(client):
    data = client.get('/health').get_json()
    assert data['status'] == 'healthy'
    assert data['version'] == __version__
    assert data['backend'] == 'http://backend.test'
    assert data['components'] == sorted(PAGES)


def test_menu_lists_every_page(client):
    html = client.get('/estado-cuenta').get_data(as_text=True)
    for resource in BoxitoConfig.RESOURCES.values():
        assert resource['name'] in html


def test_oversized_upload_json(app, client):
    app.config['MAX_CONTENT_LENGTH'] = 1024 * 1024
    response = client.post(
        '/api/comprobantes/validar',
        data={'archivo': (io.BytesIO(b'0' * (2 * 1024 * 1024)), 'grande.xlsx')},
        content_type='multipart/form-data'
    )
    assert response.status_code == 413
    assert response.get_json() == {'error': 'El archivo excede el límite de 1MB'}


def test_oversized_upload_page(app, client, flashes):
    app.config['MAX_CONTENT_LENGTH'] = 1024 * 1024
    response = client.post(
        '/facturacion/carga-masiva',
        data={'archivo': (io.BytesIO(b'0' * (2 * 1024 * 1024)), 'grande.xlsx')},
        content_type='multipart/form-data',
        headers={'Referer': 'http://localhost/facturacion'}
    )
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/facturacion')
    assert tuple(flashes()[-1]) == ('error', 'El archivo excede el límite de 1MB')
