import io
from unittest.mock import MagicMock

import pytest
from openpyxl import Workbook

from boxito.boxito_app import BoxitoApp
from boxito.config.settings import TestingConfig
from boxito.core import BackendClient


@pytest.fixture
def backend():
    """Stand-in for the REST backend; every call succeeds with empty data"""
    fake = MagicMock(spec=BackendClient)
    fake.list.return_value = []
    fake.fetch.return_value = {}
    fake.create.return_value = {'id': 1}
    fake.update.return_value = {'id': 1}
    fake.delete.return_value = {'success': True}
    fake.post.return_value = {}
    fake.put.return_value = {}
    return fake


@pytest.fixture
def app(backend):
    return BoxitoApp(TestingConfig).create_app(backend=backend)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


def make_xlsx(rows):
    """In-memory .xlsx whose first sheet holds `rows` (header included)"""
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    output = io.BytesIO()
    workbook.save(output)
    output.seek(0)
    return output


@pytest.fixture
def xlsx():
    return make_xlsx


@pytest.fixture
def flashes(client):
    """Messages flashed and not yet shown, as [(category, message)]"""
    def read():
        with client.session_transaction() as session:
            return list(session.get('_flashes', []))
    return read
