from unittest.mock import MagicMock

import pytest
import requests
from flask import Flask

from boxito.core import BackendClient, BackendError, BackendUnavailable


def _response(status=200, body=None, content=b'x'):
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.content = content
    response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return BackendClient('http://backend.test/', token='service-token', timeout=3, session=session)


def test_list_accepts_plain_and_wrapped_lists(client, session):
    session.request.return_value = _response(body=[{'id': 1}])
    assert client.list('/api/receipts') == [{'id': 1}]

    session.request.return_value = _response(body={'data': [{'id': 2}]})
    assert client.list('/api/receipts') == [{'id': 2}]


def test_request_builds_url_and_headers(client, session):
    session.request.return_value = _response(body={'id': 7})
    assert client.update('/api/invoices', 7, {'total': 10}) == {'id': 7}

    session.request.assert_called_once_with(
        'PUT',
        'http://backend.test/api/invoices/7',
        json={'total': 10},
        params=None,
        headers={'Content-Type': 'application/json', 'Authorization': 'Bearer service-token'},
        timeout=3
    )


def test_incoming_bearer_token_is_forwarded(client, session):
    session.request.return_value = _response(body={})
    app = Flask(__name__)
    with app.test_request_context(headers={'Authorization': 'Bearer user-token'}):
        client.fetch('/api/dashboard/stats')
    headers = session.request.call_args.kwargs['headers']
    assert headers['Authorization'] == 'Bearer user-token'


def test_no_token_no_header(session):
    session.request.return_value = _response(body={})
    BackendClient('http://backend.test', session=session).post('/api/x')
    assert 'Authorization' not in session.request.call_args.kwargs['headers']


def test_error_status_raises_with_backend_message(client, session):
    session.request.return_value = _response(status=409, body={'error': 'RFC duplicado'})
    with pytest.raises(BackendError) as exc_info:
        client.create('/api/clients', {'rfc': 'X'})
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == 'RFC duplicado'
    assert exc_info.value.to_dict() == {'error': 'RFC duplicado', 'status': 409}


def test_error_without_body(client, session):
    session.request.return_value = _response(status=500, content=b'')
    with pytest.raises(BackendError) as exc_info:
        client.delete('/api/clients', 3)
    assert exc_info.value.message == 'HTTP 500'


def test_connection_error_is_unavailable(client, session):
    session.request.side_effect = requests.exceptions.ConnectionError('refused')
    with pytest.raises(BackendUnavailable) as exc_info:
        client.get('/api/clients', 1)
    assert exc_info.value.status_code == 503


def test_empty_or_invalid_body_decodes_to_dict(client, session):
    session.request.return_value = _response(content=b'')
    assert client.delete('/api/clients', 1) == {}

    response = _response()
    response.json.side_effect = ValueError('not json')
    session.request.return_value = response
    assert client.fetch('/api/x') == {}
