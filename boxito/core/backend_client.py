"""
REST backend client
All pages read and write their records through this client
"""
import logging

import requests
from flask import has_request_context, request

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Backend answered with a non-2xx status"""

    def __init__(self, message, status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self):
        return {'error': self.message, 'status': self.status_code}


class BackendUnavailable(BackendError):
    """Backend could not be reached"""

    def __init__(self, message):
        super().__init__(message, status_code=503)


class BackendClient:
    """Thin wrapper over requests for the Boxito REST backend"""

    def __init__(self, base_url, token=None, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, token=None):
        headers = {'Content-Type': 'application/json'}
        token = token or self._forwarded_token() or self.token
        if token:
            headers['Authorization'] = f'Bearer {token}'
        return headers

    @staticmethod
    def _forwarded_token():
        """Bearer token of the incoming request, when there is one"""
        if not has_request_context():
            return None
        auth = request.headers.get('Authorization', '')
        if auth.lower().startswith('bearer '):
            return auth[7:].strip() or None
        return None

    def request(self, method, path, payload=None, params=None, token=None):
        """Send a request and return the decoded JSON body"""
        url = f'{self.base_url}{path}'
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                params=params,
                headers=self._headers(token),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f'Backend unreachable: {method} {url}: {e}')
            raise BackendUnavailable(f'Error de conexión con el servidor: {e}') from e

        if not response.ok:
            body = self._decode(response)
            message = body.get('error') if isinstance(body, dict) else None
            message = message or f'HTTP {response.status_code}'
            logger.warning(f'Backend error: {method} {url} -> {response.status_code} {message}')
            raise BackendError(message, status_code=response.status_code, payload=body)

        return self._decode(response)

    @staticmethod
    def _decode(response):
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    # Generic resource operations

    def list(self, resource, params=None, token=None):
        data = self.request('GET', resource, params=params, token=token)
        return data if isinstance(data, list) else data.get('data', [])

    def get(self, resource, record_id, token=None):
        return self.request('GET', f'{resource}/{record_id}', token=token)

    def create(self, resource, payload, token=None):
        return self.request('POST', resource, payload=payload, token=token)

    def update(self, resource, record_id, payload, token=None):
        return self.request('PUT', f'{resource}/{record_id}', payload=payload, token=token)

    def delete(self, resource, record_id, token=None):
        return self.request('DELETE', f'{resource}/{record_id}', token=token)

    def fetch(self, path, params=None, token=None):
        return self.request('GET', path, params=params, token=token)

    def post(self, path, payload=None, token=None):
        return self.request('POST', path, payload=payload, token=token)

    def put(self, path, payload=None, token=None):
        return self.request('PUT', path, payload=payload, token=token)
