import io
import logging
import re
from datetime import datetime

from openpyxl import load_workbook
from werkzeug.datastructures import MultiDict

from boxito.components.comprobantes import ComprobantesService, validate_receipt_row
from boxito.core import BackendError, pending_uploads
from boxito.core.bulk_upload import validate_rows
from boxito.core.spreadsheets import read_rows

HEADER = ['id_asociado', 'status', 'monto', 'tipo', 'fecha', 'link', 'factura']

RECEIPTS = [
    {'id': 1, 'id_asociado': '649', 'status': 'APROBADO', 'monto': 1838.5, 'tipo': 'ABONO',
     'fecha': '2025-08-04', 'link': '', 'factura': ''},
    {'id': 2, 'id_asociado': '463', 'status': 'PENDIENTE', 'monto': 2000, 'tipo': 'CARGO',
     'fecha': '2025-07-15', 'link': '', 'factura': 'A12345'},
    {'id': 3, 'id_asociado': '301', 'status': 'APROBADO', 'monto': 750.75, 'tipo': 'ABONO',
     'fecha': '2025-08-03', 'link': '', 'factura': 'B67890'},
    {'id': 4, 'id_asociado': '120', 'status': 'RECHAZADO', 'monto': None, 'tipo': 'ABONO',
     'fecha': '2025-08-01', 'link': '', 'factura': ''},
]


def _token(html):
    return re.search(r'name="token" value="([0-9a-f]+)"', html).group(1)


def test_receipt_row_normalized():
    result = validate_rows(
        [HEADER, [649.0, 'APROBADO', '1,838.50', 'ABONO', '04/08/25', None, 'A1']],
        validate_receipt_row
    )
    assert result.decision == 'clean'
    assert result.datosCorrectos == [{
        'id_asociado': '649', 'status': 'APROBADO', 'monto': 1838.5, 'tipo': 'ABONO',
        'fecha': '2025-08-04', 'link': '', 'factura': 'A1'
    }]


def test_receipt_row_errors():
    result = validate_rows(
        [HEADER, ['649', None, '-5', None, '32/13/2025']],
        validate_receipt_row
    )
    assert result.lineasConErrores == 1
    assert {issue.campo for issue in result.only_errors} == {'status', 'tipo', 'monto', 'fecha'}


def test_receipt_row_zero_amount_allowed_and_nonstandard_values_warn():
    result = validate_rows(
        [HEADER, ['649', 'EN REVISION', 0, 'DEPOSITO', datetime(2025, 8, 4)]],
        validate_receipt_row
    )
    assert result.lineasCorrectas == 1
    assert result.lineasConAdvertencias == 1
    assert {issue.campo for issue in result.only_warnings} == {'status', 'tipo'}
    assert result.datosCorrectos[0]['monto'] == 0


def test_receipt_row_missing_amount():
    result = validate_rows([HEADER, ['649', 'APROBADO', None, 'ABONO', '2025-08-04']], validate_receipt_row)
    assert result.only_errors[0].campo == 'monto'


def test_filter_receipts():
    filters = ComprobantesService.read_filters(MultiDict({'mes': '8', 'status': 'aprob'}))
    assert [r['id'] for r in ComprobantesService.filter_receipts(RECEIPTS, filters)] == [1, 3]

    filters = ComprobantesService.read_filters(MultiDict({'factura': 'b67'}))
    assert [r['id'] for r in ComprobantesService.filter_receipts(RECEIPTS, filters)] == [3]


def test_filter_receipts_month_zero_keeps_every_month():
    filters = ComprobantesService.read_filters(MultiDict({'mes': '0'}))
    assert [r['id'] for r in ComprobantesService.filter_receipts(RECEIPTS, filters)] == [1, 2, 3, 4]


def test_compute_stats():
    stats = ComprobantesService.compute_stats(RECEIPTS)
    assert stats == {
        'totalAprobados': 2,
        'totalPendientes': 1,
        'totalRechazados': 1,
        'montoTotal': 4589.25,
        'tasaAprobacion': 50.0
    }
    assert ComprobantesService.compute_stats([])['tasaAprobacion'] == 0


def test_layout_rows_pass_validation():
    rows = read_rows(ComprobantesService.layout_workbook(), 'layout.xlsx')
    result = validate_rows(rows, validate_receipt_row)
    assert result.totalLineas == 4
    assert result.lineasCorrectas == 4


def test_index_renders(client, backend):
    backend.list.return_value = RECEIPTS
    response = client.get('/comprobantes?mes=8')
    assert response.status_code == 200
    assert '649' in response.get_data(as_text=True)
    backend.list.assert_called_with('/api/receipts')


def test_index_survives_backend_error(client, backend):
    backend.list.side_effect = BackendError('caído', 502)
    response = client.get('/comprobantes')
    assert response.status_code == 200
    assert 'caído' in response.get_data(as_text=True)


def test_save_creates_receipt(client, backend, flashes):
    response = client.post('/comprobantes/guardar', data={
        'id_asociado': '649', 'status': 'APROBADO', 'monto': '100', 'tipo': 'ABONO', 'fecha': '04/08/2025'
    })
    assert response.status_code == 302
    backend.create.assert_called_once()
    path, payload = backend.create.call_args.args
    assert path == '/api/receipts'
    assert payload['fecha'] == '2025-08-04'
    assert flashes()[-1][0] == 'success'


def test_save_invalid_form_flashes_errors(client, backend, flashes):
    client.post('/comprobantes/5/guardar', data={'id_asociado': '649', 'monto': 'x'})
    backend.update.assert_not_called()
    assert all(category == 'error' for category, _ in flashes())


def test_delete(client, backend):
    assert client.post('/comprobantes/3/eliminar').status_code == 302
    backend.delete.assert_called_once_with('/api/receipts', '3')


def test_layout_download(client):
    response = client.get('/comprobantes/layout')
    assert response.status_code == 200
    assert 'attachment' in response.headers['Content-Disposition']
    assert 'Boxito_Layout_Comprobantes.xlsx' in response.headers['Content-Disposition']


def test_export_uses_current_filters(client, backend):
    backend.list.return_value = RECEIPTS
    response = client.get('/comprobantes/exportar?status=PENDIENTE')
    assert response.status_code == 200
    sheet = load_workbook(io.BytesIO(response.data)).active
    assert sheet.max_row == 2
    assert sheet['B2'].value == '463'


def test_export_with_no_rows_redirects(client, backend, flashes):
    response = client.get('/comprobantes/exportar')
    assert response.status_code == 302
    assert flashes()[-1][0] == 'warning'


def test_export_backend_error_is_logged(client, backend, flashes, caplog):
    backend.list.side_effect = BackendError('db down', 500)
    with caplog.at_level(logging.ERROR, logger='boxito.components.comprobantes.routes'):
        response = client.get('/comprobantes/exportar')
    assert response.status_code == 302
    assert 'Could not export receipts: db down' in caplog.text
    assert tuple(flashes()[-1]) == ('error', 'Error al exportar: db down')


def test_bulk_upload_preview_and_confirm(client, backend, xlsx, flashes):
    upload = xlsx([
        HEADER,
        ['649', 'APROBADO', 1838.5, 'ABONO', '04/08/2025', '', ''],
        ['463', 'OTRO', 2000, 'CARGO', '2025-08-04', '', 'A1'],
        ['301', 'APROBADO', 'abc', 'ABONO', '2025-08-04', '', ''],
    ])
    response = client.post(
        '/comprobantes/carga-masiva',
        data={'archivo': (upload, 'carga.xlsx')},
        content_type='multipart/form-data'
    )
    html = response.get_data(as_text=True)
    assert response.status_code == 200
    assert 'Procesar solo líneas correctas (2)' in html

    backend.post.return_value = {'count': 2}
    response = client.post('/comprobantes/carga-masiva/confirmar', data={'token': _token(html)})
    assert response.status_code == 302
    path, payload = backend.post.call_args.args
    assert path == '/api/receipts/bulk'
    assert [r['id_asociado'] for r in payload['receipts']] == ['649', '463']
    assert any('2 registros procesados' in message for _, message in flashes())


def test_confirm_with_used_token(client, backend, flashes):
    token = pending_uploads.add('comprobantes', [{'id_asociado': '1'}])
    pending_uploads.discard(token)
    client.post('/comprobantes/carga-masiva/confirmar', data={'token': token})
    backend.post.assert_not_called()
    assert flashes()[-1][0] == 'warning'


def test_cancel_discards_pending_rows(client, backend):
    token = pending_uploads.add('comprobantes', [{'id_asociado': '1'}])
    client.post('/comprobantes/carga-masiva/cancelar', data={'token': token})
    assert pending_uploads.get('comprobantes', token) is None


def test_upload_rejects_other_extensions(client, flashes):
    response = client.post(
        '/comprobantes/carga-masiva',
        data={'archivo': (io.BytesIO(b'x'), 'carga.pdf')},
        content_type='multipart/form-data'
    )
    assert response.status_code == 302
    assert 'Formato no soportado' in flashes()[-1][1]


def test_unreadable_file_shows_file_error(client, backend):
    response = client.post(
        '/comprobantes/carga-masiva',
        data={'archivo': (io.BytesIO(b'not a workbook'), 'carga.xlsx')},
        content_type='multipart/form-data'
    )
    assert response.status_code == 200
    assert 'Error procesando archivo' in response.get_data(as_text=True)
    assert 'name="token"' not in response.get_data(as_text=True)


def test_api_list(client, backend):
    backend.list.return_value = RECEIPTS
    data = client.get('/api/comprobantes?sort=monto&dir=desc&per_page=10').get_json()
    assert data['stats']['totalAprobados'] == 2
    assert [row['id'] for row in data['table']['rows']] == [2, 1, 3, 4]


def test_api_save_validation_error(client, backend):
    response = client.post('/api/comprobantes', json={'id_asociado': '1'})
    assert response.status_code == 400
    campos = {item['campo'] for item in response.get_json()['detalles']}
    assert {'status', 'monto', 'tipo', 'fecha'} <= campos


def test_api_save_backend_error(client, backend):
    backend.create.side_effect = BackendError('Duplicado', 409)
    response = client.post('/api/comprobantes', json={
        'id_asociado': '1', 'status': 'APROBADO', 'monto': 1, 'tipo': 'ABONO', 'fecha': '2025-01-01'
    })
    assert response.status_code == 409
    assert response.get_json()['error'] == 'Duplicado'


def test_api_bulk_validate_and_confirm(client, backend, xlsx):
    upload = xlsx([HEADER, ['649', 'APROBADO', 10, 'ABONO', '2025-08-04']])
    data = client.post(
        '/api/comprobantes/validar',
        data={'archivo': (upload, 'carga.xlsx')},
        content_type='multipart/form-data'
    ).get_json()
    assert data['decision'] == 'clean'
    assert data['token']

    backend.post.return_value = {'count': 1}
    response = client.post('/api/comprobantes/confirmar', json={'token': data['token']})
    assert response.get_json() == {'created': 1, 'errors': 0}

    response = client.post('/api/comprobantes/confirmar', json={'token': data['token']})
    assert response.status_code == 404


def test_api_confirm_retry_after_backend_error(client, backend, xlsx):
    upload = xlsx([HEADER, ['649', 'APROBADO', 10, 'ABONO', '2025-08-04']])
    token = client.post(
        '/api/comprobantes/validar',
        data={'archivo': (upload, 'carga.xlsx')},
        content_type='multipart/form-data'
    ).get_json()['token']

    backend.post.side_effect = BackendError('db down', 500)
    response = client.post('/api/comprobantes/confirmar', json={'token': token})
    assert response.status_code == 500

    backend.post.side_effect = None
    backend.post.return_value = {'count': 1}
    response = client.post('/api/comprobantes/confirmar', json={'token': token})
    assert response.status_code == 200
    assert response.get_json() == {'created': 1, 'errors': 0}
    assert pending_uploads.get('comprobantes', token) is None


def test_confirm_keeps_preview_after_backend_error(client, backend, xlsx, flashes):
    upload = xlsx([HEADER, ['649', 'APROBADO', 10, 'ABONO', '2025-08-04']])
    html = client.post(
        '/comprobantes/carga-masiva',
        data={'archivo': (upload, 'carga.xlsx')},
        content_type='multipart/form-data'
    ).get_data(as_text=True)
    token = _token(html)

    backend.post.side_effect = BackendError('db down', 500)
    response = client.post('/comprobantes/carga-masiva/confirmar', data={'token': token})
    html = response.get_data(as_text=True)
    assert response.status_code == 200
    assert _token(html) == token
    assert 'Error en carga masiva: db down' in html

    backend.post.side_effect = None
    backend.post.return_value = {'count': 1}
    response = client.post('/comprobantes/carga-masiva/confirmar', data={'token': token})
    assert response.status_code == 302
    assert flashes()[-1][0] == 'success'


def test_api_validate_requires_file(client):
    assert client.post('/api/comprobantes/validar').status_code == 400
