"""
Helpers shared by the page blueprints
"""
import logging
from pathlib import Path

from flask import current_app, flash, jsonify, redirect, render_template, request, send_file, url_for

from boxito.core import pending_uploads
from boxito.core.backend_client import BackendError
from boxito.core.bulk_upload import confirmation_summary
from boxito.core.mascot import pick
from boxito.core.schemas import form_errors
from boxito.core.spreadsheets import XLSX_MIMETYPE

logger = logging.getLogger(__name__)


def query_url(**changes):
    """URL of the current page with some query args replaced

    Changing anything but the page number sends the user back to page 1.
    """
    args = request.args.to_dict()
    args.update({key: value for key, value in changes.items() if value is not None})
    if 'page' not in changes:
        args.pop('page', None)
    args.update(request.view_args or {})
    return url_for(request.endpoint, **args)


def json_backend_error(e: BackendError):
    return jsonify(e.to_dict()), e.status_code


def json_validation_error(e):
    return jsonify({'error': 'Datos inválidos', 'detalles': form_errors(e)}), 400


def flash_validation_error(e):
    for item in form_errors(e):
        flash(f"{item['campo']}: {item['error']}", 'error')


def send_workbook(buffer, filename):
    return send_file(buffer, mimetype=XLSX_MIMETYPE, as_attachment=True, download_name=filename)


def uploaded_spreadsheet():
    """File from the 'archivo' field, or None after flashing why it was refused"""
    upload = request.files.get('archivo')
    if not upload or not upload.filename:
        flash('Selecciona un archivo Excel para la carga masiva', 'error')
        return None
    allowed = current_app.config['ALLOWED_SPREADSHEET_EXTENSIONS']
    if Path(upload.filename).suffix.lower() not in allowed:
        flash(f'Formato no soportado. Usa: {", ".join(allowed)}', 'error')
        return None
    return upload


def bulk_preview(page, result, token=None):
    """Keep the correct rows aside and render the validation preview"""
    if token is None:
        token = pending_uploads.add(page, result.datosCorrectos, result) if result.can_process else None
        flash(
            f'{pick(page, "validacion")} Análisis completo: '
            f'{result.lineasCorrectas} líneas correctas de {result.totalLineas}',
            'info'
        )
    return render_template(
        'bulk_preview.html',
        page=page,
        result=result,
        token=token,
        confirm_url=url_for(f'{page}.confirm_upload'),
        cancel_url=url_for(f'{page}.cancel_upload'),
        back_url=url_for(f'{page}.index')
    )


def confirm_bulk(page, service):
    """Send the rows stored under the posted token to the backend"""
    token = request.form.get('token', '')
    entry = pending_uploads.get(page, token)
    if entry is None:
        flash('La carga expiró o ya fue procesada. Vuelve a subir el archivo', 'warning')
        return redirect(url_for(f'{page}.index'))

    rows = entry['rows']
    try:
        response = service.confirm_upload(rows)
    except BackendError as e:
        logger.error(f'Bulk upload for {page} failed: {e.message}')
        flash(f'Error en carga masiva: {e.message}', 'error')
        if entry['result'] is not None:
            return bulk_preview(page, entry['result'], token)
        return redirect(url_for(f'{page}.index'))

    pending_uploads.discard(token)
    created, failed = confirmation_summary(response, len(rows))
    flash(f'{pick(page, "cargaMasiva")} {created} registros procesados', 'success')
    if failed:
        flash(f'{failed} registros fueron rechazados por el servidor', 'warning')
    return redirect(url_for(f'{page}.index'))


def cancel_bulk(page):
    pending_uploads.discard(request.form.get('token', ''))
    flash('Carga masiva cancelada', 'info')
    return redirect(url_for(f'{page}.index'))


def api_validate_bulk(page, service):
    upload = request.files.get('archivo')
    if not upload or not upload.filename:
        return jsonify({'error': 'Archivo requerido'}), 400
    result = service.validate_upload(upload)
    data = result.to_dict()
    data['token'] = pending_uploads.add(page, result.datosCorrectos, result) if result.can_process else None
    return jsonify(data)


def api_confirm_bulk(page, service):
    token = (request.get_json(silent=True) or {}).get('token', '')
    entry = pending_uploads.get(page, token)
    if entry is None:
        return jsonify({'error': 'La carga expiró o ya fue procesada'}), 404
    rows = entry['rows']
    try:
        response = service.confirm_upload(rows)
    except BackendError as e:
        logger.error(f'Bulk upload for {page} failed: {e.message}')
        return json_backend_error(e)
    pending_uploads.discard(token)
    created, failed = confirmation_summary(response, len(rows))
    return jsonify({'created': created, 'errors': failed})
