"""
Configuración de Notificaciones Service
"""
import logging

from boxito.components import register_component
from boxito.config.settings import BoxitoConfig
from boxito.core import get_backend
from boxito.core.schemas import NotificationSettingsForm
from boxito.core.tables import as_number

logger = logging.getLogger(__name__)

CHECKBOXES = ('email_enabled', 'sms_enabled')


def _money(amount):
    return f'${amount:,.2f}'


def form_from_fields(fields):
    """Settings from the HTML form; unchecked boxes are simply absent"""
    data = {key: value for key, value in fields.items() if key not in CHECKBOXES}
    for key in CHECKBOXES:
        data[key] = key in fields
    return data


def summarize_check(response):
    """(message, category) for an alert check response

    Accepts {result: {overdue, dueSoon, totalOverdueAmount, totalDueSoonAmount}}
    and {overdueCount, totalAmount, breakdown}.
    """
    response = response if isinstance(response, dict) else {}

    if isinstance(response.get('result'), dict):
        result = response['result']
        overdue = int(as_number(result.get('overdue')))
        due_soon = int(as_number(result.get('dueSoon')))
        if overdue == 0 and due_soon == 0:
            return '📦 ¡Excelente! No hay facturas vencidas ni por vencer en los próximos días', 'success'
        parts = []
        if overdue > 0:
            parts.append(f'{overdue} facturas vencidas ({_money(as_number(result.get("totalOverdueAmount")))})')
        if due_soon > 0:
            parts.append(f'{due_soon} facturas por vencer ({_money(as_number(result.get("totalDueSoonAmount")))})')
        return f'📦 Alertas generadas: {" y ".join(parts)}', 'warning'

    overdue = int(as_number(response.get('overdueCount')))
    if overdue == 0:
        return '📦 ¡Excelente! No hay facturas vencidas', 'success'
    message = f'📦 Alertas generadas: {overdue} facturas vencidas ({_money(as_number(response.get("totalAmount")))})'
    breakdown = response.get('breakdown')
    if isinstance(breakdown, dict):
        message += (
            f' - críticas: {int(as_number(breakdown.get("critical")))}, '
            f'advertencia: {int(as_number(breakdown.get("warning")))}, '
            f'recientes: {int(as_number(breakdown.get("recent")))}'
        )
    return message, 'warning'


@register_component('configuracion_notificaciones')
class ConfiguracionNotificacionesService:
    """Service for the notification settings page"""

    def __init__(self):
        self.resource = BoxitoConfig.get_resource('configuracion_notificaciones')

    @staticmethod
    def with_defaults(raw):
        """Backend settings completed with the defaults for missing keys"""
        settings = dict(BoxitoConfig.NOTIFICATION_DEFAULTS)
        if isinstance(raw, dict):
            source = raw.get('settings') if isinstance(raw.get('settings'), dict) else raw
            settings.update({
                key: source[key]
                for key in BoxitoConfig.NOTIFICATION_DEFAULTS
                if source.get(key) is not None
            })
        return settings

    def get_settings(self):
        return self.with_defaults(get_backend().fetch(self.resource['settings_path']))

    def save_settings(self, data):
        form = NotificationSettingsForm(**data)
        logger.info('Saving notification settings')
        get_backend().put(self.resource['settings_path'], form.model_dump())
        return form

    def check_alerts(self):
        logger.info('Running manual invoice alert check')
        return summarize_check(get_backend().post(self.resource['check_path']))
