"""
Form schemas
Required-field checks for the create/edit forms of every page
"""
import re
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from boxito.config.settings import BoxitoConfig
from boxito.core.dates import DateFormatError, add_days, normalize_date

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def _blank_to_none(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


def _check_email(value, label='Email'):
    if value and not EMAIL_PATTERN.match(value):
        raise ValueError(f'{label} inválido')
    return value


def _date(value, label):
    try:
        return normalize_date(value)
    except DateFormatError as e:
        raise ValueError(f'{label}: {e}') from e


class FormModel(BaseModel):
    """Base for form schemas: strips text and ignores unknown fields"""

    model_config = {'str_strip_whitespace': True, 'extra': 'ignore'}


# Clients

class ClientDocuments(FormModel):
    constanciaFiscal: str = ''
    actaConstitutiva: str = ''
    identificacion: str = ''
    comprobanteDomicilio: str = ''


class CollectionContact(FormModel):
    nombre: str = ''
    correo: str = ''

    @field_validator('correo')
    @classmethod
    def correo_valido(cls, value):
        return _check_email(value, 'Email de cobro')


class ClientForm(FormModel):
    id_cliente: str = ''
    cliente: str = Field(min_length=1)
    rfc: str = Field(min_length=12, max_length=13)
    credito: int = Field(default=0, ge=0)
    contacto: str = ''
    direccion: str = ''
    mail: str = ''
    tel: str = ''
    documentos: ClientDocuments = Field(default_factory=ClientDocuments)
    contactoCobro1: CollectionContact = Field(default_factory=CollectionContact)
    contactoCobro2: CollectionContact = Field(default_factory=CollectionContact)

    @field_validator('rfc')
    @classmethod
    def rfc_mayusculas(cls, value):
        return value.upper()

    @field_validator('mail')
    @classmethod
    def mail_valido(cls, value):
        return _check_email(value)

    @field_validator('credito', mode='before')
    @classmethod
    def credito_vacio(cls, value):
        return 0 if _blank_to_none(value) is None else value


# Receipts

class ReceiptForm(FormModel):
    id_asociado: str = Field(min_length=1)
    status: str = Field(min_length=1)
    monto: float = Field(ge=0)
    tipo: str = Field(min_length=1)
    fecha: str = Field(min_length=1)
    link: str = ''
    factura: str = ''

    @field_validator('id_asociado', mode='before')
    @classmethod
    def id_como_texto(cls, value):
        return '' if value is None else str(value)

    @field_validator('fecha')
    @classmethod
    def fecha_normalizada(cls, value):
        return _date(value, 'Fecha')


# Proposals

class ProposalForm(FormModel):
    id_cliente: str = ''
    cliente: str = Field(min_length=1)
    anio: str = Field(min_length=1)
    pdf: str = ''
    xlsx: str = ''
    comentarios: str = ''

    @field_validator('anio', mode='before')
    @classmethod
    def anio_como_texto(cls, value):
        return '' if value is None else str(value)

    @model_validator(mode='after')
    def algun_documento(self):
        if not self.pdf and not self.xlsx:
            raise ValueError('Debes adjuntar al menos un archivo (PDF o Excel)')
        return self


# Guide cancellations

class GuideCancellationForm(FormModel):
    numero_guia: str = Field(min_length=1)
    paqueteria: str = Field(min_length=1)
    cliente: str = Field(min_length=1)
    motivo: str = Field(min_length=10)
    fecha_solicitud: str = Field(min_length=1)
    url_guia: str = ''
    archivo_guia: str = ''
    comentarios: str = ''

    @field_validator('fecha_solicitud')
    @classmethod
    def fecha_normalizada(cls, value):
        return _date(value, 'Fecha de solicitud')

    @field_validator('url_guia')
    @classmethod
    def url_valida(cls, value):
        if not value:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(
                'La URL de la guía no es válida. Ejemplo: https://tracking.paqueteria.com/guia/123456'
            )
        return value


class GuideStatusForm(FormModel):
    estatus: str
    comentarios: str = ''
    responsable: str = ''
    costo_cancelacion: float = Field(default=0, ge=0)
    reembolso: float = Field(default=0, ge=0)
    numero_referencia: str = ''
    fecha_respuesta: Optional[str] = None

    @field_validator('estatus')
    @classmethod
    def estatus_valido(cls, value):
        if value not in BoxitoConfig.GUIDE_STATUSES:
            raise ValueError(f'Estatus inválido. Opciones: {", ".join(BoxitoConfig.GUIDE_STATUSES)}')
        return value

    @field_validator('costo_cancelacion', 'reembolso', mode='before')
    @classmethod
    def montos_vacios(cls, value):
        return 0 if _blank_to_none(value) is None else value

    @field_validator('fecha_respuesta', mode='before')
    @classmethod
    def fecha_respuesta_normalizada(cls, value):
        if _blank_to_none(value) is None:
            return None
        return _date(value, 'Fecha de respuesta')


# Invoices

class InvoiceForm(FormModel):
    paqueteria: str = Field(min_length=1)
    numero_comprobante: str = Field(min_length=1)
    cliente: str = Field(min_length=1)
    rfc: str = Field(min_length=12, max_length=13)
    credito: int = Field(default=0, ge=0)
    fecha_creacion: str = Field(min_length=1)
    fecha_vencimiento: str = ''
    total: float = Field(gt=0)
    pago1: float = Field(default=0, ge=0)
    fecha_pago1: Optional[str] = None
    pago2: float = Field(default=0, ge=0)
    fecha_pago2: Optional[str] = None
    pago3: float = Field(default=0, ge=0)
    fecha_pago3: Optional[str] = None
    nc: float = Field(default=0, ge=0)
    por_cobrar: float = 0
    estatus: str = 'Pendiente'
    comentarios: str = ''
    cfdi: str = ''
    soporte: str = ''

    @field_validator('credito', 'pago1', 'pago2', 'pago3', 'nc', mode='before')
    @classmethod
    def numeros_vacios(cls, value):
        return 0 if _blank_to_none(value) is None else value

    @field_validator('rfc')
    @classmethod
    def rfc_mayusculas(cls, value):
        return value.upper()

    @field_validator('fecha_creacion')
    @classmethod
    def fecha_creacion_normalizada(cls, value):
        return _date(value, 'Fecha de creación')

    @field_validator('fecha_vencimiento', mode='before')
    @classmethod
    def fecha_vencimiento_normalizada(cls, value):
        return _date(_blank_to_none(value), 'Fecha de vencimiento')

    @field_validator('fecha_pago1', 'fecha_pago2', 'fecha_pago3', mode='before')
    @classmethod
    def fechas_pago(cls, value):
        if _blank_to_none(value) is None:
            return None
        return _date(value, 'Fecha de pago')

    @model_validator(mode='after')
    def derivar_campos(self):
        if self.credito > 0:
            self.fecha_vencimiento = add_days(self.fecha_creacion, self.credito)
        elif not self.fecha_vencimiento:
            self.fecha_vencimiento = self.fecha_creacion
        self.por_cobrar = outstanding(self.total, self.pago1, self.pago2, self.pago3, self.nc)
        self.estatus = 'Pagada' if self.por_cobrar <= 0 else 'Pendiente'
        return self


def outstanding(total, *payments):
    """Amount still owed on an invoice, never negative"""
    paid = sum(payment or 0 for payment in payments)
    return round(max(0.0, (total or 0) - paid), 2)


# Notification settings

class NotificationSettingsForm(FormModel):
    email_enabled: bool = True
    sms_enabled: bool = False
    factoring_email: str = Field(min_length=1)
    factoring_phone: str = ''
    overdue_days_alert: int = Field(default=1, ge=0, le=365)
    due_soon_days_alert: int = Field(default=3, ge=0, le=365)

    @field_validator('factoring_email')
    @classmethod
    def email_valido(cls, value):
        return _check_email(value, 'Email de facturación')


def form_errors(exc: ValidationError) -> List[dict]:
    """Flatten a pydantic ValidationError into [{campo, error}]"""
    errors = []
    for item in exc.errors():
        campo = '.'.join(str(part) for part in item.get('loc', ())) or 'general'
        message = item.get('msg', 'Valor inválido')
        if message.startswith('Value error, '):
            message = message[len('Value error, '):]
        errors.append({'campo': campo, 'error': message})
    return errors
