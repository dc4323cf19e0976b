import pytest
from pydantic import ValidationError

from boxito.core.schemas import (
    ClientForm, GuideCancellationForm, GuideStatusForm, InvoiceForm, NotificationSettingsForm,
    ProposalForm, ReceiptForm, form_errors, outstanding
)


def _fields(exc_info):
    return {item['campo'] for item in form_errors(exc_info.value)}


def test_client_form_normalizes():
    form = ClientForm(cliente=' Acme ', rfc='aaa010101aaa', credito='', mail='pagos@acme.mx')
    assert form.cliente == 'Acme'
    assert form.rfc == 'AAA010101AAA'
    assert form.credito == 0
    assert form.documentos.constanciaFiscal == ''


def test_client_form_required_fields():
    with pytest.raises(ValidationError) as exc_info:
        ClientForm(cliente='', rfc='SHORT', mail='no-es-correo')
    assert _fields(exc_info) == {'cliente', 'rfc', 'mail'}


def test_client_form_collection_email():
    with pytest.raises(ValidationError) as exc_info:
        ClientForm(cliente='Acme', rfc='AAA010101AAA', contactoCobro1={'nombre': 'Ana', 'correo': 'ana'})
    assert _fields(exc_info) == {'contactoCobro1.correo'}


def test_receipt_form():
    form = ReceiptForm(id_asociado=649, status='APROBADO', monto='0', tipo='ABONO', fecha='04/08/2025')
    assert form.id_asociado == '649'
    assert form.monto == 0
    assert form.fecha == '2025-08-04'


def test_receipt_form_rejects_negative_amount_and_bad_date():
    with pytest.raises(ValidationError) as exc_info:
        ReceiptForm(id_asociado='1', status='A', monto=-1, tipo='ABONO', fecha='ayer')
    assert _fields(exc_info) == {'monto', 'fecha'}


def test_proposal_form_needs_a_document():
    with pytest.raises(ValidationError) as exc_info:
        ProposalForm(cliente='Acme', anio=2025)
    errors = form_errors(exc_info.value)
    assert errors == [{'campo': 'general', 'error': 'Debes adjuntar al menos un archivo (PDF o Excel)'}]

    form = ProposalForm(cliente='Acme', anio=2025, xlsx='tarifas.xlsx')
    assert form.anio == '2025'


def test_guide_cancellation_form():
    data = {
        'numero_guia': 'GU123', 'paqueteria': 'DHL', 'cliente': 'Acme',
        'motivo': 'Dirección incorrecta del destinatario', 'fecha_solicitud': '2025-03-01',
        'url_guia': 'https://tracking.dhl.com/guia/123'
    }
    assert GuideCancellationForm(**data).url_guia == 'https://tracking.dhl.com/guia/123'

    with pytest.raises(ValidationError) as exc_info:
        GuideCancellationForm(**dict(data, motivo='corto', url_guia='ftp://x'))
    assert _fields(exc_info) == {'motivo', 'url_guia'}


def test_guide_status_form():
    form = GuideStatusForm(estatus='Cancelada', costo_cancelacion='', reembolso='50', fecha_respuesta='')
    assert form.costo_cancelacion == 0
    assert form.reembolso == 50
    assert form.fecha_respuesta is None

    with pytest.raises(ValidationError):
        GuideStatusForm(estatus='Perdida')


def test_invoice_form_derives_due_date_and_balance():
    form = InvoiceForm(
        paqueteria='DHL', numero_comprobante='FAC-1', cliente='Acme', rfc='aaa010101aaa',
        credito='30', fecha_creacion='15/01/2025', total='1000', pago1='400', pago2='', nc='100'
    )
    assert form.fecha_vencimiento == '2025-02-14'
    assert form.por_cobrar == 500
    assert form.estatus == 'Pendiente'
    assert form.rfc == 'AAA010101AAA'


def test_invoice_form_paid_when_nothing_owed():
    form = InvoiceForm(
        paqueteria='DHL', numero_comprobante='FAC-1', cliente='Acme', rfc='AAA010101AAA',
        fecha_creacion='2025-01-15', fecha_vencimiento='2025-01-20', total=1000, pago1=1200,
        estatus='Pendiente'
    )
    assert form.fecha_vencimiento == '2025-01-20'
    assert form.por_cobrar == 0
    assert form.estatus == 'Pagada'


def test_invoice_form_due_date_defaults_to_creation():
    form = InvoiceForm(
        paqueteria='DHL', numero_comprobante='FAC-1', cliente='Acme', rfc='AAA010101AAA',
        fecha_creacion='2025-01-15', total=10
    )
    assert form.fecha_vencimiento == '2025-01-15'


def test_invoice_form_total_must_be_positive():
    with pytest.raises(ValidationError) as exc_info:
        InvoiceForm(
            paqueteria='DHL', numero_comprobante='FAC-1', cliente='Acme', rfc='AAA010101AAA',
            fecha_creacion='2025-01-15', total=0
        )
    assert _fields(exc_info) == {'total'}


def test_outstanding_never_negative():
    assert outstanding(100, 30, None, 20) == 50
    assert outstanding(100, 150) == 0


def test_notification_settings_form():
    form = NotificationSettingsForm(factoring_email='cobranza@shope.mx', overdue_days_alert='5')
    assert form.overdue_days_alert == 5
    assert form.email_enabled is True

    with pytest.raises(ValidationError) as exc_info:
        NotificationSettingsForm(factoring_email='x', due_soon_days_alert=400)
    assert _fields(exc_info) == {'factoring_email', 'due_soon_days_alert'}


def test_form_errors_strips_value_error_prefix():
    with pytest.raises(ValidationError) as exc_info:
        ClientForm(cliente='Acme', rfc='AAA010101AAA', mail='x')
    assert form_errors(exc_info.value) == [{'campo': 'mail', 'error': 'Email inválido'}]
