"""
Facturación Component
Invoices with derived balances and Excel bulk upload
"""
from .routes import facturacion_bp, init_facturacion
from .service import FacturacionService, validate_invoice_row

__all__ = ['facturacion_bp', 'init_facturacion', 'FacturacionService', 'validate_invoice_row']
