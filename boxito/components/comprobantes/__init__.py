"""
Comprobantes Component
Payment receipts with Excel bulk upload
"""
from .routes import comprobantes_bp, init_comprobantes
from .service import ComprobantesService, validate_receipt_row

__all__ = ['comprobantes_bp', 'init_comprobantes', 'ComprobantesService', 'validate_receipt_row']
