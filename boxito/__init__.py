"""
Boxito back-office
Flask application for the client directory, receipts, proposals,
guide cancellations, invoicing and notification settings
"""

__version__ = '1.4.0'
