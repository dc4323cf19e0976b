"""
Dashboard Component
Business metrics from the backend's dashboard endpoints
"""
from .routes import dashboard_bp, init_dashboard
from .service import DashboardService

__all__ = ['dashboard_bp', 'init_dashboard', 'DashboardService']
