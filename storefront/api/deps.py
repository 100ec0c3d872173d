# storefront/api/deps.py
from typing import Optional

from storefront.config import settings
from storefront.database import cart_db
from storefront.services.backend import BackendClient
from storefront.services.dashboard import AdminDashboard

_dashboard: Optional[AdminDashboard] = None


def get_db():
    """
    Dependency that returns the file-backed cart store.
    Usage:
        db = Depends(get_db)
    """
    return cart_db


def get_backend() -> BackendClient:
    """Client for the external catalog / inventory / job backend."""
    return BackendClient.from_settings(settings)


def get_dashboard() -> AdminDashboard:
    """
    Process-wide admin dashboard (pollers + job runner). Created on first use so
    importing the app has no side effects.
    """
    global _dashboard
    if _dashboard is None:
        _dashboard = AdminDashboard(get_backend(), settings)
    return _dashboard
