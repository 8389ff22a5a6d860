# utils/auth.py
from functools import wraps

from flask import request

from school_visits.services.dashboard_service import DashboardService

DASHBOARD_PASSWORD_HEADER = 'X-Dashboard-Password'


def require_dashboard_access():
    """Raise DashboardLocked unless the request carries the dashboard password."""
    DashboardService.require_unlocked(request.headers.get(DASHBOARD_PASSWORD_HEADER))


def dashboard_access_required(f):
    """Decorator for dashboard-only endpoints."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        require_dashboard_access()
        return f(*args, **kwargs)

    return decorated_function
