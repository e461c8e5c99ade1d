"""
Dashboard view for published usage metrics.

Read-only consumer of the metrics payload.
"""

from .client import DashboardFetchError, DashboardState, ViewStatus, fetch_payload, load_state
from .render import render_dashboard

__all__ = [
    "DashboardFetchError",
    "DashboardState",
    "ViewStatus",
    "fetch_payload",
    "load_state",
    "render_dashboard",
]
