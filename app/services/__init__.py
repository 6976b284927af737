"""Dashboard services: row loading and aggregation."""
from app.services.dashboard_data_service import load_dataset
from app.services.dashboard_service import DashboardQuery, DashboardResult, MetricName, build_dashboard

__all__ = [
    "load_dataset",
    "DashboardQuery",
    "DashboardResult",
    "MetricName",
    "build_dashboard",
]
