"""Pydantic request/response schemas."""
from app.schemas.common import ErrorResponse
from app.schemas.dashboard import (
    DashboardResponse,
    DashboardSeriesOut,
    DashboardTotalsOut,
    PlatformCardOut,
    PostRowOut,
)

__all__ = [
    "ErrorResponse",
    "DashboardResponse",
    "DashboardSeriesOut",
    "DashboardTotalsOut",
    "PlatformCardOut",
    "PostRowOut",
]
