"""Domain errors of the metrics engine."""
from typing import Any, Dict, Optional


class MetricsError(Exception):
    """Base error for the metrics engine."""

    code = "metrics_error"

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class InvalidDateRangeError(MetricsError):
    """Custom range bounds are malformed or inverted (from > to)."""

    code = "invalid_date_range"
