from __future__ import annotations

from typing import Dict, Iterable, Sequence


class DashboardError(Exception):
    """Base error for a data source request; maps onto an HTTP status."""

    status_code = 500
    error = "Failed to fetch data"

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.error, "details": self.details}


class ConfigurationError(DashboardError):
    pass


class UpstreamFetchError(DashboardError):
    pass


class NoDataError(DashboardError):
    status_code = 404
    error = "No data found"


class MissingColumnsError(DashboardError):
    status_code = 400
    error = "Required columns not found"

    def __init__(self, missing: Iterable[str], headers: Sequence[str] = ()):
        self.missing = list(missing)
        self.headers = [str(h) for h in headers]
        details = f"missing: {', '.join(self.missing)}"
        if self.headers:
            details += f" (headers: {', '.join(self.headers)})"
        super().__init__(details)
