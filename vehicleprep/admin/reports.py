from typing import Dict, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import clean_filters
from vehicleprep.api.request import ApiResponse, api_request


class ReportsAPI:
    """Report generation is server-side; these calls request and list the results."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_quick_metrics(self, period: str = "week") -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/reports/quick-metrics", params={"period": period}),
            show_error_toast=False,
            retry_count=1,
        )

    def get_punctuality_report(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/reports/ponctualite", params=clean_filters(filters or {})),
            retry_count=1,
        )

    def get_performance_report(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/reports/performance", params=clean_filters(filters or {})),
            retry_count=1,
        )

    def get_activity_report(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/reports/activite", params=clean_filters(filters or {})),
            retry_count=1,
        )

    def export_report(self, options: Dict) -> ApiResponse:
        return api_request(lambda: self.client.post("/admin/reports/export", options))

    def download_report(self, report_id: str, report_format: str) -> bytes:
        """Raw file content of a generated report (csv, excel or pdf)."""
        response = self.client.get(f"/admin/reports/{report_id}/download", params={"format": report_format})
        return response.content

    def get_reports_list(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/reports", params=clean_filters(filters or {})),
            retry_count=1,
        )

    def get_report_templates(self) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/reports/templates"),
            show_error_toast=False,
            retry_count=1,
        )

    def delete_report(self, report_id: str) -> ApiResponse:
        return api_request(lambda: self.client.delete(f"/admin/reports/{report_id}"))
