from typing import Dict, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import clean_filters, compact_params
from vehicleprep.api.request import ApiResponse, api_request


class DashboardAPI:
    # Dashboard widgets render their own empty/error states, so no toasts here
    def __init__(self, client: ApiClient):
        self.client = client

    def get_kpis(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/dashboard/kpis", params=clean_filters(filters or {})),
            show_error_toast=False,
        )

    def get_overview(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/dashboard/overview", params=clean_filters(filters or {})),
            show_error_toast=False,
        )

    def get_charts(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/dashboard/charts", params=clean_filters(filters or {})),
            show_error_toast=False,
        )

    def get_alerts(self, limit: Optional[int] = None, priority: Optional[str] = None,
                   unread_only: bool = False) -> ApiResponse:
        params = compact_params({
            "limit": limit,
            "priority": priority,
            "unreadOnly": "true" if unread_only else None,
        })
        return api_request(
            lambda: self.client.get("/admin/dashboard/alerts", params=params),
            show_error_toast=False,
        )

    def mark_alert_as_read(self, alert_id: str) -> ApiResponse:
        return api_request(lambda: self.client.patch(f"/admin/dashboard/alerts/{alert_id}/read"))

    def dismiss_alert(self, alert_id: str) -> ApiResponse:
        return api_request(lambda: self.client.delete(f"/admin/dashboard/alerts/{alert_id}"))

    def mark_all_alerts_as_read(self) -> ApiResponse:
        return api_request(lambda: self.client.patch("/admin/dashboard/alerts/read-all"))

    def get_realtime_data(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/admin/dashboard/realtime"), show_error_toast=False)
