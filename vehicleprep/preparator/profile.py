from datetime import date
from typing import Dict, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import compact_params
from vehicleprep.api.request import ApiResponse, api_request


class ProfileAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_dashboard(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/profile/dashboard"), retry_count=1)

    def get_performance_stats(self, period: Optional[str] = None, agency_id: Optional[str] = None) -> ApiResponse:
        params = compact_params({"period": period, "agencyId": agency_id})
        return api_request(lambda: self.client.get("/profile/performance", params=params), show_error_toast=False)

    def get_week_schedule(self, week_of: Optional[date] = None) -> ApiResponse:
        params = compact_params({"date": week_of.isoformat() if week_of else None})
        return api_request(lambda: self.client.get("/profile/schedule/week", params=params))

    def update_profile(self, data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.put("/profile", data),
            show_success_toast=True,
            success_message="Profile updated",
        )
