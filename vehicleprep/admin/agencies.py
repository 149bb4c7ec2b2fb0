from typing import Dict, List, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import compact_params, is_paginated_list, normalize_pagination
from vehicleprep.api.request import ApiResponse, api_request


class AgenciesAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_agencies(self, filters: Optional[Dict] = None) -> ApiResponse:
        """List agencies; the pagination block always carries both `pages` and `totalPages`."""
        result = api_request(
            lambda: self.client.get("/admin/agencies", params=filters or {}),
            retry_count=2,
        )
        if result.success and is_paginated_list(result.data, "agencies"):
            result.data["pagination"] = normalize_pagination(result.data["pagination"])
        return result

    def get_agency(self, agency_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/admin/agencies/{agency_id}"))

    def create_agency(self, data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.post("/admin/agencies", data),
            show_success_toast=True,
            success_message="Agency created",
        )

    def update_agency(self, agency_id: str, data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.put(f"/admin/agencies/{agency_id}", data),
            show_success_toast=True,
            success_message="Agency updated",
        )

    def delete_agency(self, agency_id: str) -> ApiResponse:
        # Agencies are deactivated server-side, never hard-deleted
        return api_request(
            lambda: self.client.delete(f"/admin/agencies/{agency_id}"),
            show_success_toast=True,
            success_message="Agency deactivated",
        )

    def reactivate_agency(self, agency_id: str) -> ApiResponse:
        return api_request(
            lambda: self.client.patch(f"/admin/agencies/{agency_id}/reactivate"),
            show_success_toast=True,
            success_message="Agency reactivated",
        )

    def check_code_availability(self, code: str, exclude_id: Optional[str] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.post(
                "/admin/agencies/check-code",
                compact_params({"code": code, "excludeAgencyId": exclude_id}),
            ),
            show_error_toast=False,
        )

    def bulk_actions(self, action: str, agency_ids: List[str], params: Optional[Dict] = None) -> ApiResponse:
        data = compact_params({"action": action, "agencyIds": agency_ids, "params": params})
        return api_request(
            lambda: self.client.post("/admin/agencies/bulk-actions", data),
            show_success_toast=True,
            success_message="Bulk action completed",
        )

    def get_agency_stats(self, agency_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/admin/agencies/{agency_id}/stats"))

    def get_agency_users(self, agency_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/admin/agencies/{agency_id}/users"))
