from typing import Any, Dict, List, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import compact_params
from vehicleprep.api.request import ApiResponse, api_request


class SchedulesAPI:
    """Admin schedule planning. Conflict detection itself runs on the server."""

    def __init__(self, client: ApiClient):
        self.client = client

    # -------------------------
    # Schedules
    # -------------------------
    def get_schedules(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/schedules", params=filters or {}),
            retry_count=2,
        )

    def get_schedule(self, schedule_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/admin/schedules/{schedule_id}"))

    def create_schedule(self, schedule_data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.post("/admin/schedules", schedule_data),
            show_success_toast=True,
            success_message="Schedule created",
        )

    def update_schedule(self, schedule_id: str, schedule_data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.put(f"/admin/schedules/{schedule_id}", schedule_data),
            show_success_toast=True,
            success_message="Schedule updated",
        )

    def delete_schedule(self, schedule_id: str) -> ApiResponse:
        return api_request(
            lambda: self.client.delete(f"/admin/schedules/{schedule_id}"),
            show_success_toast=True,
            success_message="Schedule deleted",
        )

    def bulk_create_schedules(self, data: Dict) -> ApiResponse:
        # The caller reports created/failed counts itself
        return api_request(lambda: self.client.post("/admin/schedules/bulk-create", data))

    def duplicate_schedule(self, schedule_id: str, data: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.post(f"/admin/schedules/{schedule_id}/duplicate", data or {}),
            show_success_toast=True,
            success_message="Schedule duplicated",
        )

    # -------------------------
    # Views and stats
    # -------------------------
    def get_calendar_view(self, year: Optional[int] = None, month: Optional[int] = None,
                          view: str = "month", agency: Optional[str] = None,
                          user: Optional[str] = None) -> ApiResponse:
        params = {"year": year, "month": month, "view": view, "agency": agency, "user": user}
        return api_request(
            lambda: self.client.get("/admin/schedules/calendar", params=compact_params(params)),
        )

    def get_schedule_stats(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(lambda: self.client.get("/admin/schedules/stats", params=filters or {}))

    def get_user_week_schedule(self, user_id: str, date: Optional[str] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get(f"/admin/schedules/user/{user_id}/week", params=compact_params({"date": date})),
        )

    def search_schedules(self, search: str, filters: Optional[Dict] = None,
                         options: Optional[Dict] = None) -> ApiResponse:
        query: Dict[str, Any] = {"search": search}
        if filters:
            query["filters"] = filters
        if options:
            query["options"] = options
        return api_request(lambda: self.client.post("/admin/schedules/search", query))

    # -------------------------
    # Templates
    # -------------------------
    def get_templates(self, category: Optional[str] = None, include_usage: bool = False) -> ApiResponse:
        params = compact_params({"category": category, "includeUsage": "true" if include_usage else None})
        return api_request(lambda: self.client.get("/admin/schedules/templates", params=params))

    def create_template(self, template_data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.post("/admin/schedules/templates", template_data),
            show_success_toast=True,
            success_message="Template created",
        )

    def apply_template(self, data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.post("/admin/schedules/apply-template", data),
            show_success_toast=True,
            success_message="Template applied",
        )

    # -------------------------
    # Conflicts
    # -------------------------
    def get_conflicts(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(lambda: self.client.get("/admin/schedules/conflicts", params=filters or {}))

    def check_conflicts(self, user_id: str, agency_id: str, date: str, start_time: str,
                        end_time: str, exclude_id: Optional[str] = None) -> ApiResponse:
        """Ask the server whether a prospective shift overlaps existing ones."""
        payload = compact_params({
            "userId": user_id,
            "agencyId": agency_id,
            "date": date,
            "startTime": start_time,
            "endTime": end_time,
            "excludeId": exclude_id,
        })
        return api_request(
            lambda: self.client.post("/admin/schedules/conflicts/check", payload),
            show_error_toast=False,
        )

    def resolve_conflicts(self, conflict_ids: List[str], resolution_type: str = "auto",
                          parameters: Optional[Dict] = None) -> ApiResponse:
        data: Dict[str, Any] = {"conflictIds": conflict_ids, "resolutionType": resolution_type}
        if parameters:
            data["parameters"] = parameters
        return api_request(
            lambda: self.client.post("/admin/schedules/conflicts/resolve", data),
            show_success_toast=True,
            success_message="Conflicts resolved",
        )

    def validate_schedule(self, schedule_data: Dict) -> ApiResponse:
        # Validation failures are shown inline by the caller, not as toasts
        return api_request(
            lambda: self.client.post("/admin/schedules/validate", schedule_data),
            show_error_toast=False,
        )
