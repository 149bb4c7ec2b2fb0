from datetime import date
from typing import Callable, Dict, List, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import clean_filters, compact_params, normalize_pagination
from vehicleprep.api.request import ApiResponse, api_request
from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)


class TimesheetsAPI:
    """Admin review of clock-in/out records against the planned schedules."""

    def __init__(self, client: ApiClient, today: Callable[[], date] = date.today):
        self.client = client
        self._today = today

    # -------------------------
    # CRUD
    # -------------------------
    def get_timesheets(self, filters: Optional[Dict] = None) -> ApiResponse:
        result = api_request(
            lambda: self.client.get("/admin/timesheets", params=clean_filters(filters or {})),
            retry_count=1,
        )
        if isinstance(result.data, dict):
            if not isinstance(result.data.get("timesheets"), list):
                logger.warning("Unexpected timesheet list payload", keys=list(result.data.keys()))
            if isinstance(result.data.get("pagination"), dict):
                result.data["pagination"] = normalize_pagination(result.data["pagination"])
        return result

    def get_timesheet(self, timesheet_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/admin/timesheets/{timesheet_id}"))

    def create_timesheet(self, data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.post("/admin/timesheets", data),
            show_success_toast=True,
            success_message="Timesheet created",
        )

    def update_timesheet(self, timesheet_id: str, data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.put(f"/admin/timesheets/{timesheet_id}", data),
            show_success_toast=True,
            success_message="Timesheet updated",
        )

    def delete_timesheet(self, timesheet_id: str) -> ApiResponse:
        return api_request(
            lambda: self.client.delete(f"/admin/timesheets/{timesheet_id}"),
            show_success_toast=True,
            success_message="Timesheet deleted",
        )

    # -------------------------
    # Review
    # -------------------------
    def validate_timesheet(self, timesheet_id: str, admin_notes: Optional[str] = None) -> ApiResponse:
        stamp = f"Validated on {self._today().isoformat()}"
        notes = f"{admin_notes}\n{stamp}" if admin_notes else stamp
        return self.update_timesheet(timesheet_id, {"status": "validated", "adminNotes": notes})

    def dispute_timesheet(self, timesheet_id: str, reason: str) -> ApiResponse:
        notes = f"Disputed on {self._today().isoformat()}: {reason}"
        return self.update_timesheet(timesheet_id, {"status": "disputed", "adminNotes": notes})

    def bulk_actions(self, action: str, timesheet_ids: List[str], params: Optional[Dict] = None) -> ApiResponse:
        data = compact_params({"action": action, "timesheetIds": timesheet_ids, "params": params})
        return api_request(
            lambda: self.client.post("/admin/timesheets/bulk-actions", data),
            show_success_toast=True,
            success_message="Bulk action completed",
        )

    def validate_many(self, timesheet_ids: List[str], admin_notes: Optional[str] = None) -> ApiResponse:
        return self.bulk_actions("validate", timesheet_ids, compact_params({"adminNotes": admin_notes}))

    def dispute_many(self, timesheet_ids: List[str], reason: str) -> ApiResponse:
        return self.bulk_actions("dispute", timesheet_ids, {"adminNotes": reason})

    def delete_many(self, timesheet_ids: List[str]) -> ApiResponse:
        return self.bulk_actions("delete", timesheet_ids)

    # -------------------------
    # Schedule vs. actual
    # -------------------------
    def get_comparison(self, filters: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/timesheets/compare", params=clean_filters(filters)),
            retry_count=1,
        )

    def get_missing_timesheets(self, filters: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/timesheets/compare/missing", params=clean_filters(filters)),
            retry_count=1,
        )

    def get_stats(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/timesheets/stats", params=clean_filters(filters or {})),
            retry_count=1,
        )

    def get_punctuality_report(self, filters: Optional[Dict] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.get("/admin/timesheets/stats/punctuality", params=clean_filters(filters or {})),
            retry_count=1,
        )
