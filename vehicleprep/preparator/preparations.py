from datetime import date
from typing import BinaryIO, Dict, Optional
from urllib.parse import quote

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import clean_filters, compact_params
from vehicleprep.api.request import ApiResponse, api_request

DEFAULT_CANCEL_REASON = "Cancelled by user"


class PreparationsAPI:
    """Vehicle preparation workflow as seen by the preparator on the lot."""

    def __init__(self, client: ApiClient):
        self.client = client

    # -------------------------
    # Context
    # -------------------------
    def get_today_schedule_agency(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/preparations/today-schedule-agency"))

    def get_user_agencies(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/preparations/user-agencies"), retry_count=1)

    # -------------------------
    # Workflow
    # -------------------------
    def start_preparation(self, vehicle_data: Dict) -> ApiResponse:
        return api_request(
            lambda: self.client.post("/preparations/start", vehicle_data),
            show_success_toast=True,
            success_message="Preparation started",
        )

    def get_preparation(self, preparation_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/preparations/{preparation_id}"))

    def get_current_preparation(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/preparations/current"), show_error_toast=False)

    def complete_step(self, preparation_id: str, step: str, notes: Optional[str] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.put(
                f"/preparations/{preparation_id}/step",
                {"step": step, "notes": notes or ""},
            ),
        )

    def complete_step_with_photo(self, preparation_id: str, step: str, photo: BinaryIO,
                                 filename: str = "photo.jpg", notes: Optional[str] = None) -> ApiResponse:
        """Upload the step photo as multipart form data."""
        form = {"step": step}
        if notes:
            form["notes"] = notes
        return api_request(
            lambda: self.client.put(
                f"/preparations/{preparation_id}/step",
                data=form,
                files={"photo": (filename, photo, "image/jpeg")},
            ),
        )

    def complete_preparation(self, preparation_id: str, notes: Optional[str] = None) -> ApiResponse:
        body = {"notes": notes.strip()} if notes and notes.strip() else {}
        return api_request(
            lambda: self.client.post(f"/preparations/{preparation_id}/complete", body),
            show_success_toast=True,
            success_message="Preparation completed",
        )

    def cancel_preparation(self, preparation_id: str, reason: Optional[str] = None) -> ApiResponse:
        return api_request(
            lambda: self.client.post(
                f"/preparations/{preparation_id}/cancel",
                {"reason": reason or DEFAULT_CANCEL_REASON},
            ),
        )

    def report_issue(self, preparation_id: str, issue_type: str, description: str,
                     severity: Optional[str] = None, photo: Optional[BinaryIO] = None,
                     filename: str = "issue.jpg") -> ApiResponse:
        # (None, value) parts keep the body multipart even without a photo
        parts = {"type": (None, issue_type), "description": (None, description)}
        if severity:
            parts["severity"] = (None, severity)
        if photo is not None:
            parts["photo"] = (filename, photo, "image/jpeg")
        return api_request(
            lambda: self.client.post(f"/preparations/{preparation_id}/issue", files=parts),
            show_success_toast=True,
            success_message="Issue reported",
        )

    # -------------------------
    # History
    # -------------------------
    def get_history(self, start_date: Optional[date] = None, end_date: Optional[date] = None,
                    **filters) -> ApiResponse:
        params = clean_filters({
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
            **filters,
        })
        return api_request(lambda: self.client.get("/preparations/history", params=params))

    def get_my_stats(self, period: Optional[str] = None, agency_id: Optional[str] = None) -> ApiResponse:
        """Personal counters; period is one of "today", "week" or "month", server default when omitted."""
        params = compact_params({"period": period, "agencyId": agency_id})
        return api_request(lambda: self.client.get("/preparations/my-stats", params=params))

    def get_vehicle_history(self, license_plate: str) -> ApiResponse:
        plate = quote(license_plate, safe="")
        return api_request(lambda: self.client.get(f"/preparations/vehicle-history/{plate}"))

    def get_preparation_photos(self, preparation_id: str) -> ApiResponse:
        return api_request(lambda: self.client.get(f"/preparations/{preparation_id}/photos"))
