from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from vehicleprep.api.client import ApiClient
from vehicleprep.api.helpers import compact_params
from vehicleprep.api.request import ApiResponse, api_request
from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Millisecond ISO-8601 in UTC with a trailing Z, the format the backend parses."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class TimesheetStatus:
    timesheet: Optional[Dict[str, Any]]
    is_not_started: bool
    is_clocked_in: bool
    is_clocked_out: bool
    is_on_break: bool
    current_worked_minutes: int
    current_worked_time: Optional[str]

    @classmethod
    def from_payload(cls, data: Optional[Dict[str, Any]]) -> "TimesheetStatus":
        data = data or {}
        timesheet = data.get("timesheet")
        current = data.get("currentStatus") or {}
        # No timesheet yet, or one with neither start nor end, means the day has not begun
        not_started = not timesheet or (not timesheet.get("startTime") and not timesheet.get("endTime"))
        return cls(
            timesheet=timesheet,
            is_not_started=bool(not_started),
            is_clocked_in=bool(current.get("isClockedIn")),
            is_clocked_out=bool(current.get("isClockedOut")),
            is_on_break=bool(current.get("isOnBreak")),
            current_worked_minutes=current.get("currentWorkedMinutes") or 0,
            current_worked_time=current.get("currentWorkedTime") or None,
        )


class PreparatorTimesheetsAPI:
    """Clock-in/out and breaks for the signed-in preparator."""

    def __init__(self, client: ApiClient, now: Callable[[], datetime] = utc_now):
        self.client = client
        self._now = now

    @staticmethod
    def _require_agency(agency_id: str, action: str) -> None:
        if not agency_id:
            raise ValueError(f"Agency id is required to {action}")

    def _punch(self, endpoint: str, payload: Dict[str, Any], success_message: str) -> ApiResponse:
        logger.info("Timesheet punch", endpoint=endpoint, agency_id=payload["agencyId"])
        return api_request(
            lambda: self.client.post(endpoint, payload),
            show_success_toast=True,
            success_message=success_message,
        )

    def get_today_status(self, agency_id: str) -> TimesheetStatus:
        """
        Today's timesheet for the agency, flattened into a TimesheetStatus.

        Raises:
            ValueError: missing agency id, or the server answered success=false
        """
        self._require_agency(agency_id, "read today's status")
        result = api_request(
            lambda: self.client.get("/timesheets/today-status", params={"agencyId": agency_id}),
            show_error_toast=False,
        )
        if not result.success:
            raise ValueError(result.message or "Invalid API response")
        return TimesheetStatus.from_payload(result.data)

    def clock_in(self, agency_id: str, location: Optional[Dict[str, float]] = None,
                 timestamp: Optional[datetime] = None) -> ApiResponse:
        self._require_agency(agency_id, "clock in")
        payload = {
            "agencyId": agency_id,
            "timestamp": iso_timestamp(timestamp or self._now()),
            "location": location,
        }
        return self._punch("/timesheets/clock-in", payload, "Clocked in")

    def clock_out(self, agency_id: str, notes: Optional[str] = None,
                  location: Optional[Dict[str, float]] = None,
                  timestamp: Optional[datetime] = None) -> ApiResponse:
        self._require_agency(agency_id, "clock out")
        payload = {
            "agencyId": agency_id,
            "timestamp": iso_timestamp(timestamp or self._now()),
            "notes": notes or None,
            "location": location,
        }
        return self._punch("/timesheets/clock-out", payload, "Clocked out")

    def start_break(self, agency_id: str, timestamp: Optional[datetime] = None) -> ApiResponse:
        self._require_agency(agency_id, "start a break")
        payload = {"agencyId": agency_id, "timestamp": iso_timestamp(timestamp or self._now())}
        return self._punch("/timesheets/break-start", payload, "Break started")

    def end_break(self, agency_id: str, timestamp: Optional[datetime] = None) -> ApiResponse:
        self._require_agency(agency_id, "end a break")
        payload = {"agencyId": agency_id, "timestamp": iso_timestamp(timestamp or self._now())}
        return self._punch("/timesheets/break-end", payload, "Break ended")

    def get_history(self, start_date: Optional[str] = None, end_date: Optional[str] = None,
                    agency: Optional[str] = None, status: Optional[str] = None,
                    page: int = 1, limit: int = 20) -> ApiResponse:
        params = compact_params({
            "startDate": start_date,
            "endDate": end_date,
            "agency": agency,
            "status": status,
            "page": page or 1,
            "limit": limit or 20,
        })
        return api_request(lambda: self.client.get("/timesheets/history", params=params))

    def get_stats(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/timesheets/stats"))

    def update_timesheet(self, timesheet_id: str, data: Dict[str, Any]) -> ApiResponse:
        if not timesheet_id:
            raise ValueError("Timesheet id is required")
        return api_request(
            lambda: self.client.put(f"/timesheets/{timesheet_id}", data),
            show_success_toast=True,
            success_message="Timesheet updated",
        )
