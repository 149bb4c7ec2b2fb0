"""
Uniform call-site contract over the API client.

Every endpoint answers with the same envelope::

    {"success": bool, "data": ..., "message": str, "errors": [{"field": ..., "message": ...}]}

``api_request`` unwraps it, optionally emits toasts, and retries pure network
failures (nothing came back) a bounded number of times. It does NOT turn
``success: false`` into an exception: callers inspect ``.success`` and
``.errors`` themselves.
"""
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import requests

from vehicleprep.api.notifications import error_toast, success_toast
from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)

RETRY_DELAY_SECONDS = 1.0
GENERIC_ERROR_MESSAGE = "An error occurred"
CONNECTION_ERROR_MESSAGE = "Connection error"

STATUS_MESSAGES = {
    400: "Invalid request data",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    422: "Invalid data",
    429: "Too many requests, try again later",
    500: "Internal server error",
    502: "Server unavailable",
    503: "Service temporarily unavailable",
}


@dataclass
class FieldError:
    field: Optional[str]
    message: str

    @classmethod
    def from_raw(cls, raw: Any) -> "FieldError":
        # Older endpoints send plain strings instead of {field, message}
        if isinstance(raw, dict):
            return cls(field=raw.get("field"), message=str(raw.get("message", "")))
        return cls(field=None, message=str(raw))


@dataclass
class ApiResponse:
    success: bool
    data: Any = None
    message: str = ""
    errors: Optional[List[FieldError]] = None

    @classmethod
    def from_dict(cls, body: Any) -> "ApiResponse":
        if not isinstance(body, dict):
            return cls(success=True, data=body)
        raw_errors = body.get("errors")
        errors = [FieldError.from_raw(e) for e in raw_errors] if isinstance(raw_errors, list) else None
        return cls(
            success=bool(body.get("success", False)),
            data=body.get("data"),
            message=body.get("message") or "",
            errors=errors,
        )

    @classmethod
    def from_response(cls, response: requests.Response) -> "ApiResponse":
        if not response.content:
            return cls(success=200 <= response.status_code < 300)
        try:
            body = response.json()
        except ValueError as e:
            raise ValueError(f"Response from {response.url} is not JSON") from e
        return cls.from_dict(body)


def _response_body(error: BaseException) -> Any:
    response = getattr(error, "response", None)
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def is_network_error(error: BaseException) -> bool:
    """True when the request failed without any HTTP response (connection error, timeout)."""
    if not isinstance(error, requests.RequestException):
        return False
    if isinstance(error, requests.exceptions.InvalidJSONError):
        return False
    return getattr(error, "response", None) is None


def extract_error_message(error: BaseException) -> str:
    """Server-provided message, else the exception text, else the generic fallback."""
    body = _response_body(error)
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(error) or GENERIC_ERROR_MESSAGE


def handle_api_error(error: BaseException) -> str:
    """
    Turn any client error into a message suitable for the user.

    Order of preference: the server `message`, the joined `errors` messages,
    a per-status default, the exception text, then a generic fallback.
    """
    body = _response_body(error)
    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        if isinstance(body.get("errors"), list) and body["errors"]:
            return ", ".join(FieldError.from_raw(e).message for e in body["errors"])

    response = getattr(error, "response", None)
    if response is not None:
        status = response.status_code
        return STATUS_MESSAGES.get(status, f"Error {status}")

    if is_network_error(error):
        return CONNECTION_ERROR_MESSAGE
    return str(error) or GENERIC_ERROR_MESSAGE


def api_request(
    fn: Callable[[], requests.Response],
    show_error_toast: bool = True,
    show_success_toast: bool = False,
    success_message: Optional[str] = None,
    retry_count: int = 0,
) -> ApiResponse:
    """
    Run a request function and unwrap its envelope.

    Args:
        fn: zero-argument callable issuing the request (e.g. ``lambda: client.get("/x")``)
        show_error_toast: emit an error toast when the call finally fails
        show_success_toast: emit `success_message` as a toast on success
        success_message: text of the success toast
        retry_count: extra attempts for network errors only, spaced by RETRY_DELAY_SECONDS
    """
    try:
        result = ApiResponse.from_response(fn())
    except Exception as error:
        if retry_count > 0 and is_network_error(error):
            logger.warning(
                "Network error, retrying request",
                retries_left=retry_count,
                delay_seconds=RETRY_DELAY_SECONDS,
                error=str(error),
            )
            time.sleep(RETRY_DELAY_SECONDS)
            return api_request(
                fn,
                show_error_toast=show_error_toast,
                show_success_toast=show_success_toast,
                success_message=success_message,
                retry_count=retry_count - 1,
            )

        if show_error_toast and isinstance(error, requests.RequestException):
            error_toast(extract_error_message(error))
        raise

    if show_success_toast and success_message:
        success_toast(success_message)
    return result
