from vehicleprep.api.client import ApiClient, RequestSpec, get_api_client
from vehicleprep.api.exceptions import AuthError, MissingRefreshTokenError, RefreshError, TooManyAttemptsError
from vehicleprep.api.navigation import Navigator, redirect_to_login
from vehicleprep.api.notifications import LoggingNotifier, Notifier, RecordingNotifier, set_notifier
from vehicleprep.api.refresh import RefreshCoordinator
from vehicleprep.api.request import ApiResponse, FieldError, api_request, handle_api_error
from vehicleprep.api.storage import JsonFileStorage, MemoryStorage, SqlStorage, TokenStore

__all__ = [
    "ApiClient",
    "ApiResponse",
    "AuthError",
    "FieldError",
    "JsonFileStorage",
    "LoggingNotifier",
    "MemoryStorage",
    "MissingRefreshTokenError",
    "Navigator",
    "Notifier",
    "RecordingNotifier",
    "RefreshCoordinator",
    "RefreshError",
    "RequestSpec",
    "SqlStorage",
    "TokenStore",
    "TooManyAttemptsError",
    "api_request",
    "get_api_client",
    "handle_api_error",
    "redirect_to_login",
    "set_notifier",
]
