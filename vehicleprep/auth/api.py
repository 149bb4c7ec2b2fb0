"""Authentication endpoints: login, logout, profile and explicit refresh."""
from typing import Optional

import requests

from vehicleprep.api.client import ApiClient
from vehicleprep.api.exceptions import AuthError
from vehicleprep.api.request import ApiResponse, api_request
from vehicleprep.api.storage import is_usable_token
from vehicleprep.auth.utils import LoginThrottle
from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)


class AuthAPI:
    def __init__(self, client: ApiClient, throttle: Optional[LoginThrottle] = None):
        self.client = client
        self.throttle = throttle or LoginThrottle()

    def login(self, email: str, password: str) -> ApiResponse:
        """
        Authenticate and persist the returned credentials.

        The access token (``data.token``) and refresh token
        (``data.refreshToken``) are written under every storage alias.
        """
        self.throttle.check()
        try:
            result = api_request(
                lambda: self.client.post(
                    "/auth/login",
                    {"email": email, "password": password},
                    refresh_on_401=False,
                ),
                show_error_toast=True,
                show_success_toast=True,
                success_message="Login successful",
            )
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code in (400, 401):
                self.throttle.record_failure()
            logger.warning("Login failed", email=email, status=getattr(e.response, "status_code", None))
            raise

        data = result.data if isinstance(result.data, dict) else {}
        if result.success and is_usable_token(data.get("token")):
            self.client.token_store.save_credentials(data["token"], data.get("refreshToken"))
            self.throttle.reset()
            logger.info("User logged in", email=email)
        else:
            self.throttle.record_failure()
            logger.warning("Login rejected", email=email, message=result.message)
        return result

    def logout(self) -> None:
        """Best-effort server logout, then wipe every locally stored auth key."""
        try:
            self.client.post("/auth/logout", refresh_on_401=False)
        except (requests.RequestException, AuthError) as e:
            logger.warning("Server logout failed (non-blocking)", error=str(e))
        self.client.token_store.clear_all()
        logger.info("User logged out")

    def get_profile(self) -> ApiResponse:
        return api_request(lambda: self.client.get("/auth/me"), show_error_toast=True)

    def refresh_token(self) -> ApiResponse:
        '''Explicit refresh through the client; no toast for the automatic flow'''
        refresh_token = self.client.token_store.get_refresh_token()
        result = api_request(
            lambda: self.client.post("/auth/refresh", {"refreshToken": refresh_token}),
            show_error_toast=False,
        )
        data = result.data if isinstance(result.data, dict) else {}
        if result.success and is_usable_token(data.get("token")):
            self.client.token_store.set_access_token(data["token"])
        return result

    def verify_auth(self) -> bool:
        try:
            return self.get_profile().success
        except (requests.RequestException, AuthError):
            return False
