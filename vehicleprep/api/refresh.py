import threading
from concurrent.futures import Future
from datetime import datetime
from typing import Callable, List, Optional

import requests

from vehicleprep.api.exceptions import MissingRefreshTokenError, RefreshError
from vehicleprep.api.storage import TokenStore, is_usable_token
from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)

REFRESH_ENDPOINT = "/auth/refresh"


class RefreshCoordinator:
    """
    Single-flight access token refresh for one API client.

    All requests that come back 401 while a refresh is running belong to the
    same "wave": the first one issues the refresh call, the others park on a
    one-shot future in the pending queue. When the refresh settles every
    parked future is resolved with the new token (or rejected with the
    refresh error) before the wave is closed.
    """

    def __init__(
        self,
        token_store: TokenStore,
        base_url: str,
        timeout: float = 10,
        on_session_expired: Optional[Callable[[], object]] = None,
    ):
        self.token_store = token_store
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.on_session_expired = on_session_expired
        self._lock = threading.Lock()
        self._is_refreshing = False
        self._pending: List[Future] = []
        self._waves = 0
        self._last_refresh_at: Optional[datetime] = None

    @property
    def is_refreshing(self) -> bool:
        with self._lock:
            return self._is_refreshing

    def pending_count(self) -> int:
        """Number of requests parked on the running wave."""
        with self._lock:
            return len(self._pending)

    def obtain_token(self) -> str:
        """
        Return a fresh access token, joining the running wave if there is one.

        Raises:
            MissingRefreshTokenError: no usable refresh token is stored
            RefreshError: the refresh call got no answer, or its response carried no token
            requests.HTTPError: the refresh call was rejected
        """
        waiter = None
        with self._lock:
            if self._is_refreshing:
                waiter = Future()
                self._pending.append(waiter)
                position = len(self._pending)
            else:
                self._is_refreshing = True
                self._waves += 1
                wave = self._waves

        if waiter is not None:
            logger.debug("Refresh in progress, request queued", position=position)
            return waiter.result()

        logger.info("Refreshing access token", wave=wave)
        return self._lead_wave()

    def _lead_wave(self) -> str:
        token = None
        error = None
        try:
            token = self._request_new_token()
            self.token_store.set_access_token(token)
            logger.info("Access token refreshed")
            return token
        except Exception as e:
            error = e
            logger.warning("Token refresh failed, ending session", error_type=type(e).__name__, error=str(e))
            self._expire_session()
            raise
        finally:
            if token is None and error is None:
                error = RefreshError("Token refresh interrupted")
            self._settle(token, error)

    def _settle(self, token: Optional[str], error: Optional[BaseException]) -> None:
        # The queue is drained before the flag drops so the next wave starts empty
        with self._lock:
            waiters, self._pending = self._pending, []
            if error is None:
                self._last_refresh_at = datetime.now()
            for waiter in waiters:
                if error is not None:
                    waiter.set_exception(error)
                else:
                    waiter.set_result(token)
            self._is_refreshing = False
        if waiters:
            logger.info(
                "Released queued requests",
                count=len(waiters),
                outcome="rejected" if error is not None else "replayed",
            )

    def _request_new_token(self) -> str:
        refresh_token = self.token_store.get_refresh_token()
        if not is_usable_token(refresh_token):
            raise MissingRefreshTokenError()

        # Bare requests call: must not go through the client's session or its 401 handling
        try:
            response = requests.post(
                f"{self.base_url}{REFRESH_ENDPOINT}",
                json={"refreshToken": refresh_token},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            # A refresh that never answered ends the session; it is not a retryable network blip
            raise RefreshError(f"Token refresh request failed: {e}") from e
        if response.status_code >= 400:
            raise requests.HTTPError(
                f"{response.status_code} from token refresh",
                response=response,
            )

        try:
            token = response.json()["data"]["token"]
        except (ValueError, KeyError, TypeError) as e:
            raise RefreshError("Refresh response did not contain a token") from e
        if not is_usable_token(token):
            raise RefreshError("Refresh response did not contain a token")
        return token

    def _expire_session(self) -> None:
        self.token_store.clear_all()
        if self.on_session_expired is None:
            return
        try:
            self.on_session_expired()
        except Exception as e:
            logger.error("Session-expired handler failed", error=str(e), exc_info=True)

    def get_status(self) -> dict:
        """Get current status of the coordinator"""
        with self._lock:
            return {
                "is_refreshing": self._is_refreshing,
                "pending": len(self._pending),
                "waves": self._waves,
                "last_refresh_at": self._last_refresh_at.isoformat() if self._last_refresh_at else None,
                "timestamp": datetime.now().isoformat(),
            }
