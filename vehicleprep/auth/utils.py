"""Authentication helpers: local login throttling and server health."""
import threading
import time
from typing import Callable, Optional

import requests

from vehicleprep.api.exceptions import TooManyAttemptsError
from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)

MAX_LOGIN_ATTEMPTS = 5
LOGIN_LOCKOUT_SECONDS = 15 * 60


class LoginThrottle:
    """
    Refuse login locally after too many failures.

    After MAX_LOGIN_ATTEMPTS failed attempts, further logins raise until
    LOGIN_LOCKOUT_SECONDS have passed since the last failed attempt; then the
    counter starts over.
    """

    def __init__(
        self,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        lockout_seconds: float = LOGIN_LOCKOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self.attempts = 0
        self.last_attempt_at: Optional[float] = None

    def check(self) -> None:
        with self._lock:
            if self.attempts < self.max_attempts or self.last_attempt_at is None:
                return
            elapsed = self._clock() - self.last_attempt_at
            if elapsed < self.lockout_seconds:
                logger.warning("Login refused, too many attempts", attempts=self.attempts)
                raise TooManyAttemptsError(self.lockout_seconds - elapsed)
            self.attempts = 0
            self.last_attempt_at = None

    def record_failure(self) -> None:
        with self._lock:
            self.attempts += 1
            self.last_attempt_at = self._clock()

    def reset(self) -> None:
        with self._lock:
            self.attempts = 0
            self.last_attempt_at = None


def check_server_health(client) -> bool:
    """Return True when the API answers its health endpoint."""
    try:
        client.get("/health", refresh_on_401=False)
        return True
    except requests.RequestException as e:
        logger.warning("API health check failed", error=str(e))
        return False
