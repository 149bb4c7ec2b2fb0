"""Where the user is sent when the session cannot be recovered."""
import threading
from typing import List

from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)

LOGIN_PATH = "/login"


class Navigator:
    """Tracks the current route of the dashboard using the client."""

    def __init__(self, pathname: str = "/"):
        self._lock = threading.Lock()
        self.pathname = pathname
        self.history: List[str] = [pathname]

    def navigate(self, path: str) -> None:
        with self._lock:
            logger.info("Navigating", from_path=self.pathname, to_path=path)
            self.pathname = path
            self.history.append(path)


def redirect_to_login(navigator: Navigator, login_path: str = LOGIN_PATH) -> bool:
    """
    Send the navigator to the login page unless it is already there.

    Returns True when a navigation happened. Never raises: a failing redirect
    is logged and reported as False.
    """
    try:
        if login_path in (navigator.pathname or ""):
            logger.debug("Already on login route, skipping redirect", pathname=navigator.pathname)
            return False
        navigator.navigate(login_path)
        return True
    except Exception as e:
        logger.error("Redirect to login failed", error=str(e), exc_info=True)
        return False
