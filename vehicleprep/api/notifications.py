"""
User-facing notifications ("toasts").

The dashboards show a toast for opt-in successes and for request errors. The
client only emits them through a Notifier; what the notifier does with them
(log, push to a UI, collect for a test) is up to whoever installs it.
"""
import threading
from dataclasses import dataclass
from typing import List

from vehicleprep.logging_config import get_logger

logger = get_logger(__name__)

SUCCESS_TITLE = "Success"
ERROR_TITLE = "Error"


@dataclass
class Toast:
    title: str
    description: str
    variant: str = "default"


class Notifier:
    def notify(self, title: str, description: str, variant: str = "default") -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Default notifier: toasts become log lines."""

    def notify(self, title, description, variant="default"):
        if variant == "destructive":
            logger.warning("Toast", title=title, description=description, variant=variant)
        else:
            logger.info("Toast", title=title, description=description, variant=variant)


class RecordingNotifier(Notifier):
    """Keeps every toast in memory, in emission order."""

    def __init__(self):
        self._lock = threading.Lock()
        self.toasts: List[Toast] = []

    def notify(self, title, description, variant="default"):
        with self._lock:
            self.toasts.append(Toast(title=title, description=description, variant=variant))


_notifier: Notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    return _notifier


def set_notifier(notifier: Notifier) -> Notifier:
    '''
    Install the process-wide notifier and return the previous one.
    '''
    global _notifier
    previous = _notifier
    _notifier = notifier
    return previous


def success_toast(message: str) -> None:
    _notifier.notify(SUCCESS_TITLE, message)


def error_toast(message: str) -> None:
    _notifier.notify(ERROR_TITLE, message, variant="destructive")
