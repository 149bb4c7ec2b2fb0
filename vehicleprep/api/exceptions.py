"""Errors raised by the authenticated client.

HTTP failures are surfaced as ``requests.HTTPError`` (with ``.response``) and
transport failures as ``requests.ConnectionError`` / ``requests.Timeout``.
The classes below cover what requests has no vocabulary for.
"""


class AuthError(Exception):
    """Base class for authentication failures on the client side."""


class RefreshError(AuthError):
    """The access token could not be refreshed; the session is over."""


class MissingRefreshTokenError(RefreshError):
    """No usable refresh token is stored, so no refresh call was attempted."""

    def __init__(self, message="No refresh token available"):
        super().__init__(message)


class TooManyAttemptsError(AuthError):
    """Login refused locally after too many failed attempts."""

    def __init__(self, retry_after_seconds: float):
        self.retry_after_seconds = retry_after_seconds
        minutes = max(1, int(round(retry_after_seconds / 60)))
        super().__init__(f"Too many login attempts. Try again in {minutes} minutes.")
