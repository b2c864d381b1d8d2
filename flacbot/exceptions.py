"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class FlacBotError(Exception):
    """Base exception for all application-specific errors."""


class RemoteError(FlacBotError):
    """Base class for failures talking to the remote catalog API."""


class RemoteUnavailableError(RemoteError):
    """
    Raised when the catalog cannot be reached: network errors, timeouts,
    non-2xx statuses, undecodable bodies or an open circuit breaker.
    """


class RemoteApiError(RemoteError):
    """Raised when the catalog answers but flags the request as failed."""


class DownloadError(FlacBotError):
    """Raised when the audio bytes behind a download URL cannot be fetched."""


class SessionExpiredError(FlacBotError):
    """
    Raised when a selection cannot be resolved against the user's session.

    ``reason`` is ``"session"`` when the user has no session at all and
    ``"track"`` when the session exists but the track id is not in it.
    """

    def __init__(self, message: str, reason: str = "session"):
        super().__init__(message)
        self.reason = reason


class LocalIOError(FlacBotError):
    """Raised when writing or removing a local file fails."""


class ConfigurationError(FlacBotError):
    """Raised for issues related to configuration loading or validation."""
