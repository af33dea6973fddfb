"""Custom exception hierarchy for pyqapac."""

from __future__ import annotations


class QapacError(Exception):
    """Base exception for all pyqapac errors."""


class QapacConfigError(QapacError):
    """Invalid or missing configuration."""


class QapacTransportError(QapacError):
    """HTTP-level failure talking to the Qapac backend."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class QapacNetworkError(QapacTransportError):
    """The request never produced a response (DNS, connect, timeout...)."""


class QapacServerError(QapacTransportError):
    """The backend answered with a non-2xx status or an unreadable body."""


class QapacAuthError(QapacServerError):
    """Credentials rejected (HTTP 401/403).

    On any authenticated call this means the stored session is no longer
    usable and must be cleared.
    """


class MalformedGeometryError(QapacError):
    """A WKT geometry string could not be parsed.

    Only raised by the strict decoder; the lenient decoder used by the
    polling loops yields an empty geometry instead.
    """


class LocationPermissionError(QapacError):
    """The host location provider lost (or never had) location permission."""
