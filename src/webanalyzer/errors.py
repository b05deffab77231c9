"""Error taxonomy surfaced by the analysis pipeline."""

from __future__ import annotations

from enum import Enum

__all__ = ["AnalysisError", "ErrorKind", "FetchError"]


class ErrorKind(str, Enum):
    """Stable, user-facing failure categories."""

    INVALID_URL = "InvalidUrl"
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    PAGE_NOT_FOUND = "PageNotFound"
    TIMEOUT = "Timeout"
    UNKNOWN = "Unknown"

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def status_code(self) -> int:
        """HTTP status used when the failure is reported through the API."""

        return _STATUS_CODES[self]


_MESSAGES = {
    ErrorKind.INVALID_URL: "Invalid URL format. Only HTTP and HTTPS URLs are supported.",
    ErrorKind.NOT_FOUND: "Website not found. Please check the URL and try again.",
    ErrorKind.FORBIDDEN: "Access denied. This website blocks automated requests.",
    ErrorKind.PAGE_NOT_FOUND: (
        "Page not found. The URL may be incorrect or the page may have been removed."
    ),
    ErrorKind.TIMEOUT: "Request timeout. The website took too long to respond.",
    ErrorKind.UNKNOWN: (
        "Failed to analyze website. Please try again or check if the URL is accessible."
    ),
}

_STATUS_CODES = {
    ErrorKind.INVALID_URL: 400,
    ErrorKind.NOT_FOUND: 502,
    ErrorKind.FORBIDDEN: 502,
    ErrorKind.PAGE_NOT_FOUND: 502,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UNKNOWN: 502,
}


class AnalysisError(Exception):
    """Raised when a URL cannot be analysed."""

    def __init__(self, kind: ErrorKind, url: str | None = None, message: str | None = None) -> None:
        self.kind = kind
        self.url = url
        self.message = message or kind.message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


class FetchError(AnalysisError):
    """Transport-level failure while retrieving a page."""
