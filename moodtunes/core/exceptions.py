"""Custom exceptions and error taxonomy for the mood-based music discovery service"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Fixed set of failure classifications used throughout the pipeline"""
    VALIDATION = "VALIDATION"
    AUTH = "AUTH"
    API = "API"
    RATE_LIMIT = "RATE_LIMIT"
    NETWORK = "NETWORK"
    SERVER = "SERVER"


@dataclass(frozen=True)
class ErrorPolicy:
    """Transport status, retryability and default user message for an ErrorKind"""
    status_code: int
    retryable: bool
    default_message: str


ERROR_POLICIES = {
    ErrorKind.VALIDATION: ErrorPolicy(400, False, "Please check your input and try again."),
    ErrorKind.AUTH: ErrorPolicy(401, False, "Service authentication failed."),
    ErrorKind.API: ErrorPolicy(503, True, "Unable to fetch music data. Please try again later."),
    ErrorKind.RATE_LIMIT: ErrorPolicy(429, True, "Too many requests. Please wait and try again."),
    ErrorKind.NETWORK: ErrorPolicy(502, True, "Network connection failed."),
    ErrorKind.SERVER: ErrorPolicy(500, True, "An unexpected error occurred."),
}


def get_error_policy(kind: ErrorKind) -> ErrorPolicy:
    """Look up the policy for an error kind"""
    return ERROR_POLICIES[ErrorKind(kind)]


class MoodTunesError(Exception):
    """Base exception for the mood-based music discovery system"""
    pass


class DiscoveryError(MoodTunesError):
    """
    A failure classified into one of the fixed error kinds.

    The message is safe to show to the caller; ``details`` holds the
    original cause for diagnostics only.
    """

    kind: ErrorKind = ErrorKind.SERVER

    def __init__(
        self,
        message: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
        details: Optional[Any] = None
    ):
        if kind is not None:
            self.kind = ErrorKind(kind)
        self.message = message or get_error_policy(self.kind).default_message
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return get_error_policy(self.kind).status_code

    @property
    def retryable(self) -> bool:
        return get_error_policy(self.kind).retryable

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, message={self.message!r})"


class ValidationError(DiscoveryError):
    """Exception raised for invalid input"""
    kind = ErrorKind.VALIDATION


class AuthenticationError(DiscoveryError):
    """Exception raised when the external source rejects our credentials"""
    kind = ErrorKind.AUTH


class YouTubeAPIError(DiscoveryError):
    """Exception raised for YouTube Data API errors and unusable responses"""
    kind = ErrorKind.API


class RateLimitError(DiscoveryError):
    """Exception raised when rate limits or quotas are exceeded"""
    kind = ErrorKind.RATE_LIMIT


class NetworkError(DiscoveryError):
    """Exception raised for connectivity failures"""
    kind = ErrorKind.NETWORK


class RequestTimeoutError(NetworkError):
    """Exception raised when a call exceeds its hard timeout"""

    def __init__(self, message: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message or "Request timed out. Please try again.", details=details)


class ServerError(DiscoveryError):
    """Exception raised for unexpected internal failures"""
    kind = ErrorKind.SERVER


_KIND_TO_EXCEPTION = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.AUTH: AuthenticationError,
    ErrorKind.API: YouTubeAPIError,
    ErrorKind.RATE_LIMIT: RateLimitError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.SERVER: ServerError,
}


def error_for_kind(kind: ErrorKind, message: Optional[str] = None, details: Optional[Any] = None) -> DiscoveryError:
    """Build the exception subclass matching an error kind"""
    return _KIND_TO_EXCEPTION[ErrorKind(kind)](message, details=details)
