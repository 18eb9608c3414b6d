"""Central error handling: classification, logging and error response bodies"""

import asyncio
import logging
from typing import Optional, Any, Dict, Tuple

import httpx

from .exceptions import (
    DiscoveryError, ErrorKind, NetworkError, RequestTimeoutError, ServerError,
    ValidationError, get_error_policy
)
from .settings import get_settings

logger = logging.getLogger(__name__)


def classify_exception(error: BaseException) -> DiscoveryError:
    """
    Map any exception onto the fixed error taxonomy.

    Classified errors pass through untouched; transport exceptions become
    NETWORK errors and everything else is an unexpected SERVER error. The
    original exception is preserved in ``details``.
    """
    if isinstance(error, DiscoveryError):
        return error

    details = {"original_error": str(error), "error_type": type(error).__name__}

    if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
        return RequestTimeoutError(details=details)

    if isinstance(error, httpx.RequestError):
        return NetworkError(details=details)

    return ServerError(details=details)


def create_error_response(
    kind: ErrorKind,
    message: Optional[str] = None,
    details: Optional[Any] = None
) -> Dict[str, Any]:
    """Create the standardized failure body ``{success, error, code}``"""
    body: Dict[str, Any] = {
        "success": False,
        "error": message or get_error_policy(kind).default_message,
        "code": ErrorKind(kind).value,
    }
    if details is not None:
        body["details"] = details
    return body


def unsupported_method_error(method: str) -> ValidationError:
    """Error raised when the discovery endpoint is called with the wrong method"""
    return ValidationError(f"Method {method} not allowed. Use POST to submit mood data.")


class ErrorHandler:
    """
    Centralized error handling.

    Logs every failure with its request context, keeps per-kind counters
    and converts errors into transport-facing bodies. Diagnostic details
    are only attached in development mode.
    """

    def __init__(self, include_details: Optional[bool] = None):
        self._include_details = include_details
        self.error_counts: Dict[str, int] = {}

    @property
    def include_details(self) -> bool:
        if self._include_details is not None:
            return self._include_details
        return get_settings().is_development

    def handle_error(
        self,
        error: BaseException,
        context: Optional[Dict[str, Any]] = None
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Classify and log an error, then build its response.

        Args:
            error: The exception that occurred
            context: Request context included in the log entry

        Returns:
            Tuple of HTTP status code and response body
        """
        context = context or {}
        classified = classify_exception(error)
        kind = classified.kind.value

        self.error_counts[kind] = self.error_counts.get(kind, 0) + 1

        log_extra = {
            "error_kind": kind,
            "status_code": classified.status_code,
            "retryable": classified.retryable,
            "context": context,
        }
        if classified.kind == ErrorKind.SERVER:
            logger.error(
                f"Unexpected error ({self.error_counts[kind]} occurrences): {error}",
                extra=log_extra,
                exc_info=None if error is classified else error
            )
        elif classified.kind == ErrorKind.VALIDATION:
            logger.info(f"Rejected request: {classified.message}", extra=log_extra)
        else:
            logger.warning(
                f"{kind} error ({self.error_counts[kind]} occurrences): {classified.message}",
                extra={**log_extra, "details": classified.details}
            )

        details = classified.details if self.include_details else None
        body = create_error_response(classified.kind, classified.message, details)
        return classified.status_code, body

    def get_error_stats(self) -> Dict[str, int]:
        """Get error occurrence statistics"""
        return self.error_counts.copy()

    def reset_stats(self):
        """Reset error statistics"""
        self.error_counts.clear()


# Global error handler instance
error_handler = ErrorHandler()


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance"""
    return error_handler
