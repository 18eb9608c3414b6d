"""Tests for the error taxonomy and central error handling"""

import asyncio
import pytest
import httpx

from moodtunes.core.error_handler import (
    ErrorHandler, classify_exception, create_error_response, unsupported_method_error
)
from moodtunes.core.exceptions import (
    AuthenticationError, DiscoveryError, ErrorKind, NetworkError, RequestTimeoutError,
    ServerError, ValidationError, YouTubeAPIError, error_for_kind, get_error_policy
)


class TestErrorTaxonomy:
    """Test the fixed kind to status/retryability table"""

    @pytest.mark.parametrize("kind,status,retryable", [
        (ErrorKind.VALIDATION, 400, False),
        (ErrorKind.AUTH, 401, False),
        (ErrorKind.API, 503, True),
        (ErrorKind.RATE_LIMIT, 429, True),
        (ErrorKind.NETWORK, 502, True),
        (ErrorKind.SERVER, 500, True),
    ])
    def test_policy_table(self, kind, status, retryable):
        error = error_for_kind(kind)

        assert error.kind == kind
        assert error.status_code == status
        assert error.retryable is retryable
        assert error.message == get_error_policy(kind).default_message

    def test_default_messages(self):
        assert ServerError().message == "An unexpected error occurred."
        assert NetworkError().message == "Network connection failed."
        assert RequestTimeoutError().message == "Request timed out. Please try again."

    def test_explicit_kind_overrides_class_default(self):
        error = DiscoveryError("custom", kind="RATE_LIMIT")

        assert error.kind == ErrorKind.RATE_LIMIT
        assert error.status_code == 429
        assert str(error) == "custom"

    def test_timeout_is_network_kind(self):
        assert RequestTimeoutError().kind == ErrorKind.NETWORK
        assert isinstance(RequestTimeoutError(), NetworkError)


class TestClassifyException:
    """Test mapping arbitrary exceptions into the taxonomy"""

    def test_classified_errors_pass_through(self):
        error = AuthenticationError("denied")
        assert classify_exception(error) is error

    def test_timeouts(self):
        assert isinstance(classify_exception(asyncio.TimeoutError()), RequestTimeoutError)
        assert isinstance(classify_exception(httpx.ReadTimeout("slow")), RequestTimeoutError)

    def test_transport_errors(self):
        classified = classify_exception(httpx.ConnectError("refused"))

        assert classified.kind == ErrorKind.NETWORK
        assert classified.details["error_type"] == "ConnectError"

    def test_unknown_errors_are_server(self):
        classified = classify_exception(KeyError("missing"))

        assert classified.kind == ErrorKind.SERVER
        assert classified.message == "An unexpected error occurred."


class TestErrorResponses:
    """Test response body construction"""

    def test_create_error_response(self):
        assert create_error_response(ErrorKind.API) == {
            "success": False,
            "error": "Unable to fetch music data. Please try again later.",
            "code": "API",
        }

    def test_create_error_response_with_details(self):
        body = create_error_response(ErrorKind.VALIDATION, "bad", {"field": "mood"})

        assert body["details"] == {"field": "mood"}

    def test_unsupported_method_error(self):
        error = unsupported_method_error("GET")

        assert error.kind == ErrorKind.VALIDATION
        assert error.message == "Method GET not allowed. Use POST to submit mood data."


class TestErrorHandler:
    """Test centralized handling"""

    def test_handle_classified_error(self):
        handler = ErrorHandler(include_details=False)

        status, body = handler.handle_error(
            YouTubeAPIError(details={"status_code": 404}), {"path": "/api/music"}
        )

        assert status == 503
        assert body == {
            "success": False,
            "error": "Unable to fetch music data. Please try again later.",
            "code": "API",
        }

    def test_details_only_in_development(self):
        error = ServerError(details={"original_error": "boom"})

        _, hidden = ErrorHandler(include_details=False).handle_error(error)
        _, shown = ErrorHandler(include_details=True).handle_error(error)

        assert "details" not in hidden
        assert shown["details"] == {"original_error": "boom"}

    def test_details_follow_environment(self, monkeypatch):
        from moodtunes.core.settings import reload_settings

        handler = ErrorHandler()
        assert handler.include_details is True

        monkeypatch.setenv("ENVIRONMENT", "production")
        reload_settings()
        assert handler.include_details is False

    def test_unexpected_exception(self):
        handler = ErrorHandler(include_details=True)

        status, body = handler.handle_error(ZeroDivisionError("division by zero"))

        assert status == 500
        assert body["code"] == "SERVER"
        assert body["details"]["error_type"] == "ZeroDivisionError"

    def test_error_counts(self):
        handler = ErrorHandler(include_details=False)

        handler.handle_error(ValidationError("bad"))
        handler.handle_error(ValidationError("worse"))
        handler.handle_error(httpx.ConnectError("refused"))

        assert handler.get_error_stats() == {"VALIDATION": 2, "NETWORK": 1}

        handler.reset_stats()
        assert handler.get_error_stats() == {}
