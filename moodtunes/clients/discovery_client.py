"""Resilient consumer client for the discovery API"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from ..core.exceptions import (
    DiscoveryError, ErrorKind, NetworkError, RequestTimeoutError, ServerError,
    ValidationError, error_for_kind
)
from ..core.retry import RetryConfig, RetryError, retry_async
from ..core.settings import get_settings

logger = logging.getLogger(__name__)

MUSIC_ENDPOINT = "/api/music"
MIN_MOOD_LENGTH = 3


def _is_retryable(error: Exception) -> bool:
    return isinstance(error, DiscoveryError) and error.retryable


def _parse_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


class DiscoveryClient:
    """
    Client for ``POST /api/music`` that retries transient failures.

    Up to ``max_attempts`` attempts are made, one at a time, waiting
    ``base_delay * attempt`` seconds between them. Client-side failures
    (VALIDATION, AUTH) stop immediately; everything else is retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_config: Optional[RetryConfig] = None,
        timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self.retry_config = retry_config or RetryConfig(
            max_attempts=settings.max_retries,
            base_delay=settings.retry_base_delay,
            backoff="linear",
            jitter=False
        )
        self.sleep = sleep
        self.client = http_client or httpx.AsyncClient(
            timeout=self.timeout,
            headers={"Content-Type": "application/json"}
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def discover_music(self, mood: str, language: str = "id") -> Dict[str, Any]:
        """
        Submit a mood description and return the successful response body.

        Args:
            mood: Free-text mood description
            language: Language code sent along with the mood

        Returns:
            Response body with ``success`` true, ``data`` and ``mood_analysis``

        Raises:
            ValidationError: Mood too short, or the server rejected the input
            DiscoveryError: Non-retryable failure reported by the server
            NetworkError: All attempts failed with retryable errors
        """
        trimmed = (mood or "").strip()
        if len(trimmed) < MIN_MOOD_LENGTH:
            raise ValidationError(f"Mood description must be at least {MIN_MOOD_LENGTH} characters long")

        payload = {"mood": trimmed, "language": language}

        try:
            return await retry_async(
                self._attempt,
                payload,
                config=self.retry_config,
                is_retryable=_is_retryable,
                sleep=self.sleep
            )
        except RetryError as e:
            last = e.last_exception
            raise NetworkError(
                f"Failed to fetch music after {e.attempts} attempts: {last}",
                details={
                    "attempts": e.attempts,
                    "last_error": str(last),
                    "last_error_kind": last.kind.value if isinstance(last, DiscoveryError) else None,
                }
            ) from last

    async def _attempt(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{MUSIC_ENDPOINT}"

        try:
            response = await asyncio.wait_for(
                self.client.post(url, json=payload),
                timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(details={"timeout": self.timeout, "original_error": type(e).__name__})
        except httpx.RequestError as e:
            raise NetworkError(details={"original_error": str(e)})

        body = _parse_body(response)

        if not response.is_success:
            raise self._classify_failure(response.status_code, body)

        if body is None or not isinstance(body.get("success"), bool):
            raise ServerError("Invalid response format from server", details={"status_code": response.status_code})

        if not body["success"]:
            raise self._classify_failure(response.status_code, body)

        logger.info(f"Discovery API returned {len(body.get('data') or [])} videos")
        return body

    @staticmethod
    def _classify_failure(status_code: int, body: Optional[Dict[str, Any]]) -> DiscoveryError:
        """Build the error for a failed response, preferring the kind reported by the server"""
        body = body or {}
        message = body.get("error") if isinstance(body.get("error"), str) else None
        details = {"status_code": status_code}

        code = body.get("code")
        if isinstance(code, str) and code in ErrorKind.__members__:
            return error_for_kind(ErrorKind(code), message, details=details)

        if 400 <= status_code < 500:
            return ValidationError(message or f"Request failed with status {status_code}", details=details)

        return ServerError(message or f"Server error: {status_code}", details=details)


def create_discovery_client(base_url: Optional[str] = None) -> DiscoveryClient:
    """Factory function to create a discovery API client"""
    return DiscoveryClient(base_url=base_url)
