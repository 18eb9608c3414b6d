"""Custom middleware for the FastAPI application"""

import time
import logging
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.error_handler import get_error_handler
from ..core.logging import request_context

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its outcome.

    Each request gets a correlation id that is bound to every log record
    emitted while it is handled and returned as ``X-Request-ID``, next to
    ``X-Process-Time``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with request_context() as request_id:
            request.state.request_id = request_id
            response = await self._handle(request, call_next)
            response.headers["X-Request-ID"] = request_id
            return response

    async def _handle(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        client_host = request.client.host if request.client else "unknown"

        logger.info(f"Incoming request: {request.method} {request.url.path} from {client_host}")

        try:
            response = await call_next(request)
        except Exception as e:
            # Anything reaching this point escaped the route exception handlers
            process_time = time.perf_counter() - start_time
            status_code, body = get_error_handler().handle_error(e, {
                "method": request.method,
                "path": request.url.path,
                "request_id": request.state.request_id,
            })
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"- Status: {status_code} - Time: {process_time:.3f}s"
            )
            response = JSONResponse(status_code=status_code, content=body)
            response.headers["X-Process-Time"] = f"{process_time:.6f}"
            return response

        process_time = time.perf_counter() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Time: {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response
