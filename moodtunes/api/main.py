"""FastAPI web server for mood-based music discovery"""

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .middleware import RequestLoggingMiddleware

from ..core.error_handler import get_error_handler, unsupported_method_error
from ..core.exceptions import DiscoveryError, ValidationError
from ..core.logging import get_logger, get_performance_metrics, get_request_id, setup_logging
from ..core.settings import get_settings
from ..models.discovery_models import (
    DiscoveryResponse, ErrorResponse, MoodAnalysisResponse, MoodRequest, MusicRequest
)
from ..services.discovery_service import DiscoveryService, create_discovery_service

# Setup logging
setup_logging()
logger = get_logger(__name__)

ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 401, 429, 500, 502, 503)
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the long-lived collaborators once per process"""
    settings = get_settings()
    logger.info(f"Starting mood music discovery service ({settings.environment})...")

    service = create_discovery_service()
    if service.youtube_client is None:
        logger.warning("YOUTUBE_API_KEY is not set; /api/music will reject requests")

    app.state.discovery_service = service

    try:
        yield
    finally:
        if service.youtube_client is not None:
            await service.youtube_client.aclose()
        logger.info("Shutting down mood music discovery service...")


app = FastAPI(
    title="MoodTunes API",
    description="Discover music videos that match a free-text mood description",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_discovery_service(request: Request) -> DiscoveryService:
    """Dependency returning the service built during start-up"""
    return request.app.state.discovery_service


def _error_json(error: BaseException, request: Request) -> JSONResponse:
    status_code, body = get_error_handler().handle_error(
        error, {"method": request.method, "path": request.url.path, "request_id": get_request_id()}
    )
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(DiscoveryError)
async def discovery_error_handler(request: Request, exc: DiscoveryError):
    return _error_json(exc, request)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))

    message = "Invalid request body"
    if problems:
        message = f"{message}: {'; '.join(problems)}"

    return _error_json(ValidationError(message, details={"errors": problems}), request)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return _error_json(exc, request)


@app.get("/")
async def root():
    """Service information"""
    return {
        "service": "MoodTunes API",
        "version": app.version,
        "endpoints": {
            "discover": "POST /api/music",
            "analyze": "POST /api/mood",
            "stats": "GET /api/stats",
        }
    }


@app.post("/api/music", response_model=DiscoveryResponse, responses=ERROR_RESPONSES)
async def discover_music(
    payload: MusicRequest,
    service: DiscoveryService = Depends(get_discovery_service)
):
    """Discover music videos for a mood description"""
    return await service.discover(payload.mood, payload.language)


@app.api_route(
    "/api/music",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False
)
async def music_method_not_allowed(request: Request):
    raise unsupported_method_error(request.method)


@app.post("/api/mood", response_model=MoodAnalysisResponse, responses=ERROR_RESPONSES)
async def analyze_mood(
    payload: MoodRequest,
    service: DiscoveryService = Depends(get_discovery_service)
):
    """Classify a mood description without looking up any videos"""
    return service.analyze_mood(payload.mood)


@app.get("/api/stats")
async def get_stats():
    """Operation timings and error counts since start-up"""
    return {
        "operations": get_performance_metrics(),
        "errors": get_error_handler().get_error_stats(),
    }


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "moodtunes.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower()
    )
