"""Logging setup, JSON formatting and per-step timing for the discovery pipeline"""

import json
import logging
import logging.handlers
import threading
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from .settings import get_settings

LOG_DIR = Path("logs")
CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Attributes every LogRecord carries; anything else was passed through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "request_id"
}

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Correlation id bound to the current request, if any"""
    return _request_id.get()


@contextmanager
def request_context(request_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a correlation id to every record logged inside the block.

    A new id is generated when none is given. The binding follows the
    current asyncio task, so concurrent requests never see each other's id.
    """
    request_id = request_id or uuid.uuid4().hex[:12]
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)


class RequestContextFilter(logging.Filter):
    """Copies the bound request id onto each record as ``request_id``"""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = _request_id.get()
        return True


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line.

    Fields passed through ``extra`` (operation names, error kinds, request
    context) are grouped under ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request_id = getattr(record, 'request_id', None)
        if request_id:
            entry['request_id'] = request_id

        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            entry['extra'] = extra

        return json.dumps(entry, default=str, ensure_ascii=False)


@dataclass
class OperationStats:
    """Running totals for one named pipeline step"""
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    total_duration: float = 0.0
    min_duration: Optional[float] = None
    max_duration: float = 0.0
    last_call: Optional[str] = None

    def add(self, duration: float, success: bool) -> None:
        self.total_calls += 1
        if success:
            self.successful_calls += 1
        else:
            self.failed_calls += 1
        self.total_duration += duration
        self.min_duration = duration if self.min_duration is None else min(self.min_duration, duration)
        self.max_duration = max(self.max_duration, duration)
        self.last_call = datetime.now(timezone.utc).isoformat()

    def summary(self) -> Dict[str, Any]:
        data = asdict(self)
        data['avg_duration'] = self.total_duration / self.total_calls
        data['success_rate'] = self.successful_calls / self.total_calls
        return data


class PerformanceMetrics:
    """Thread-safe registry of OperationStats keyed by operation name"""

    def __init__(self):
        self._stats: Dict[str, OperationStats] = {}
        self._lock = threading.Lock()

    def record_operation(self, operation: str, duration: float, success: bool = True):
        with self._lock:
            self._stats.setdefault(operation, OperationStats()).add(duration, success)

    def get_metrics(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Summary for one operation (empty if never recorded) or for all of them"""
        with self._lock:
            if operation:
                stats = self._stats.get(operation)
                return stats.summary() if stats else {}
            return {name: stats.summary() for name, stats in self._stats.items()}

    def reset(self, operation: Optional[str] = None):
        with self._lock:
            if operation:
                self._stats.pop(operation, None)
            else:
                self._stats.clear()


# Global performance metrics instance
performance_metrics = PerformanceMetrics()


class LoggingManager:
    """
    Configures the root logger once per process.

    Development gets readable console lines, production gets JSON. Rotating
    files under ``logs/`` are only written when ``log_to_file`` is enabled.
    """

    def __init__(self):
        self.configured = False

    def _file_handler(self, filename: str, level: int, max_mb: int, backups: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            LOG_DIR / filename,
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backups
        )
        handler.setLevel(level)
        handler.setFormatter(StructuredFormatter())
        handler.addFilter(RequestContextFilter())
        return handler

    def setup_logging(self):
        if self.configured:
            return

        settings = get_settings()
        level = getattr(logging, settings.log_level)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.addFilter(RequestContextFilter())
        console_handler.setFormatter(
            StructuredFormatter() if settings.is_production else logging.Formatter(CONSOLE_FORMAT)
        )
        root_logger.addHandler(console_handler)

        if settings.log_to_file:
            LOG_DIR.mkdir(exist_ok=True)
            root_logger.addHandler(self._file_handler("moodtunes.log", logging.INFO, 20, 5))
            root_logger.addHandler(self._file_handler("errors.log", logging.ERROR, 5, 3))

        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)

        self.configured = True
        logging.getLogger(__name__).info(
            "Logging system initialized",
            extra={
                'environment': settings.environment,
                'log_level': settings.log_level,
                'structured_logging': settings.is_production,
            }
        )

    def get_logger(self, name: str) -> logging.Logger:
        if not self.configured:
            self.setup_logging()
        return logging.getLogger(name)


# Global logging manager
logging_manager = LoggingManager()


def get_logger(name: str) -> logging.Logger:
    """Get a logger, configuring logging first if needed"""
    return logging_manager.get_logger(name)


def setup_logging():
    """Initialize the logging system"""
    logging_manager.setup_logging()


@contextmanager
def track_operation(operation: str, **context: Any) -> Iterator[Dict[str, Any]]:
    """
    Time a block of work and emit its outcome as telemetry.

    The yielded dict can be filled with extra fields to log on completion.
    Recording failures are logged and never propagate into the caller.

    Args:
        operation: Name of the operation for metrics
        **context: Additional fields included in the completion log
    """
    logger = logging.getLogger(__name__)
    start_time = time.perf_counter()
    extra: Dict[str, Any] = dict(context)
    success = True

    try:
        yield extra
    except BaseException:
        success = False
        raise
    finally:
        duration = time.perf_counter() - start_time
        try:
            performance_metrics.record_operation(operation, duration, success)
            logger.info(
                f"{'Completed' if success else 'Failed'} {operation} in {duration * 1000:.1f}ms",
                extra={**extra, 'operation': operation, 'duration': duration, 'success': success}
            )
        except Exception as e:
            logger.debug(f"Failed to record telemetry for {operation}: {e}")


def get_performance_metrics(operation: Optional[str] = None) -> Dict[str, Any]:
    """Get performance metrics"""
    return performance_metrics.get_metrics(operation)


def reset_performance_metrics(operation: Optional[str] = None):
    """Reset performance metrics"""
    performance_metrics.reset(operation)
