"""
Request Logging Middleware

Logs each request and its outcome with timing information.
"""
import time
from typing import Callable, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ...core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SKIP_PATHS = ["/health", "/ready", "/docs", "/redoc", "/openapi.json"]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status code and duration of every request.

    Probe and documentation paths are skipped to keep the log readable.
    """

    def __init__(self, app, skip_paths: Optional[List[str]] = None):
        super().__init__(app)
        self.skip_paths = skip_paths or DEFAULT_SKIP_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if any(request.url.path.startswith(path) for path in self.skip_paths):
            return await call_next(request)

        request_id = getattr(request.state, "request_id", None)
        suffix = f" [{request_id}]" if request_id else ""
        method = request.method
        path = request.url.path

        start_time = time.perf_counter()
        logger.info(f"-> {method} {path}{suffix}")
        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(f"{method} {path} raised after {duration_ms:.2f}ms{suffix}: {e}")
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        log = logger.info if response.status_code < 500 else logger.error
        log(f"<- {method} {path} {response.status_code} ({duration_ms:.2f}ms){suffix}")
        return response
