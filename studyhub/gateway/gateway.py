"""
API Gateway

Main gateway class that orchestrates routing, middleware and health probes.
Acts as the single entry point for all API requests.
"""
from typing import List, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.config import CORS_ORIGINS, ENVIRONMENT, RATE_LIMIT_ENABLED, RATE_LIMIT_PER_MINUTE
from ..core.logging_config import get_logger
from .middleware import ErrorHandlingMiddleware, RequestIDMiddleware, RequestLoggingMiddleware
from .middleware.error_handler import error_body

logger = get_logger(__name__)


class APIGateway:
    """
    API Gateway that manages routing, middleware and health endpoints.

    Responsibilities:
    - Initialize FastAPI application
    - Register middleware (CORS, rate limiting, logging, error handling)
    - Register routers
    - Provide liveness and readiness endpoints
    """

    def __init__(
        self,
        title: str = "StudyHub API",
        description: str = "Study material uploads with background summaries and quizzes",
        version: str = "1.0.0",
        enable_docs: Optional[bool] = None,
        rate_limit_enabled: bool = RATE_LIMIT_ENABLED,
    ):
        self.title = title
        self.description = description
        self.version = version
        self.enable_docs = enable_docs if enable_docs is not None else ENVIRONMENT != "production"

        self.app = FastAPI(
            title=self.title,
            description=self.description,
            version=self.version,
            docs_url="/docs" if self.enable_docs else None,
            redoc_url="/redoc" if self.enable_docs else None,
        )
        self.routers: List[str] = []

        self.limiter = Limiter(
            key_func=get_remote_address,
            default_limits=[f"{RATE_LIMIT_PER_MINUTE}/minute"],
            enabled=rate_limit_enabled,
        )
        self.app.state.limiter = self.limiter
        self.app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
        self._register_error_handlers()

        logger.info("API Gateway initialized")

    def _register_error_handlers(self):
        """Give HTTP and validation errors the same JSON shape as middleware errors."""

        @self.app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            return JSONResponse(
                status_code=exc.status_code,
                content=error_body(request, exc.detail, exc.status_code),
                headers=getattr(exc, "headers", None),
            )

        @self.app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            logger.warning(f"Validation error for {request.method} {request.url.path}: {exc.errors()}")
            content = error_body(request, "Validation Error", 422)
            content["detail"] = jsonable_errors(exc)
            return JSONResponse(status_code=422, content=content)

    def setup_middleware(self):
        """Configure all middleware. The last one added runs first."""
        logger.info("Setting up middleware...")

        self.app.add_middleware(SlowAPIMiddleware)
        self.app.add_middleware(ErrorHandlingMiddleware)
        self.app.add_middleware(RequestLoggingMiddleware)
        self.app.add_middleware(RequestIDMiddleware)
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.debug(f"CORS origins: {', '.join(CORS_ORIGINS)}")
        logger.info("All middleware configured")

    def register_router(self, router: APIRouter, prefix: str = "", tags: Optional[List[str]] = None):
        """Include a router, optionally under a URL prefix."""
        self.app.include_router(router, prefix=prefix, tags=tags or [])
        self.routers.append(prefix or "/")
        logger.info(f"Registered router {', '.join(tags or [])} at prefix '{prefix}'")

    def register_health_endpoints(self):
        """Register root, liveness and readiness endpoints."""
        from ..routers import dependencies

        @self.app.get("/")
        async def root():
            return {"message": f"{self.title} is running", "version": self.version, "status": "healthy"}

        @self.app.get("/health")
        async def health_check():
            """Liveness probe: the process is up and services were built."""
            if dependencies.db_service is None or dependencies.file_service is None:
                logger.warning("Health check failed: services not initialized")
                return JSONResponse(
                    status_code=503,
                    content={"status": "unhealthy", "reason": "Services not initialized"},
                )
            return {"status": "healthy"}

        @self.app.get("/ready")
        async def readiness_check():
            """
            Readiness probe.

            Requires a reachable database. A disconnected broker is reported but
            does not fail the probe: uploads still succeed with queued=false.
            """
            db = dependencies.db_service
            if db is None:
                return JSONResponse(status_code=503, content={"ready": False, "reason": "Database not initialized"})
            try:
                await db.ping()
            except Exception as e:
                logger.error(f"Readiness check failed: {e}")
                return JSONResponse(status_code=503, content={"ready": False, "reason": str(e)})

            broker = dependencies.broker
            return {"ready": True, "broker": "connected" if broker is not None and broker.is_connected else "disconnected"}

        logger.info("Health check endpoints registered")

    def get_app(self) -> FastAPI:
        return self.app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the raw input/context objects, which may not be JSON-safe."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
