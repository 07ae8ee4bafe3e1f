"""
API process entry point.

    uvicorn studyhub.main:app --host 0.0.0.0 --port 8000
"""
import sys
from typing import Any, Dict, Optional

from fastapi import FastAPI

from . import __version__
from .core.config import AI_PROVIDER, DATABASE_TYPE, ENVIRONMENT, RATE_LIMIT_ENABLED, STORAGE_TYPE
from .core.logging_config import get_logger, setup_logging
from .gateway import APIGateway
from .routers import dependencies, files, quizzes, subjects, users

logger = get_logger(__name__)


def create_app(services: Optional[Dict[str, Any]] = None, rate_limit_enabled: bool = RATE_LIMIT_ENABLED) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Prebuilt collaborators keyed ``db``, ``storage`` and
            ``broker``. Anything missing is created from configuration. An
            explicit ``broker: None`` runs without a broker.
        rate_limit_enabled: Toggle slowapi limits
    """
    services = services or {}

    gateway = APIGateway(
        title="StudyHub API",
        description="Study material uploads with background summaries and quizzes",
        version=__version__,
        rate_limit_enabled=rate_limit_enabled,
    )
    gateway.setup_middleware()

    gateway.register_router(users.router, tags=["Users"])
    gateway.register_router(subjects.router, tags=["Subjects"])
    gateway.register_router(files.router, tags=["Files"])
    gateway.register_router(quizzes.router, tags=["Quizzes"])
    gateway.register_health_endpoints()

    app = gateway.get_app()

    @app.on_event("startup")
    async def startup_event():
        logger.info("=" * 60)
        logger.info("Starting StudyHub API...")
        logger.info(f"  -> Python Version: {sys.version.split()[0]}")
        logger.info(f"  -> Environment: {ENVIRONMENT}")
        logger.info(f"  -> Database: {DATABASE_TYPE}, Storage: {STORAGE_TYPE}, AI Provider: {AI_PROVIDER}")
        logger.info(f"  -> Rate Limiting: {'enabled' if rate_limit_enabled else 'disabled'}")

        await dependencies.initialize_database(services.get("db"))
        await dependencies.initialize_storage(services.get("storage"))
        if "broker" in services and services["broker"] is None:
            logger.warning("Running without a message broker, background jobs are disabled")
            dependencies.broker = None
        else:
            dependencies.initialize_broker(services.get("broker"))
        dependencies.initialize_services()

        logger.info("StudyHub API initialized")
        logger.info("=" * 60)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down StudyHub API...")
        await dependencies.shutdown_services()
        logger.info("StudyHub API shutdown complete")

    return app


setup_logging("api")
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
