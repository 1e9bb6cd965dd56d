"""
Scrims services.

FastAPI application factories for the identity service and the team service.
Run one per process:

    uvicorn scrims.main:identity_app --port 8000
    uvicorn scrims.main:team_app --port 8001
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Optional

from fastapi import APIRouter, FastAPI

from scrims.api.errors import install_exception_handlers
from scrims.api.middleware.request_id import RequestIdMiddleware
from scrims.api.v1 import identity_router, team_router
from scrims.config import get_settings
from scrims.database import close_db, init_db
from scrims.kernel.identity.jwt import get_token_issuer
from scrims.logging_config import configure_logging, get_logger
from scrims.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)


def _create_app(
    service: str,
    router: APIRouter,
    on_startup: Optional[Callable[[], None]] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        configure_logging(
            service=service,
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )
        logger.info("Starting %s %s service v%s", settings.project_name, service, settings.version)
        if on_startup is not None:
            on_startup()
        await init_db()
        logger.info("Database initialized")

        yield

        logger.info("Shutting down...")
        await close_db()
        logger.info("Database connections closed")

    app = FastAPI(
        title=f"{settings.project_name} {service} service",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.add_middleware(RequestIdMiddleware)
    install_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        return HealthResponse(service=service, version=settings.version)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.project_name,
            "service": service,
            "version": settings.version,
            "api": settings.api_prefix,
        }

    app.include_router(router, prefix=settings.api_prefix)
    return app


def _require_signing_key() -> None:
    # Raises ConfigurationError when JWT_KEY is unset
    get_token_issuer()


def create_identity_app() -> FastAPI:
    """Identity service: registration, login, lookup, password rotation."""
    return _create_app("identity", identity_router, on_startup=_require_signing_key)


def create_team_app() -> FastAPI:
    """Team service: team creation and listing."""
    return _create_app("team", team_router, on_startup=_require_signing_key)


identity_app = create_identity_app()
team_app = create_team_app()


if __name__ == "__main__":
    import sys

    import uvicorn

    service_name = sys.argv[1] if len(sys.argv) > 1 else "identity"
    port = int(sys.argv[2]) if len(sys.argv) > 2 else 8000
    uvicorn.run(
        f"scrims.main:{service_name}_app",
        host="0.0.0.0",
        port=port,
        reload=settings.debug,
    )
