import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dependency_injector import providers
from contextlib import asynccontextmanager
from typing import Optional

from core.config.settings import Environment, Settings
from core.config.validator import validate_startup_configuration
from core.logging import get_api_logger_safe, configure_logging
from core.utils.exceptions import ConfigurationError

from app.containers import AppContainer
from api.middleware.request_ids import RequestIdMiddleware
from api.middleware.error_handling import ErrorHandlingMiddleware, register_exception_handlers
from api.routers import auth, orders, portfolio
from api.schemas.responses import HealthResponse, HealthStatus

logger = get_api_logger_safe("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    container = app.state.container
    settings = container.settings()

    # Startup
    logger.info("Starting Tradebook API server", environment=settings.environment.value)
    if not validate_startup_configuration(settings):
        raise ConfigurationError("Configuration validation failed; refusing to start",
                                 config_field="settings")

    db_manager = container.db_manager()
    try:
        await db_manager.init()
        logger.info("API services initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize API services", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down Tradebook API server")
    try:
        await db_manager.shutdown()
    except Exception as e:
        logger.error("Error during API shutdown", error=str(e))


def _build_uvicorn_log_config() -> dict:
    """Return a minimal log config that cooperates with our structlog handlers.

    Handler lists are left out so uvicorn's dictConfig does not clear the
    handlers enhanced logging already attached to uvicorn/fastapi loggers.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "loggers": {
            "uvicorn": {"level": "INFO", "propagate": False},
            "uvicorn.error": {"level": "INFO", "propagate": False},
            "uvicorn.access": {"level": "INFO", "propagate": False},
            "fastapi": {"level": "INFO", "propagate": False},
        },
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Creates and configures the FastAPI application"""
    container = AppContainer()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    settings = container.settings()

    # Configure logging for API context (idempotent)
    configure_logging(settings)

    app = FastAPI(
        title="Tradebook API",
        version=settings.version,
        description="Holdings, positions and user-submitted orders behind credential-based authentication.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container

    # Wire dependency injection
    container.wire(modules=[
        "api.dependencies",
        "api.routers.auth",
        "api.routers.orders",
        "api.routers.portfolio",
    ])

    register_exception_handlers(app)

    # Last added is outermost: CORS, then request ids, then the 500 fallback
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    cors_origins = settings.api.cors_origins
    if settings.environment == Environment.PRODUCTION and "*" in cors_origins:
        raise ValueError(
            "CORS wildcard (*) not allowed in production. "
            "Specify exact origins in API__CORS_ORIGINS environment variable."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.api.cors_credentials,
        allow_methods=settings.api.cors_methods,
        allow_headers=settings.api.cors_headers,
    )

    app.include_router(portfolio.router)
    app.include_router(orders.router)
    app.include_router(auth.router)

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        database_ok = await container.db_manager().verify_connection()
        db_status = HealthStatus.HEALTHY if database_ok else HealthStatus.UNHEALTHY
        return HealthResponse(
            status=HealthStatus.HEALTHY if database_ok else HealthStatus.DEGRADED,
            service="tradebook-api",
            version=settings.version,
            environment=settings.environment.value,
            database=db_status,
        )

    return app


def run(settings: Optional[Settings] = None):
    """Main function to run the API server"""
    app = create_app(settings)
    api_settings = app.state.container.settings().api

    uvicorn.run(
        app,
        host=api_settings.host,
        port=api_settings.port,
        log_level="info",
        access_log=True,
        access_log_format='h=%(h)s r="%(r)s" s=%(s)s L=%(L)f a="%(a)s"',
        log_config=_build_uvicorn_log_config(),
        reload=False
    )


if __name__ == "__main__":
    run()
