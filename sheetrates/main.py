import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import formulas, health, rates
from .services.rates.base import ConversionError, RateFetchError
from .services.rates.cache_service import RateFetchClient, build_rate_fetch_client


def create_app(
    settings_override: Settings | None = None,
    rate_client: RateFetchClient | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    rate_client: inject a prepared client (fake provider, shared cache);
    otherwise one is built from settings and closed on shutdown.
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    owns_client = rate_client is None
    client = rate_client or build_rate_fetch_client(settings)
    logging.getLogger("sheetrates").info(
        "rate provider=%s ttl=%ss", client.provider.name, client.cache.ttl_seconds
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_client:
            client.close()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_client = client

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_exception_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(RateFetchError, errors.rate_fetch_error_handler)
    app.add_exception_handler(ConversionError, errors.conversion_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(rates.router)
    app.include_router(formulas.router)

    @app.get("/")
    async def root():
        return {"message": f"{settings.app_name} API", "version": settings.version}

    return app


app = create_app()
