"""
FastAPI application factory for the Capital Code assistant.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings, get_settings
from database.session import close_db, init_db
from .errors import unhandled_exception_handler, validation_exception_handler
from .middleware import MetricsMiddleware, RateLimitMiddleware
from .routes import chat, customers, system
from .services import get_services, initialize_services

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start services on boot and release them on shutdown."""
    settings = get_settings()
    configure_logging(settings)

    if settings.database_url:
        try:
            await init_db(settings.database_url)
        except Exception as e:
            # Conversations fall back to the in-memory store
            logger.warning(f"Database unavailable, using in-memory store: {e}")

    initialize_services()
    logger.info(f"{settings.brand_name} assistant ready ({settings.environment})")
    try:
        yield
    finally:
        await get_services().shutdown()
        await close_db()
        logger.info(f"{settings.brand_name} assistant stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application: middleware, error handlers and routers."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        description="Spanish-speaking sales assistant with multi-model fallback.",
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Added last runs first: CORS, then metrics, then throttling
    app.add_middleware(RateLimitMiddleware, requests_per_minute=settings.rate_limit_per_minute)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(system.router, tags=["System"])
    app.include_router(chat.router, prefix="/api", tags=["Chat"])
    app.include_router(customers.router, prefix="/api", tags=["Customers"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("api.main:app", host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())
