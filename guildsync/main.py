"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers. See
guildsync.core.lifespan and guildsync.core.exception_handlers.

Settings are loaded inside create_app() so tests can set env (and clear the
get_settings cache) before calling it.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from guildsync.api.v1 import api_router
from guildsync.core.config import get_settings
from guildsync.core.exception_handlers import register_exception_handlers
from guildsync.core.lifespan import create_lifespan
from guildsync.core.limiter import limiter


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
