"""FastAPI application entry point for the user cache service.

create_app() only wires things together: lifespan (logging, Redis, engine
dispose), exception handlers, middleware and the /api/v1 router. Settings
are read inside create_app() so tests can set env vars before import.

Run with `uvicorn app.main:app`, `python -m app.main` or the
`user-cache-service` console script.
"""

import uvicorn
from fastapi import FastAPI

from app.api.v1 import api_router
from app.core.config import get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.middleware import RequestIDMiddleware, TimeoutMiddleware

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """Build the FastAPI application with users and health routes under /api/v1."""
    settings = get_settings()
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="User CRUD backed by Postgres with a Redis cache-aside layer.",
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    register_exception_handlers(application)

    # Last added runs outermost: the timeout covers request-ID handling too.
    application.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    application.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

    application.include_router(api_router, prefix=API_PREFIX)
    return application


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on settings.host:settings.port."""
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
