"""
Application factory and entry point.

    uvicorn --factory bookstore.main:create_app
    bookstore                     # console script
    python -m bookstore
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.routing import Route

from bookstore.api.v1 import books_router, health_router, register_exception_handlers
from bookstore.config import Settings, get_settings
from bookstore.core.logging import RequestIDMiddleware, setup_logging
from bookstore.database import create_engine_from_settings, init_db, make_session_factory
from bookstore.utils.logging import get_project_version
from bookstore.validators import build_book_validator

logger = logging.getLogger(__name__)


def log_routes(app: FastAPI) -> None:
    """Log every registered route once at startup."""
    for route in app.routes:
        if isinstance(route, Route):
            methods = ",".join(sorted(route.methods or ()))
            logger.info("route %-14s %s", methods, route.path, extra={"route_name": route.name})


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info("Starting up bookstore...", extra={"env": settings.ENV})

    # The app instance owns the pool; handlers reach it through app.state
    engine = create_engine_from_settings(settings)
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.book_validator = build_book_validator()

    try:
        await init_db(engine)
        log_routes(app)
        yield
    finally:
        logger.info("Shutting down bookstore...")
        await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Bookstore",
        description="CRUD service for books",
        version=get_project_version(),
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps everything, CORS included
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(books_router)
    return app


def run() -> None:
    settings = get_settings()
    # log_config=None: logging is configured by setup_logging in the lifespan
    uvicorn.run(create_app(settings), host=settings.SERVER_HOST, port=settings.SERVER_PORT, log_config=None)


if __name__ == "__main__":
    run()
