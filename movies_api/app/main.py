"""
Main entrypoint for the Movies API.

This module assembles the FastAPI application: logging, CORS, the
database handle, the movie service with its adapter and event
notifier, the routers and the envelope‑shaped error handlers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn movies_api.app.main:app --reload

The database is opened when the application starts and closed when it
stops; pending event publications are awaited before closing.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .adapters.sqlite_movie_adapter import SqliteMovieAdapter
from .api.router import router as api_router
from .core.config import Settings, settings
from .core.db import Database
from .core.logging_config import setup_logging
from .core.responses import envelope
from .events.movie_events import MovieEventNotifier, ProducerFactory
from .services.movie_service import MovieService, validation_messages


def create_app(
    app_settings: Optional[Settings] = None,
    producer_factory: Optional[ProducerFactory] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to use instead of the environment‑derived defaults.
    producer_factory : Optional[ProducerFactory]
        Callable returning a Kafka producer; defaults to
        ``aiokafka.AIOKafkaProducer``.  Tests pass fakes here.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    app_settings = app_settings or settings
    # Initialise logging before anything else so that the objects
    # created below can log.
    setup_logging(app_settings.log_level, app_settings.log_file or None)

    database = Database(app_settings.database_url)
    notifier = MovieEventNotifier(app_settings, producer_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        try:
            yield
        finally:
            await notifier.drain()
            database.close()

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.api_version,
        description="API for managing movies",
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = app_settings
    app.state.database = database
    app.state.notifier = notifier
    app.state.movie_service = MovieService(SqliteMovieAdapter(database), notifier)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return envelope(exc.status_code, headers=getattr(exc, "headers", None), error=str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return envelope(400, error=", ".join(validation_messages(exc)))

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {"message": "Server is running"}

    app.include_router(api_router)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
