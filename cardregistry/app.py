"""FastAPI app initialization, startup bootstrap, exception handling"""

import asyncio
import logging
import traceback
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cardregistry.cache import RegistryCache
from cardregistry.config import Config, get_config
from cardregistry.db import DatabaseConnection
from cardregistry.errors.base import ApplicationError
from cardregistry.errors.loader import SourceReadError
from cardregistry.loader import BootstrapLoader
from cardregistry.routes.card import card_router
from cardregistry.routes.stats import router as stats_router
from cardregistry.tasks.stats_report import schedule_stats_report

logger = logging.getLogger(__name__)


def bootstrap(config: Config) -> tuple[DatabaseConnection, RegistryCache, BootstrapLoader]:
    """Build the store and the cache, then load the initial data file into both."""
    db_conn = DatabaseConnection(config)
    db_conn.create_tables()
    cache = RegistryCache(db_conn)
    loader = BootstrapLoader(cache)
    try:
        loader.load(config.data_file_path)
    except SourceReadError:
        # serve with whatever the store holds, the cache repairs itself on reads
        logger.exception("Initial data was not loaded, starting with an empty cache")
    return db_conn, cache, loader


def app_factory(config: Config | None = None) -> FastAPI:
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_conn, cache, loader = bootstrap(config)
        app.state.cache = cache
        app.state.loader = loader

        reporter = None
        if config.stats_report_interval > 0:
            reporter = asyncio.create_task(
                schedule_stats_report(cache, config.stats_report_interval)
            )
        try:
            yield
        finally:
            if reporter is not None:
                reporter.cancel()
                with suppress(asyncio.CancelledError):
                    await reporter
            db_conn.dispose()

    app = FastAPI(title=config.app_name, version=config.app_version, lifespan=lifespan)

    @app.exception_handler(ApplicationError)
    def application_exception_handler(request: Request, exc: ApplicationError):
        c = {
            "error_code": exc.error_code,
            "error": exc.error,
            "where": exc.where,
        }
        logger.error(c)
        # Only print full traceback when in debug logging
        if logger.isEnabledFor(logging.DEBUG):
            traceback.print_exception(exc)
        return JSONResponse(status_code=exc.http_code or 418, content=c)

    @app.exception_handler(SQLAlchemyError)
    def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(exc)
        if logger.isEnabledFor(logging.DEBUG):
            traceback.print_exception(exc)
        return JSONResponse(
            status_code=418,
            content={"error_code": 1500, "error": exc._message()},
        )

    app.include_router(card_router)
    app.include_router(stats_router)
    return app
