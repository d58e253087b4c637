import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from akashic import __version__
from akashic.api.routes import api_router
from akashic.core.config import Settings, get_settings
from akashic.core.logging import configure_logging
from akashic.db.session import Database
from akashic.exceptions import AppError
from akashic.models.seed import run_seeding
from akashic.services.lore import LoreResponder, Responder

logger = logging.getLogger(__name__)


async def prepare_database(database: Database) -> None:
    """Creates the schema and seeds the default catalog. Safe to run on every start."""
    await database.create_all()
    async with database.sessionmaker() as session:
        await run_seeding(session)


def create_app(
    settings: Settings | None = None, database: Database | None = None, responder: Responder | None = None
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.seed_on_startup:
            await prepare_database(database)
        yield
        await database.dispose()

    app = FastAPI(title="Akashic Archive", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.responder = responder or LoreResponder()

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": "Invalid request data", "code": "validation_error", "errors": _errors(exc)},
        )

    # Global handler: never leak internals (or scroll keys) to the client.
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error", "code": "internal_error"})

    @app.get("/api/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    app.include_router(api_router, prefix="/api")
    return app


def _errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]} for error in exc.errors()]
