import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reskinit.api import (
    card_definitions_router,
    cardsets_router,
    decks_router,
    games_router,
    health_router,
    users_router,
)
from reskinit.config import settings
from reskinit.db.database import Database
from reskinit.models.failure import KnownError, create_unknown_failure
from reskinit.services.auth import TokenVerifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database at startup and dispose it at shutdown."""
    database: Database | None = getattr(app.state, "database", None)
    owned = database is None
    if database is None:
        database = Database(settings.database_url, echo=settings.debug)
        app.state.database = database
    if getattr(app.state, "token_verifier", None) is None:
        app.state.token_verifier = TokenVerifier(settings.jwt_secret, settings.jwt_algorithm)

    await database.init_db()
    logger.info("%s started", settings.app_name)
    try:
        yield
    finally:
        if owned:
            await database.dispose()
            app.state.database = None


async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    """Render a domain failure as the ApiResponse envelope."""
    logger.debug(
        "%s %s failed: %s (%s)", request.method, request.url.path, exc.kind.value, exc.message
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected error and return the fixed unknown-failure envelope."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=create_unknown_failure(exc).model_dump(mode="json"),
    )


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("reskinit"),
    lifespan=lifespan,
)

app.add_exception_handler(KnownError, known_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unknown_error_handler)

app.include_router(card_definitions_router)
app.include_router(cardsets_router)
app.include_router(decks_router)
app.include_router(games_router)
app.include_router(health_router)
app.include_router(users_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
