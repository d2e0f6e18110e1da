"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from hydroponics.config import Settings, get_settings
from hydroponics.database import Database
from hydroponics.errors import HydroponicsError, StoreError, StoreTimeout, ValidationError
from hydroponics.services.retention import Pruner, prune_periodically, retention_rules

logger = logging.getLogger("hydroponics")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle.

    The store handle is opened here and closed on shutdown, unless one was
    attached to ``app.state.db`` beforehand (the caller then owns it).
    """
    settings: Settings = app.state.settings
    owns_db = getattr(app.state, "db", None) is None
    if owns_db:
        app.state.db = await Database.connect(settings)

    # Startup: launch background pruning
    prune_task = asyncio.create_task(
        prune_periodically(
            app.state.pruner,
            app.state.db,
            settings.PRUNE_INTERVAL_SECONDS,
            run_immediately=settings.PRUNE_ON_STARTUP,
        )
    )
    logger.info("Background prune task started (every %ds)", settings.PRUNE_INTERVAL_SECONDS)
    yield
    # Shutdown: cancel the task and close the pool
    prune_task.cancel()
    try:
        await prune_task
    except asyncio.CancelledError:
        pass
    if owns_db:
        await app.state.db.close()
        app.state.db = None


# ── Error responses ─────────────────────────────────


def _error_body(code: str, message: str, fields: list[str] | None = None) -> dict:
    return {"error": code, "message": message, "fields": fields or []}


async def hydroponics_error_handler(request: Request, exc: HydroponicsError):
    if isinstance(exc, ValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    elif isinstance(exc, StoreTimeout):
        logger.error("Store timeout on %s %s: %s", request.method, request.url.path, exc.message)
    elif isinstance(exc, StoreError):
        logger.error(
            "Store error on %s %s: %s (cause: %r)",
            request.method,
            request.url.path,
            exc.message,
            exc.__cause__,
        )
    else:
        logger.error("Unhandled application error on %s: %s", request.url.path, exc.message)

    return JSONResponse(
        status_code=exc.http_status,
        content=_error_body(exc.code, exc.public_message, getattr(exc, "fields", None)),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed bodies / query strings as 400 with the offending field names."""
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append(".".join(loc) or "body")
    return JSONResponse(
        status_code=400,
        content=_error_body(
            ValidationError.code,
            f"Invalid fields: {', '.join(fields)}",
            fields,
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything that escaped the routes; the cause is only logged."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=HydroponicsError.http_status,
        content=_error_body(HydroponicsError.code, HydroponicsError.public_message),
    )


# ── App factory ─────────────────────────────────────


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pruner = Pruner(retention_rules(settings))

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HydroponicsError, hydroponics_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "API Hidroponía online"

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    # ── API routers ──
    from hydroponics.api.configuration import router as configuration_router
    from hydroponics.api.lights import router as lights_router
    from hydroponics.api.maintenance import router as maintenance_router
    from hydroponics.api.readings import router as readings_router

    app.include_router(readings_router)
    app.include_router(configuration_router)
    app.include_router(lights_router)
    app.include_router(maintenance_router)

    return app


app = create_app()
