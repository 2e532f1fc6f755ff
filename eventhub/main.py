import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from eventhub.core.config import get_cors_origins
from eventhub.core.logging_config import setup_logging
from eventhub.database.db import Database
from eventhub.routes import bookings, events

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.create_all()
    logger.info("Database initialized successfully")
    yield
    database.dispose()


async def store_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Store unavailable during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Database connection failed"},
    )


async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error during %s %s", request.method, request.url.path)
    # store errors carry SQL and bound parameters
    if isinstance(exc, SQLAlchemyError) or not str(exc):
        detail = "An unexpected error occurred"
    else:
        detail = str(exc)
    return JSONResponse(status_code=500, content={"detail": detail})


def create_app(database: Database | None = None) -> FastAPI:
    setup_logging()

    app = FastAPI(title="eventhub", lifespan=lifespan)
    app.state.database = database or Database()

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(OperationalError, store_unavailable)
    app.add_exception_handler(Exception, unexpected_error)

    # Include the routers
    app.include_router(events.router, prefix="/api")
    app.include_router(bookings.router, prefix="/api")

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()
