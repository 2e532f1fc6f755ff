"""Database handle: lazily built engine and session factory."""

import logging
from typing import Any, Generator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from eventhub.core.config import get_database_url

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """
    Holds one SQLAlchemy engine for the life of the process.

    The engine is created on first use rather than on construction, so
    building a Database (or importing the app) never touches the store.
    Call dispose() on shutdown to release pooled connections.
    """

    def __init__(self, url: str | None = None, **engine_args: Any):
        self.url = url or get_database_url()
        self._engine_args = engine_args
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    def _default_engine_args(self) -> dict[str, Any]:
        if not self.url.startswith("sqlite"):
            return {"pool_pre_ping": True}
        args: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in self.url or self.url == "sqlite://":
            # a single shared connection, otherwise every session sees an empty db
            args["poolclass"] = StaticPool
        return args

    @property
    def engine(self) -> Engine:
        return self._ensure_engine()

    def _ensure_engine(self) -> Engine:
        if self._engine is None:
            args = {**self._default_engine_args(), **self._engine_args}
            self._engine = create_engine(self.url, **args)
            self._session_factory = sessionmaker(
                bind=self._engine, autocommit=False, autoflush=False
            )
            logger.info("Database engine created for %s", self._engine.url.render_as_string(hide_password=True))
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def session(self) -> Session:
        self._ensure_engine()
        assert self._session_factory is not None
        return self._session_factory()

    def create_all(self) -> None:
        # Import models so that they register with Base.metadata
        from eventhub.models import bookings, events  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


def get_db(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session from the app's Database."""
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
