"""
Database client — engine, session factory and the process-wide handle.

The application entry points (FastAPI lifespan, seed CLI) obtain one
client through get_client() and pass it down explicitly.
"""

import builtins
from typing import Optional

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.core.exceptions import StorageConnectionError

logger = structlog.get_logger(__name__)

Base = declarative_base()

# Attribute on builtins holding the client while not in production.
# Module globals are lost when the module is re-imported on hot reload;
# builtins lives for the whole interpreter.
GLOBAL_CLIENT_SLOT = "_sealed_users_db_client"

_client: Optional["DatabaseClient"] = None


def _engine_options(url: str, echo: bool) -> dict:
    parsed = make_url(url)
    options: dict = {"echo": echo}
    if parsed.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            # One shared connection, otherwise each checkout sees an empty db
            options["poolclass"] = StaticPool
    else:
        options.update(
            pool_pre_ping=True,  # Check connections before using them
            pool_size=5,
            max_overflow=10,
            pool_recycle=3600,
        )
    return options


class DatabaseClient:
    """Owns one engine and its session factory."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_engine(url, **_engine_options(url, echo))
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def __repr__(self):
        return f"<DatabaseClient {make_url(self.url).render_as_string(hide_password=True)}>"

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        """Create all tables for registered models."""
        # Register models with Base before creating
        from app.domain.models import user  # noqa: F401

        try:
            Base.metadata.create_all(bind=self.engine)
        except OperationalError as exc:
            raise StorageConnectionError(details={"reason": str(exc.orig)}) from exc
        logger.info("Database tables created/verified")

    def ping(self) -> None:
        """Round-trip a trivial query, raising StorageConnectionError on failure."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except OperationalError as exc:
            raise StorageConnectionError(details={"reason": str(exc.orig)}) from exc

    def dispose(self) -> None:
        self.engine.dispose()


def get_client() -> DatabaseClient:
    """Return the process-wide client, creating it on first use."""
    global _client
    settings = get_settings()

    if _client is None:
        _client = getattr(builtins, GLOBAL_CLIENT_SLOT, None)
    if _client is None:
        _client = DatabaseClient(settings.DATABASE_URL, echo=settings.DB_ECHO)
        logger.info("Database client created", client=repr(_client))

    if not settings.is_production:
        setattr(builtins, GLOBAL_CLIENT_SLOT, _client)
    return _client


def reset_client() -> None:
    """Dispose the cached client and forget it."""
    global _client
    client = _client or getattr(builtins, GLOBAL_CLIENT_SLOT, None)
    if client is not None:
        client.dispose()
    _client = None
    if hasattr(builtins, GLOBAL_CLIENT_SLOT):
        delattr(builtins, GLOBAL_CLIENT_SLOT)
