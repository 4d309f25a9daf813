"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI

from app.config import get_settings
from app.core.exceptions import AppError, global_exception_handler
from app.core.logging import configure_logging
from app.core.middleware import setup_middleware
from app.domain.models.user import User
from app.infrastructure.database import DatabaseClient, get_client, reset_client
from app.infrastructure.field_encryption import FieldEncryptionMiddleware
from app.interfaces.api.users import router as users_router
from app.interfaces.deps import get_db_client
from app.interfaces.web.pages import router as pages_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — wire the database client and encryption."""
    settings = get_settings()
    logger.info("Starting Sealed Users...", env=settings.ENVIRONMENT)

    owns_client = app.state.db_client is None
    if owns_client:
        app.state.db_client = get_client()
    app.state.db_client.create_all()
    app.state.field_encryption = FieldEncryptionMiddleware.from_settings(settings, User)

    yield

    if owns_client:
        # Outside production the handle stays in its global slot for the next reload
        if settings.is_production:
            reset_client()
        app.state.db_client = None
    logger.info("Sealed Users stopped")


def create_app(db_client: Optional[DatabaseClient] = None) -> FastAPI:
    """Build the application; *db_client* overrides the process-wide one."""
    configure_logging()

    app = FastAPI(
        title="Sealed Users",
        description="Demo of field-level encryption at rest",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.db_client = db_client

    setup_middleware(app)
    app.add_exception_handler(AppError, global_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(pages_router)
    app.include_router(users_router)

    @app.get("/health")
    def health(client: DatabaseClient = Depends(get_db_client)):
        """Liveness plus a storage round-trip; 503 if the database is down."""
        client.ping()
        return {"status": "healthy"}

    return app


app = create_app()
