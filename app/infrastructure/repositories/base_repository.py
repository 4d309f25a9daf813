"""
SQLAlchemy implementation of the Base Repository.

Rows leave the repository as detached pydantic schemas, never as live
ORM objects, so callers can rewrite field values without the session
flushing them back.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConstraintViolationError,
    EntityNotFoundException,
    StorageConnectionError,
    UniqueConstraintError,
)
from app.domain.repositories.base import BaseRepository
from app.infrastructure.database import Base

# psycopg2 SQLSTATE for unique_violation
PG_UNIQUE_VIOLATION = "23505"

ModelType = TypeVar("ModelType", bound=Base)
SchemaType = TypeVar("SchemaType", bound=BaseModel)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for duplicate-key errors, false for NOT NULL, FK and CHECK failures."""
    if getattr(exc.orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


def to_data(obj_in: Any) -> Dict[str, Any]:
    """Accept a dict or pydantic model and return a plain dict."""
    if isinstance(obj_in, BaseModel):
        return obj_in.model_dump(exclude_unset=True)
    return dict(obj_in)


class SQLAlchemyRepository(BaseRepository[SchemaType], Generic[ModelType, SchemaType]):
    """Generic repository implementation for SQLAlchemy models."""

    def __init__(self, db: Session, model: Type[ModelType], schema: Type[SchemaType]):
        self.db = db
        self.model = model
        self.schema = schema

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        """Map driver errors onto application errors, rolling back first."""
        try:
            yield
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                raise UniqueConstraintError(
                    f"{self.model.__name__} violates a unique constraint",
                    details={"reason": str(exc.orig)},
                ) from exc
            raise ConstraintViolationError(
                f"{self.model.__name__} violates an integrity constraint",
                details={"reason": str(exc.orig)},
            ) from exc
        except OperationalError as exc:
            self.db.rollback()
            raise StorageConnectionError(details={"reason": str(exc.orig)}) from exc

    def _to_schema(self, db_obj: ModelType) -> SchemaType:
        return self.schema.model_validate(db_obj)

    def get_by_id(self, id: int) -> Optional[SchemaType]:
        with self._translate_errors():
            db_obj = self.db.get(self.model, id)
        return self._to_schema(db_obj) if db_obj else None

    def find_many(self) -> List[SchemaType]:
        with self._translate_errors():
            rows = self.db.query(self.model).all()
        return [self._to_schema(row) for row in rows]

    def create(self, obj_in: Any) -> SchemaType:
        db_obj = self.model(**to_data(obj_in))
        with self._translate_errors():
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
        return self._to_schema(db_obj)

    def update(self, id: int, obj_in: Any) -> SchemaType:
        with self._translate_errors():
            db_obj = self.db.get(self.model, id)
            if db_obj is None:
                raise EntityNotFoundException(
                    f"{self.model.__name__} not found", details={"id": id}
                )
            for field, value in to_data(obj_in).items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            self.db.commit()
            self.db.refresh(db_obj)
        return self._to_schema(db_obj)
