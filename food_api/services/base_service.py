"""
Base Service Classes.

Provides abstract base classes for application services that:
- Use a Repository for data access
- Run every store call inside ``store_step`` under the request deadline
- Convert entities to output DTOs

Architecture:
    Router (thin) → Service (business logic) → Repository (data access) → Model

Usage:
    class CategoryService(BaseCRUDService[Category, CategoryOutput]):
        def __init__(self, db: Session, deadline: Deadline | None = None):
            super().__init__(
                db=db,
                repo=CategoryRepository(db),
                output_schema=CategoryOutput,
                entity_name="Category",
                deadline=deadline,
            )
"""

from __future__ import annotations

from typing import Any, Generic, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from food_api.models import Base
from food_api.repositories import BaseRepository, RepositoryFilters
from food_shared.config.logging import get_logger
from food_shared.infrastructure.db import safe_commit, store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import NotFoundError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseService(Generic[ModelT]):
    """
    Base service for domain operations.

    Holds the session, the repository and the request deadline.
    """

    def __init__(self, db: Session, repo: BaseRepository[ModelT], deadline: Deadline | None = None):
        self._db = db
        self._repo = repo
        self._deadline = deadline

    def _read(self, step: str):
        return store_step(self._db, step, self._deadline)

    def _write(self, step: str):
        return store_step(self._db, step, self._deadline, write=True)

    def _reload(self, step: str):
        return store_step(self._db, step, self._deadline, committed=True)


class BaseCRUDService(BaseService[ModelT], Generic[ModelT, OutputT]):
    """
    Base service for entities with CRUD operations.

    Subclasses override the validation hooks and ``to_output``; the CRUD
    methods themselves rarely need changes.
    """

    def __init__(
        self,
        db: Session,
        repo: BaseRepository[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        deadline: Deadline | None = None,
    ):
        super().__init__(db, repo, deadline)
        self._output_schema = output_schema
        self._entity_name = entity_name

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._entity_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_entity(self, entity_id: int) -> ModelT:
        """
        Get raw entity (for internal use).

        Raises:
            NotFoundError: If entity not found.
        """
        with self._read(f"load {self._entity_name.lower()}"):
            entity = self._repo.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id)
        return entity

    def get_by_id(self, entity_id: int) -> OutputT:
        return self.to_output(self.get_entity(entity_id))

    def list_all(self, filters: RepositoryFilters | None = None) -> list[OutputT]:
        with self._read(f"list {self._entity_name.lower()}"):
            entities: Sequence[ModelT] = self._repo.find_all(filters)
        return [self.to_output(e) for e in entities]

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, data: dict[str, Any]) -> OutputT:
        """
        Create new entity.

        Raises:
            ValidationError / InvalidReferenceError: If data is invalid.
        """
        self._validate_create(data)
        entity = self._repo.model(**self._to_columns(data))

        with self._write(f"insert {self._entity_name.lower()}"):
            self._db.add(entity)
            safe_commit(self._db)
        with self._reload(f"reload {self._entity_name.lower()}"):
            self._db.refresh(entity)
            output = self.to_output(entity)

        logger.info(f"{self._entity_name} created", entity_id=entity.id)
        return output

    def update(self, entity_id: int, data: dict[str, Any]) -> OutputT:
        """
        Update existing entity. Only keys present in ``data`` change.

        Raises:
            NotFoundError: If entity not found.
        """
        entity = self.get_entity(entity_id)
        self._validate_update(entity, data)

        columns = self._repo.model.__table__.columns
        for field_name, value in self._to_columns(data).items():
            column = columns.get(field_name)
            # Explicit nulls only clear nullable columns
            if column is None or (value is None and not column.nullable):
                continue
            setattr(entity, field_name, value)

        with self._write(f"update {self._entity_name.lower()}"):
            safe_commit(self._db)
        with self._reload(f"reload {self._entity_name.lower()}"):
            self._db.refresh(entity)
            output = self.to_output(entity)

        logger.info(f"{self._entity_name} updated", entity_id=entity_id, fields=sorted(data))
        return output

    def delete(self, entity_id: int) -> None:
        """
        Hard delete entity.

        Raises:
            NotFoundError: If entity not found.
        """
        entity = self.get_entity(entity_id)
        self._validate_delete(entity)

        # Capture what post-delete hooks need before the row goes away
        entity_info = self._get_entity_info(entity)

        with self._write(f"delete {self._entity_name.lower()}"):
            self._repo.delete(entity)
            safe_commit(self._db)

        logger.info(f"{self._entity_name} deleted", entity_id=entity_id)
        self._after_delete(entity_info)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT) -> OutputT:
        """
        Convert entity to output DTO.

        Override this method for custom transformation logic.
        """
        return self._output_schema.model_validate(entity)

    def _to_columns(self, data: dict[str, Any]) -> dict[str, Any]:
        """Map request fields to model columns (identity by default)."""
        return dict(data)

    # =========================================================================
    # Validation Hooks (override in subclasses)
    # =========================================================================

    def _validate_create(self, data: dict[str, Any]) -> None:
        pass

    def _validate_update(self, entity: ModelT, data: dict[str, Any]) -> None:
        pass

    def _validate_delete(self, entity: ModelT) -> None:
        pass

    def _get_entity_info(self, entity: ModelT) -> dict[str, Any]:
        return {"id": entity.id}

    def _after_delete(self, entity_info: dict[str, Any]) -> None:
        pass
