"""
Base Repository implementation.
Provides common data access patterns with guaranteed eager loading.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from food_shared.config.constants import Limits


ModelT = TypeVar("ModelT")


@dataclass
class RepositoryFilters:
    """Base filters for repository queries."""

    # Pagination
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    # Branch filtering
    branch_id: int | None = None

    # Search
    search: str | None = None

    def __post_init__(self):
        """Validate and normalize filters."""
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)
        if self.search:
            self.search = self.search.strip()[:Limits.MAX_SEARCH_TERM_LENGTH]


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Subclasses must implement:
    - model: the SQLAlchemy model class

    and may override:
    - _base_query(): base query with eager loading
    - _apply_filters(): entity-specific filters
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    def _base_query(self) -> Select:
        return select(self.model).order_by(self.model.id)

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if filters.branch_id is not None and hasattr(self.model, "branch_id"):
            query = query.where(self.model.branch_id == filters.branch_id)
        return query

    def find_all(self, filters: RepositoryFilters | None = None) -> Sequence[ModelT]:
        """
        Find all entities matching filters, paginated.

        Args:
            filters: Optional filters

        Returns:
            List of entities
        """
        filters = filters or RepositoryFilters()
        query = self._apply_filters(self._base_query(), filters)
        query = query.offset(filters.offset).limit(filters.limit)
        return self._db.execute(query).scalars().unique().all()

    def find_by_id(self, entity_id: int, *, for_update: bool = False) -> ModelT | None:
        """
        Find entity by ID.

        Args:
            entity_id: Entity ID
            for_update: Lock the row until the transaction ends

        Returns:
            Entity or None
        """
        query = self._base_query().where(self.model.id == entity_id)
        if for_update:
            query = query.with_for_update()
        return self._db.scalar(query)

    def delete(self, entity: ModelT) -> None:
        """Hard delete entity. Flushes, does not commit."""
        self._db.delete(entity)
        self._db.flush()
