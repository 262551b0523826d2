"""
Category Domain Service.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from food_api.models import Branch, Category, MenuItem
from food_api.repositories import CategoryRepository, RepositoryFilters
from food_api.services.base_service import BaseCRUDService
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import ConflictError, InvalidBranchError
from food_shared.utils.schemas import CategoryOutput


class CategoryService(BaseCRUDService[Category, CategoryOutput]):
    def __init__(self, db: Session, deadline: Deadline | None = None):
        super().__init__(
            db=db,
            repo=CategoryRepository(db),
            output_schema=CategoryOutput,
            entity_name="Category",
            deadline=deadline,
        )

    def list_by_branch(self, branch_id: int, limit: int, offset: int) -> list[CategoryOutput]:
        return self.list_all(RepositoryFilters(branch_id=branch_id, limit=limit, offset=offset))

    def _validate_create(self, data: dict[str, Any]) -> None:
        with self._read("validate branch"):
            branch = self._db.get(Branch, data["branch_id"])
        if branch is None:
            raise InvalidBranchError(data["branch_id"])

    def _validate_delete(self, entity: Category) -> None:
        with self._read("check category menus"):
            menus = self._db.scalar(
                select(func.count()).select_from(MenuItem).where(MenuItem.category_id == entity.id)
            ) or 0
        if menus:
            raise ConflictError("Category still has menus", category_id=entity.id, menus=menus)
