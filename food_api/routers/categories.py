"""
Category endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from food_api.routers._common import Pagination, get_pagination
from food_api.services.domain import CategoryService
from food_api.services.permissions import Action, Resource, require
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.schemas import CategoryCreate, CategoryOutput, CategoryUpdate

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOutput])
def list_categories(
    branch_id: int = Query(...),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.CATEGORY, Action.READ)),
) -> list[CategoryOutput]:
    """List categories of a branch."""
    return CategoryService(db, deadline).list_by_branch(branch_id, pagination.limit, pagination.offset)


@router.get("/{category_id}", response_model=CategoryOutput)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.CATEGORY, Action.READ)),
) -> CategoryOutput:
    return CategoryService(db, deadline).get_by_id(category_id)


@router.post("", response_model=CategoryOutput, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.CATEGORY, Action.CREATE)),
) -> CategoryOutput:
    return CategoryService(db, deadline).create(body.model_dump())


@router.patch("/{category_id}", response_model=CategoryOutput)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.CATEGORY, Action.UPDATE)),
) -> CategoryOutput:
    return CategoryService(db, deadline).update(category_id, body.model_dump(exclude_unset=True))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.CATEGORY, Action.DELETE)),
) -> None:
    """Delete a category. Fails with 409 while it still has menus."""
    CategoryService(db, deadline).delete(category_id)
