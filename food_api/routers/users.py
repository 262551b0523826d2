"""
User administration router.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from food_api.repositories import RepositoryFilters
from food_api.routers._common import Pagination, get_pagination
from food_api.services.domain import UserService
from food_api.services.permissions import Action, Resource, require
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.schemas import RoleUpdate, UserCreate, UserOutput

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[UserOutput])
def list_users(
    branch_id: int | None = Query(default=None),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.USER, Action.READ)),
) -> list[UserOutput]:
    filters = pagination.filters(RepositoryFilters, branch_id=branch_id)
    return UserService(db, deadline).list_users(filters)


@router.post("", response_model=UserOutput, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.USER, Action.CREATE)),
) -> UserOutput:
    """Create a verified account. The role must be within the caller's grant."""
    return UserService(db, deadline).create_user(user, body)


@router.put("/{user_id}/role", response_model=UserOutput)
def change_role(
    user_id: int,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.USER, Action.UPDATE)),
) -> UserOutput:
    return UserService(db, deadline).change_role(user, user_id, body)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.USER, Action.DELETE)),
) -> None:
    UserService(db, deadline).delete_user(user, user_id)
