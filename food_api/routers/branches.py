"""
Branch and table endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from food_api.repositories import RepositoryFilters
from food_api.routers._common import Pagination, get_pagination
from food_api.services.domain import BranchService, TableService
from food_api.services.permissions import Action, Resource, require
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.schemas import (
    BranchCreate,
    BranchOutput,
    BranchUpdate,
    TableCreate,
    TableOutput,
    TableUpdate,
)

router = APIRouter(prefix="/api", tags=["branches"])


# =============================================================================
# Branches
# =============================================================================


@router.get("/branches", response_model=list[BranchOutput])
def list_branches(
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.BRANCH, Action.READ)),
) -> list[BranchOutput]:
    return BranchService(db, deadline).list_all(pagination.filters(RepositoryFilters))


@router.get("/branches/{branch_id}", response_model=BranchOutput)
def get_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.BRANCH, Action.READ)),
) -> BranchOutput:
    return BranchService(db, deadline).get_by_id(branch_id)


@router.post("/branches", response_model=BranchOutput, status_code=status.HTTP_201_CREATED)
def create_branch(
    body: BranchCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.BRANCH, Action.CREATE)),
) -> BranchOutput:
    return BranchService(db, deadline).create(body.model_dump())


@router.patch("/branches/{branch_id}", response_model=BranchOutput)
def update_branch(
    branch_id: int,
    body: BranchUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.BRANCH, Action.UPDATE)),
) -> BranchOutput:
    return BranchService(db, deadline).update(branch_id, body.model_dump(exclude_unset=True))


@router.delete("/branches/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.BRANCH, Action.DELETE)),
) -> None:
    BranchService(db, deadline).delete(branch_id)


# =============================================================================
# Tables
# =============================================================================


@router.get("/tables", response_model=list[TableOutput])
def list_tables(
    branch_id: int = Query(...),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.TABLE, Action.READ)),
) -> list[TableOutput]:
    return TableService(db, deadline).list_by_branch(branch_id, pagination.limit, pagination.offset)


@router.get("/tables/{table_id}", response_model=TableOutput)
def get_table(
    table_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.TABLE, Action.READ)),
) -> TableOutput:
    return TableService(db, deadline).get_by_id(table_id)


@router.post("/tables", response_model=TableOutput, status_code=status.HTTP_201_CREATED)
def create_table(
    body: TableCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.TABLE, Action.CREATE)),
) -> TableOutput:
    return TableService(db, deadline).create(body.model_dump())


@router.patch("/tables/{table_id}", response_model=TableOutput)
def update_table(
    table_id: int,
    body: TableUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.TABLE, Action.UPDATE)),
) -> TableOutput:
    return TableService(db, deadline).update(table_id, body.model_dump(exclude_unset=True))


@router.delete("/tables/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    table_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.TABLE, Action.DELETE)),
) -> None:
    TableService(db, deadline).delete(table_id)
