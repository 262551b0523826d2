"""
Add-on endpoints.
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from food_api.routers._common import Pagination, get_pagination
from food_api.services.domain import AddOnService
from food_api.services.permissions import Action, Resource, require
from food_shared.config.constants import Limits
from food_shared.infrastructure.blob_store import BlobStore, get_blob_store
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.schemas import AddOnCreate, AddOnOutput, AddOnUpdate

router = APIRouter(prefix="/api/add-ons", tags=["add-ons"])


@router.get("", response_model=list[AddOnOutput])
def list_add_ons(
    menu_id: int | None = Query(default=None),
    branch_id: int | None = Query(default=None),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ADD_ON, Action.READ)),
) -> list[AddOnOutput]:
    return AddOnService(db, deadline).list_filtered(menu_id, branch_id, pagination.limit, pagination.offset)


@router.get("/{add_on_id}", response_model=AddOnOutput)
def get_add_on(
    add_on_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ADD_ON, Action.READ)),
) -> AddOnOutput:
    return AddOnService(db, deadline).get_by_id(add_on_id)


@router.post("", response_model=AddOnOutput, status_code=status.HTTP_201_CREATED)
def create_add_on(
    body: AddOnCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ADD_ON, Action.CREATE)),
) -> AddOnOutput:
    return AddOnService(db, deadline).create(body.model_dump())


@router.patch("/{add_on_id}", response_model=AddOnOutput)
def update_add_on(
    add_on_id: int,
    body: AddOnUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ADD_ON, Action.UPDATE)),
) -> AddOnOutput:
    return AddOnService(db, deadline).update(add_on_id, body.model_dump(exclude_unset=True))


@router.delete("/{add_on_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_add_on(
    add_on_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(require(Resource.ADD_ON, Action.DELETE)),
) -> None:
    AddOnService(db, deadline, blob_store).delete(add_on_id)


@router.put("/{add_on_id}/cover", response_model=AddOnOutput)
def upload_cover(
    add_on_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(require(Resource.ADD_ON, Action.UPDATE)),
) -> AddOnOutput:
    data = file.file.read(Limits.MAX_UPLOAD_BYTES + 1)
    return AddOnService(db, deadline, blob_store).upload_cover(add_on_id, data, file.content_type)


@router.delete("/{add_on_id}/cover", response_model=AddOnOutput)
def delete_cover(
    add_on_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(require(Resource.ADD_ON, Action.UPDATE)),
) -> AddOnOutput:
    return AddOnService(db, deadline, blob_store).delete_cover(add_on_id)
