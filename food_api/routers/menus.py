"""
Menu endpoints: CRUD, search by title and cover images.
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from food_api.routers._common import Pagination, get_pagination
from food_api.services.domain import MenuService
from food_api.services.permissions import Action, Resource, require
from food_shared.config.constants import Limits
from food_shared.infrastructure.blob_store import BlobStore, get_blob_store
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.exceptions import ValidationError
from food_shared.utils.schemas import MenuCreate, MenuOutput, MenuUpdate

router = APIRouter(prefix="/api/menus", tags=["menus"])


@router.get("", response_model=list[MenuOutput])
def list_menus(
    branch_id: int | None = Query(default=None),
    category_id: int | None = Query(default=None),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.MENU, Action.READ)),
) -> list[MenuOutput]:
    """List menus by branch or by category (one of the two is required)."""
    service = MenuService(db, deadline)
    if category_id is not None:
        return service.list_by_category(category_id, pagination.limit, pagination.offset)
    if branch_id is not None:
        return service.list_by_branch(branch_id, pagination.limit, pagination.offset)
    raise ValidationError("branch_id or category_id is required")


@router.get("/search", response_model=list[MenuOutput])
def search_menus(
    branch_id: int = Query(...),
    title: str = Query(..., min_length=1, max_length=Limits.MAX_SEARCH_TERM_LENGTH),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.MENU, Action.READ)),
) -> list[MenuOutput]:
    """Case-insensitive title search within a branch."""
    return MenuService(db, deadline).search(branch_id, title, pagination.limit, pagination.offset)


@router.get("/{menu_id}", response_model=MenuOutput)
def get_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.MENU, Action.READ)),
) -> MenuOutput:
    return MenuService(db, deadline).get_by_id(menu_id)


@router.post("", response_model=MenuOutput, status_code=status.HTTP_201_CREATED)
def create_menu(
    body: MenuCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.MENU, Action.CREATE)),
) -> MenuOutput:
    return MenuService(db, deadline).create(body.model_dump())


@router.patch("/{menu_id}", response_model=MenuOutput)
def update_menu(
    menu_id: int,
    body: MenuUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.MENU, Action.UPDATE)),
) -> MenuOutput:
    """Price changes affect future orders only; placed orders keep their snapshot."""
    return MenuService(db, deadline).update(menu_id, body.model_dump(exclude_unset=True))


@router.delete("/{menu_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(require(Resource.MENU, Action.DELETE)),
) -> None:
    """Delete a menu together with its add-ons and cover images."""
    MenuService(db, deadline, blob_store).delete(menu_id)


@router.put("/{menu_id}/cover", response_model=MenuOutput)
def upload_cover(
    menu_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(require(Resource.MENU, Action.UPDATE)),
) -> MenuOutput:
    data = file.file.read(Limits.MAX_UPLOAD_BYTES + 1)
    return MenuService(db, deadline, blob_store).upload_cover(menu_id, data, file.content_type)


@router.delete("/{menu_id}/cover", response_model=MenuOutput)
def delete_cover(
    menu_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(require(Resource.MENU, Action.UPDATE)),
) -> MenuOutput:
    return MenuService(db, deadline, blob_store).delete_cover(menu_id)
