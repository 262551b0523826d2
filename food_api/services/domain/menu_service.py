"""
Menu and Add-on Domain Services.

Prices arrive as decimals and are stored as cents. A menu discount may
never exceed its price.
"""

from typing import Any

from sqlalchemy.orm import Session

from food_api.models import AddOn, Branch, Category, MenuItem
from food_api.repositories import (
    AddOnFilters,
    AddOnRepository,
    MenuFilters,
    MenuRepository,
)
from food_api.services.base_service import BaseCRUDService
from food_shared.infrastructure.blob_store import BlobStore
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import (
    InvalidBranchError,
    InvalidCategoryError,
    InvalidMenuReferenceError,
    ValidationError,
)
from food_shared.utils.money import to_cents
from food_shared.utils.schemas import AddOnOutput, MenuOutput
from .cover_images import discard_blob, remove_cover, replace_cover

_MONEY_COLUMNS = {"price": "price_cents", "discount": "discount_cents"}


def _money_to_columns(data: dict[str, Any]) -> dict[str, Any]:
    columns = {}
    for key, value in data.items():
        if key in _MONEY_COLUMNS:
            columns[_MONEY_COLUMNS[key]] = to_cents(value) if value is not None else None
        else:
            columns[key] = value
    return columns


class MenuService(BaseCRUDService[MenuItem, MenuOutput]):
    """Menu CRUD, search and cover images. Deleting a menu removes its add-ons."""

    def __init__(
        self,
        db: Session,
        deadline: Deadline | None = None,
        blob_store: BlobStore | None = None,
    ):
        super().__init__(
            db=db,
            repo=MenuRepository(db),
            output_schema=MenuOutput,
            entity_name="Menu",
            deadline=deadline,
        )
        self._blob_store = blob_store

    def to_output(self, entity: MenuItem) -> MenuOutput:
        return MenuOutput.from_model(entity, with_add_ons=True)

    def _to_columns(self, data: dict[str, Any]) -> dict[str, Any]:
        return _money_to_columns(data)

    # =========================================================================
    # Queries
    # =========================================================================

    def list_by_branch(self, branch_id: int, limit: int, offset: int) -> list[MenuOutput]:
        return self.list_all(MenuFilters(branch_id=branch_id, limit=limit, offset=offset))

    def list_by_category(self, category_id: int, limit: int, offset: int) -> list[MenuOutput]:
        return self.list_all(MenuFilters(category_id=category_id, limit=limit, offset=offset))

    def search(self, branch_id: int, title: str, limit: int, offset: int) -> list[MenuOutput]:
        """Case-insensitive title substring search within a branch."""
        if not title.strip():
            raise ValidationError("Search term must not be empty")
        return self.list_all(
            MenuFilters(branch_id=branch_id, search=title, limit=limit, offset=offset)
        )

    # =========================================================================
    # Cover images
    # =========================================================================

    def upload_cover(self, menu_id: int, data: bytes, content_type: str | None) -> MenuOutput:
        menu = self.get_entity(menu_id)
        replace_cover(self._db, self._blob_store, menu, "menus", data, content_type, self._deadline)
        with self._reload("reload menu"):
            return self.to_output(menu)

    def delete_cover(self, menu_id: int) -> MenuOutput:
        menu = self.get_entity(menu_id)
        remove_cover(self._db, self._blob_store, menu, self._deadline)
        with self._reload("reload menu"):
            return self.to_output(menu)

    # =========================================================================
    # Validation
    # =========================================================================

    def _check_category(self, branch_id: int, category_id: int) -> None:
        with self._read("validate category"):
            category = self._db.get(Category, category_id)
        if category is None:
            raise InvalidCategoryError(category_id)
        if category.branch_id != branch_id:
            raise InvalidCategoryError(category_id, reason=f"not in branch {branch_id}")

    @staticmethod
    def _check_discount(price_cents: int, discount_cents: int) -> None:
        if discount_cents > price_cents:
            raise ValidationError(
                "Discount cannot exceed price",
                price_cents=price_cents,
                discount_cents=discount_cents,
            )

    def _validate_create(self, data: dict[str, Any]) -> None:
        with self._read("validate branch"):
            branch = self._db.get(Branch, data["branch_id"])
        if branch is None:
            raise InvalidBranchError(data["branch_id"])
        self._check_category(data["branch_id"], data["category_id"])
        self._check_discount(to_cents(data["price"]), to_cents(data.get("discount", 0)))

    def _validate_update(self, entity: MenuItem, data: dict[str, Any]) -> None:
        if data.get("category_id") is not None:
            self._check_category(entity.branch_id, data["category_id"])
        price = to_cents(data["price"]) if data.get("price") is not None else entity.price_cents
        discount = (
            to_cents(data["discount"]) if data.get("discount") is not None else entity.discount_cents
        )
        self._check_discount(price, discount)

    def _get_entity_info(self, entity: MenuItem) -> dict[str, Any]:
        covers = [entity.cover_url] + [add_on.cover_url for add_on in entity.add_ons]
        return {"id": entity.id, "covers": [url for url in covers if url]}

    def _after_delete(self, entity_info: dict[str, Any]) -> None:
        if self._blob_store is None:
            return
        for url in entity_info["covers"]:
            discard_blob(self._blob_store, url)


class AddOnService(BaseCRUDService[AddOn, AddOnOutput]):
    """Add-on CRUD and cover images."""

    def __init__(
        self,
        db: Session,
        deadline: Deadline | None = None,
        blob_store: BlobStore | None = None,
    ):
        super().__init__(
            db=db,
            repo=AddOnRepository(db),
            output_schema=AddOnOutput,
            entity_name="AddOn",
            deadline=deadline,
        )
        self._blob_store = blob_store

    def to_output(self, entity: AddOn) -> AddOnOutput:
        return AddOnOutput.from_model(entity)

    def _to_columns(self, data: dict[str, Any]) -> dict[str, Any]:
        return _money_to_columns(data)

    def list_filtered(
        self,
        menu_id: int | None,
        branch_id: int | None,
        limit: int,
        offset: int,
    ) -> list[AddOnOutput]:
        return self.list_all(
            AddOnFilters(menu_id=menu_id, branch_id=branch_id, limit=limit, offset=offset)
        )

    def upload_cover(self, add_on_id: int, data: bytes, content_type: str | None) -> AddOnOutput:
        add_on = self.get_entity(add_on_id)
        replace_cover(self._db, self._blob_store, add_on, "add-ons", data, content_type, self._deadline)
        with self._reload("reload add-on"):
            return self.to_output(add_on)

    def delete_cover(self, add_on_id: int) -> AddOnOutput:
        add_on = self.get_entity(add_on_id)
        remove_cover(self._db, self._blob_store, add_on, self._deadline)
        with self._reload("reload add-on"):
            return self.to_output(add_on)

    def _validate_create(self, data: dict[str, Any]) -> None:
        menu_id = data.get("menu_id")
        if menu_id is None:
            return
        with self._read("validate menu"):
            menu = self._db.get(MenuItem, menu_id)
        if menu is None:
            raise InvalidMenuReferenceError(menu_id)

    def _get_entity_info(self, entity: AddOn) -> dict[str, Any]:
        return {"id": entity.id, "cover_url": entity.cover_url}

    def _after_delete(self, entity_info: dict[str, Any]) -> None:
        if self._blob_store is not None:
            discard_blob(self._blob_store, entity_info["cover_url"])
