"""
Role policy.

``authorize(role, resource, action)`` is the single place where role rules
live. Routers never compare roles themselves; they depend on ``require``.

    Resource        READ   CREATE      UPDATE      DELETE
    order           all    all         all         ASSISTANT+
    sale            all    ASSISTANT+  -           MANAGER+
    table/category/
    menu/add_on     all    MANAGER+    MANAGER+    MANAGER+
    branch          all    OWNER+      OWNER+      OWNER+
    user            OWNER+ MANAGER+    (grants)    ROOT
"""

from enum import Enum
from typing import Any, Callable, Final

from fastapi import Depends

from food_shared.config.constants import Roles
from food_shared.config.logging import get_logger
from food_shared.security.auth import current_user_context
from food_shared.utils.exceptions import ForbiddenError

logger = get_logger(__name__)


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Resource(str, Enum):
    BRANCH = "branch"
    TABLE = "table"
    CATEGORY = "category"
    MENU = "menu"
    ADD_ON = "add_on"
    ORDER = "order"
    SALE = "sale"
    USER = "user"


_CATALOG: Final = (Resource.TABLE, Resource.CATEGORY, Resource.MENU, Resource.ADD_ON)

# (resource, action) -> minimum role. Missing pairs are denied.
_MINIMUM_ROLE: Final[dict[tuple[Resource, Action], str]] = {
    (Resource.ORDER, Action.READ): Roles.STAFF,
    (Resource.ORDER, Action.CREATE): Roles.STAFF,
    (Resource.ORDER, Action.UPDATE): Roles.STAFF,
    (Resource.ORDER, Action.DELETE): Roles.ASSISTANT,
    (Resource.SALE, Action.READ): Roles.STAFF,
    (Resource.SALE, Action.CREATE): Roles.ASSISTANT,
    (Resource.SALE, Action.DELETE): Roles.MANAGER,
    (Resource.BRANCH, Action.READ): Roles.STAFF,
    (Resource.BRANCH, Action.CREATE): Roles.OWNER,
    (Resource.BRANCH, Action.UPDATE): Roles.OWNER,
    (Resource.BRANCH, Action.DELETE): Roles.OWNER,
    (Resource.USER, Action.READ): Roles.OWNER,
    (Resource.USER, Action.CREATE): Roles.MANAGER,
    (Resource.USER, Action.UPDATE): Roles.OWNER,
    (Resource.USER, Action.DELETE): Roles.ROOT,
    **{(resource, Action.READ): Roles.STAFF for resource in _CATALOG},
    **{(resource, Action.CREATE): Roles.MANAGER for resource in _CATALOG},
    **{(resource, Action.UPDATE): Roles.MANAGER for resource in _CATALOG},
    **{(resource, Action.DELETE): Roles.MANAGER for resource in _CATALOG},
}

# Highest role each role may hand out
_GRANT_CEILING: Final[dict[str, str]] = {
    Roles.MANAGER: Roles.ASSISTANT,
    Roles.OWNER: Roles.MANAGER,
    Roles.ROOT: Roles.OWNER,
}


def authorize(role: str | None, resource: Resource, action: Action) -> bool:
    """True if ``role`` may perform ``action`` on ``resource``."""
    minimum = _MINIMUM_ROLE.get((resource, action))
    if minimum is None:
        return False
    return Roles.at_least(role, minimum)


def can_grant(role: str | None, target_role: str) -> bool:
    """True if ``role`` may create a user with, or change a user to, ``target_role``."""
    ceiling = _GRANT_CEILING.get(role or "")
    if ceiling is None or target_role not in Roles.ALL:
        return False
    return Roles.rank(target_role) <= Roles.rank(ceiling)


def ensure(user: dict[str, Any], resource: Resource, action: Action) -> None:
    """Raise ForbiddenError unless the caller may perform the action."""
    role = user.get("role")
    if not authorize(role, resource, action):
        raise ForbiddenError(
            f"{action.value} {resource.value}",
            user_id=user.get("sub"),
            role=role,
        )


def require(resource: Resource, action: Action) -> Callable[..., dict[str, Any]]:
    """
    FastAPI dependency factory.

    Usage:
        @router.delete("/{sale_id}")
        def delete_sale(user: dict = Depends(require(Resource.SALE, Action.DELETE))):
            ...
    """

    def dependency(user: dict[str, Any] = Depends(current_user_context)) -> dict[str, Any]:
        ensure(user, resource, action)
        return user

    return dependency
