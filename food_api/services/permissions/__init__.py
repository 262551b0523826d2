"""
Role policy: the single authorization entry point.

Usage:
    from food_api.services.permissions import Action, Resource, require

    @router.post("/menus")
    def create_menu(..., user: dict = Depends(require(Resource.MENU, Action.CREATE))):
        ...
"""

from .policy import Action, Resource, authorize, can_grant, ensure, require

__all__ = [
    "Action",
    "Resource",
    "authorize",
    "can_grant",
    "ensure",
    "require",
]
