"""
Limit/offset paging shared by list endpoints.

    @router.get("")
    def list_orders(page: Pagination = Depends(get_pagination), ...):
        filters = page.filters(OrderFilters, branch_id=branch_id)
"""

from dataclasses import dataclass
from typing import Any, TypeVar

from fastapi import Query

from food_api.repositories import RepositoryFilters
from food_shared.config.constants import Limits

FiltersT = TypeVar("FiltersT", bound=RepositoryFilters)


@dataclass(frozen=True)
class Pagination:
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    def filters(self, filters_cls: type[FiltersT], **fields: Any) -> FiltersT:
        """Repository filters carrying this page plus ``fields``."""
        return filters_cls(limit=self.limit, offset=self.offset, **fields)


def get_pagination(
    limit: int = Query(Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE, description="Page size"),
    offset: int = Query(0, ge=0, description="Rows to skip"),
) -> Pagination:
    return Pagination(limit=limit, offset=offset)
