# pincorp/utils/pagination.py

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

from pincorp.config import ITEMS_PER_PAGE

T = TypeVar('T')


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_items: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(items: Sequence[T], page: int = 1, per_page: int = ITEMS_PER_PAGE) -> Page[T]:
    """Slices one page out of `items`; the page number is clamped to the available range."""
    if per_page <= 0:
        raise ValueError("per_page must be positive")
    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page,
                total_pages=total_pages, total_items=total_items)
