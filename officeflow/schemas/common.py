"""Shared response pieces."""

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Pagination block returned alongside list items."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(
            current_page=page,
            total_pages=(total + limit - 1) // limit if total else 0,
            total_items=total,
            items_per_page=limit,
        )
