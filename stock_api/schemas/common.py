from __future__ import annotations

from pydantic import BaseModel

from stock_core.repositories import PagedResult


class PagingMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_page(cls, result: PagedResult) -> "PagingMeta":
        return cls(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        )


__all__ = ["PagingMeta"]
