"""Pagination helpers for list endpoints."""

import math
from collections.abc import Callable

from fastapi import Query
from pydantic import BaseModel

MAX_PAGE_SIZE = 200


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=created_at&order=desc`."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
        sort: str = Query(default="created_at", description="Sort field (snake_case column)"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination_with_limit(default_limit: int) -> Callable[..., PaginationParams]:
    """Same query parameters as PaginationParams with a different default page size."""

    def dependency(
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=default_limit, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
        sort: str = Query(default="created_at", description="Sort field (snake_case column)"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ) -> PaginationParams:
        return PaginationParams(page=page, limit=limit, sort=sort, order=order)

    return dependency


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    model_config = {"populate_by_name": True}


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 1
