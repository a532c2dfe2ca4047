"""
Pagination utilities

Every list endpoint shares the same contract: ``page`` and ``limit`` are
read leniently (anything that does not parse as a positive or negative
integer falls back to the endpoint default), offset is
``(page - 1) * limit`` and the metadata is derived from the total row count.
"""
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from fastapi import Query as QueryParam
from sqlalchemy.orm import Query

from app.schemas.common import PaginationMeta

DEFAULT_PAGE = 1

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_int(value: Any, default: int) -> int:
    """
    Read an integer the way query strings are read everywhere in the API.

    Leading digits win (``"3abc"`` is 3), non-numeric or missing input
    and zero fall back to ``default``. No range checks are applied.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value or default

    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    return int(match.group(1)) or default


@dataclass(frozen=True)
class PageRequest:
    """Requested window into a list"""
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination_params(
    page: Any = None,
    limit: Any = None,
    default_limit: int = 10
) -> PageRequest:
    """
    Coerce raw pagination parameters

    Args:
        page: Raw page value (1-indexed)
        limit: Raw items-per-page value
        default_limit: Endpoint specific default page size

    Returns:
        PageRequest with integer page and limit
    """
    return PageRequest(
        page=coerce_int(page, DEFAULT_PAGE),
        limit=coerce_int(limit, default_limit),
    )


def pagination_dependency(default_limit: int) -> Callable[..., PageRequest]:
    """Build a FastAPI dependency reading ``?page=&limit=`` with the given default"""

    def dependency(
        page: Optional[str] = QueryParam(None, description="Page number (default 1)"),
        limit: Optional[str] = QueryParam(None, description=f"Items per page (default {default_limit})")
    ) -> PageRequest:
        return get_pagination_params(page, limit, default_limit)

    return dependency


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    """
    Compute page metadata

    Args:
        page: Current page number
        limit: Items per page
        total: Total number of matching rows

    Returns:
        PaginationMeta with current page, total pages and navigation flags
    """
    return PaginationMeta(
        current_page=page,
        total_pages=math.ceil(total / limit),
        has_next=page * limit < total,
        has_prev=page > 1,
    )


def paginate(query: Query, page_request: PageRequest) -> Tuple[List[Any], int]:
    """
    Paginate SQLAlchemy query

    Args:
        query: SQLAlchemy query object (already ordered)
        page_request: Coerced page and limit

    Returns:
        Tuple of (items, total_count)
    """
    total = query.order_by(None).count()

    # Out-of-range windows (page < 1, negative limit) read as empty
    if page_request.offset < 0 or page_request.limit <= 0:
        return [], total

    items = query.limit(page_request.limit).offset(page_request.offset).all()
    return items, total
