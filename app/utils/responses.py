"""
Utility functions for API responses
"""
from typing import Any, Dict, List

from pydantic import BaseModel

from app.schemas.common import PaginationMeta


def dump(item: Any) -> Any:
    """Serialize a schema instance, passing plain values through"""
    if isinstance(item, BaseModel):
        return item.model_dump(by_alias=True)
    return item


def paginated_response(
    key: str,
    items: List[Any],
    meta: PaginationMeta
) -> Dict:
    """
    Create paginated response

    Args:
        key: Name of the collection in the body ("posts", "comments", ...)
        items: Items of the current page
        meta: Pagination metadata

    Returns:
        Dict with the items under ``key`` and a ``pagination`` block
    """
    return {
        key: [dump(item) for item in items],
        "pagination": meta.model_dump(by_alias=True),
    }

