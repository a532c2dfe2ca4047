"""
Common/Shared Pydantic schemas
"""
from pydantic import BaseModel, Field, ConfigDict


class PaginationMeta(BaseModel):
    """
    Pagination metadata shared by every list endpoint.

    Serialized with the wire names ``current``, ``total``, ``hasNext`` and
    ``hasPrev``; ``total`` is the number of pages, not rows.
    """
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., serialization_alias="current")
    total_pages: int = Field(..., serialization_alias="total")
    has_next: bool = Field(..., serialization_alias="hasNext")
    has_prev: bool = Field(..., serialization_alias="hasPrev")


# Config for all schemas
ORMConfig = ConfigDict(from_attributes=True)
