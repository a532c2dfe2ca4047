"""
Comment Pydantic schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.schemas.common import ORMConfig


class CommentCreate(BaseModel):
    """Schema for creating a comment or a reply"""
    content: str = Field(..., min_length=1)
    post_id: int
    parent_id: Optional[int] = None


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    """Comment joined with its author's display fields"""
    id: int
    content: str
    post_id: int
    user_id: int
    parent_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    username: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None

    model_config = ORMConfig


class CommentWithReplies(CommentResponse):
    replies_count: int = 0


class UserComment(CommentResponse):
    post_title: str
