"""
Post Pydantic schemas
"""
from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime
from app.schemas.common import ORMConfig


PostStatus = Literal["draft", "published"]


class UpdatePostStatus(BaseModel):
    status: PostStatus


class PostResponse(BaseModel):
    """Post joined with its author's display fields"""
    id: int
    title: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    author_id: int
    status: str
    views: int
    likes: int
    created_at: datetime
    updated_at: datetime
    username: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    comment_count: int = 0

    model_config = ORMConfig


class PostDetail(PostResponse):
    bio: Optional[str] = None


class RecentPost(BaseModel):
    id: int
    title: str
    status: str
    views: int
    likes: int
    author_id: int
    created_at: datetime
    username: str
    full_name: Optional[str] = None

    model_config = ORMConfig


class TopPost(BaseModel):
    title: str
    views: int
    likes: int
    username: str


class MonthlyCount(BaseModel):
    month: str
    count: int
