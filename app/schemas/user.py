"""
User Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime
from app.schemas.common import ORMConfig


# ============ Request Schemas ============

class UserRegister(BaseModel):
    """Schema for user registration"""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=100)


class UserLogin(BaseModel):
    """Schema for user login"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateProfile(BaseModel):
    """Schema for updating profile details"""
    full_name: str = Field(..., min_length=1, max_length=100)
    bio: Optional[str] = None


class UpdateRole(BaseModel):
    role: Literal["user", "admin"]


# ============ Response Schemas ============

class UserResponse(BaseModel):
    """Authenticated user's own account"""
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    role: str
    avatar: Optional[str] = None
    bio: Optional[str] = None

    model_config = ORMConfig


class UserProfile(BaseModel):
    """Public profile with activity counts"""
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime
    posts_count: int = 0
    comments_count: int = 0

    model_config = ORMConfig


class UserSearchResult(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    posts_count: int = 0

    model_config = ORMConfig


class TopContributor(UserSearchResult):
    total_views: int = 0
    total_likes: int = 0


class RecentUser(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    created_at: datetime

    model_config = ORMConfig


class AdminUserResponse(BaseModel):
    """User row as listed on the admin dashboard"""
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    bio: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    posts_count: int = 0
    comments_count: int = 0

    model_config = ORMConfig
