"""
User API endpoints
Public profiles, search and profile editing
"""
from fastapi import APIRouter, Depends, Query, UploadFile, File, Form
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import Settings
from app.core.database import get_db
from app.core.dependencies import get_current_user, get_settings, get_storage
from app.core.exceptions import ValidationFailed
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.comment_service import CommentService
from app.services.post_service import PostService
from app.services.storage_service import LocalStorageService
from app.services.user_service import UserService
from app.utils.pagination import PageRequest, pagination_dependency, coerce_int
from app.utils.responses import paginated_response, dump

router = APIRouter()


@router.put("/profile", response_model=dict)
async def update_profile(
    full_name: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalStorageService = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    """
    Update profile details and avatar

    - **full_name**: New full name (required)
    - **bio**: Optional bio
    - **avatar**: Optional image (jpeg, jpg, png, gif, webp; max 2MB)
    """
    if not full_name or not full_name.strip():
        raise ValidationFailed.for_field("full_name", "Full name is required")

    avatar_path = None
    if avatar is not None and avatar.filename:
        avatar_path = await storage.save_image(
            avatar,
            folder="avatars",
            prefix="avatar",
            max_size=settings.MAX_AVATAR_SIZE,
            field="avatar"
        )

    try:
        replaced = AuthService.update_profile(db, current_user, full_name, bio, avatar_path)
    except Exception:
        storage.delete_file(avatar_path)
        raise

    storage.delete_file(replaced)
    return {"message": "Profile updated successfully"}


@router.get("/search/{query}", response_model=dict)
async def search_users(
    query: str,
    page_request: PageRequest = Depends(pagination_dependency(10)),
    db: Session = Depends(get_db)
):
    """
    Search users by username or full name
    """
    users, meta = UserService.search_users(db, query, page_request)
    return paginated_response("users", users, meta)


@router.get("/top/contributors", response_model=dict)
async def top_contributors(
    limit: Optional[str] = Query(None, description="Number of users (default 10)"),
    db: Session = Depends(get_db)
):
    """
    Users with the most published posts
    """
    users = UserService.top_contributors(db, coerce_int(limit, 10))
    return {"users": [dump(user) for user in users]}


@router.get("/{username}", response_model=dict)
async def get_user_profile(
    username: str,
    db: Session = Depends(get_db)
):
    """
    Get a user's public profile with post and comment counts
    """
    return {"user": dump(UserService.get_profile(db, username))}


@router.get("/{username}/posts", response_model=dict)
async def list_user_posts(
    username: str,
    page_request: PageRequest = Depends(pagination_dependency(10)),
    db: Session = Depends(get_db)
):
    """
    Get a user's published posts
    """
    posts, meta = PostService.list_posts_by_username(db, username, page_request)
    return paginated_response("posts", posts, meta)


@router.get("/{username}/comments", response_model=dict)
async def list_user_comments(
    username: str,
    page_request: PageRequest = Depends(pagination_dependency(10)),
    db: Session = Depends(get_db)
):
    """
    Get a user's top-level comments
    """
    comments, meta = CommentService.list_comments_by_username(db, username, page_request)
    return paginated_response("comments", comments, meta)
