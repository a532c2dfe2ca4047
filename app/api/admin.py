"""
Admin API endpoints
Dashboard statistics and moderation; every route requires the admin role
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_storage
from app.models.user import User
from app.schemas.post import UpdatePostStatus
from app.schemas.user import UpdateRole
from app.services.admin_service import AdminService
from app.services.comment_service import CommentService
from app.services.post_service import PostService
from app.services.storage_service import LocalStorageService
from app.utils.pagination import PageRequest, pagination_dependency
from app.utils.responses import paginated_response

router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/dashboard", response_model=dict)
async def dashboard(db: Session = Depends(get_db)):
    """
    Totals for users, posts, comments, views and likes, plus recent activity
    """
    return AdminService.dashboard(db)


@router.get("/users", response_model=dict)
async def list_users(
    page_request: PageRequest = Depends(pagination_dependency(20)),
    search: Optional[str] = Query(None, description="Match username, email or full name"),
    db: Session = Depends(get_db)
):
    """
    List users with their post and comment counts
    """
    users, meta = AdminService.list_users(db, page_request, search)
    return paginated_response("users", users, meta)


@router.put("/users/{user_id}/role", response_model=dict)
async def update_user_role(
    user_id: int,
    role_data: UpdateRole,
    current_admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """
    Change a user's role (`user` or `admin`)
    """
    AdminService.update_role(db, current_admin, user_id, role_data.role)
    return {"message": "User role updated successfully"}


@router.delete("/users/{user_id}", response_model=dict)
async def delete_user(
    user_id: int,
    current_admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: LocalStorageService = Depends(get_storage)
):
    """
    Delete a user together with their posts, comments and likes
    """
    for path in AdminService.delete_user(db, current_admin, user_id):
        storage.delete_file(path)
    return {"message": "User deleted successfully"}


@router.get("/posts", response_model=dict)
async def list_posts(
    page_request: PageRequest = Depends(pagination_dependency(20)),
    status: Optional[str] = Query(None, description="Filter by draft/published"),
    search: Optional[str] = Query(None, description="Match title, content or author"),
    db: Session = Depends(get_db)
):
    """
    List posts of any status with comment counts
    """
    posts, meta = PostService.search_all(db, page_request, status, search)
    return paginated_response("posts", posts, meta)


@router.put("/posts/{post_id}/status", response_model=dict)
async def update_post_status(
    post_id: int,
    status_data: UpdatePostStatus,
    db: Session = Depends(get_db)
):
    """
    Publish or unpublish a post
    """
    PostService.set_status(db, post_id, status_data.status)
    return {"message": "Post status updated successfully"}


@router.delete("/posts/{post_id}", response_model=dict)
async def delete_post(
    post_id: int,
    current_admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: LocalStorageService = Depends(get_storage)
):
    """
    Delete any post
    """
    post = PostService.get_editable_post(db, current_admin, post_id)
    storage.delete_file(PostService.delete_post(db, post))
    return {"message": "Post deleted successfully"}


@router.get("/comments", response_model=dict)
async def list_comments(
    page_request: PageRequest = Depends(pagination_dependency(20)),
    search: Optional[str] = Query(None, description="Match content, author or post title"),
    db: Session = Depends(get_db)
):
    """
    List all comments with author and post title
    """
    comments, meta = CommentService.search_comments(db, page_request, search)
    return paginated_response("comments", comments, meta)


@router.delete("/comments/{comment_id}", response_model=dict)
async def delete_comment(
    comment_id: int,
    current_admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """
    Delete a comment and its replies
    """
    CommentService.delete_comment(db, current_admin.id, current_admin.role, comment_id)
    return {"message": "Comment deleted successfully"}


@router.get("/analytics", response_model=dict)
async def analytics(db: Session = Depends(get_db)):
    """
    Posts and users per month over the last year, and the top posts
    """
    return AdminService.analytics(db)
