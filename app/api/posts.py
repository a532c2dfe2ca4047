"""
Posts API endpoints
Blog posts, views and likes
"""
from fastapi import APIRouter, Depends, status, Query, UploadFile, File, Form
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import Settings
from app.core.database import get_db
from app.core.dependencies import get_current_user, get_settings, get_storage
from app.models.user import User
from app.services.post_service import PostService, validate_post_fields
from app.services.storage_service import LocalStorageService
from app.utils.pagination import PageRequest, pagination_dependency
from app.utils.responses import paginated_response, dump

router = APIRouter()


async def _store_featured_image(
    featured_image: Optional[UploadFile],
    storage: LocalStorageService,
    settings: Settings
) -> Optional[str]:
    if featured_image is None or not featured_image.filename:
        return None
    return await storage.save_image(
        featured_image,
        folder="posts",
        prefix="post",
        max_size=settings.MAX_POST_IMAGE_SIZE,
        field="featured_image"
    )


@router.get("/posts", response_model=dict)
async def list_posts(
    page_request: PageRequest = Depends(pagination_dependency(10)),
    search: Optional[str] = Query(None, description="Match title or content"),
    db: Session = Depends(get_db)
):
    """
    Get published posts, newest first

    - **page**: Page number
    - **limit**: Items per page (default 10)
    - **search**: Optional text to look for in title or content
    """
    posts, meta = PostService.list_published(db, page_request, search)
    return paginated_response("posts", posts, meta)


@router.get("/posts/user/{user_id}", response_model=dict)
async def list_user_posts(
    user_id: int,
    page_request: PageRequest = Depends(pagination_dependency(10)),
    db: Session = Depends(get_db)
):
    """
    Get a user's published posts
    """
    posts, meta = PostService.list_user_posts(db, user_id, page_request)
    return paginated_response("posts", posts, meta)


@router.get("/posts/{post_id}", response_model=dict)
async def get_post(
    post_id: int,
    db: Session = Depends(get_db)
):
    """
    Get a published post; every call counts as a view
    """
    post = PostService.view_post(db, post_id)
    return {"post": dump(post)}


@router.post("/posts", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    post_status: Optional[str] = Form(None, alias="status"),
    featured_image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalStorageService = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    """
    Create a post

    - **title**: Post title
    - **content**: Post body
    - **excerpt**: Optional summary
    - **status**: `draft` or `published`
    - **featured_image**: Optional image (jpeg, jpg, png, gif, webp; max 5MB)
    """
    # Reject bad fields before anything is written to storage
    validate_post_fields(title, content, post_status)
    image_path = await _store_featured_image(featured_image, storage, settings)

    try:
        post = PostService.create_post(
            db,
            author_id=current_user.id,
            title=title,
            content=content,
            status=post_status,
            excerpt=excerpt,
            featured_image=image_path
        )
    except Exception:
        storage.delete_file(image_path)
        raise

    return {
        "message": "Post created successfully",
        "postId": post.id
    }


@router.put("/posts/{post_id}", response_model=dict)
async def update_post(
    post_id: int,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    post_status: Optional[str] = Form(None, alias="status"),
    featured_image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalStorageService = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    """
    Update a post (author or admin)

    A new featured image replaces the old one, which is deleted.
    """
    validate_post_fields(title, content, post_status)
    post = PostService.get_editable_post(db, current_user, post_id)

    image_path = await _store_featured_image(featured_image, storage, settings)
    try:
        replaced = PostService.update_post(
            db,
            post,
            title=title,
            content=content,
            status=post_status,
            excerpt=excerpt,
            featured_image=image_path
        )
    except Exception:
        storage.delete_file(image_path)
        raise

    storage.delete_file(replaced)
    return {"message": "Post updated successfully"}


@router.delete("/posts/{post_id}", response_model=dict)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: LocalStorageService = Depends(get_storage)
):
    """
    Delete a post with its comments and likes (author or admin)
    """
    post = PostService.get_editable_post(db, current_user, post_id)
    featured_image = PostService.delete_post(db, post)
    storage.delete_file(featured_image)
    return {"message": "Post deleted successfully"}


@router.post("/posts/{post_id}/like", response_model=dict)
async def toggle_like(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Like a post, or unlike it if already liked

    Returns the resulting `liked` state
    """
    liked = PostService.toggle_like(db, current_user.id, post_id)
    return {
        "message": "Post liked" if liked else "Post unliked",
        "liked": liked
    }
