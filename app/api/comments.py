"""
Comments API endpoints
Threaded post comments
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentUpdate
from app.services.comment_service import CommentService
from app.utils.pagination import PageRequest, pagination_dependency
from app.utils.responses import paginated_response, dump

router = APIRouter()


@router.get("/comments/post/{post_id}", response_model=dict)
async def list_post_comments(
    post_id: int,
    page_request: PageRequest = Depends(pagination_dependency(20)),
    db: Session = Depends(get_db)
):
    """
    Get top-level comments for a post

    - **post_id**: Post ID
    - **page**: Page number
    - **limit**: Items per page (default 20)

    Returns newest comments first, each with its `replies_count`
    """
    comments, meta = CommentService.list_post_comments(db, post_id, page_request)
    return paginated_response("comments", comments, meta)


@router.get("/comments/comment/{comment_id}/replies", response_model=dict)
async def list_replies(
    comment_id: int,
    db: Session = Depends(get_db)
):
    """
    Get replies to a comment, oldest first
    """
    replies = CommentService.list_replies(db, comment_id)
    return {"replies": [dump(reply) for reply in replies]}


@router.post("/comments", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add a comment to a published post, or reply to a comment

    - **content**: Comment text
    - **post_id**: Post ID
    - **parent_id**: Optional comment being replied to (same post)
    """
    comment = CommentService.create_comment(
        db,
        author_id=current_user.id,
        post_id=comment_data.post_id,
        content=comment_data.content,
        parent_id=comment_data.parent_id
    )

    return {
        "message": "Comment added successfully",
        "comment": dump(comment)
    }


@router.put("/comments/{comment_id}", response_model=dict)
async def update_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Edit a comment (only the comment author can edit)
    """
    CommentService.update_comment(db, current_user.id, comment_id, comment_data.content)
    return {"message": "Comment updated successfully"}


@router.delete("/comments/{comment_id}", response_model=dict)
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a comment and its replies (comment author or admin)
    """
    CommentService.delete_comment(db, current_user.id, current_user.role, comment_id)
    return {"message": "Comment deleted successfully"}


@router.get("/comments/user/{user_id}", response_model=dict)
async def list_user_comments(
    user_id: int,
    page_request: PageRequest = Depends(pagination_dependency(10)),
    db: Session = Depends(get_db)
):
    """
    Get a user's top-level comments with the title of each post
    """
    comments, meta = CommentService.list_user_comments(db, user_id, page_request)
    return paginated_response("comments", comments, meta)
