"""
Comment Service
Threaded comments: creation, one-level replies, ownership-gated edits and
cascading deletes
"""
from sqlalchemy.orm import Session, Query, aliased
from sqlalchemy import func, or_, select
from typing import List, Optional, Tuple
import logging

from app.core.exceptions import NotFoundOrDenied, ValidationFailed
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User
from app.schemas.comment import CommentResponse, CommentWithReplies, UserComment
from app.schemas.common import PaginationMeta
from app.utils.pagination import PageRequest, build_pagination, paginate

logger = logging.getLogger(__name__)


def _require_content(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise ValidationFailed.for_field("content", "Comment content is required")
    return content


def _replies_count():
    """Correlated count of the direct replies of the outer comment row"""
    reply = aliased(Comment)
    return (
        select(func.count(reply.id))
        .where(reply.parent_id == Comment.id)
        .correlate(Comment)
        .scalar_subquery()
        .label("replies_count")
    )


def _with_author(db: Session, *extra_columns) -> Query:
    return db.query(
        Comment,
        User.username,
        User.full_name,
        User.avatar,
        *extra_columns
    ).join(User, Comment.user_id == User.id)


def _to_response(schema, comment: Comment, username: str, full_name: Optional[str],
                 avatar: Optional[str], **extra):
    return schema(
        id=comment.id,
        content=comment.content,
        post_id=comment.post_id,
        user_id=comment.user_id,
        parent_id=comment.parent_id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        username=username,
        full_name=full_name,
        avatar=avatar,
        **extra
    )


class CommentService:
    """Service for comment tree operations"""

    @staticmethod
    def list_post_comments(
        db: Session,
        post_id: int,
        page_request: PageRequest
    ) -> Tuple[List[CommentWithReplies], PaginationMeta]:
        """
        Top-level comments of a post, newest first, with reply counts

        A post that does not exist simply has no comments.

        Args:
            db: Database session
            post_id: Post ID
            page_request: Page window

        Returns:
            Tuple of (comments, pagination metadata)
        """
        query = _with_author(db, _replies_count()).filter(
            Comment.post_id == post_id,
            Comment.parent_id.is_(None)
        ).order_by(Comment.created_at.desc(), Comment.id.desc())

        rows, total = paginate(query, page_request)

        comments = [
            _to_response(CommentWithReplies, comment, username, full_name, avatar,
                         replies_count=replies_count or 0)
            for comment, username, full_name, avatar, replies_count in rows
        ]
        return comments, build_pagination(page_request.page, page_request.limit, total)

    @staticmethod
    def list_replies(db: Session, comment_id: int) -> List[CommentResponse]:
        """
        Direct replies of a comment, oldest first, unpaginated

        Only one level is materialized; replies of a reply are not followed.
        """
        rows = _with_author(db).filter(
            Comment.parent_id == comment_id
        ).order_by(Comment.created_at.asc(), Comment.id.asc()).all()

        return [
            _to_response(CommentResponse, comment, username, full_name, avatar)
            for comment, username, full_name, avatar in rows
        ]

    @staticmethod
    def get_comment(db: Session, comment_id: int) -> CommentResponse:
        row = _with_author(db).filter(Comment.id == comment_id).first()
        if row is None:
            raise NotFoundOrDenied("Comment not found")
        comment, username, full_name, avatar = row
        return _to_response(CommentResponse, comment, username, full_name, avatar)

    @staticmethod
    def create_comment(
        db: Session,
        author_id: int,
        post_id: int,
        content: str,
        parent_id: Optional[int] = None
    ) -> CommentResponse:
        """
        Add a comment, or a reply when ``parent_id`` is given

        Args:
            db: Database session
            author_id: ID of the commenting user
            post_id: Target post ID; the post must be published
            content: Comment text (non-empty)
            parent_id: Optional comment being replied to, on the same post;
                0 is read as no parent

        Returns:
            Created comment joined with author display fields

        Raises:
            ValidationFailed: Empty content
            NotFoundOrDenied: Post missing or unpublished, or parent not on this post
        """
        _require_content(content)
        parent_id = parent_id or None

        # Drafts are reported exactly like missing posts
        post = db.query(Post.id).filter(
            Post.id == post_id,
            Post.status == "published"
        ).first()
        if post is None:
            raise NotFoundOrDenied("Post not found")

        if parent_id is not None:
            parent = db.query(Comment.id).filter(
                Comment.id == parent_id,
                Comment.post_id == post_id
            ).first()
            if parent is None:
                raise NotFoundOrDenied("Parent comment not found")

        comment = Comment(
            content=content,
            post_id=post_id,
            user_id=author_id,
            parent_id=parent_id
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)

        logger.info(f"Comment {comment.id} added to post {post_id} by user {author_id}"
                    + (f" in reply to {parent_id}" if parent_id is not None else ""))

        return CommentService.get_comment(db, comment.id)

    @staticmethod
    def update_comment(
        db: Session,
        requester_id: int,
        comment_id: int,
        content: str
    ) -> Comment:
        """
        Replace a comment's content. Only the author may edit, admin role included.

        Raises:
            ValidationFailed: Empty content
            NotFoundOrDenied: Comment missing or requester is not its author
        """
        _require_content(content)

        comment = db.query(Comment).filter(Comment.id == comment_id).first()
        if comment is None or comment.user_id != requester_id:
            raise NotFoundOrDenied("Comment not found or access denied")

        comment.content = content
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def delete_comment(
        db: Session,
        requester_id: int,
        requester_role: str,
        comment_id: int
    ) -> int:
        """
        Delete a comment together with its direct replies

        Allowed for the comment's author or any admin.

        Returns:
            Number of comment rows removed

        Raises:
            NotFoundOrDenied: Comment missing or requester may not delete it
        """
        comment = db.query(Comment).filter(Comment.id == comment_id).first()
        if comment is None:
            raise NotFoundOrDenied("Comment not found or access denied")
        if comment.user_id != requester_id and requester_role != "admin":
            raise NotFoundOrDenied("Comment not found or access denied")

        return CommentService.remove_with_replies(db, comment_id)

    @staticmethod
    def remove_with_replies(db: Session, comment_id: int) -> int:
        """
        Remove a comment and its direct replies in one transaction

        Replies go first so the count is not absorbed by the foreign key cascade.

        Returns:
            Number of comment rows removed (the comment plus its direct replies)
        """
        replies = db.query(Comment).filter(
            Comment.parent_id == comment_id
        ).delete(synchronize_session=False)
        removed = db.query(Comment).filter(
            Comment.id == comment_id
        ).delete(synchronize_session=False)
        db.commit()
        deleted = replies + removed

        logger.info(f"Deleted comment {comment_id} ({deleted} rows including replies)")
        return deleted

    @staticmethod
    def _user_comments(
        db: Session,
        page_request: PageRequest,
        *criteria
    ) -> Tuple[List[UserComment], PaginationMeta]:
        query = _with_author(db, Post.title).join(
            Post, Comment.post_id == Post.id
        ).filter(
            Comment.parent_id.is_(None),
            *criteria
        ).order_by(Comment.created_at.desc(), Comment.id.desc())

        rows, total = paginate(query, page_request)

        comments = [
            _to_response(UserComment, comment, username, full_name, avatar, post_title=title)
            for comment, username, full_name, avatar, title in rows
        ]
        return comments, build_pagination(page_request.page, page_request.limit, total)

    @staticmethod
    def list_user_comments(
        db: Session,
        user_id: int,
        page_request: PageRequest
    ) -> Tuple[List[UserComment], PaginationMeta]:
        """Top-level comments written by a user, newest first, with post titles"""
        return CommentService._user_comments(db, page_request, Comment.user_id == user_id)

    @staticmethod
    def list_comments_by_username(
        db: Session,
        username: str,
        page_request: PageRequest
    ) -> Tuple[List[UserComment], PaginationMeta]:
        return CommentService._user_comments(db, page_request, User.username == username)

    @staticmethod
    def search_comments(
        db: Session,
        page_request: PageRequest,
        search: Optional[str] = None
    ) -> Tuple[List[UserComment], PaginationMeta]:
        """
        All comments, replies included, newest first (admin listing)

        ``search`` matches comment text, author username or post title.
        """
        query = _with_author(db, Post.title).join(Post, Comment.post_id == Post.id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Comment.content.like(pattern),
                User.username.like(pattern),
                Post.title.like(pattern)
            ))
        query = query.order_by(Comment.created_at.desc(), Comment.id.desc())

        rows, total = paginate(query, page_request)

        comments = [
            _to_response(UserComment, comment, username, full_name, avatar, post_title=title)
            for comment, username, full_name, avatar, title in rows
        ]
        return comments, build_pagination(page_request.page, page_request.limit, total)
