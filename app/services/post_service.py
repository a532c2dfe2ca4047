"""
Post Service
Post CRUD plus the view and like counters kept on each post
"""
from sqlalchemy.orm import Session, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, or_, select
from typing import List, Optional, Tuple
import logging

from app.core.exceptions import NotFoundOrDenied, ValidationFailed
from app.models.comment import Comment
from app.models.like import Like
from app.models.post import Post, POST_STATUSES
from app.models.user import User
from app.schemas.common import PaginationMeta
from app.schemas.post import PostResponse, PostDetail
from app.utils.pagination import PageRequest, build_pagination, paginate

logger = logging.getLogger(__name__)


def comment_count():
    """Correlated count of all comments (replies included) on the outer post row"""
    return (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
        .label("comment_count")
    )


def _with_author(db: Session, *extra_columns) -> Query:
    return db.query(
        Post,
        User.username,
        User.full_name,
        User.avatar,
        comment_count(),
        *extra_columns
    ).join(User, Post.author_id == User.id)


def _to_response(row, schema=PostResponse) -> PostResponse:
    post, username, full_name, avatar, count, *extra = row
    data = {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "excerpt": post.excerpt,
        "featured_image": post.featured_image,
        "author_id": post.author_id,
        "status": post.status,
        "views": post.views,
        "likes": post.likes,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
        "username": username,
        "full_name": full_name,
        "avatar": avatar,
        "comment_count": count or 0,
    }
    if schema is PostDetail:
        data["bio"] = extra[0] if extra else None
    return schema(**data)


def validate_post_fields(title: Optional[str], content: Optional[str], status: Optional[str]):
    """Field checks shared by create and update; collects every failure"""
    errors = []
    if not title or not title.strip():
        errors.append({"field": "title", "message": "Title is required"})
    if not content or not content.strip():
        errors.append({"field": "content", "message": "Content is required"})
    if status not in POST_STATUSES:
        errors.append({"field": "status", "message": "Invalid status"})
    if errors:
        raise ValidationFailed(errors)


class PostService:
    """Service for post operations"""

    @staticmethod
    def list_published(
        db: Session,
        page_request: PageRequest,
        search: Optional[str] = None
    ) -> Tuple[List[PostResponse], PaginationMeta]:
        """
        Published posts, newest first

        Args:
            db: Database session
            page_request: Page window
            search: Optional substring matched against title or content

        Returns:
            Tuple of (posts, pagination metadata)
        """
        query = _with_author(db).filter(Post.status == "published")
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Post.title.like(pattern), Post.content.like(pattern)))
        query = query.order_by(Post.created_at.desc(), Post.id.desc())

        rows, total = paginate(query, page_request)
        posts = [_to_response(row) for row in rows]
        return posts, build_pagination(page_request.page, page_request.limit, total)

    @staticmethod
    def view_post(db: Session, post_id: int) -> PostDetail:
        """
        Fetch a published post and count the view

        Every call increments ``views``; repeated reads by the same caller
        are not deduplicated.

        Raises:
            NotFoundOrDenied: Post missing or still a draft
        """
        db.query(Post).filter(Post.id == post_id).update(
            {Post.views: Post.views + 1}, synchronize_session=False
        )
        db.commit()

        row = _with_author(db, User.bio).filter(
            Post.id == post_id,
            Post.status == "published"
        ).first()
        if row is None:
            raise NotFoundOrDenied("Post not found")
        return _to_response(row, PostDetail)

    @staticmethod
    def create_post(
        db: Session,
        author_id: int,
        title: str,
        content: str,
        status: str,
        excerpt: Optional[str] = None,
        featured_image: Optional[str] = None
    ) -> Post:
        """
        Create a post owned by ``author_id``

        Returns:
            Created Post object
        """
        validate_post_fields(title, content, status)

        post = Post(
            title=title,
            content=content,
            excerpt=excerpt,
            featured_image=featured_image,
            author_id=author_id,
            status=status
        )
        db.add(post)
        db.commit()
        db.refresh(post)

        logger.info(f"Post {post.id} created by user {author_id} ({status})")
        return post

    @staticmethod
    def get_editable_post(db: Session, requester: User, post_id: int) -> Post:
        """Load a post the requester may change: its author, or any admin"""
        post = db.query(Post).filter(Post.id == post_id).first()
        if post is None or (post.author_id != requester.id and not requester.is_admin):
            raise NotFoundOrDenied("Post not found or access denied")
        return post

    @staticmethod
    def update_post(
        db: Session,
        post: Post,
        title: str,
        content: str,
        status: str,
        excerpt: Optional[str] = None,
        featured_image: Optional[str] = None
    ) -> Optional[str]:
        """
        Overwrite the editable fields of a post

        Args:
            featured_image: New image path; None keeps the current one

        Returns:
            Path of the image that was replaced, if any, so the caller can
            remove it from storage
        """
        validate_post_fields(title, content, status)

        replaced = None
        if featured_image:
            replaced = post.featured_image
            post.featured_image = featured_image

        post.title = title
        post.content = content
        post.excerpt = excerpt
        post.status = status
        db.commit()
        db.refresh(post)
        return replaced

    @staticmethod
    def delete_post(db: Session, post: Post) -> Optional[str]:
        """
        Delete a post; its comments and likes go with it

        Returns:
            Featured image path to remove from storage, if any
        """
        featured_image = post.featured_image
        post_id = post.id
        db.delete(post)
        db.commit()

        logger.info(f"Post {post_id} deleted")
        return featured_image

    @staticmethod
    def set_status(db: Session, post_id: int, status: str) -> Post:
        post = db.query(Post).filter(Post.id == post_id).first()
        if post is None:
            raise NotFoundOrDenied("Post not found")
        post.status = status
        db.commit()
        return post

    @staticmethod
    def toggle_like(db: Session, user_id: int, post_id: int) -> bool:
        """
        Like the post, or remove the like if the user already likes it

        The like row and the ``likes`` counter change in one transaction,
        and the counter is only moved when a row was actually inserted or
        deleted. The unique (user, post) constraint settles concurrent
        toggles: a losing insert is rolled back and reported as liked.

        Args:
            db: Database session
            user_id: Liking user
            post_id: Post ID

        Returns:
            True if the post is now liked by the user, False otherwise

        Raises:
            NotFoundOrDenied: Post does not exist
        """
        if db.query(Post.id).filter(Post.id == post_id).first() is None:
            raise NotFoundOrDenied("Post not found")

        existing = db.query(Like.id).filter(
            Like.user_id == user_id,
            Like.post_id == post_id
        ).first()

        if existing:
            removed = db.query(Like).filter(
                Like.user_id == user_id,
                Like.post_id == post_id
            ).delete(synchronize_session=False)
            if removed:
                db.query(Post).filter(Post.id == post_id).update(
                    {Post.likes: Post.likes - removed}, synchronize_session=False
                )
            db.commit()
            return False

        try:
            db.add(Like(user_id=user_id, post_id=post_id))
            db.flush()
        except IntegrityError:
            # Another request inserted the same like first and counted it
            db.rollback()
            logger.warning(f"Concurrent like for post {post_id} by user {user_id} ignored")
            return True

        db.query(Post).filter(Post.id == post_id).update(
            {Post.likes: Post.likes + 1}, synchronize_session=False
        )
        db.commit()
        return True

    @staticmethod
    def _author_posts(
        db: Session,
        page_request: PageRequest,
        *criteria
    ) -> Tuple[List[PostResponse], PaginationMeta]:
        query = _with_author(db).filter(
            Post.status == "published",
            *criteria
        ).order_by(Post.created_at.desc(), Post.id.desc())

        rows, total = paginate(query, page_request)
        posts = [_to_response(row) for row in rows]
        return posts, build_pagination(page_request.page, page_request.limit, total)

    @staticmethod
    def list_user_posts(
        db: Session,
        user_id: int,
        page_request: PageRequest
    ) -> Tuple[List[PostResponse], PaginationMeta]:
        """Published posts of a user, newest first"""
        return PostService._author_posts(db, page_request, Post.author_id == user_id)

    @staticmethod
    def list_posts_by_username(
        db: Session,
        username: str,
        page_request: PageRequest
    ) -> Tuple[List[PostResponse], PaginationMeta]:
        return PostService._author_posts(db, page_request, User.username == username)

    @staticmethod
    def search_all(
        db: Session,
        page_request: PageRequest,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> Tuple[List[PostResponse], PaginationMeta]:
        """
        Posts of any status for the admin listing

        ``search`` matches title, content or author username.
        """
        query = _with_author(db)
        if status:
            query = query.filter(Post.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Post.title.like(pattern),
                Post.content.like(pattern),
                User.username.like(pattern)
            ))
        query = query.order_by(Post.created_at.desc(), Post.id.desc())

        rows, total = paginate(query, page_request)
        posts = [_to_response(row) for row in rows]
        return posts, build_pagination(page_request.page, page_request.limit, total)
