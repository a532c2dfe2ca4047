"""
User Service
Public profiles, user search and contributor rankings
"""
from sqlalchemy.orm import Session
from sqlalchemy import func, or_, select, and_
from typing import List, Tuple

from app.core.exceptions import NotFoundOrDenied
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User
from app.schemas.common import PaginationMeta
from app.schemas.user import UserProfile, UserSearchResult, TopContributor
from app.utils.pagination import PageRequest, build_pagination, paginate


def published_posts_count():
    return (
        select(func.count(Post.id))
        .where(Post.author_id == User.id, Post.status == "published")
        .correlate(User)
        .scalar_subquery()
        .label("posts_count")
    )


def comments_count():
    return (
        select(func.count(Comment.id))
        .where(Comment.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
        .label("comments_count")
    )


class UserService:
    """Service for public user queries"""

    @staticmethod
    def get_profile(db: Session, username: str) -> UserProfile:
        """
        Public profile by username

        Raises:
            NotFoundOrDenied: Unknown username
        """
        row = db.query(User, published_posts_count(), comments_count()).filter(
            User.username == username
        ).first()
        if row is None:
            raise NotFoundOrDenied("User not found")

        user, posts, comments = row
        return UserProfile(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            bio=user.bio,
            created_at=user.created_at,
            posts_count=posts or 0,
            comments_count=comments or 0
        )

    @staticmethod
    def search_users(
        db: Session,
        term: str,
        page_request: PageRequest
    ) -> Tuple[List[UserSearchResult], PaginationMeta]:
        """Users whose username or full name contains ``term``, most active first"""
        pattern = f"%{term}%"
        posts = published_posts_count()
        query = db.query(User, posts).filter(
            or_(User.username.like(pattern), User.full_name.like(pattern))
        ).order_by(posts.desc(), User.username.asc())

        rows, total = paginate(query, page_request)

        users = [
            UserSearchResult(
                id=user.id,
                username=user.username,
                full_name=user.full_name,
                avatar=user.avatar,
                bio=user.bio,
                posts_count=count or 0
            )
            for user, count in rows
        ]
        return users, build_pagination(page_request.page, page_request.limit, total)

    @staticmethod
    def top_contributors(db: Session, limit: int = 10) -> List[TopContributor]:
        """
        Users with at least one published post, ranked by post count then views
        """
        posts_count = func.count(Post.id).label("posts_count")
        total_views = func.coalesce(func.sum(Post.views), 0).label("total_views")
        total_likes = func.coalesce(func.sum(Post.likes), 0).label("total_likes")

        rows = db.query(User, posts_count, total_views, total_likes).join(
            Post, and_(Post.author_id == User.id, Post.status == "published")
        ).group_by(User.id).having(
            func.count(Post.id) > 0
        ).order_by(
            posts_count.desc(), total_views.desc()
        ).limit(max(limit, 0)).all()

        return [
            TopContributor(
                id=user.id,
                username=user.username,
                full_name=user.full_name,
                avatar=user.avatar,
                bio=user.bio,
                posts_count=count,
                total_views=int(views or 0),
                total_likes=int(likes or 0)
            )
            for user, count, views, likes in rows
        ]
