"""
Admin Service
Read-only statistics for the dashboard plus admin-only user management
"""
from sqlalchemy.orm import Session
from sqlalchemy import func, extract, or_, select
from typing import List, Tuple, Dict, Any
from datetime import datetime
import logging

from app.core.exceptions import Conflict, NotFoundOrDenied
from app.models.comment import Comment
from app.models.post import Post
from app.models.user import User
from app.schemas.common import PaginationMeta
from app.schemas.post import RecentPost, TopPost, MonthlyCount
from app.schemas.user import AdminUserResponse, RecentUser
from app.utils.pagination import PageRequest, build_pagination, paginate

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
TOP_POSTS_LIMIT = 10
ANALYTICS_MONTHS = 12


def _months_ago(moment: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` earlier, clamped to the month's last day"""
    year = moment.year + (moment.month - 1 - months) // 12
    month = (moment.month - 1 - months) % 12 + 1
    day = moment.day
    while day > 28:
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1
    return moment.replace(year=year, month=month, day=day)


class AdminService:
    """Service for admin dashboard queries"""

    @staticmethod
    def dashboard(db: Session) -> Dict[str, Any]:
        """
        Totals across the store plus the latest posts and users

        Returns:
            Dict with ``stats``, ``recentPosts`` and ``recentUsers``
        """
        total_users = db.query(func.count(User.id)).scalar() or 0

        post_stats = db.query(
            func.count(Post.id).label('total_posts'),
            func.coalesce(func.sum(Post.views), 0).label('total_views'),
            func.coalesce(func.sum(Post.likes), 0).label('total_likes')
        ).first()

        published = db.query(func.count(Post.id)).filter(Post.status == "published").scalar() or 0
        drafts = db.query(func.count(Post.id)).filter(Post.status == "draft").scalar() or 0
        total_comments = db.query(func.count(Comment.id)).scalar() or 0

        recent_posts = db.query(Post, User.username, User.full_name).join(
            User, Post.author_id == User.id
        ).order_by(Post.created_at.desc(), Post.id.desc()).limit(RECENT_LIMIT).all()

        recent_users = db.query(User).order_by(
            User.created_at.desc(), User.id.desc()
        ).limit(RECENT_LIMIT).all()

        return {
            "stats": {
                "totalUsers": total_users,
                "totalPosts": post_stats.total_posts or 0,
                "publishedPosts": published,
                "draftPosts": drafts,
                "totalComments": total_comments,
                "totalViews": int(post_stats.total_views or 0),
                "totalLikes": int(post_stats.total_likes or 0)
            },
            "recentPosts": [
                RecentPost(
                    id=post.id,
                    title=post.title,
                    status=post.status,
                    views=post.views,
                    likes=post.likes,
                    author_id=post.author_id,
                    created_at=post.created_at,
                    username=username,
                    full_name=full_name
                ).model_dump()
                for post, username, full_name in recent_posts
            ],
            "recentUsers": [
                RecentUser.model_validate(user).model_dump() for user in recent_users
            ]
        }

    @staticmethod
    def list_users(
        db: Session,
        page_request: PageRequest,
        search: str = None
    ) -> Tuple[List[AdminUserResponse], PaginationMeta]:
        """All users, newest first, with their post and comment counts"""
        posts_count = (
            select(func.count(Post.id))
            .where(Post.author_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("posts_count")
        )
        comments_count = (
            select(func.count(Comment.id))
            .where(Comment.user_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("comments_count")
        )

        query = db.query(User, posts_count, comments_count)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.username.like(pattern),
                User.email.like(pattern),
                User.full_name.like(pattern)
            ))
        query = query.order_by(User.created_at.desc(), User.id.desc())

        rows, total = paginate(query, page_request)

        users = []
        for user, posts, comments in rows:
            item = AdminUserResponse.model_validate(user)
            item.posts_count = posts or 0
            item.comments_count = comments or 0
            users.append(item)
        return users, build_pagination(page_request.page, page_request.limit, total)

    @staticmethod
    def update_role(db: Session, admin: User, user_id: int, role: str) -> User:
        """
        Change a user's role

        Raises:
            Conflict: Admin tries to demote themself
            NotFoundOrDenied: Unknown user
        """
        if user_id == admin.id and role == "user":
            raise Conflict("Cannot remove your own admin role")

        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundOrDenied("User not found")

        user.role = role
        db.commit()
        logger.info(f"Admin {admin.id} set role of user {user_id} to {role}")
        return user

    @staticmethod
    def delete_user(db: Session, admin: User, user_id: int) -> List[str]:
        """
        Delete a user; posts, comments and likes cascade

        Returns:
            Stored file paths (avatar, post images) that should be removed

        Raises:
            Conflict: Admin tries to delete themself
            NotFoundOrDenied: Unknown user
        """
        if user_id == admin.id:
            raise Conflict("Cannot delete your own account")

        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundOrDenied("User not found")

        files = [
            image for (image,) in db.query(Post.featured_image).filter(
                Post.author_id == user_id,
                Post.featured_image.isnot(None)
            ).all()
        ]
        if user.avatar:
            files.append(user.avatar)

        db.delete(user)
        db.commit()
        logger.info(f"Admin {admin.id} deleted user {user_id}")
        return files

    @staticmethod
    def _monthly_counts(db: Session, column, since: datetime) -> List[MonthlyCount]:
        year = extract("year", column).label("year")
        month = extract("month", column).label("month")

        rows = db.query(year, month, func.count().label("count")).filter(
            column >= since
        ).group_by(year, month).order_by(year, month).all()

        return [
            MonthlyCount(month=f"{int(y):04d}-{int(m):02d}", count=count)
            for y, m, count in rows
        ]

    @staticmethod
    def _top_posts(db: Session, order_column) -> List[TopPost]:
        rows = db.query(Post.title, Post.views, Post.likes, User.username).join(
            User, Post.author_id == User.id
        ).filter(
            Post.status == "published"
        ).order_by(order_column.desc(), Post.id.asc()).limit(TOP_POSTS_LIMIT).all()

        return [
            TopPost(title=title, views=views, likes=likes, username=username)
            for title, views, likes, username in rows
        ]

    @staticmethod
    def analytics(db: Session, now: datetime = None) -> Dict[str, Any]:
        """
        Monthly activity over the trailing twelve months and top posts

        Args:
            db: Database session
            now: Reference time (defaults to current UTC time)

        Returns:
            Dict with ``postsByMonth``, ``usersByMonth``, ``topPostsByViews``
            and ``topPostsByLikes``
        """
        since = _months_ago(now or datetime.utcnow(), ANALYTICS_MONTHS)

        return {
            "postsByMonth": [
                item.model_dump() for item in AdminService._monthly_counts(db, Post.created_at, since)
            ],
            "usersByMonth": [
                item.model_dump() for item in AdminService._monthly_counts(db, User.created_at, since)
            ],
            "topPostsByViews": [
                item.model_dump() for item in AdminService._top_posts(db, Post.views)
            ],
            "topPostsByLikes": [
                item.model_dump() for item in AdminService._top_posts(db, Post.likes)
            ],
        }
