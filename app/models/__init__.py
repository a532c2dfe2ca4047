"""
Models package - Import all models here for easy access
"""
from app.models.user import User
from app.models.post import Post
from app.models.comment import Comment
from app.models.like import Like

__all__ = [
    "User",
    "Post",
    "Comment",
    "Like",
]
