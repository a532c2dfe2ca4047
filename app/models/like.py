"""
Like model for post likes
"""
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Like(Base):
    """A user currently liking a post"""
    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Unique constraint - user can only like a post once
    __table_args__ = (
        UniqueConstraint('user_id', 'post_id', name='unique_like'),
    )

    user = relationship("User", back_populates="likes")
    post = relationship("Post", back_populates="like_rows")
