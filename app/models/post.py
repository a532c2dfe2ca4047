"""
Post model - SQLAlchemy ORM
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


POST_STATUSES = ("draft", "published")


class Post(Base):
    """Blog post with denormalized view and like counters"""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    author_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    title = Column(String(255), nullable=False, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    featured_image = Column(String(255), nullable=True)
    status = Column(Enum(*POST_STATUSES, name="post_status"), default="draft", nullable=False, index=True)

    # Statistics
    views = Column(Integer, default=0, nullable=False)
    likes = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    author = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", passive_deletes=True)
    like_rows = relationship("Like", back_populates="post", passive_deletes=True)

    def __repr__(self):
        return f"<Post(id={self.id}, title={self.title}, author_id={self.author_id})>"
