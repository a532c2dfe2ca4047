"""
Authentication Service
Handles user registration, login, token issuance and profile edits
"""
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional
import logging

from app.core.config import Settings
from app.core.exceptions import Conflict
from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
)
from app.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def create_user(
        db: Session,
        username: str,
        email: str,
        password: str,
        full_name: str
    ) -> User:
        """
        Create new user account

        Args:
            db: Database session
            username: Unique username
            email: Unique email
            password: Plain password (will be hashed)
            full_name: Display name

        Returns:
            Created User object

        Raises:
            Conflict: Username or email already taken
        """
        existing = db.query(User).filter(
            or_(User.email == email, User.username == username)
        ).first()
        if existing:
            raise Conflict("User already exists")

        user = User(
            username=username,
            email=email,
            password=get_password_hash(password),
            full_name=full_name,
            role="user"
        )

        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    @staticmethod
    def authenticate_user(
        db: Session,
        email: str,
        password: str
    ) -> Optional[User]:
        """
        Authenticate user by email and password

        Returns:
            User object if authenticated, None otherwise
        """
        user = db.query(User).filter(User.email == email).first()

        if not user:
            return None

        if not verify_password(password, user.password):
            return None

        return user

    @staticmethod
    def create_token(user: User, settings: Settings) -> str:
        return create_access_token(data={"sub": user.id}, settings=settings)

    @staticmethod
    def update_profile(
        db: Session,
        user: User,
        full_name: str,
        bio: Optional[str] = None,
        avatar: Optional[str] = None
    ) -> Optional[str]:
        """
        Update the caller's display fields

        Args:
            avatar: New avatar path; None keeps the current one

        Returns:
            Path of the avatar that was replaced, if any
        """
        replaced = None
        if avatar:
            replaced = user.avatar
            user.avatar = avatar

        user.full_name = full_name
        user.bio = bio
        db.commit()
        db.refresh(user)
        return replaced
