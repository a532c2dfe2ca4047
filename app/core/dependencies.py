"""
FastAPI dependencies for authentication and authorization
"""
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.config import Settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationFailed, AdminRequired
from app.core.security import decode_token
from app.models.user import User

logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_user as a 401
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> User:
    """
    Dependency to get current authenticated user from JWT token

    Raises:
        AuthenticationFailed: If the token is missing, invalid or the user is gone
    """
    if credentials is None:
        raise AuthenticationFailed("No token, authorization denied")

    payload = decode_token(credentials.credentials, settings)
    if not payload:
        raise AuthenticationFailed("Token is not valid")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationFailed("Token is not valid")

    try:
        uid_int = int(user_id)
    except (TypeError, ValueError):
        logger.info(f"Token validation failed: user id {user_id!r} is not an integer")
        raise AuthenticationFailed("Token is not valid")

    user = db.query(User).filter(User.id == uid_int).first()
    if user is None:
        logger.info(f"Token validation failed: user {uid_int} not found")
        raise AuthenticationFailed("Token is not valid")

    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise AdminRequired()
    return current_user


def get_storage(request: Request):
    """Blob store configured on the application"""
    return request.app.state.storage
