"""
Credential helpers: password hashing and bearer token issuance
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import Settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    data: Dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create signed JWT access token

    Args:
        data: Claims to embed; ``sub`` carries the user id
        settings: Settings providing the key, algorithm and lifetime
        expires_delta: Optional override of the configured lifetime

    Returns:
        Encoded token string
    """
    to_encode = data.copy()
    # JWT subject must be a string
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])
    expire = datetime.utcnow() + (
        expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """Decode and verify a token, returning None when it is invalid or expired"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Token validation failed: {e}")
        return None
