"""
Authentication API endpoints
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.core.dependencies import get_current_user, get_settings
from app.core.exceptions import InvalidCredentials
from app.services.auth_service import AuthService
from app.schemas.user import UserRegister, UserLogin, UpdateProfile, UserResponse
from app.models.user import User

router = APIRouter()


@router.post("/register", response_model=dict, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Register new user account

    - **username**: Unique username (min 3 characters)
    - **email**: Unique email address
    - **password**: Password (min 6 characters)
    - **full_name**: User's full name

    Returns a bearer token for the new account
    """
    user = AuthService.create_user(
        db=db,
        username=user_data.username,
        email=user_data.email,
        password=user_data.password,
        full_name=user_data.full_name
    )

    return {
        "message": "User registered successfully",
        "token": AuthService.create_token(user, settings),
        "user": UserResponse.model_validate(user).model_dump()
    }


@router.post("/login", response_model=dict)
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Login with email and password

    Returns a bearer token and the user's account
    """
    user = AuthService.authenticate_user(
        db=db,
        email=credentials.email,
        password=credentials.password
    )

    if not user:
        raise InvalidCredentials()

    return {
        "message": "Login successful",
        "token": AuthService.create_token(user, settings),
        "user": UserResponse.model_validate(user).model_dump()
    }


@router.get("/me", response_model=dict)
async def me(current_user: User = Depends(get_current_user)):
    """
    Get the authenticated user's account
    """
    return {"user": UserResponse.model_validate(current_user).model_dump()}


@router.put("/profile", response_model=dict)
async def update_profile(
    profile_data: UpdateProfile,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update full name and bio
    """
    AuthService.update_profile(db, current_user, profile_data.full_name, profile_data.bio)
    return {"message": "Profile updated successfully"}
