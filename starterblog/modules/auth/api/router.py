"""Authentication router: registration, login and token validation"""
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from starterblog.core.config import Settings
from starterblog.core.exceptions import AuthError
from starterblog.deps import get_current_user_id, get_db, get_settings
from starterblog.modules.auth.schemas.auth import (
    LoginResponse, Message, TokenValidation, UserLogin, UserRegister,
)
from starterblog.modules.auth.services.auth import login_user, register_user
from starterblog.modules.user_management.services.user import get_user

router = APIRouter()


@router.post("/register", response_model=Message, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    user_in: UserRegister,
) -> Any:
    """Register a new user"""
    user = register_user(db, user_in)
    return {"message": f"New user {user.email} registered"}


@router.post("/login", response_model=LoginResponse)
def login(
    *,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    login_in: UserLogin,
) -> Any:
    """Exchange email and password for a session token"""
    return login_user(db, login_in, settings)


@router.get("/validate-token", response_model=TokenValidation)
def validate_token(
    db: Session = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
) -> Any:
    """Validate the current user's token and return who it belongs to"""
    user = get_user(db, current_user_id)
    if not user:
        raise AuthError("User not found")

    return {"valid": True, "id": user.id, "name": user.name}
