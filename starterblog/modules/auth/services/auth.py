import logging
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from starterblog.core.config import Settings
from starterblog.core.exceptions import AuthError, ConflictError, ValidationError
from starterblog.core.security import create_access_token, get_password_hash, verify_password
from starterblog.modules.auth.schemas.auth import UserLogin, UserRegister
from starterblog.modules.user_management.models.user import User
from starterblog.modules.user_management.services.user import get_user_by_email

logger = logging.getLogger("app")

MIN_PASSWORD_LENGTH = 6


def register_user(db: Session, user_in: UserRegister) -> User:
    """Create a user with a hashed password and an empty post counter"""
    if not user_in.name or not user_in.email or not user_in.password or not user_in.confirm_password:
        raise ValidationError("Please fill in all fields")

    if len(user_in.password.strip()) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")

    if user_in.password != user_in.confirm_password:
        raise ValidationError("Passwords do not match")

    email = user_in.email.lower()
    if get_user_by_email(db, email):
        raise ConflictError("Email already exists")

    user = User(
        name=user_in.name,
        email=email,
        hashed_password=get_password_hash(user_in.password),
        posts=0,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another registration for the same email
        db.rollback()
        raise ConflictError("Email already exists")
    db.refresh(user)

    logger.info(f"Registered new user {user.id}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Return the user for these credentials; unknown email and wrong password fail alike"""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        raise AuthError("Invalid email or password")
    return user


def login_user(db: Session, login_in: UserLogin, settings: Settings) -> Dict[str, Any]:
    if not login_in.email or not login_in.password:
        raise ValidationError("Fill in all fields")

    user = authenticate_user(db, login_in.email, login_in.password)
    token = create_access_token(user.id, user.name, settings)

    logger.info(f"User {user.id} logged in")
    return {"token": token, "id": user.id, "name": user.name}
