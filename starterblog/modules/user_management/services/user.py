from typing import List, Optional
import logging

from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from starterblog.core.config import settings
from starterblog.core.exceptions import (
    AuthError, ConflictError, NotFoundError, UpdateFailedError, ValidationError,
)
from starterblog.core.security import get_password_hash, verify_password
from starterblog.core.storage import FileStorage, discard_file, get_upload_size
from starterblog.db.session import utcnow
from starterblog.modules.posts.models.post import Post
from starterblog.modules.user_management.models.user import User
from starterblog.modules.user_management.schemas.user import UserEdit

logger = logging.getLogger("app")


def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by (lower-cased) email"""
    return db.query(User).filter(User.email == email.lower()).first()


def get_users(db: Session) -> List[User]:
    """Get every registered user, oldest first"""
    return db.query(User).order_by(User.created_at.asc()).all()


def read_user(db: Session, user_id: str) -> User:
    """Get user by ID or raise NotFoundError"""
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def change_avatar(
    db: Session,
    storage: FileStorage,
    user_id: str,
    avatar: Optional[UploadFile],
    max_size: Optional[int] = None,
) -> User:
    """
    Replace the user's avatar.

    The new file is stored and the record committed before the previous
    avatar is removed, so a failure never leaves the user pointing at a
    missing file.
    """
    max_size = max_size or settings.MAX_AVATAR_SIZE
    if not avatar or not avatar.filename:
        raise ValidationError("Please choose an image")
    if get_upload_size(avatar) > max_size:
        raise ValidationError(f"Profile picture is too big. Should be less than {max_size // 1000}KB")

    user = read_user(db, user_id)
    old_avatar = user.avatar

    new_filename = storage.save(avatar)
    try:
        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .update({User.avatar: new_filename, User.updated_at: utcnow()}, synchronize_session=False)
        )
        if not updated:
            raise UpdateFailedError("Avatar couldn't be changed")
        db.commit()
    except (SQLAlchemyError, UpdateFailedError):
        db.rollback()
        discard_file(storage, new_filename)
        raise

    if old_avatar:
        discard_file(storage, old_avatar)

    logger.info(f"Changed avatar for user {user_id}")
    db.refresh(user)
    return user


def edit_user(db: Session, user_id: str, user_in: UserEdit) -> User:
    """Update name, email and password after checking the current password"""
    if not user_in.name or not user_in.email or not user_in.current_password or not user_in.new_password:
        raise ValidationError("Fill in all fields")

    user = read_user(db, user_id)

    email = user_in.email.lower()
    email_owner = get_user_by_email(db, email)
    if email_owner and email_owner.id != user.id:
        raise ConflictError("Email already exists")

    if not verify_password(user_in.current_password, user.hashed_password):
        raise AuthError("Invalid current password")

    if user_in.new_password != user_in.confirm_new_password:
        raise ValidationError("New passwords do not match")

    user.name = user_in.name
    user.email = email
    user.hashed_password = get_password_hash(user_in.new_password)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")

    db.refresh(user)
    logger.info(f"Updated profile for user {user_id}")
    return user


def recount_posts(db: Session) -> int:
    """
    Recompute every user's post counter from the posts table.

    Returns the number of users whose stored counter was wrong.
    """
    counts = dict(
        db.query(Post.creator, func.count(Post.id)).group_by(Post.creator).all()
    )
    corrected = 0
    for user in db.query(User).all():
        actual = counts.get(user.id, 0)
        if user.posts != actual:
            logger.warning(f"User {user.id} post counter was {user.posts}, actual {actual}")
            user.posts = actual
            corrected += 1
    db.commit()
    return corrected

