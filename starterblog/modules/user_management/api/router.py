from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from starterblog.core.config import Settings
from starterblog.core.storage import FileStorage
from starterblog.deps import get_current_user_id, get_db, get_settings, get_storage
from starterblog.modules.user_management.schemas.user import User as UserSchema, UserEdit
from starterblog.modules.user_management.services.user import (
    change_avatar, edit_user, get_users, read_user,
)

router = APIRouter()
logger = logging.getLogger("app")


def _to_schema(user, storage: FileStorage) -> UserSchema:
    """User response with the public URL of the avatar, if any"""
    data = UserSchema.model_validate(user)
    if user.avatar:
        data.avatar_url = storage.url(user.avatar)
    return data


@router.get("/authors", response_model=List[UserSchema])
def read_authors(
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> Any:
    """List every author"""
    return [_to_schema(user, storage) for user in get_users(db)]


@router.post("/change-avatar", response_model=UserSchema)
def update_avatar(
    *,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
    avatar: Optional[UploadFile] = File(None),
    current_user_id: str = Depends(get_current_user_id),
) -> Any:
    """Upload a new profile picture for the current user"""
    user = change_avatar(db, storage, current_user_id, avatar, max_size=settings.MAX_AVATAR_SIZE)
    return _to_schema(user, storage)


@router.post("/edit-user", response_model=UserSchema)
def update_user_details(
    *,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    user_in: UserEdit,
    current_user_id: str = Depends(get_current_user_id),
) -> Any:
    """Change the current user's name, email and password"""
    return _to_schema(edit_user(db, current_user_id, user_in), storage)


@router.get("/{user_id}", response_model=UserSchema)
def read_user_by_id(
    user_id: str,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> Any:
    """Get a specific user by id"""
    return _to_schema(read_user(db, user_id), storage)
