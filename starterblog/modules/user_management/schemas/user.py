from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from starterblog.modules.auth.schemas.auth import _normalize_email


class UserEdit(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_new_password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class User(BaseModel):
    """User model returned to client, never carries the password hash"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    avatar: Optional[str] = None
    avatar_url: Optional[str] = None
    posts: int = 0
    created_at: datetime
    updated_at: datetime
