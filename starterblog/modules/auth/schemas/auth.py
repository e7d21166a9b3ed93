from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator


def _normalize_email(email: Optional[str]) -> Optional[str]:
    """Normalize email to lowercase."""
    return email.strip().lower() if email else None


class UserRegister(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class UserLogin(BaseModel):
    # Not EmailStr: a malformed address must fail like any other bad credential
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class LoginResponse(BaseModel):
    token: str
    id: str
    name: str


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    name: Optional[str] = None


class TokenValidation(BaseModel):
    valid: bool
    id: str
    name: str


class Message(BaseModel):
    message: str
