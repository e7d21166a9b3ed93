# Implements security-related functionality:
# JWT session token generation and verification
# Password hashing and verification using bcrypt
# Provides core security functions used by the auth module and route dependencies

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import jwt, ExpiredSignatureError, JWTError
from passlib.context import CryptContext

from starterblog.core.config import Settings
from starterblog.core.exceptions import AuthError
from starterblog.modules.auth.schemas.auth import TokenPayload

logger = logging.getLogger("app")

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_access_token(
    subject: str,
    name: str,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"sub": str(subject), "name": name, "iat": now, "exp": now + expires_delta}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str, settings: Settings) -> TokenPayload:
    """Decode a session token, raising AuthError when it can't be trusted."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Token expired")
        raise AuthError("Not authorized, token expired")
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        raise AuthError("Not authorized, invalid token")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Token payload missing 'sub' field")
        raise AuthError("Not authorized, invalid token")

    return TokenPayload(sub=user_id, name=payload.get("name"))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
