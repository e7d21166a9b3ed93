from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from starterblog.core import security
from starterblog.core.config import Settings
from starterblog.core.exceptions import AuthError
from starterblog.core.storage import FileStorage
from starterblog.db.session import get_db  # noqa: F401

# Bearer token scheme; missing credentials are reported as AuthError below
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    """
    Dependency for the settings the running app was created with
    """
    return request.app.state.settings


def get_storage(request: Request) -> FileStorage:
    """
    Dependency for the configured upload storage
    """
    return request.app.state.storage


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Dependency for the acting user's id, taken from the verified session token
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authorized, no token")

    token_data = security.verify_access_token(credentials.credentials, settings)
    return token_data.sub
