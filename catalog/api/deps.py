# catalog/api/deps.py
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from ..config import Settings, get_settings, settings
from ..exceptions import UnauthorizedError
from ..utils.security import verify_access_token
from ..utils.storage import ImageStore, build_image_store

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity resolved from the bearer token of the current request."""
    user_id: int


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    app_settings: Settings = Depends(get_settings),
) -> AuthContext:
    """
    Resolve the caller from ``Authorization: Bearer <token>``.

    Missing or non-bearer header -> UnauthorizedError (401), nothing verified.
    Bad signature, expired or malformed token -> InvalidTokenError (403).
    Ownership checks are left to each handler.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    user_id = verify_access_token(credentials.credentials, app_settings)
    return AuthContext(user_id=user_id)


@lru_cache
def get_image_store() -> ImageStore:
    """Process-wide image store built from the settings snapshot."""
    return build_image_store(settings)
