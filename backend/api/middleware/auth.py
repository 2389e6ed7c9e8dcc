"""
JWT Authentication middleware.

Resolves the bearer access token to the current user through the
Session Manager. Failures raise auth module exceptions, which the API
error handler turns into 401 responses.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from modules.auth.exceptions import MissingTokenError
from modules.auth.interfaces import IAuthService
from shared.models import User

from ..dependencies import get_auth_service

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> User:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None:
        raise MissingTokenError("Missing authorization header")

    return await auth.authenticate(credentials.credentials)


# Type alias for cleaner route definitions
RequireAuth = Depends(get_current_user)
