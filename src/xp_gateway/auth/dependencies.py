"""FastAPI dependencies: get_current_user_id / require_admin.

Usage in any protected router:
    from src.xp_gateway.auth.dependencies import get_current_user_id

    @router.get("/protected")
    async def protected(user_id: Annotated[str, Depends(get_current_user_id)]):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import settings
from src.xp_common.errors import AuthorizationError, InvalidCredentialsError
from src.xp_gateway.auth.jwt_handler import decode_token

_bearer = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> str:
    """Validate the Bearer token and return its subject (the user id)."""
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload = decode_token(credentials.credentials)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
    return str(payload["sub"])


async def require_admin(
    user_id: Annotated[str, Depends(get_current_user_id)],
) -> str:
    """Only ids listed in ADMIN_USER_IDS (the scheduler, operators) pass."""
    if user_id not in settings.ADMIN_USER_IDS:
        raise AuthorizationError("Admin privileges required")
    return user_id
