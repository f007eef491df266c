"""JWT verification.

Tokens are issued by the external identity provider and signed with the
shared JWT_SECRET (HS256). This service only verifies them; `sub` is the
user id used as wallet owner.

`create_access_token` mints tokens in the same format for local development
and integration tests.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.xp_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def create_access_token(user_id: str, expires_in: timedelta = timedelta(minutes=30)) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + expires_in,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: bad signature, expired, wrong type or no `sub`.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type", "access") != "access" or not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
