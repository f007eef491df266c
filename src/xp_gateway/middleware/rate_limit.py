"""Fixed-window rate limiting backed by Redis.

    count = INCR ratelimit:{subject}:{window}
    if count == 1: EXPIRE key 60
    if count > limit: 429 + Retry-After

The subject is the token's `sub` when a valid Bearer token is present,
otherwise the client IP (X-Forwarded-For aware). /health is never limited.
If Redis is unreachable the request is let through and a warning logged.
"""

import logging
import time

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.xp_common.errors import InvalidCredentialsError, RateLimitError
from src.xp_common.redis_client import get_redis
from src.xp_common.response import error_response
from src.xp_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def _client_subject(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        try:
            return f"user:{decode_token(auth[7:].strip())['sub']}"
        except InvalidCredentialsError:
            pass  # fall back to IP; the auth dependency rejects the request later
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limit_per_minute: int | None = None) -> None:
        super().__init__(app)
        self._limit = limit_per_minute or settings.RATE_LIMIT_PER_MINUTE

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        now = int(time.time())
        window = now // _WINDOW_SECONDS
        key = f"ratelimit:{_client_subject(request)}:{window}"
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError:
            logger.warning("Rate limiter unavailable, letting request through", exc_info=True)
            return await call_next(request)

        if count > self._limit:
            exc = RateLimitError()
            retry_after = _WINDOW_SECONDS - (now % _WINDOW_SECONDS)
            return JSONResponse(
                status_code=exc.http_status,
                content=error_response(exc.code, exc.message).model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
