"""Access log for the exchange API.

Every request gets a request_id (``req_`` + 12 hex chars) stored on
request.state, echoed by ApiResponse and returned as X-Request-ID.
Server errors are logged at WARNING so failed conversions stand out.

    INFO [POST] /api/v1/conversions → 200 (23ms) req_a1b2c3d4e5f6 client=10.0.0.7
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("xp.request")

REQUEST_ID_HEADER = "X-Request-ID"


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _new_request_id()
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s client=%s",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            request_id,
            request.client.host if request.client else "-",
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
