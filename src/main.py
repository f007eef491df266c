"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.xp_admin.api.router import router as admin_router
from src.xp_common.database import async_session_factory, engine
from src.xp_common.errors import AppError
from src.xp_common.redis_client import close_redis, get_redis, redis_available
from src.xp_common.response import error_response
from src.xp_conversion.api.router import router as conversion_router
from src.xp_gateway.middleware.rate_limit import RateLimitMiddleware
from src.xp_gateway.middleware.request_log import RequestLogMiddleware
from src.xp_rates.api.router import router as rates_router
from src.xp_rates.application.service import rate_resolver
from src.xp_rewards.api.router import router as rewards_router
from src.xp_tier.api.router import router as tier_router
from src.xp_trade.api.router import router as trade_router
from src.xp_wallet.api.router import router as wallet_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis, load the rate snapshot. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    async with async_session_factory() as session:
        await rate_resolver.refresh(session)
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# last added runs first: request ids are assigned before rate limiting
app.add_middleware(RateLimitMiddleware)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, request)
    content = resp.model_dump()
    if exc.retryable:
        content["retryable"] = True
    return JSONResponse(status_code=exc.http_status, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # body/query schema failures use the same envelope and code as ValidationError
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query"))
    message = f"Invalid {field or 'request'}: {first.get('msg', 'validation failed')}"
    resp = error_response(1001, message, request)
    return JSONResponse(status_code=422, content=resp.model_dump())


app.include_router(wallet_router, prefix="/api/v1")
app.include_router(rates_router, prefix="/api/v1")
app.include_router(conversion_router, prefix="/api/v1")
app.include_router(trade_router, prefix="/api/v1")
app.include_router(tier_router, prefix="/api/v1")
app.include_router(rewards_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str | int]:
    redis_ok = await redis_available()
    return {
        "status": "ok" if redis_ok else "degraded",
        "version": "0.1.0",
        "rates_loaded": len(rate_resolver.snapshot),
    }
