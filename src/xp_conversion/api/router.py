"""xp_conversion REST API — quote, convert, history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.database import get_db_session
from src.xp_common.response import ApiResponse, success_response
from src.xp_conversion.application.schemas import ConvertRequest, TransactionResponse
from src.xp_conversion.application.service import ConversionExecutor
from src.xp_gateway.auth.dependencies import get_current_user_id

router = APIRouter(prefix="/conversions", tags=["conversions"])

_executor = ConversionExecutor()


@router.post("/quote")
async def quote_conversion(
    body: ConvertRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _executor.quote_conversion(
        db, user_id, body.from_program, body.to_program, body.amount
    )
    return success_response(data.model_dump(), request)


@router.post("")
async def convert(
    body: ConvertRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    tx = await _executor.convert(db, user_id, body.from_program, body.to_program, body.amount)
    return success_response(TransactionResponse.from_domain(tx).model_dump(), request)


@router.get("")
async def list_conversions(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _executor.list_transactions(db, user_id, cursor, limit)
    return success_response(data.model_dump(), request)
