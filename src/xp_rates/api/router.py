"""xp_rates REST API — resolved exchange rate quotes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.database import get_db_session
from src.xp_common.response import ApiResponse, success_response
from src.xp_gateway.auth.dependencies import get_current_user_id
from src.xp_rates.application.service import RateApplicationService

router = APIRouter(prefix="/rates", tags=["rates"])

_service = RateApplicationService()


@router.get("")
async def get_rate(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    from_program: str = Query(..., description="Source LoyaltyProgram code"),
    to_program: str = Query(..., description="Destination LoyaltyProgram code"),
) -> ApiResponse:
    data = await _service.get_quote(db, from_program, to_program)
    return success_response(data.model_dump(), request)
