"""xp_tier REST API — caller's membership tier."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.database import get_db_session
from src.xp_common.response import ApiResponse, success_response
from src.xp_gateway.auth.dependencies import get_current_user_id
from src.xp_tier.application.service import TierApplicationService

router = APIRouter(prefix="/tiers", tags=["tiers"])

_service = TierApplicationService()


@router.get("/status")
async def get_tier_status(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_tier_status(db, user_id)
    return success_response(data.model_dump(), request)
