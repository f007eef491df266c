"""xp_rewards REST API — balance to reward equivalents."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.xp_common.response import ApiResponse, success_response
from src.xp_gateway.auth.dependencies import get_current_user_id
from src.xp_rewards.application.schemas import RewardValuationResponse
from src.xp_rewards.domain.valuator import valuate

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("/valuation")
async def get_valuation(
    user_id: Annotated[str, Depends(get_current_user_id)],
    request: Request,
    program: str = Query(..., description="LoyaltyProgram code"),
    balance: int = Query(..., ge=0, description="Points balance to value"),
    upcoming: int = Query(3, ge=0, le=10, description="Nearest upcoming rewards to list"),
) -> ApiResponse:
    data = RewardValuationResponse.from_domain(valuate(program, balance, upcoming))
    return success_response(data.model_dump(), request)
