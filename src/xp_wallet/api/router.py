"""xp_wallet REST API — caller's wallets."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.database import get_db_session
from src.xp_common.response import ApiResponse, success_response
from src.xp_gateway.auth.dependencies import get_current_user_id
from src.xp_wallet.application.service import WalletApplicationService

router = APIRouter(prefix="/wallets", tags=["wallets"])

_service = WalletApplicationService()


@router.get("")
async def list_wallets(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_wallets(db, user_id)
    return success_response(data.model_dump(), request)
