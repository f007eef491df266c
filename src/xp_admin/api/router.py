"""Admin REST API — callers must be listed in ADMIN_USER_IDS."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_admin.application.service import AdminService
from src.xp_common.database import get_db_session
from src.xp_common.response import ApiResponse, success_response
from src.xp_gateway.auth.dependencies import require_admin
from src.xp_wallet.application.schemas import CreditWalletRequest

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.post("/trade-offers/sweep")
async def sweep_expired_offers(
    admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return success_response(await _service.sweep_expired_offers(db), request)


@router.post("/tiers/rollover")
async def rollover_tiers(
    admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return success_response(await _service.rollover_tiers(db), request)


@router.post("/rates/refresh")
async def refresh_rates(
    admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return success_response(await _service.refresh_rates(db), request)


@router.post("/wallets/credit")
async def credit_wallet(
    body: CreditWalletRequest,
    admin_id: Annotated[str, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.credit_wallet(db, body.user_id, body.program.value, body.amount)
    return success_response(data, request)
