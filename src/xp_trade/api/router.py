"""xp_trade REST API — peer-to-peer trade offers."""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.xp_common.database import get_db_session
from src.xp_common.datetime_utils import utc_now
from src.xp_common.response import ApiResponse, success_response
from src.xp_gateway.auth.dependencies import get_current_user_id
from src.xp_trade.application.schemas import (
    CreateOfferRequest,
    OfferListResponse,
    OfferResponse,
    TradeListResponse,
    TradeResponse,
)
from src.xp_trade.application.service import TradeOfferBook

router = APIRouter(prefix="/trade-offers", tags=["trade-offers"])

_book = TradeOfferBook()


@router.post("")
async def create_offer(
    body: CreateOfferRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    offer = await _book.create(
        db,
        user_id,
        body.from_program,
        body.to_program,
        body.amount_offered,
        body.amount_requested,
        utc_now() + timedelta(days=body.expires_in_days),
        body.description,
    )
    return success_response(OfferResponse.from_domain(offer, user_id).model_dump(), request)


@router.get("")
async def list_open_offers(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    offers = await _book.list_open_offers(db, exclude_user_id=user_id, limit=limit)
    data = OfferListResponse(items=[OfferResponse.from_domain(o, user_id) for o in offers])
    return success_response(data.model_dump(), request)


@router.get("/mine")
async def list_my_offers(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    offers = await _book.list_user_offers(db, user_id, limit=limit)
    data = OfferListResponse(items=[OfferResponse.from_domain(o, user_id) for o in offers])
    return success_response(data.model_dump(), request)


@router.get("/history")
async def list_trade_history(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    trades = await _book.list_trade_history(db, user_id, limit=limit)
    data = TradeListResponse(items=[TradeResponse.from_domain(t, user_id) for t in trades])
    return success_response(data.model_dump(), request)


@router.get("/{offer_id}")
async def get_offer(
    offer_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    offer = await _book.get_offer(db, offer_id)
    return success_response(OfferResponse.from_domain(offer, user_id).model_dump(), request)


@router.post("/{offer_id}/accept")
async def accept_offer(
    offer_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    trade = await _book.accept(db, offer_id, user_id)
    return success_response(TradeResponse.from_domain(trade, user_id).model_dump(), request)


@router.post("/{offer_id}/cancel")
async def cancel_offer(
    offer_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    offer = await _book.cancel(db, offer_id, user_id)
    return success_response(OfferResponse.from_domain(offer, user_id).model_dump(), request)
