"""Trade API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from bookloop.api.schemas import TradeCreateRequest, TradeResponse, TradeUpdateRequest
from bookloop.core.dependencies import get_trade_service
from bookloop.domain.entities import Trade
from bookloop.domain.services import ITradeService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/trades", tags=["trades"])


@router.get("/user/{user_id}", response_model=list[TradeResponse])
async def list_user_trades(
    user_id: str,
    trade_service: Annotated[ITradeService, Depends(get_trade_service)],
) -> list[TradeResponse]:
    """Trades the user requested or received."""
    trades = await trade_service.list_user_trades(user_id)
    return [TradeResponse.model_validate(t) for t in trades]


@router.post("", response_model=TradeResponse, status_code=status.HTTP_201_CREATED)
async def create_trade(
    body: TradeCreateRequest,
    trade_service: Annotated[ITradeService, Depends(get_trade_service)],
) -> TradeResponse:
    """Open a trade request; the book owner is notified."""
    trade = await trade_service.create_trade(Trade(id="", **body.model_dump()))
    return TradeResponse.model_validate(trade)


@router.get("/{trade_id}", response_model=TradeResponse)
async def get_trade(
    trade_id: str,
    trade_service: Annotated[ITradeService, Depends(get_trade_service)],
) -> TradeResponse:
    return TradeResponse.model_validate(await trade_service.get_trade(trade_id))


@router.put("/{trade_id}", response_model=TradeResponse)
async def update_trade(
    trade_id: str,
    body: TradeUpdateRequest,
    trade_service: Annotated[ITradeService, Depends(get_trade_service)],
) -> TradeResponse:
    """Update status and negotiation fields.

    A status change to ``accepted``, ``declined`` or ``completed`` notifies
    the requester.
    """
    trade = await trade_service.update_trade(trade_id, **body.model_dump(exclude_none=True))
    return TradeResponse.model_validate(trade)
