from fastapi import APIRouter, Depends, status
from dependency_injector.wiring import inject, Provide
from typing import List

from app.containers import AppContainer
from api.dependencies import get_current_identity
from api.schemas.responses import MessageResponse, ErrorResponse
from services.auth.models import Identity
from services.orders.ledger import OrderLedger
from services.orders.models import NewOrderRequest, OrderResponse

router = APIRouter(
    tags=["Orders"],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.get("/allorders", response_model=List[OrderResponse])
@inject
async def list_orders(
    identity: Identity = Depends(get_current_identity),
    ledger: OrderLedger = Depends(Provide[AppContainer.order_ledger]),
):
    """
    Orders submitted by the authenticated caller, oldest first.
    """
    return await ledger.list_for_owner(identity.subject_id)


@router.post("/newOrder", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
@inject
async def new_order(
    body: NewOrderRequest,
    identity: Identity = Depends(get_current_identity),
    ledger: OrderLedger = Depends(Provide[AppContainer.order_ledger]),
):
    """
    Record an order for the authenticated caller.

    The owner is taken from the session token; any owner field in the body is ignored.
    """
    await ledger.submit(
        owner_id=identity.subject_id,
        instrument_name=body.name,
        quantity=body.qty,
        price=body.price,
        mode=body.mode,
    )
    return MessageResponse(message="Order saved!")
