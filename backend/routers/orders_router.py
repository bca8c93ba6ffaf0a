# backend/routers/orders_router.py
from typing import List

from fastapi import APIRouter, Depends

from routers.dependencies import get_current_account, get_order_engine
from schemas.orders import OrderCreate, OrderUpdate, OrderResponse
from services.auth_service import AuthenticatedAccount
from services.order_service import OrderEngine

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    body: OrderCreate,
    account: AuthenticatedAccount = Depends(get_current_account),
    engine: OrderEngine = Depends(get_order_engine),
):
    order = engine.create_order(account, body.products, body.deliveryAddress, body.note)
    return OrderResponse.from_order(order)


@router.get("/my", response_model=List[OrderResponse])
def get_my_orders(
    account: AuthenticatedAccount = Depends(get_current_account),
    engine: OrderEngine = Depends(get_order_engine),
):
    return [OrderResponse.from_order(o) for o in engine.list_for_account(account)]


@router.get("/my/{order_id}", response_model=OrderResponse)
def get_my_order(
    order_id: int,
    account: AuthenticatedAccount = Depends(get_current_account),
    engine: OrderEngine = Depends(get_order_engine),
):
    return OrderResponse.from_order(engine.get_for_account(account, order_id))


@router.put("/my/{order_id}", response_model=OrderResponse)
def update_my_order(
    order_id: int,
    body: OrderUpdate,
    account: AuthenticatedAccount = Depends(get_current_account),
    engine: OrderEngine = Depends(get_order_engine),
):
    order = engine.update_order(account, order_id, body.products, body.deliveryAddress, body.note)
    return OrderResponse.from_order(order)
