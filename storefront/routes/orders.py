# -------- CUSTOMER ORDERS --------
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlmodel import Session

from storefront.database import get_session
from storefront.errors import OrderFailure, OrderHTTPException
from storefront.models.user import User
from storefront.schemas.order_schemas import CreateOrderRequest, OrderOut, PlacedOrder
from storefront.services.order_service import (
    create_order,
    get_user_order,
    list_user_orders,
    serialize_order,
)
from storefront.utils.token import get_current_user

router = APIRouter()


@router.post("", status_code=201, response_model=PlacedOrder)
def place_order(
    payload: CreateOrderRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    result = create_order(session, current_user, payload, background_tasks)
    if isinstance(result, OrderFailure):
        raise OrderHTTPException(result)
    return result


@router.get("", response_model=List[OrderOut])
def my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return [serialize_order(o) for o in list_user_orders(session, current_user.id)]


@router.get("/{order_number}", response_model=OrderOut)
def my_order_detail(
    order_number: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    order = get_user_order(session, current_user.id, order_number)
    if not order:
        raise HTTPException(404, "Order not found")
    return serialize_order(order)
