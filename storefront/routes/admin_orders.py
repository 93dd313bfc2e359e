# -------- ADMIN ORDERS --------
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlmodel import Session

from storefront.database import get_session
from storefront.errors import OrderFailure, OrderHTTPException
from storefront.models.order import OrderStatus, PaymentStatus
from storefront.models.user import User
from storefront.schemas.order_schemas import (
    AdminOrderDetail,
    AdminOrderPage,
    BulkStatusResult,
    BulkStatusUpdateRequest,
    OrderStats,
    PaymentStatusOut,
    PaymentStatusUpdateRequest,
    StatusTransitionOut,
    StatusUpdateRequest,
)
from storefront.services.order_service import (
    get_order,
    get_order_stats,
    list_orders,
    serialize_admin_order,
)
from storefront.services.order_status_service import (
    bulk_transition,
    transition_order_status,
    update_payment_status,
)
from storefront.utils.token import get_current_admin

router = APIRouter()


@router.get("", response_model=AdminOrderPage)
def admin_list_orders(
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return list_orders(
        session,
        page=page,
        limit=limit,
        status=status,
        payment_status=payment_status,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/stats", response_model=OrderStats)
def admin_order_stats(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return get_order_stats(session)


@router.post("/bulk-update", response_model=List[BulkStatusResult])
def admin_bulk_update_status(
    data: BulkStatusUpdateRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    if not data.order_ids:
        raise HTTPException(400, "Order IDs are required")

    return bulk_transition(session, data.order_ids, data.status, data.notes, background_tasks)


@router.get("/{order_id}", response_model=AdminOrderDetail)
def admin_order_detail(
    order_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    order = get_order(session, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    return serialize_admin_order(order)


@router.patch("/{order_id}/status", response_model=StatusTransitionOut)
def admin_update_order_status(
    order_id: int,
    data: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    result = transition_order_status(session, order_id, data.status, data.notes, background_tasks)
    if isinstance(result, OrderFailure):
        raise OrderHTTPException(result)
    return result


@router.patch("/{order_id}/payment-status", response_model=PaymentStatusOut)
def admin_update_payment_status(
    order_id: int,
    data: PaymentStatusUpdateRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    result = update_payment_status(session, order_id, data.payment_status)
    if isinstance(result, OrderFailure):
        raise OrderHTTPException(result)
    return result
