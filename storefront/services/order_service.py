# storefront/services/order_service.py
"""
Order creation and order queries.

`create_order` is the one place an order graph is written: the address
snapshot, the order, its items, the first history entry and the stock
decrements all go through a single commit.
"""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional, Union

from fastapi import BackgroundTasks
from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from storefront.config import settings
from storefront.constants.order_status import allowed_next_statuses
from storefront.errors import (
    OrderErrorKind,
    OrderFailure,
    OrderRejection,
    OrderServiceError,
    persistence_failure,
)
from storefront.models.address import Address
from storefront.models.order import Order, OrderStatus, PaymentStatus
from storefront.models.order_history import OrderHistory
from storefront.models.order_item import OrderItem
from storefront.models.user import User
from storefront.notifications import notify_order_confirmation
from storefront.schemas.notification_schemas import OrderNotice
from storefront.schemas.order_schemas import (
    AddressOut,
    AdminOrderDetail,
    AdminOrderRow,
    CreateOrderRequest,
    CustomerOut,
    OrderHistoryOut,
    OrderItemOut,
    OrderOut,
    OrderStats,
    PlacedOrder,
    ValidatedOrderRequest,
)
from storefront.services.inventory_service import reduce_inventory
from storefront.services.order_numbers import next_order_number
from storefront.services.order_validation import validate_order_request
from storefront.utils.pagination import paginate

logger = logging.getLogger(__name__)

COD_METHODS = {"cod", "cash", "cash_on_delivery"}

PAYMENT_METHOD_LABELS = {
    "cod": "Cash on Delivery",
    "cash": "Cash on Delivery",
    "cash_on_delivery": "Cash on Delivery",
    "card": "Credit Card",
}

ORDER_LOAD_OPTIONS = (
    selectinload(Order.items).selectinload(OrderItem.product),
    selectinload(Order.history),
    selectinload(Order.shipping_address),
    selectinload(Order.billing_address),
    selectinload(Order.user),
)


def payment_method_label(method: str) -> str:
    return PAYMENT_METHOD_LABELS.get(method, method.replace("_", " ").title())


def placed_message(method: str) -> str:
    if method in COD_METHODS:
        return "Order placed successfully! You will pay on delivery."
    return "Order placed and payment processed successfully!"


# -------------------------
# CREATE
# -------------------------

def _persist_order(session: Session, user: User, data: ValidatedOrderRequest) -> Order:
    order_number = next_order_number(session)
    shipping = data.shipping

    # one snapshot serves as both shipping and billing address
    address = Address(
        user_id=user.id,
        type="SHIPPING",
        first_name=shipping.first_name,
        last_name=shipping.last_name,
        company=shipping.company,
        address1=shipping.address1,
        address2=shipping.address2,
        city=shipping.city,
        state=shipping.state,
        postal_code=shipping.postal_code,
        country=shipping.country,
        phone=shipping.phone,
    )
    session.add(address)
    session.flush()

    now = datetime.utcnow()
    order = Order(
        order_number=order_number,
        user_id=user.id,
        email=shipping.email,
        phone=shipping.phone,
        status=OrderStatus.PENDING,
        payment_status=data.payment_status,
        payment_method=data.payment_method,
        payment_info=data.payment_info,
        subtotal=data.subtotal,
        shipping_cost=data.shipping_cost,
        tax_amount=data.tax_amount,
        discount_amount=data.discount_amount,
        total=data.total,
        currency=settings.CURRENCY,
        shipping_address_id=address.id,
        billing_address_id=address.id,
        notes=data.notes,
        created_at=now,
        updated_at=now,
    )
    session.add(order)
    session.flush()

    for line in data.items:
        session.add(
            OrderItem(
                order_id=order.id,
                product_id=line.product_id,
                quantity=line.quantity,
                price=line.price,
                total=line.total,
            )
        )

    session.add(
        OrderHistory(
            order_id=order.id,
            status=OrderStatus.PENDING.value,
            notes=f"Order placed - payment method: {payment_method_label(data.payment_method)}",
            created_at=now,
        )
    )

    reduce_inventory(session, data.items)
    return order


def create_order(
    session: Session,
    user: Optional[User],
    payload: CreateOrderRequest,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Union[PlacedOrder, OrderFailure]:
    if user is None:
        return OrderFailure(kind=OrderErrorKind.UNAUTHORIZED, message="Unauthorized")

    try:
        validated = validate_order_request(session, payload)
        if isinstance(validated, OrderRejection):
            session.rollback()
            return validated

        order = _persist_order(session, user, validated)
        session.commit()

    except OrderServiceError as exc:
        session.rollback()
        logger.warning(f"Order for user {user.id} rolled back: {exc.message}")
        return exc.to_failure()

    except SQLAlchemyError as exc:
        session.rollback()
        failure = persistence_failure(exc)
        if failure.kind == OrderErrorKind.INTERNAL_ERROR:
            logger.exception(f"Order creation failed for user {user.id}")
        else:
            logger.error(f"Order creation failed for user {user.id} ({failure.kind.value}): {exc}")
        return failure

    except Exception:
        session.rollback()
        raise

    logger.info(f"Order {order.order_number} placed by user {user.id} (total {order.total})")

    order = get_order(session, order.id)
    if background_tasks is not None:
        background_tasks.add_task(notify_order_confirmation, OrderNotice.from_order(order))
    else:
        logger.warning(f"No task queue for order {order.order_number}, confirmation email not sent")

    return PlacedOrder(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        total=order.total,
        message=placed_message(order.payment_method),
    )


# -------------------------
# READ
# -------------------------

def get_order(session: Session, order_id: int) -> Optional[Order]:
    return session.exec(
        select(Order)
        .where(Order.id == order_id)
        .options(*ORDER_LOAD_OPTIONS)
        .execution_options(populate_existing=True)
    ).first()


def list_user_orders(session: Session, user_id: int) -> List[Order]:
    return session.exec(
        select(Order)
        .where(Order.user_id == user_id)
        .options(*ORDER_LOAD_OPTIONS)
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()


def get_user_order(session: Session, user_id: int, order_number: str) -> Optional[Order]:
    return session.exec(
        select(Order)
        .where(Order.user_id == user_id)
        .where(Order.order_number == order_number)
        .options(*ORDER_LOAD_OPTIONS)
    ).first()


def _address_out(address: Optional[Address]) -> Optional[AddressOut]:
    return AddressOut.model_validate(address) if address else None


def serialize_order(order: Order) -> OrderOut:
    history = sorted(order.history, key=lambda h: (h.created_at, h.id), reverse=True)

    return OrderOut(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        email=order.email,
        phone=order.phone,
        subtotal=order.subtotal,
        shipping_cost=order.shipping_cost,
        tax_amount=order.tax_amount,
        discount_amount=order.discount_amount,
        total=order.total,
        currency=order.currency,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemOut(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else None,
                quantity=item.quantity,
                price=item.price,
                total=item.total,
            )
            for item in order.items
        ],
        shipping_address=_address_out(order.shipping_address),
        billing_address=_address_out(order.billing_address),
        history=[OrderHistoryOut.model_validate(h) for h in history],
    )


def serialize_admin_order(order: Order) -> AdminOrderDetail:
    data = serialize_order(order).model_dump()
    customer = None
    if order.user:
        customer = CustomerOut(id=order.user.id, name=order.user.full_name, email=order.user.email)

    return AdminOrderDetail(
        **data,
        customer=customer,
        allowed_next_statuses=allowed_next_statuses(order.status),
    )


# -------------------------
# ADMIN
# -------------------------

def list_orders(
    session: Session,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict:
    query = select(Order, User).outerjoin(User, User.id == Order.user_id)

    if status:
        query = query.where(Order.status == status)

    if payment_status:
        query = query.where(Order.payment_status == payment_status)

    if search:
        like = f"%{search}%"
        query = query.where(
            or_(
                Order.order_number.ilike(like),
                Order.email.ilike(like),
                User.first_name.ilike(like),
                User.last_name.ilike(like),
                cast(Order.id, String).ilike(like),
            )
        )

    if date_from:
        query = query.where(Order.created_at >= datetime.combine(date_from, time.min))

    if date_to:
        # inclusive of the whole end day
        query = query.where(Order.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)
    data["results"] = [
        AdminOrderRow(
            id=o.id,
            order_number=o.order_number,
            customer_name=u.full_name if u else None,
            email=o.email,
            status=o.status,
            payment_status=o.payment_status,
            total=o.total,
            created_at=o.created_at,
        )
        for o, u in data["results"]
    ]
    return data


def get_order_stats(session: Session) -> OrderStats:
    counts = dict(
        session.exec(
            select(Order.status, func.count(Order.id)).group_by(Order.status)
        ).all()
    )

    revenue = session.exec(
        select(func.coalesce(func.sum(Order.total), 0))
        .where(Order.payment_status == PaymentStatus.PAID)
    ).one()

    pending_payments = session.exec(
        select(func.count(Order.id)).where(Order.payment_status == PaymentStatus.PENDING)
    ).one()

    return OrderStats(
        total=sum(counts.values()),
        pending=counts.get(OrderStatus.PENDING, 0),
        confirmed=counts.get(OrderStatus.CONFIRMED, 0),
        processing=counts.get(OrderStatus.PROCESSING, 0),
        shipped=counts.get(OrderStatus.SHIPPED, 0),
        delivered=counts.get(OrderStatus.DELIVERED, 0),
        cancelled=counts.get(OrderStatus.CANCELLED, 0),
        refunded=counts.get(OrderStatus.REFUNDED, 0),
        total_revenue=Decimal(str(revenue or 0)),
        pending_payments=pending_payments,
    )
