# storefront/services/order_status_service.py
"""
Order lifecycle.

Fulfillment status follows ALLOWED_TRANSITIONS and every change is written
to OrderHistory and announced to the customer. Payment status is a separate
axis: admins may set it to anything, and it is neither historised nor
notified.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Union

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from storefront.constants.order_status import is_transition_allowed
from storefront.errors import (
    OrderErrorKind,
    OrderFailure,
    persistence_failure,
)
from storefront.models.order import Order, OrderStatus, PaymentStatus
from storefront.models.order_history import OrderHistory
from storefront.notifications import notify_order_status_update
from storefront.schemas.notification_schemas import OrderNotice
from storefront.schemas.order_schemas import (
    BulkStatusResult,
    PaymentStatusOut,
    StatusTransitionOut,
)
from storefront.services.order_service import get_order

logger = logging.getLogger(__name__)


def _not_found(order_id: int) -> OrderFailure:
    return OrderFailure(kind=OrderErrorKind.NOT_FOUND, message=f"Order {order_id} not found")


def _lock_order(session: Session, order_id: int) -> Optional[Order]:
    # status checks must see the committed row, not a cached instance
    return session.exec(
        select(Order)
        .where(Order.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()


def transition_order_status(
    session: Session,
    order_id: int,
    new_status: OrderStatus,
    notes: Optional[str] = None,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Union[StatusTransitionOut, OrderFailure]:
    new_status = OrderStatus(new_status)

    order = _lock_order(session, order_id)
    if not order:
        return _not_found(order_id)

    previous_status = order.status

    # same status: nothing to record, nobody to tell
    if new_status == previous_status:
        unchanged = StatusTransitionOut(
            id=order.id,
            order_number=order.order_number,
            previous_status=previous_status,
            status=previous_status,
            changed=False,
            message=f"Order is already {previous_status.value}",
        )
        session.rollback()  # releases the row lock
        return unchanged

    if not is_transition_allowed(previous_status, new_status):
        session.rollback()
        return OrderFailure(
            kind=OrderErrorKind.INVALID_TRANSITION,
            message=f"Invalid status change from {previous_status.value} to {new_status.value}",
        )

    try:
        now = datetime.utcnow()
        order.status = new_status
        order.updated_at = now
        session.add(order)
        session.add(
            OrderHistory(
                order_id=order.id,
                status=new_status.value,
                notes=notes,
                created_at=now,
            )
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Status change for order {order_id} failed: {exc}")
        return persistence_failure(exc)

    logger.info(f"Order {order.order_number}: {previous_status.value} -> {new_status.value}")

    if background_tasks is not None:
        order = get_order(session, order_id)
        background_tasks.add_task(
            notify_order_status_update,
            OrderNotice.from_order(order),
            new_status.value,
            previous_status.value,
        )
    else:
        logger.warning(f"No task queue for order {order.order_number}, status update email not sent")

    return StatusTransitionOut(
        id=order.id,
        order_number=order.order_number,
        previous_status=previous_status,
        status=new_status,
        changed=True,
        message="Order status updated",
    )


def update_payment_status(
    session: Session,
    order_id: int,
    payment_status: PaymentStatus,
) -> Union[PaymentStatusOut, OrderFailure]:
    order = _lock_order(session, order_id)
    if not order:
        return _not_found(order_id)

    try:
        order.payment_status = PaymentStatus(payment_status)
        order.updated_at = datetime.utcnow()
        session.add(order)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Payment status change for order {order_id} failed: {exc}")
        return persistence_failure(exc)

    session.refresh(order)
    logger.info(f"Order {order.order_number} payment status set to {order.payment_status.value}")

    return PaymentStatusOut(
        id=order.id,
        order_number=order.order_number,
        payment_status=order.payment_status,
        message="Payment status updated",
    )


def bulk_transition(
    session: Session,
    order_ids: Iterable[int],
    new_status: OrderStatus,
    notes: Optional[str] = None,
    background_tasks: Optional[BackgroundTasks] = None,
) -> List[BulkStatusResult]:
    """Apply one status to many orders; each order succeeds or fails on its own."""
    results = []

    for order_id in order_ids:
        try:
            outcome = transition_order_status(
                session, order_id, new_status, notes, background_tasks
            )
        except Exception as exc:
            session.rollback()
            logger.exception(f"Bulk status update failed for order {order_id}")
            results.append(BulkStatusResult(order_id=order_id, success=False, error=str(exc) or "Unknown error"))
            continue

        if isinstance(outcome, OrderFailure):
            results.append(BulkStatusResult(order_id=order_id, success=False, error=outcome.message))
        else:
            results.append(BulkStatusResult(order_id=order_id, success=True, status=outcome.status))

    return results
