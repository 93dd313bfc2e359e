# storefront/notifications/dispatcher.py
import logging
from typing import List, Optional

from pydantic import BaseModel

from storefront.notifications.channels import Channel
from storefront.notifications.email_handlers import send_admin_email, send_user_email
from storefront.notifications.events import OrderEvent
from storefront.notifications.rules import NOTIFICATION_RULES, TEMPLATES
from storefront.schemas.notification_schemas import OrderNotice
from storefront.services import email_service

logger = logging.getLogger(__name__)


class NotificationResult(BaseModel):
    event: OrderEvent
    sent: bool = False
    skipped: bool = False
    reason: Optional[str] = None
    channels: List[Channel] = []


class NotificationDispatcher:
    """
    Central notification dispatcher.

    Handles:
    - customer email
    - admin email

    Sending is best effort. An unconfigured provider is reported as a
    skipped result, never as an exception.
    """

    def __init__(self, rules: dict = None, templates: dict = None):
        self.rules = rules if rules is not None else NOTIFICATION_RULES
        self.templates = templates if templates is not None else TEMPLATES

    def send_order_confirmation(self, order: OrderNotice) -> NotificationResult:
        return self._dispatch(
            OrderEvent.ORDER_PLACED,
            order,
            user_subject=f"Order Confirmation - #{order.order_number}",
            admin_subject=f"New order received - #{order.order_number}",
        )

    def send_order_status_update(
        self,
        order: OrderNotice,
        new_status: str,
        previous_status: str,
    ) -> NotificationResult:
        return self._dispatch(
            OrderEvent.STATUS_UPDATED,
            order,
            user_subject=f"Order Status Update - #{order.order_number}",
            admin_subject=f"Order #{order.order_number} is now {new_status}",
            new_status=new_status,
            previous_status=previous_status,
        )

    def _dispatch(self, event: OrderEvent, order: OrderNotice, *, user_subject, admin_subject, **ctx):
        if not email_service.is_configured():
            logger.info(f"Skipping {event.value} for {order.order_number}: email not configured")
            return NotificationResult(
                event=event,
                skipped=True,
                reason="Email provider is not configured",
            )

        rules = self.rules.get(event, {})
        templates = self.templates.get(event, {})
        delivered = []

        # -------------------------
        # CUSTOMER EMAIL
        # -------------------------
        if rules.get(Channel.EMAIL_USER):
            if send_user_email(
                template=templates[Channel.EMAIL_USER],
                subject=user_subject,
                to=order.email,
                order=order,
                **ctx,
            ):
                delivered.append(Channel.EMAIL_USER)

        # -------------------------
        # ADMIN EMAIL
        # -------------------------
        if rules.get(Channel.EMAIL_ADMIN):
            if send_admin_email(
                template=templates[Channel.EMAIL_ADMIN],
                subject=admin_subject,
                order=order,
                **ctx,
            ):
                delivered.append(Channel.EMAIL_ADMIN)

        return NotificationResult(event=event, sent=bool(delivered), channels=delivered)


dispatcher = NotificationDispatcher()


# Background task entry points. They run after the response has been sent,
# so anything that goes wrong is logged here and goes no further.

def notify_order_confirmation(order: OrderNotice) -> Optional[NotificationResult]:
    try:
        result = dispatcher.send_order_confirmation(order)
    except Exception:
        logger.exception(f"Order confirmation for {order.order_number} failed")
        return None

    logger.info(f"Order confirmation for {order.order_number}: sent={result.sent} skipped={result.skipped}")
    return result


def notify_order_status_update(
    order: OrderNotice,
    new_status: str,
    previous_status: str,
) -> Optional[NotificationResult]:
    try:
        result = dispatcher.send_order_status_update(order, new_status, previous_status)
    except Exception:
        logger.exception(f"Status update email for {order.order_number} failed")
        return None

    logger.info(
        f"Status update for {order.order_number} ({previous_status} -> {new_status}): "
        f"sent={result.sent} skipped={result.skipped}"
    )
    return result
