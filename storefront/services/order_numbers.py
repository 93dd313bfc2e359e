import random
import time
import logging

from sqlmodel import Session, select

from storefront.config import settings
from storefront.models.order import Order

logger = logging.getLogger(__name__)


def generate_order_number(prefix: str = None) -> str:
    """ORD-<last 8 digits of the ms timestamp>-<4 random digits>"""
    prefix = prefix or settings.ORDER_NUMBER_PREFIX
    timestamp = str(int(time.time() * 1000))[-8:]
    suffix = f"{random.randint(0, 9999):04d}"
    return f"{prefix}-{timestamp}-{suffix}"


def next_order_number(session: Session) -> str:
    """
    Pick an order number not already taken.

    Two concurrent checkouts can still race past this check; the unique
    constraint on Order.order_number catches that and surfaces as a 409.
    """
    candidate = generate_order_number()
    for attempt in range(1, settings.ORDER_NUMBER_MAX_ATTEMPTS + 1):
        taken = session.exec(
            select(Order.id).where(Order.order_number == candidate)
        ).first()
        if taken is None:
            return candidate

        logger.warning(f"Order number {candidate} already taken (attempt {attempt})")
        candidate = generate_order_number()

    return candidate
