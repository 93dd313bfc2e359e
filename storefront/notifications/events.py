# storefront/notifications/events.py
from enum import Enum


class OrderEvent(str, Enum):
    ORDER_PLACED = "order_placed"
    STATUS_UPDATED = "status_updated"
