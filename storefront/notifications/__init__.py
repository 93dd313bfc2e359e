from .events import OrderEvent
from .dispatcher import (
    NotificationDispatcher,
    NotificationResult,
    dispatcher,
    notify_order_confirmation,
    notify_order_status_update,
)

__all__ = [
    "OrderEvent",
    "NotificationDispatcher",
    "NotificationResult",
    "dispatcher",
    "notify_order_confirmation",
    "notify_order_status_update",
]
