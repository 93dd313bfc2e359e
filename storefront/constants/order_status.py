from storefront.models.order import OrderStatus

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
    OrderStatus.CONFIRMED: [OrderStatus.PROCESSING, OrderStatus.CANCELLED],
    OrderStatus.PROCESSING: [OrderStatus.SHIPPED, OrderStatus.CANCELLED],
    OrderStatus.SHIPPED: [OrderStatus.DELIVERED],
    OrderStatus.DELIVERED: [OrderStatus.REFUNDED],
    OrderStatus.CANCELLED: [],
    OrderStatus.REFUNDED: [],
}

TERMINAL_STATUSES = {
    status for status, allowed in ALLOWED_TRANSITIONS.items() if not allowed
}


def allowed_next_statuses(status: OrderStatus) -> list[OrderStatus]:
    return list(ALLOWED_TRANSITIONS.get(OrderStatus(status), []))


def is_transition_allowed(current: OrderStatus, new: OrderStatus) -> bool:
    return OrderStatus(new) in ALLOWED_TRANSITIONS.get(OrderStatus(current), [])
