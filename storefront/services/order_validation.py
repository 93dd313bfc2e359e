# storefront/services/order_validation.py
"""
Order intake validation.

Turns a submitted checkout payload into a ValidatedOrderRequest, or an
OrderRejection describing the first problem found. Nothing is written here;
stock is only read, the authoritative check happens again inside the
order transaction.
"""

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from sqlmodel import Session

from storefront.errors import OrderErrorKind, OrderRejection
from storefront.models.order import PaymentStatus
from storefront.models.product import Product
from storefront.schemas.order_schemas import (
    CreateOrderRequest,
    ValidatedLine,
    ValidatedOrderRequest,
    ValidatedShipping,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# money columns are NUMERIC(10, 2)
MAX_AMOUNT = Decimal("100000000")

# camelCase names are what the storefront client submits and reads back
REQUIRED_SHIPPING_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "phone": "phone",
    "address1": "address1",
    "city": "city",
    "state": "state",
    "postal_code": "postalCode",
}

PAYMENT_STATUS_MAP = {
    "completed": PaymentStatus.PAID,
    "paid": PaymentStatus.PAID,
    "failed": PaymentStatus.FAILED,
    "refunded": PaymentStatus.REFUNDED,
    "partially_refunded": PaymentStatus.PARTIALLY_REFUNDED,
}

DEFAULT_PAYMENT_METHOD = "cod"

# card details that are safe to keep on the order
PAYMENT_INFO_KEEP = ("cardholder_name", "brand")


def map_payment_status(value: Optional[str]) -> PaymentStatus:
    """Map a client supplied payment status onto PaymentStatus. Never fails."""
    if not value:
        return PaymentStatus.PENDING
    return PAYMENT_STATUS_MAP.get(str(value).strip().lower(), PaymentStatus.PENDING)


def in_amount_range(value) -> bool:
    value = Decimal(value)
    return value.is_finite() and abs(value) < MAX_AMOUNT


def to_cents(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT)


def sanitize_payment_info(info: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Keep a card summary only: last four digits, holder and brand."""
    if not info:
        return None

    normalized = {_snake(k): v for k, v in info.items()}
    cleaned = {
        key: str(normalized[key])
        for key in PAYMENT_INFO_KEEP
        if normalized.get(key)
    }

    card_number = str(normalized.get("card_number") or normalized.get("last4") or "")
    digits = "".join(ch for ch in card_number if ch.isdigit())
    if digits:
        cleaned["last4"] = digits[-4:]

    return cleaned or None


def _snake(key: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in key).lstrip("_")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _reject(kind: OrderErrorKind, message: str, **extra) -> OrderRejection:
    logger.info(f"Order rejected ({kind.value}): {message}")
    return OrderRejection(kind=kind, message=message, **extra)


def _validate_shipping(payload: CreateOrderRequest) -> Union[ValidatedShipping, OrderRejection]:
    info = payload.shipping_info
    missing = [
        label
        for attr, label in REQUIRED_SHIPPING_FIELDS.items()
        if info is None or _blank(getattr(info, attr))
    ]

    if missing:
        return _reject(
            OrderErrorKind.INCOMPLETE_SHIPPING,
            f"Missing required shipping information: {', '.join(missing)}",
            missing_fields=missing,
        )

    return ValidatedShipping(
        first_name=info.first_name.strip(),
        last_name=info.last_name.strip(),
        email=info.email.strip(),
        phone=info.phone.strip(),
        company=(info.company or "").strip(),
        address1=info.address1.strip(),
        address2=(info.address2 or "").strip(),
        city=info.city.strip(),
        state=info.state.strip(),
        postal_code=info.postal_code.strip(),
        country=(info.country or "").strip(),
    )


def _validate_line(session: Session, position: int, item) -> Union[ValidatedLine, OrderRejection]:
    if item.product_id is None or _blank(str(item.product_id)):
        return _reject(
            OrderErrorKind.MISSING_PRODUCT_ID,
            f"Item {position} is missing a product id",
        )
    product_id = str(item.product_id).strip()

    quantity = item.quantity
    if (
        quantity is None
        or not math.isfinite(quantity)
        or quantity <= 0
        or quantity != int(quantity)
    ):
        return _reject(
            OrderErrorKind.INVALID_QUANTITY,
            f"Invalid quantity for product {product_id}",
        )

    try:
        price = None
        if item.price is not None and in_amount_range(item.price):
            price = to_cents(item.price)
    except InvalidOperation:
        price = None
    if price is None or price <= 0:
        return _reject(
            OrderErrorKind.INVALID_PRICE,
            f"Invalid price for product {product_id}",
        )

    if not in_amount_range(price * int(quantity)):
        return _reject(
            OrderErrorKind.INVALID_TOTALS,
            f"Line total for product {product_id} is too large",
        )

    product = session.get(Product, product_id)
    if not product or not product.is_active:
        return _reject(
            OrderErrorKind.PRODUCT_NOT_FOUND,
            f"Product {product_id} not found",
        )

    if int(quantity) > product.stock:
        return _reject(
            OrderErrorKind.INSUFFICIENT_STOCK,
            f"Insufficient stock for {product.name}. Only {product.stock} available.",
        )

    return ValidatedLine(
        product_id=product_id,
        quantity=int(quantity),
        price=price,
        total=to_cents(price * int(quantity)),
    )


def _resolve_totals(payload: CreateOrderRequest, lines_total: Decimal):
    submitted = (
        payload.subtotal if payload.subtotal is not None else lines_total,
        payload.shipping or 0,
        payload.tax or 0,
        payload.discount or 0,
        payload.total or 0,
    )
    if not all(in_amount_range(value) for value in submitted):
        return _reject(OrderErrorKind.INVALID_TOTALS, "Order amounts are too large")

    subtotal = to_cents(submitted[0])
    shipping = to_cents(payload.shipping or 0)
    tax = to_cents(payload.tax or 0)
    discount = to_cents(payload.discount or 0)
    expected = subtotal + shipping + tax - discount

    if min(subtotal, shipping, tax, discount) < 0:
        return _reject(OrderErrorKind.INVALID_TOTALS, "Order amounts cannot be negative")

    total = to_cents(payload.total) if payload.total is not None else expected
    if total != expected:
        return _reject(
            OrderErrorKind.INVALID_TOTALS,
            f"Order total {total} does not match subtotal + shipping + tax - discount ({expected})",
        )
    if total < 0:
        return _reject(OrderErrorKind.INVALID_TOTALS, "Order total cannot be negative")
    if not in_amount_range(total):
        return _reject(OrderErrorKind.INVALID_TOTALS, "Order amounts are too large")

    return subtotal, shipping, tax, discount, total


def validate_order_request(
    session: Session,
    payload: CreateOrderRequest,
) -> Union[ValidatedOrderRequest, OrderRejection]:
    # 1. cart
    if not payload.items:
        return _reject(OrderErrorKind.EMPTY_CART, "Your cart is empty")

    # 2. shipping
    shipping = _validate_shipping(payload)
    if isinstance(shipping, OrderRejection):
        return shipping

    # 3. items, against the catalog as it is right now
    lines = []
    for position, item in enumerate(payload.items, start=1):
        line = _validate_line(session, position, item)
        if isinstance(line, OrderRejection):
            return line
        lines.append(line)

    # 4. totals
    totals = _resolve_totals(payload, sum((line.total for line in lines), Decimal("0")))
    if isinstance(totals, OrderRejection):
        return totals
    subtotal, shipping_cost, tax_amount, discount_amount, total = totals

    payment_method = (payload.payment_method or DEFAULT_PAYMENT_METHOD).strip().lower()

    return ValidatedOrderRequest(
        items=lines,
        shipping=shipping,
        payment_method=payment_method or DEFAULT_PAYMENT_METHOD,
        payment_status=map_payment_status(payload.payment_status),
        payment_info=sanitize_payment_info(payload.payment_info),
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total=total,
        notes=payload.notes,
    )
