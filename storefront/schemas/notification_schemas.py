# storefront/schemas/notification_schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class NoticeItem(BaseModel):
    name: str
    quantity: int
    price: Decimal
    total: Decimal


class NoticeAddress(BaseModel):
    first_name: str
    last_name: str
    address1: str
    address2: str = ""
    city: str
    state: str
    postal_code: str
    country: str = ""


class OrderNotice(BaseModel):
    """
    Detached copy of an order for the notification channels.

    Built while the database session is still open, so background tasks
    never touch ORM instances.
    """

    order_id: int
    order_number: str
    email: str
    customer_name: str
    status: str
    payment_status: str
    payment_method: str
    subtotal: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    currency: str
    items: List[NoticeItem] = []
    shipping_address: Optional[NoticeAddress] = None
    created_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderNotice":
        address = order.shipping_address
        if order.user:
            customer_name = order.user.full_name
        elif address:
            customer_name = f"{address.first_name} {address.last_name}"
        else:
            customer_name = "Customer"

        return cls(
            order_id=order.id,
            order_number=order.order_number,
            email=order.email,
            customer_name=customer_name,
            status=order.status.value,
            payment_status=order.payment_status.value,
            payment_method=order.payment_method,
            subtotal=order.subtotal,
            shipping_cost=order.shipping_cost,
            tax_amount=order.tax_amount,
            discount_amount=order.discount_amount,
            total=order.total,
            currency=order.currency,
            items=[
                NoticeItem(
                    name=item.product.name if item.product else item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                    total=item.total,
                )
                for item in order.items
            ],
            shipping_address=(
                NoticeAddress.model_validate(address, from_attributes=True)
                if address else None
            ),
            created_at=order.created_at,
        )
