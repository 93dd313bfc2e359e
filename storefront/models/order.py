from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.models.address import Address
from storefront.models.order_item import OrderItem
from storefront.models.order_history import OrderHistory

if TYPE_CHECKING:
    from storefront.models.user import User


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)

    # contact details are copied from checkout, independent of the account
    user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    email: str
    phone: str

    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, index=True)
    payment_method: str = Field(default="cod")
    payment_info: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    subtotal: Decimal = Field(max_digits=10, decimal_places=2)
    shipping_cost: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    tax_amount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    total: Decimal = Field(max_digits=10, decimal_places=2)
    currency: str = Field(default="USD")

    shipping_address_id: Optional[int] = Field(default=None, foreign_key="address.id")
    billing_address_id: Optional[int] = Field(default=None, foreign_key="address.id")
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # relationships
    user: Optional["User"] = Relationship()
    items: List["OrderItem"] = Relationship(back_populates="order")
    history: List["OrderHistory"] = Relationship(back_populates="order")
    shipping_address: Optional["Address"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Order.shipping_address_id]"}
    )
    billing_address: Optional["Address"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Order.billing_address_id]"}
    )
