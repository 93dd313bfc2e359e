# storefront/schemas/order_schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from storefront.models.order import OrderStatus, PaymentStatus

# Money is kept as Decimal internally and rendered as a JSON number
Money = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case keys, renders camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------- REQUEST ----------

class OrderItemIn(CamelModel):
    product_id: Optional[Union[str, int]] = None
    quantity: Optional[float] = None
    price: Optional[Decimal] = None


class ShippingInfo(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class CreateOrderRequest(CamelModel):
    items: Optional[List[OrderItemIn]] = None
    shipping_info: Optional[ShippingInfo] = None

    subtotal: Optional[Decimal] = None
    shipping: Optional[Decimal] = None
    tax: Optional[Decimal] = None
    discount: Optional[Decimal] = None
    total: Optional[Decimal] = None

    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    payment_info: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None


class StatusUpdateRequest(CamelModel):
    status: OrderStatus
    notes: Optional[str] = None


class PaymentStatusUpdateRequest(CamelModel):
    payment_status: PaymentStatus


class BulkStatusUpdateRequest(CamelModel):
    order_ids: List[int]
    status: OrderStatus
    notes: Optional[str] = None


# ---------- VALIDATED (internal) ----------

class ValidatedLine(BaseModel):
    product_id: str
    quantity: int
    price: Decimal
    total: Decimal


class ValidatedShipping(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    company: str = ""
    address1: str
    address2: str = ""
    city: str
    state: str
    postal_code: str
    country: str = ""


class ValidatedOrderRequest(BaseModel):
    items: List[ValidatedLine]
    shipping: ValidatedShipping

    payment_method: str
    payment_status: PaymentStatus
    payment_info: Optional[Dict[str, Any]] = None

    subtotal: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    notes: Optional[str] = None


# ---------- RESPONSE ----------

class PlacedOrder(CamelModel):
    id: int
    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    total: Money
    message: str


class OrderItemOut(CamelModel):
    id: int
    product_id: str
    product_name: Optional[str] = None
    quantity: int
    price: Money
    total: Money


class AddressOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    company: str = ""
    address1: str
    address2: str = ""
    city: str
    state: str
    postal_code: str
    country: str = ""
    phone: Optional[str] = None


class OrderHistoryOut(CamelModel):
    id: int
    status: str
    notes: Optional[str] = None
    created_at: datetime


class OrderOut(CamelModel):
    id: int
    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: str
    email: str
    phone: str

    subtotal: Money
    shipping_cost: Money
    tax_amount: Money
    discount_amount: Money
    total: Money
    currency: str

    created_at: datetime
    updated_at: datetime

    items: List[OrderItemOut] = []
    shipping_address: Optional[AddressOut] = None
    billing_address: Optional[AddressOut] = None
    history: List[OrderHistoryOut] = []


class CustomerOut(CamelModel):
    id: int
    name: str
    email: str


class AdminOrderDetail(OrderOut):
    customer: Optional[CustomerOut] = None
    allowed_next_statuses: List[OrderStatus] = []


class AdminOrderRow(CamelModel):
    id: int
    order_number: str
    customer_name: Optional[str] = None
    email: str
    status: OrderStatus
    payment_status: PaymentStatus
    total: Money
    created_at: datetime


class AdminOrderPage(CamelModel):
    total_items: int
    total_pages: int
    current_page: int
    limit: int
    results: List[AdminOrderRow]


class StatusTransitionOut(CamelModel):
    id: int
    order_number: str
    previous_status: OrderStatus
    status: OrderStatus
    changed: bool
    message: str


class PaymentStatusOut(CamelModel):
    id: int
    order_number: str
    payment_status: PaymentStatus
    message: str


class BulkStatusResult(CamelModel):
    order_id: int
    success: bool
    status: Optional[OrderStatus] = None
    error: Optional[str] = None


class OrderStats(CamelModel):
    total: int
    pending: int
    confirmed: int
    processing: int
    shipped: int
    delivered: int
    cancelled: int
    refunded: int
    total_revenue: Money
    pending_payments: int


class LowStockProduct(CamelModel):
    id: str
    name: str
    sku: Optional[str] = None
    stock: int
