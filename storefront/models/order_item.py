from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from decimal import Decimal

if TYPE_CHECKING:
    from storefront.models.order import Order
    from storefront.models.product import Product


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    product_id: str = Field(foreign_key="product.id", index=True)

    quantity: int
    price: Decimal = Field(max_digits=10, decimal_places=2)   # unit price at order time
    total: Decimal = Field(max_digits=10, decimal_places=2)   # price * quantity

    order: Optional["Order"] = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()
