from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import uuid4


class Product(SQLModel, table=True):
    # Catalog rows are owned by the catalog screens; orders only read them
    # and decrement stock.
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    sku: Optional[str] = Field(default=None, index=True)
    price: Decimal = Field(max_digits=10, decimal_places=2)
    stock: int = Field(default=0)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
