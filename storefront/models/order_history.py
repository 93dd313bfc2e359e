from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from storefront.models.order import Order


class OrderHistory(SQLModel, table=True):
    """Append-only status timeline of an order."""

    __tablename__ = "order_history"
    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="order.id", index=True)
    status: str = Field(index=True)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    order: Optional["Order"] = Relationship(back_populates="history")
