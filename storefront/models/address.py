from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Address(SQLModel, table=True):
    """
    Address snapshot captured when an order is placed.

    Rows are inserted once per order and never updated, so later address
    book edits cannot change what a placed order shipped to.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="user.id")
    type: str = Field(default="SHIPPING")

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

    created_at: datetime = Field(default_factory=datetime.utcnow)
