# storefront/services/inventory_service.py
from datetime import datetime
from typing import Iterable, List
import logging

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.errors import InsufficientStockError, ProductUnavailableError
from storefront.models.product import Product
from storefront.schemas.order_schemas import ValidatedLine

logger = logging.getLogger(__name__)


def reduce_inventory(session: Session, lines: Iterable[ValidatedLine]):
    """
    Decrement stock for every order line.

    Must run inside the order transaction. Each product row is locked, the
    stock re-checked, and the decrement is guarded by `stock >= quantity`
    so two checkouts racing for the last units cannot both succeed.
    Raises, leaving the rollback to the caller.
    """
    for line in lines:
        product = session.exec(
            select(Product)
            .where(Product.id == line.product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

        if not product or not product.is_active:
            raise ProductUnavailableError(
                f"Product {line.product_id} is no longer available"
            )

        if product.stock < line.quantity:
            raise InsufficientStockError(
                f"Insufficient stock for {product.name}. Only {product.stock} available."
            )

        result = session.exec(
            update(Product)
            .where(Product.id == line.product_id)
            .where(Product.stock >= line.quantity)
            .values(stock=Product.stock - line.quantity, updated_at=datetime.utcnow())
        )

        if result.rowcount != 1:
            session.refresh(product)
            raise InsufficientStockError(
                f"Insufficient stock for {product.name}. Only {product.stock} available."
            )

        logger.info(f"Reserved {line.quantity} x {product.name} ({product.id})")


def low_stock_products(session: Session, threshold: int) -> List[Product]:
    return session.exec(
        select(Product)
        .where(Product.is_active == True)  # noqa: E712
        .where(Product.stock <= threshold)
        .order_by(Product.stock.asc())
    ).all()
