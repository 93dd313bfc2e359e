from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.config import settings
from storefront.database import get_session
from storefront.models.user import User
from storefront.schemas.order_schemas import LowStockProduct
from storefront.services.inventory_service import low_stock_products
from storefront.utils.token import get_current_admin

router = APIRouter()


@router.get("/low-stock", response_model=List[LowStockProduct])
def list_low_stock(
    threshold: Optional[int] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    limit = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    return [LowStockProduct.model_validate(p) for p in low_stock_products(session, limit)]
