from enum import Enum
from typing import List, Optional

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

from storefront.config import settings


GENERIC_ERROR_MESSAGE = (
    "Something went wrong while processing your request. "
    "Please contact support if the problem persists."
)


class OrderErrorKind(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"

    # client input
    EMPTY_CART = "EMPTY_CART"
    INCOMPLETE_SHIPPING = "INCOMPLETE_SHIPPING"
    MISSING_PRODUCT_ID = "MISSING_PRODUCT_ID"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_PRICE = "INVALID_PRICE"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_TOTALS = "INVALID_TOTALS"
    INVALID_REQUEST = "INVALID_REQUEST"

    # lifecycle
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # persistence
    DUPLICATE_ORDER_NUMBER = "DUPLICATE_ORDER_NUMBER"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


HTTP_STATUS = {
    OrderErrorKind.UNAUTHORIZED: 401,
    OrderErrorKind.EMPTY_CART: 400,
    OrderErrorKind.INCOMPLETE_SHIPPING: 400,
    OrderErrorKind.MISSING_PRODUCT_ID: 400,
    OrderErrorKind.INVALID_QUANTITY: 400,
    OrderErrorKind.INVALID_PRICE: 400,
    OrderErrorKind.PRODUCT_NOT_FOUND: 400,
    OrderErrorKind.INSUFFICIENT_STOCK: 400,
    OrderErrorKind.INVALID_TOTALS: 400,
    OrderErrorKind.INVALID_REQUEST: 400,
    OrderErrorKind.NOT_FOUND: 404,
    OrderErrorKind.INVALID_TRANSITION: 400,
    OrderErrorKind.DUPLICATE_ORDER_NUMBER: 409,
    OrderErrorKind.SERVICE_UNAVAILABLE: 503,
    OrderErrorKind.INTERNAL_ERROR: 500,
}

# HTTP status -> error code used when a plain HTTPException reaches the handler
STATUS_CODES = {
    400: OrderErrorKind.INVALID_REQUEST,
    401: OrderErrorKind.UNAUTHORIZED,
    404: OrderErrorKind.NOT_FOUND,
    409: OrderErrorKind.DUPLICATE_ORDER_NUMBER,
    503: OrderErrorKind.SERVICE_UNAVAILABLE,
}


class OrderFailure(BaseModel):
    """Expected failure of an order operation, returned instead of raised."""

    kind: OrderErrorKind
    message: str
    missing_fields: List[str] = []

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]


class OrderRejection(OrderFailure):
    """Failure produced by intake validation, before anything is written."""


class OrderServiceError(Exception):
    """
    Raised inside a database transaction to abort it.

    Never leaves the service layer: the orchestrator converts it into an
    OrderFailure after rolling back.
    """

    kind = OrderErrorKind.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_failure(self) -> OrderFailure:
        return OrderFailure(kind=self.kind, message=self.message)


class InsufficientStockError(OrderServiceError):
    kind = OrderErrorKind.INSUFFICIENT_STOCK


class ProductUnavailableError(OrderServiceError):
    kind = OrderErrorKind.PRODUCT_NOT_FOUND


def error_payload(message: str, code: Optional[str] = None) -> dict:
    payload = {"error": message}
    if code:
        payload["code"] = code
    return payload


def internal_error_message(exc: Exception) -> str:
    # internal detail is only exposed while developing
    if settings.is_development:
        return f"{type(exc).__name__}: {exc}"
    return GENERIC_ERROR_MESSAGE


def persistence_failure(exc: SQLAlchemyError) -> OrderFailure:
    """Classify a database error raised while writing an order."""
    if isinstance(exc, IntegrityError):
        detail = str(exc.orig).lower()
        pgcode = getattr(exc.orig, "pgcode", None)

        if pgcode == "23505" or "order_number" in detail or "unique" in detail:
            return OrderFailure(
                kind=OrderErrorKind.DUPLICATE_ORDER_NUMBER,
                message="Order number already exists. Please try again.",
            )
        if pgcode == "23503" or "foreign key" in detail:
            return OrderFailure(
                kind=OrderErrorKind.PRODUCT_NOT_FOUND,
                message="A product in your cart is no longer available",
            )

    if isinstance(exc, (OperationalError, DisconnectionError, PoolTimeoutError)):
        return OrderFailure(
            kind=OrderErrorKind.SERVICE_UNAVAILABLE,
            message="The store is temporarily unavailable. Please try again shortly.",
        )

    return OrderFailure(
        kind=OrderErrorKind.INTERNAL_ERROR,
        message=internal_error_message(exc),
    )


class OrderHTTPException(HTTPException):
    """HTTPException that keeps the error kind of the failure it came from."""

    def __init__(self, failure: OrderFailure, headers: Optional[dict] = None):
        if failure.kind == OrderErrorKind.UNAUTHORIZED and headers is None:
            headers = {"WWW-Authenticate": "Bearer"}
        super().__init__(status_code=failure.status_code, detail=failure.message, headers=headers)
        self.code = failure.kind.value
        self.missing_fields = failure.missing_fields
