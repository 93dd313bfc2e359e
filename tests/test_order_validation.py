from decimal import Decimal

import pytest

from storefront.errors import OrderErrorKind, OrderRejection
from storefront.models.order import PaymentStatus
from storefront.models.product import Product
from storefront.schemas.order_schemas import CreateOrderRequest, ValidatedOrderRequest
from storefront.services.order_validation import (
    map_payment_status,
    sanitize_payment_info,
    validate_order_request,
)

from factories import SHIPPING_INFO, order_payload


def validate(session, **kwargs):
    return validate_order_request(session, CreateOrderRequest.model_validate(order_payload(**kwargs)))


def assert_rejected(result, kind):
    assert isinstance(result, OrderRejection)
    assert result.kind == kind
    assert result.status_code == 400


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("completed", PaymentStatus.PAID),
        ("paid", PaymentStatus.PAID),
        ("PAID", PaymentStatus.PAID),
        (" Completed ", PaymentStatus.PAID),
        ("failed", PaymentStatus.FAILED),
        ("refunded", PaymentStatus.REFUNDED),
        ("partially_refunded", PaymentStatus.PARTIALLY_REFUNDED),
        ("pending", PaymentStatus.PENDING),
        ("something-else", PaymentStatus.PENDING),
        ("", PaymentStatus.PENDING),
        (None, PaymentStatus.PENDING),
    ],
)
def test_map_payment_status(raw, expected):
    assert map_payment_status(raw) == expected


def test_valid_request_is_normalized(session, product):
    result = validate(session, paymentStatus="completed")

    assert isinstance(result, ValidatedOrderRequest)
    assert result.payment_status == PaymentStatus.PAID
    assert result.payment_method == "cod"
    assert len(result.items) == 1

    line = result.items[0]
    assert line.product_id == "P1"
    assert line.quantity == 2
    assert line.total == Decimal("20.00")

    assert result.subtotal == Decimal("20.00")
    assert result.shipping_cost == Decimal("0.00")
    assert result.total == Decimal("20.00")
    assert result.shipping.city == "Springfield"


def test_snake_case_keys_are_accepted(session, product):
    payload = {
        "items": [{"product_id": "P1", "quantity": 1, "price": "10.00"}],
        "shipping_info": {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@example.com",
            "phone": "555",
            "address1": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "postal_code": "62701",
        },
    }
    result = validate_order_request(session, CreateOrderRequest.model_validate(payload))

    assert isinstance(result, ValidatedOrderRequest)
    assert result.shipping.postal_code == "62701"


def test_empty_cart(session):
    assert_rejected(validate(session, items=[]), OrderErrorKind.EMPTY_CART)


def test_missing_items_key(session):
    payload = order_payload()
    del payload["items"]
    result = validate_order_request(session, CreateOrderRequest.model_validate(payload))
    assert_rejected(result, OrderErrorKind.EMPTY_CART)


def test_missing_city_is_named(session, product):
    shipping = dict(SHIPPING_INFO)
    del shipping["city"]

    result = validate(session, shippingInfo=shipping)

    assert_rejected(result, OrderErrorKind.INCOMPLETE_SHIPPING)
    assert "city" in result.message
    assert result.missing_fields == ["city"]


def test_all_missing_shipping_fields_are_listed(session, product):
    shipping = dict(SHIPPING_INFO, city="  ", postalCode="")
    del shipping["phone"]

    result = validate(session, shippingInfo=shipping)

    assert_rejected(result, OrderErrorKind.INCOMPLETE_SHIPPING)
    assert result.missing_fields == ["phone", "city", "postalCode"]
    assert result.message == "Missing required shipping information: phone, city, postalCode"


def test_missing_shipping_block(session, product):
    payload = order_payload()
    del payload["shippingInfo"]
    result = validate_order_request(session, CreateOrderRequest.model_validate(payload))

    assert_rejected(result, OrderErrorKind.INCOMPLETE_SHIPPING)
    assert len(result.missing_fields) == 8


def test_missing_product_id(session, product):
    result = validate(session, items=[{"quantity": 1, "price": 10}])

    assert_rejected(result, OrderErrorKind.MISSING_PRODUCT_ID)
    assert result.message == "Item 1 is missing a product id"


@pytest.mark.parametrize("quantity", [0, -1, 1.5, None])
def test_invalid_quantity(session, product, quantity):
    result = validate(session, items=[{"productId": "P1", "quantity": quantity, "price": 10}])

    assert_rejected(result, OrderErrorKind.INVALID_QUANTITY)
    assert result.message == "Invalid quantity for product P1"


@pytest.mark.parametrize("price", [0, -5, None])
def test_invalid_price(session, product, price):
    result = validate(session, items=[{"productId": "P1", "quantity": 1, "price": price}])
    assert_rejected(result, OrderErrorKind.INVALID_PRICE)


def test_unknown_product(session, product):
    result = validate(session, items=[{"productId": "NOPE", "quantity": 1, "price": 10}])

    assert_rejected(result, OrderErrorKind.PRODUCT_NOT_FOUND)
    assert result.message == "Product NOPE not found"


def test_inactive_product_is_not_orderable(session, make_product):
    make_product("OLD", is_active=False)
    result = validate(session, items=[{"productId": "OLD", "quantity": 1, "price": 10}])
    assert_rejected(result, OrderErrorKind.PRODUCT_NOT_FOUND)


def test_insufficient_stock_message(session, product):
    result = validate(session, items=[{"productId": "P1", "quantity": 6, "price": 10}])

    assert_rejected(result, OrderErrorKind.INSUFFICIENT_STOCK)
    assert result.message == "Insufficient stock for P1. Only 5 available."


def test_first_failing_item_wins(session, product):
    result = validate(
        session,
        items=[
            {"productId": "P1", "quantity": 1, "price": 10},
            {"productId": "P1", "quantity": 0, "price": 10},
            {"quantity": 1, "price": 10},
        ],
    )
    assert_rejected(result, OrderErrorKind.INVALID_QUANTITY)


def test_totals_must_add_up(session, product):
    result = validate(session, subtotal=20, shipping=5, tax=1, discount=2, total=30)
    assert_rejected(result, OrderErrorKind.INVALID_TOTALS)


def test_explicit_totals_are_kept(session, product):
    result = validate(session, subtotal=20, shipping=5, tax=1.5, discount=2, total=24.5)

    assert isinstance(result, ValidatedOrderRequest)
    assert result.shipping_cost == Decimal("5.00")
    assert result.tax_amount == Decimal("1.50")
    assert result.discount_amount == Decimal("2.00")
    assert result.total == Decimal("24.50")


def test_negative_amounts_are_rejected(session, product):
    result = validate(session, shipping=-5)
    assert_rejected(result, OrderErrorKind.INVALID_TOTALS)


def test_rejection_is_repeatable_and_writes_nothing(session, product):
    first = validate(session, items=[{"productId": "P1", "quantity": 9, "price": 10}])
    second = validate(session, items=[{"productId": "P1", "quantity": 9, "price": 10}])

    assert first == second
    session.expire_all()
    assert session.get(Product, "P1").stock == 5


def test_sanitize_payment_info_keeps_card_summary_only():
    info = {
        "cardNumber": "4242 4242 4242 4242",
        "cardholderName": "Jane Doe",
        "cvv": "123",
        "expiryDate": "12/30",
        "brand": "visa",
    }

    assert sanitize_payment_info(info) == {
        "cardholder_name": "Jane Doe",
        "brand": "visa",
        "last4": "4242",
    }


def test_sanitize_payment_info_empty():
    assert sanitize_payment_info(None) is None
    assert sanitize_payment_info({"cvv": "123"}) is None


@pytest.mark.parametrize("price", [1e25, 100000000])
def test_price_out_of_range(session, product, price):
    result = validate(session, items=[{"productId": "P1", "quantity": 1, "price": price}])
    assert_rejected(result, OrderErrorKind.INVALID_PRICE)


def test_line_total_out_of_range(session, product):
    result = validate(session, items=[{"productId": "P1", "quantity": 2, "price": 99999999}])

    assert_rejected(result, OrderErrorKind.INVALID_TOTALS)
    assert result.message == "Line total for product P1 is too large"


@pytest.mark.parametrize(
    "amounts",
    [
        {"subtotal": 1e30, "total": 1e30},
        {"shipping": 100000000},
        {"tax": 1e20},
        {"total": 1e30},
        {"subtotal": 99999999, "shipping": 99999999},
    ],
)
def test_order_amounts_out_of_range(session, product, amounts):
    result = validate(session, **amounts)
    assert_rejected(result, OrderErrorKind.INVALID_TOTALS)


def test_largest_storable_total_is_accepted(session, make_product):
    make_product("BIG", price="99999999.99", stock=1)
    result = validate(session, items=[{"productId": "BIG", "quantity": 1, "price": "99999999.99"}])

    assert isinstance(result, ValidatedOrderRequest)
    assert result.total == Decimal("99999999.99")
