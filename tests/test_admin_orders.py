from datetime import date, timedelta

from storefront.models.order import OrderStatus, PaymentStatus
from storefront.services.order_status_service import transition_order_status, update_payment_status


def test_list_orders(client, admin_headers, make_product, place_order):
    make_product("P1", stock=20)
    numbers = [place_order().json()["orderNumber"] for _ in range(3)]

    response = client.get("/admin/orders", params={"limit": 2}, headers=admin_headers)

    assert response.status_code == 200
    page = response.json()
    assert page["totalItems"] == 3
    assert page["totalPages"] == 2
    assert page["currentPage"] == 1
    assert [row["orderNumber"] for row in page["results"]] == numbers[::-1][:2]
    assert page["results"][0]["customerName"] == "Jane Tester"

    second = client.get("/admin/orders", params={"limit": 2, "page": 2}, headers=admin_headers).json()
    assert [row["orderNumber"] for row in second["results"]] == [numbers[0]]


def test_filter_by_status_and_payment(session, client, admin_headers, make_product, place_order):
    make_product("P1", stock=20)
    first = place_order().json()
    second = place_order().json()
    transition_order_status(session, first["id"], OrderStatus.CONFIRMED)
    update_payment_status(session, second["id"], PaymentStatus.PAID)

    by_status = client.get("/admin/orders", params={"status": "CONFIRMED"}, headers=admin_headers).json()
    assert [row["id"] for row in by_status["results"]] == [first["id"]]

    by_payment = client.get("/admin/orders", params={"paymentStatus": "PAID"}, headers=admin_headers).json()
    assert [row["id"] for row in by_payment["results"]] == [second["id"]]


def test_search_and_dates(client, admin_headers, product, place_order):
    placed = place_order().json()

    found = client.get("/admin/orders", params={"search": placed["orderNumber"][-4:]}, headers=admin_headers)
    assert found.json()["totalItems"] == 1

    by_name = client.get("/admin/orders", params={"search": "tester"}, headers=admin_headers)
    assert by_name.json()["totalItems"] == 1

    missing = client.get("/admin/orders", params={"search": "nobody-like-this"}, headers=admin_headers)
    assert missing.json()["totalItems"] == 0

    today = date.today()
    tomorrow = today + timedelta(days=1)
    # order timestamps are UTC, so allow for either side of midnight
    around = client.get(
        "/admin/orders",
        params={"dateFrom": (today - timedelta(days=1)).isoformat(), "dateTo": tomorrow.isoformat()},
        headers=admin_headers,
    )
    assert around.json()["totalItems"] == 1

    future = client.get(
        "/admin/orders",
        params={"dateFrom": (tomorrow + timedelta(days=1)).isoformat()},
        headers=admin_headers,
    )
    assert future.json()["totalItems"] == 0


def test_order_stats(session, client, admin_headers, make_product, place_order):
    make_product("P1", stock=20)
    paid = place_order().json()
    cancelled = place_order().json()
    place_order()

    update_payment_status(session, paid["id"], PaymentStatus.PAID)
    transition_order_status(session, paid["id"], OrderStatus.CONFIRMED)
    transition_order_status(session, cancelled["id"], OrderStatus.CANCELLED)

    response = client.get("/admin/orders/stats", headers=admin_headers)

    assert response.status_code == 200
    stats = response.json()
    assert stats["total"] == 3
    assert stats["pending"] == 1
    assert stats["confirmed"] == 1
    assert stats["cancelled"] == 1
    assert stats["delivered"] == 0
    assert stats["totalRevenue"] == 20.0
    assert stats["pendingPayments"] == 2


def test_empty_stats(client, admin_headers):
    stats = client.get("/admin/orders/stats", headers=admin_headers).json()

    assert stats["total"] == 0
    assert stats["totalRevenue"] == 0.0


def test_order_detail(client, admin_headers, product, place_order):
    placed = place_order().json()

    response = client.get(f"/admin/orders/{placed['id']}", headers=admin_headers)

    assert response.status_code == 200
    detail = response.json()
    assert detail["orderNumber"] == placed["orderNumber"]
    assert detail["customer"]["name"] == "Jane Tester"
    assert detail["allowedNextStatuses"] == ["CONFIRMED", "CANCELLED"]
    assert detail["billingAddress"]["id"] == detail["shippingAddress"]["id"]


def test_order_detail_not_found(client, admin_headers):
    response = client.get("/admin/orders/404", headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Order not found", "code": "NOT_FOUND"}


def test_admin_routes_require_admin(client, customer_headers):
    assert client.get("/admin/orders", headers=customer_headers).status_code == 403
    assert client.get("/admin/orders/stats", headers=customer_headers).status_code == 403
    assert client.get("/admin/inventory/low-stock", headers=customer_headers).status_code == 403
    assert client.get("/admin/orders").status_code == 401


def test_low_stock(client, admin_headers, make_product, place_order):
    make_product("P1", stock=12)
    make_product("P2", stock=3)
    make_product("P3", stock=50)
    make_product("OLD", stock=0, is_active=False)

    place_order(items=[{"productId": "P1", "quantity": 4, "price": 10}])

    response = client.get("/admin/inventory/low-stock", headers=admin_headers)
    assert response.status_code == 200
    assert [(p["id"], p["stock"]) for p in response.json()] == [("P2", 3), ("P1", 8)]

    tight = client.get("/admin/inventory/low-stock", params={"threshold": 5}, headers=admin_headers)
    assert [p["id"] for p in tight.json()] == ["P2"]


def test_health_check(client):
    response = client.get("/health/check")

    assert response.status_code == 200
    assert response.json()["database"] == "ok"


def test_page_size_is_clamped(client, admin_headers, make_product, place_order):
    make_product("P1", stock=20)
    place_order()
    place_order()

    huge = client.get("/admin/orders", params={"limit": 500}, headers=admin_headers).json()
    assert huge["limit"] == 100
    assert huge["totalItems"] == 2

    tiny = client.get("/admin/orders", params={"limit": 0, "page": 0}, headers=admin_headers).json()
    assert tiny["limit"] == 1
    assert tiny["currentPage"] == 1
    assert tiny["totalPages"] == 2
    assert len(tiny["results"]) == 1


def test_empty_page(client, admin_headers):
    page = client.get("/admin/orders", params={"page": 3}, headers=admin_headers).json()

    assert page["totalItems"] == 0
    assert page["totalPages"] == 0
    assert page["results"] == []


def test_token_url_points_at_the_account_service(client):
    from storefront.config import settings

    schema = client.get("/openapi.json").json()
    flows = schema["components"]["securitySchemes"]["OAuth2PasswordBearer"]["flows"]

    assert flows["password"]["tokenUrl"] == settings.AUTH_TOKEN_URL
