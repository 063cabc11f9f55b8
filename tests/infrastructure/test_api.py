"""HTTP API tests through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from delifood.domain.model.value_objects import Money
from delifood.infrastructure.api.app import CORRELATION_HEADER, create_app
from tests.fakes import CLOSED_TIME, fixed_clock


@pytest.fixture
def client(container):
    return TestClient(create_app(container))


def _cart(*items, user_id=None):
    body = {"items": [{"productId": pid, "quantity": qty} for pid, qty in items]}
    if user_id is not None:
        body["userId"] = user_id
    return body


class TestPreview:

    def test_priced_quote(self, client):
        resp = client.post("/api/orders/preview", json=_cart((1, 2)))

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["hasError"] is False
        assert body["totals"] == {"subtotal": 200.0, "deliveryFee": 40.0, "total": 240.0}
        assert body["etaMinutes"] == 30
        assert body["horario"]["dentroHorario"] is True
        assert body["cart"][0]["name"] == "Tacos al pastor"

    def test_bad_lines_are_reported_not_raised(self, client):
        body = client.post("/api/orders/preview", json=_cart((3, 1), (5, 1))).json()

        assert body["hasError"] is True
        assert [line["reason"] for line in body["cart"]] == [
            "INSUFFICIENT_STOCK",
            "PRODUCT_UNAVAILABLE",
        ]
        assert body["cart"][0]["available"] == 0

    def test_empty_cart_is_a_caller_error(self, client):
        resp = client.post("/api/orders/preview", json=_cart())
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert resp.json()["message"] == "Cart is empty"

    def test_malformed_body(self, client):
        resp = client.post("/api/orders/preview", json={"items": [{"productId": "abc"}]})
        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Malformed request")


class TestConfirm:

    def test_confirm_then_show(self, client):
        resp = client.post("/api/orders/confirm", json=_cart((1, 2), user_id=1))

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["totals"]["total"] == 240.0
        assert body["message"] == f"Your order #{body['orderId']} has been confirmed. Estimated time: 30 min."

        shown = client.get(f"/api/orders/{body['orderId']}").json()
        assert shown["order"]["status"] == "pending"
        assert shown["order"]["lines"][0]["unitPrice"] == 100.0

    def test_missing_user(self, client):
        resp = client.post("/api/orders/confirm", json=_cart((1, 1)))
        assert resp.status_code == 400
        assert resp.json()["code"] == "MISSING_USER"

    def test_empty_cart(self, client):
        resp = client.post("/api/orders/confirm", json=_cart(user_id=1))
        assert resp.status_code == 400
        assert resp.json()["code"] == "EMPTY_CART"

    def test_out_of_stock_is_a_conflict(self, client):
        resp = client.post("/api/orders/confirm", json=_cart((1, 6), user_id=1))

        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert body["cart"][0]["available"] == 5

    def test_outside_service_hours(self, container):
        container.clock = fixed_clock(CLOSED_TIME)
        client = TestClient(create_app(container))

        resp = client.post("/api/orders/confirm", json=_cart((1, 1), user_id=1))

        assert resp.status_code == 409
        assert "outside service hours" in resp.json()["message"]


class TestValidateCart:

    def test_valid(self, client):
        resp = client.post("/api/products/validate-cart", json=_cart((1, 1)))
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Cart is valid"}

    def test_problems(self, client):
        resp = client.post("/api/products/validate-cart", json=_cart((3, 2)))
        assert resp.status_code == 400
        problem = resp.json()["problems"][0]
        assert problem == {
            "productId": 3,
            "reason": "INSUFFICIENT_STOCK",
            "requested": 2,
            "name": "Agua de horchata",
            "available": 0,
        }


class TestTracking:

    def test_status_flow_and_listings(self, client):
        order_id = client.post("/api/orders/confirm", json=_cart((4, 1), user_id=2)).json()["orderId"]

        resp = client.patch(f"/api/orders/{order_id}/status", json={"status": "preparing"})
        assert resp.status_code == 200
        assert resp.json()["order"]["status"] == "preparing"

        delivery = client.get("/api/orders/for-delivery").json()["orders"]
        assert [o["id"] for o in delivery] == [order_id]
        assert delivery[0]["clientName"] == "Luis Pérez"
        assert delivery[0]["restaurantId"] == 11

        assert client.get("/api/orders/by-restaurant/11").json()["orders"][0]["id"] == order_id
        assert client.get("/api/orders/by-restaurant/10").json()["orders"] == []

    def test_invalid_transition(self, client):
        order_id = client.post("/api/orders/confirm", json=_cart((1, 1), user_id=1)).json()["orderId"]
        resp = client.patch(f"/api/orders/{order_id}/status", json={"status": "delivered"})
        assert resp.status_code == 400
        assert "Cannot move order" in resp.json()["message"]

    def test_unknown_order(self, client):
        resp = client.get("/api/orders/999")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Order #999 not found"


class TestPlumbing:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "service": "orders"}

    def test_correlation_id_echoed(self, client):
        resp = client.get("/health", headers={CORRELATION_HEADER: "abc123"})
        assert resp.headers[CORRELATION_HEADER] == "abc123"

    def test_correlation_id_generated(self, client):
        assert client.get("/health").headers[CORRELATION_HEADER]


class TestMisconfiguredCatalog:

    def test_foreign_currency_row_is_a_server_error(self, container, client):
        catalog = container.catalog()
        product = catalog.get_by_id(1)
        product.price = Money.of("100", "USD")
        catalog.save(product)

        preview = client.post("/api/orders/preview", json=_cart((1, 1)))
        assert preview.status_code == 500

        confirm = client.post("/api/orders/confirm", json=_cart((1, 1), user_id=1))
        assert confirm.status_code == 500
        assert confirm.json()["code"] == "PERSISTENCE_FAILED"
