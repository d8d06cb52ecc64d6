"""
HTTP surface tests. The session registry gets fakeredis persistence and
mocked order / catalog collaborators.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from requests import ConnectionError as RequestsConnectionError

from storefront.api.dependencies import SessionRegistry
from storefront.domain.errors import OrderSubmissionError
from storefront.domain.schemas import Order
from storefront.main import create_app
from storefront.services import order_client as order_client_module
from storefront.services.order_client import OrderApiClient

ITEM = {"id": "rec1", "name": "Premium Headphones", "unit_price": "129.99", "quantity": 1, "category": "Electronics"}


def accepted(draft):
    return Order(**draft.model_dump(), created_at=datetime.now(timezone.utc))


@pytest.fixture
def order_client():
    client = MagicMock()
    client.create_order.side_effect = accepted
    return client


@pytest.fixture
def catalog(pool):
    client = MagicMock()
    client.fetch_products.return_value = pool
    return client


@pytest.fixture
def registry(persistence, order_client, catalog):
    return SessionRegistry(
        persistence=persistence,
        order_client=order_client,
        catalog_client=catalog,
        notification_service=MagicMock(),
    )


@pytest.fixture
def client(registry):
    with TestClient(create_app(registry)) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestCartEndpoints:

    def test_empty_cart(self, client):
        body = client.get("/cart", params={"session_id": "s1"}).json()

        assert body["items"] == []
        assert body["item_count"] == 0
        assert float(body["total"]) == 0
        assert [p["id"] for p in body["recommendations"]] == ["rec1", "rec2", "rec3", "rec4"]

    def test_session_id_required(self, client):
        assert client.get("/cart").status_code == 422

    def test_add_and_merge(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)
        body = client.post("/cart/items", params={"session_id": "s1"}, json={**ITEM, "quantity": 2}).json()

        assert len(body["items"]) == 1
        assert body["item_count"] == 3
        assert "rec1" not in [p["id"] for p in body["recommendations"]]

    def test_invalid_item_rejected(self, client):
        resp = client.post("/cart/items", params={"session_id": "s1"}, json={**ITEM, "quantity": 0})
        assert resp.status_code == 422

    def test_quantity_and_note(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        client.put("/cart/items/rec1/note", params={"session_id": "s1"}, json={"note": "gift"})
        body = client.put("/cart/items/rec1/quantity", params={"session_id": "s1"}, json={"quantity": 4}).json()

        assert body["items"][0]["quantity"] == 4
        assert body["items"][0]["note"] == "gift"

        body = client.put("/cart/items/rec1/quantity", params={"session_id": "s1"}, json={"quantity": 0}).json()
        assert body["items"] == []

    def test_remove_unknown_is_ok(self, client):
        resp = client.delete("/cart/items/missing", params={"session_id": "s1"})
        assert resp.status_code == 200

    def test_save_and_move(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        body = client.post("/cart/items/rec1/save", params={"session_id": "s1"}).json()
        assert body["items"] == []
        assert [i["id"] for i in body["saved_items"]] == ["rec1"]

        body = client.post("/cart/saved/rec1/move", params={"session_id": "s1"}).json()
        assert [i["id"] for i in body["items"]] == ["rec1"]
        assert body["saved_items"] == []

    def test_remove_saved(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)
        client.post("/cart/items/rec1/save", params={"session_id": "s1"})

        body = client.delete("/cart/saved/rec1", params={"session_id": "s1"}).json()

        assert body["saved_items"] == []

    def test_recently_viewed(self, client):
        product = {"id": "rec5", "name": "Phone Case", "price": "19.99", "category": "Accessories"}

        body = client.post("/cart/recently-viewed", params={"session_id": "s1"}, json=product).json()

        assert [p["id"] for p in body] == ["rec5"]

    def test_discount(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json={**ITEM, "unit_price": "200"})

        ok = client.post("/cart/discount", params={"session_id": "s1"}, json={"code": "WELCOME10"}).json()
        bad = client.post("/cart/discount", params={"session_id": "s1"}, json={"code": "NOPE"}).json()

        assert ok["applied"] is True
        assert float(ok["discount_amount"]) == 20
        assert bad["applied"] is False
        assert float(bad["discount_amount"]) == 20

        cleared = client.delete("/cart/discount", params={"session_id": "s1"}).json()
        assert float(cleared["discount_amount"]) == 0

    def test_clear(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        body = client.delete("/cart", params={"session_id": "s1"}).json()

        assert body["items"] == []

    def test_sessions_are_isolated(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        body = client.get("/cart", params={"session_id": "s2"}).json()

        assert body["items"] == []

    def test_catalog_outage_drops_recommendations(self, client, catalog):
        catalog.fetch_products.side_effect = RequestsConnectionError("down")

        resp = client.get("/cart", params={"session_id": "s1"})

        assert resp.status_code == 200
        assert resp.json()["recommendations"] == []

    def test_recommendations_endpoint(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        body = client.get("/cart/recommendations", params={"session_id": "s1"}).json()

        assert len(body) == 4
        assert "rec1" not in [p["id"] for p in body]


class TestCheckout:

    def test_checkout_clears_cart(self, client):
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        resp = client.post("/checkout", params={"session_id": "s1"}, json={"payment_method_id": "card"})

        assert resp.status_code == 201
        order_id = resp.json()["order_id"]
        assert order_id.startswith("ORD-")
        assert client.get("/cart", params={"session_id": "s1"}).json()["items"] == []

        last = client.get("/checkout/last-order", params={"session_id": "s1"}).json()
        assert last["id"] == order_id

    def test_empty_cart_is_400(self, client):
        resp = client.post("/checkout", params={"session_id": "s1"}, json={"payment_method_id": "card"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "cannot complete an empty order"

    def test_backend_failure_is_502_and_keeps_cart(self, client, order_client):
        order_client.create_order.side_effect = OrderSubmissionError("backend down", status_code=503)
        client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        resp = client.post("/checkout", params={"session_id": "s1"}, json={"payment_method_id": "card"})

        assert resp.status_code == 502
        assert len(client.get("/cart", params={"session_id": "s1"}).json()["items"]) == 1

    def test_no_last_order(self, client):
        assert client.get("/checkout/last-order", params={"session_id": "s1"}).status_code == 404

    def test_accepted_order_with_empty_body_clears_cart(self, persistence, catalog, monkeypatch):
        accepted_resp = MagicMock(ok=True, status_code=201)
        accepted_resp.json.return_value = {"data": None}
        monkeypatch.setattr(order_client_module.requests, "post", MagicMock(return_value=accepted_resp))
        registry = SessionRegistry(
            persistence=persistence,
            order_client=OrderApiClient("http://backend"),
            catalog_client=catalog,
            notification_service=MagicMock(),
        )

        with TestClient(create_app(registry)) as client:
            client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)
            resp = client.post("/checkout", params={"session_id": "s1"}, json={"payment_method_id": "card"})

            assert resp.status_code == 201
            assert client.get("/cart", params={"session_id": "s1"}).json()["items"] == []


class TestSessionRegistry:

    def test_catalog_fetched_once_per_ttl(self, registry, catalog):
        for _ in range(3):
            registry.candidate_pool()

        assert catalog.fetch_products.call_count == 1

    def test_zero_ttl_refetches(self, persistence, catalog):
        registry = SessionRegistry(persistence=persistence, catalog_client=catalog, catalog_ttl=0)

        registry.candidate_pool()
        registry.candidate_pool()

        assert catalog.fetch_products.call_count == 2

    def test_outage_is_not_retried_on_every_request(self, registry, catalog):
        catalog.fetch_products.side_effect = RequestsConnectionError("down")

        assert registry.candidate_pool() == []
        assert registry.candidate_pool() == []
        assert catalog.fetch_products.call_count == 1

    def test_malformed_catalog_does_not_fail_mutation(self, client, catalog):
        catalog.fetch_products.side_effect = ValueError("Unexpected catalog payload")

        resp = client.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

        assert resp.status_code == 200
        assert resp.json()["recommendations"] == []
        assert resp.json()["item_count"] == 1

    def test_orders_after_dispose_reopens_session(self, registry):
        cart = registry.cart("s1")
        registry.dispose_all()

        orders = registry.orders("s1")

        assert orders.cart is not cart
        assert orders.cart is registry.cart("s1")


def test_state_reloaded_by_new_app(persistence, order_client, catalog):
    def app_client():
        return TestClient(create_app(SessionRegistry(
            persistence=persistence,
            order_client=order_client,
            catalog_client=catalog,
            notification_service=MagicMock(),
        )))

    first = app_client()
    first.post("/cart/items", params={"session_id": "s1"}, json=ITEM)

    body = app_client().get("/cart", params={"session_id": "s1"}).json()

    assert [i["id"] for i in body["items"]] == ["rec1"]
