"""
Shared fixtures for the storefront test-suite.

Redis is replaced with fakeredis and celery runs tasks eagerly, so no broker
or store has to be running.
"""

from decimal import Decimal

import fakeredis
import pytest

from storefront.celery_worker import celery_app
from storefront.domain.schemas import LineItem, ProductRef
from storefront.repos.cart_storage_repo import CartStorageRepo
from storefront.services.cart_service import CartService
from storefront.services.persistence_service import PersistenceAdapter


@pytest.fixture(autouse=True)
def eager_celery():
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = False
    yield


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def storage(fake_redis):
    return CartStorageRepo(client=fake_redis, prefix="test")


@pytest.fixture
def persistence(storage):
    adapter = PersistenceAdapter(storage=storage, background=False)
    yield adapter
    adapter.flush(timeout=5)


@pytest.fixture
def cart(persistence):
    return CartService("session-1", persistence=persistence).init()


@pytest.fixture
def memory_cart():
    """Cart without any persistence behind it"""
    return CartService("memory").init()


def make_item(item_id="p1", price="10", quantity=1, category=None, name=None):
    return LineItem(
        id=item_id,
        name=name or f"Product {item_id}",
        unit_price=Decimal(price),
        quantity=quantity,
        category=category,
    )


def make_product(product_id, price="10", category="Electronics", name=None):
    return ProductRef(
        id=product_id,
        name=name or f"Product {product_id}",
        price=Decimal(price),
        category=category,
    )


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def pool():
    """The eight-product candidate pool served by the mock backend"""
    return [
        make_product("rec1", "129.99", "Electronics", "Premium Headphones"),
        make_product("rec2", "199.99", "Electronics", "Smart Watch"),
        make_product("rec3", "29.99", "Electronics", "Wireless Charger"),
        make_product("rec4", "79.99", "Electronics", "Bluetooth Speaker"),
        make_product("rec5", "19.99", "Accessories", "Phone Case"),
        make_product("rec6", "59.99", "Accessories", "Laptop Backpack"),
        make_product("rec7", "24.99", "Electronics", "Wireless Mouse"),
        make_product("rec8", "39.99", "Electronics", "USB-C Hub"),
    ]
