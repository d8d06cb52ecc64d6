# storefront/mock_backend/main.py
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import FastAPI, HTTPException

from storefront.domain.schemas import OrderDraft

app = FastAPI(title="Storefront backend (dev mock)")


def _product(id, name, price, category, image_url):
    return {"id": id, "name": name, "price": Decimal(price), "category": category, "image_url": image_url}


PRODUCTS = {
    p["id"]: p
    for p in [
        _product("rec1", "Premium Headphones", "129.99", "Electronics", "https://images.unsplash.com/photo-1505740420928-5e560c06d30e"),
        _product("rec2", "Smart Watch", "199.99", "Electronics", "https://images.unsplash.com/photo-1523275335684-37898b6baf30"),
        _product("rec3", "Wireless Charger", "29.99", "Electronics", "https://images.unsplash.com/photo-1583394838336-acd977736f90"),
        _product("rec4", "Bluetooth Speaker", "79.99", "Electronics", "https://images.unsplash.com/photo-1608043152269-423dbba4e7e1"),
        _product("rec5", "Phone Case", "19.99", "Accessories", "https://images.unsplash.com/photo-1541447271487-09612b3f49f7"),
        _product("rec6", "Laptop Backpack", "59.99", "Accessories", "https://images.unsplash.com/photo-1553062407-98eeb64c6a62"),
        _product("rec7", "Wireless Mouse", "24.99", "Electronics", "https://images.unsplash.com/photo-1605773527852-c546a8584ea3"),
        _product("rec8", "USB-C Hub", "39.99", "Electronics", "https://images.unsplash.com/photo-1625723044792-44de16ccb4e9"),
    ]
}

ORDERS: dict[str, dict] = {}


@app.get("/products")
def list_products():
    return {"data": list(PRODUCTS.values())}


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"data": product}


@app.post("/orders", status_code=201)
def create_order(draft: OrderDraft):
    if draft.id in ORDERS:
        raise HTTPException(status_code=409, detail=f"Order {draft.id} already exists")

    order = {**draft.model_dump(), "created_at": datetime.now(timezone.utc)}
    ORDERS[draft.id] = order
    return {"data": order}


@app.get("/orders/{order_id}")
def get_order(order_id: str):
    order = ORDERS.get(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"data": order}
