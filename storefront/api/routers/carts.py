# storefront/api/routers/carts.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.dependencies import SessionRegistry, get_sessions, session_param
from storefront.domain.schemas import (
    CartOut,
    DiscountIn,
    DiscountOut,
    LineItem,
    NoteIn,
    ProductRef,
    QuantityIn,
)

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_out(sessions: SessionRegistry, session_id: str):
    return sessions.cart(session_id).get_cart(sessions.candidate_pool())


@router.get("", response_model=CartOut)
def get_cart(
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    return _cart_out(sessions, session_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: LineItem,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).add_item(payload)
    return _cart_out(sessions, session_id)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: str,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).remove_item(item_id)
    return _cart_out(sessions, session_id)


@router.put("/items/{item_id}/quantity", response_model=CartOut)
def update_quantity(
    item_id: str,
    payload: QuantityIn,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).update_quantity(item_id, payload.quantity)
    return _cart_out(sessions, session_id)


@router.put("/items/{item_id}/note", response_model=CartOut)
def add_note(
    item_id: str,
    payload: NoteIn,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).add_note(item_id, payload.note)
    return _cart_out(sessions, session_id)


@router.delete("", response_model=CartOut)
def clear_cart(
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).clear_cart()
    return _cart_out(sessions, session_id)


@router.post("/items/{item_id}/save", response_model=CartOut)
def save_for_later(
    item_id: str,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).save_for_later(item_id)
    return _cart_out(sessions, session_id)


@router.post("/saved/{item_id}/move", response_model=CartOut)
def move_to_cart(
    item_id: str,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).move_to_cart(item_id)
    return _cart_out(sessions, session_id)


@router.delete("/saved/{item_id}", response_model=CartOut)
def remove_saved_item(
    item_id: str,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    sessions.cart(session_id).remove_saved_item(item_id)
    return _cart_out(sessions, session_id)


@router.post("/recently-viewed", response_model=List[ProductRef])
def add_to_recently_viewed(
    payload: ProductRef,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    cart = sessions.cart(session_id)
    cart.add_to_recently_viewed(payload)
    return cart.recently_viewed


@router.post("/discount", response_model=DiscountOut)
def apply_discount(
    payload: DiscountIn,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    #nieznany kod to normalny wynik, nie blad HTTP
    cart = sessions.cart(session_id)
    applied = cart.apply_discount(payload.code)
    return {"applied": applied, "discount_amount": cart.discount_amount}


@router.delete("/discount", response_model=DiscountOut)
def clear_discount(
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    cart = sessions.cart(session_id)
    cart.clear_discount()
    return {"applied": False, "discount_amount": cart.discount_amount}


@router.get("/recommendations", response_model=List[ProductRef])
def get_recommendations(
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    return sessions.cart(session_id).recommendations(sessions.candidate_pool())
