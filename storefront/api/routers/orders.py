# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.dependencies import SessionRegistry, get_sessions, session_param
from storefront.domain.errors import CheckoutInProgressError, StorefrontError, ValidationError
from storefront.domain.schemas import CheckoutIn, CheckoutOut, Order

router = APIRouter(tags=["orders"])


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    """
    Places an order from the session's cart.
    The cart is only cleared when the order service accepted the order.
    """
    svc = sessions.orders(session_id)
    try:
        order_id = svc.complete_order(payload.payment_method_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CheckoutInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorefrontError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"order_id": order_id}


@router.get("/checkout/last-order", response_model=Order)
def get_last_order(
    session_id: str = Depends(session_param),
    sessions: SessionRegistry = Depends(get_sessions),
):
    order = sessions.orders(session_id).last_order
    if order is None:
        raise HTTPException(status_code=404, detail="No order placed in this session")
    return order
