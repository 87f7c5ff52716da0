"""
Order management API
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends
from typing import List, Optional

from gamezone.api.deps import get_gateway
from gamezone.core.constants import ORDERS, ORDER_ITEMS, TRANSACTIONS
from gamezone.gateway import SqlAlchemyGateway
from gamezone.schemas.order import (
    OrderResponse, OrderDetailResponse, OrderItemResponse, SessionResponse,
    CafeOrderRequest, CafeItemsRequest, CafeOrderResponse, UpdateItemRequest,
    ReactivateRequest, ExtendTimeRequest, PaymentRequest, RefundRequest,
)
from gamezone.schemas.transaction import TransactionResponse
from gamezone.services.order_composer import OrderComposer, get_order
from gamezone.services.session_engine import SessionEngine

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=List[OrderResponse])
def get_orders(
    status: Optional[str] = None,
    order_type: Optional[str] = None,
    room_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    gateway: SqlAlchemyGateway = Depends(get_gateway)
):
    """List orders, newest first"""
    filters = {}
    if status:
        filters["status"] = status
    if order_type:
        filters["order_type"] = order_type
    if room_id is not None:
        filters["room_id"] = room_id
    orders = list(reversed(gateway.list(ORDERS, filters)))
    return orders[skip:skip + limit]


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order_detail(order_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Order with its lines and transactions"""
    order = get_order(gateway, order_id)
    return dict(
        order,
        items=gateway.list(ORDER_ITEMS, {"order_id": order_id}),
        transactions=gateway.list(TRANSACTIONS, {"order_id": order_id}),
    )


@router.post("/cafe", response_model=CafeOrderResponse)
def create_cafe_order(request: CafeOrderRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Counter sale (paid now, or left open as a tab)"""
    result = OrderComposer(gateway).create_cafe_order(
        request.customer_name, request.items, request.payment_method, request.pay_now
    )
    return asdict(result)


@router.post("/{order_id}/cafe-items", response_model=CafeOrderResponse)
def add_cafe_items(order_id: int, request: CafeItemsRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Add cafe products to an open order"""
    return asdict(OrderComposer(gateway).add_cafe_items(request.items, order_id=order_id))


@router.put("/{order_id}/items/{item_id}", response_model=OrderItemResponse)
def update_item(order_id: int, item_id: int, request: UpdateItemRequest,
                gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Change a cafe line's quantity"""
    return OrderComposer(gateway).update_item_quantity(order_id, item_id, request.quantity)


@router.delete("/{order_id}/items/{item_id}")
def remove_item(order_id: int, item_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Remove a cafe line"""
    total = OrderComposer(gateway).remove_item(order_id, item_id)
    return {"message": "Item removed", "total_amount": total}


@router.post("/{order_id}/reactivate", response_model=SessionResponse)
def reactivate(order_id: int, request: ReactivateRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Resume a paused order in its room"""
    return asdict(SessionEngine(gateway).reactivate_session(order_id, request.duration_hours))


@router.post("/{order_id}/extend-time", response_model=SessionResponse)
def extend_time(order_id: int, request: ExtendTimeRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Add or remove booked time"""
    return asdict(SessionEngine(gateway).extend_time(order_id, request.add_hours))


@router.post("/{order_id}/complete-payment", response_model=SessionResponse)
def complete_payment(order_id: int, request: PaymentRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Pay the order's current total"""
    return asdict(SessionEngine(gateway).complete_payment(order_id, request.payment_method))


@router.post("/{order_id}/cancel", response_model=SessionResponse)
def cancel_order(order_id: int, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Cancel an unpaid order"""
    return asdict(SessionEngine(gateway).cancel_order(order_id))


@router.post("/{order_id}/refund", response_model=TransactionResponse)
def refund_order(order_id: int, request: RefundRequest, gateway: SqlAlchemyGateway = Depends(get_gateway)):
    """Refund part or all of a completed order"""
    return SessionEngine(gateway).refund_order(
        order_id, request.amount, request.payment_method, request.reason
    )
